import tomllib
from pathlib import Path

import chieftrainer


def _project() -> dict[str, object]:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    with pyproject.open("rb") as handle:
        return tomllib.load(handle)["project"]


def test_package_version_matches_pyproject() -> None:
    assert chieftrainer.__version__ == _project()["version"]


def test_distribution_name_matches_pyproject() -> None:
    assert chieftrainer.DISTRIBUTION_NAME == _project()["name"]
