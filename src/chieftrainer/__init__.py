"""chieftrainer: practice and exam engine for power engineering papers."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]

DISTRIBUTION_NAME = "chieftrainer"


def _source_tree_version() -> str | None:
    """Read [project].version from the checkout's pyproject.toml, if this is one."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if not pyproject.is_file():
        return None
    with pyproject.open("rb") as handle:
        project = tomllib.load(handle).get("project", {})
    if project.get("name") != DISTRIBUTION_NAME:
        return None
    value = project.get("version")
    return str(value) if value else None


def _resolve_version() -> str:
    source_version = _source_tree_version()
    if source_version is not None:
        return source_version
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0+unknown"


__version__ = _resolve_version()
