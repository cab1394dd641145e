from pathlib import Path

import pytest

from chieftrainer.config import DEFAULT_DB_PATH, Settings, load_settings


def test_defaults_without_environment() -> None:
    assert load_settings({}, dotenv=False) == Settings()
    assert Settings().db_path == DEFAULT_DB_PATH


def test_reads_every_variable() -> None:
    settings = load_settings(
        {
            "CHIEFTRAINER_DB_PATH": "/tmp/trainer/state.db",
            "CHIEFTRAINER_ADVISORY_URL": "https://advice.example",
            "CHIEFTRAINER_ADVISORY_KEY": "k-123",
            "CHIEFTRAINER_ADVISORY_TIMEOUT": "2.5",
            "CHIEFTRAINER_LOG_LEVEL": "debug",
        },
        dotenv=False,
    )
    assert settings.db_path == Path("/tmp/trainer/state.db")
    assert settings.advisory_url == "https://advice.example"
    assert settings.advisory_key == "k-123"
    assert settings.advisory_timeout == 2.5
    assert settings.log_level == "DEBUG"


def test_blank_values_use_defaults() -> None:
    settings = load_settings({"CHIEFTRAINER_ADVISORY_URL": "  ", "CHIEFTRAINER_DB_PATH": ""}, dotenv=False)
    assert settings.advisory_url is None
    assert settings.db_path == DEFAULT_DB_PATH


@pytest.mark.parametrize(("raw", "message"), [("soon", "must be a number"), ("0", "positive"), ("-1", "positive")])
def test_bad_timeout_rejected(raw: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        load_settings({"CHIEFTRAINER_ADVISORY_TIMEOUT": raw}, dotenv=False)


def test_dotenv_file_is_read(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("CHIEFTRAINER_LOG_LEVEL=info\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CHIEFTRAINER_LOG_LEVEL", "")
    monkeypatch.delenv("CHIEFTRAINER_LOG_LEVEL")
    assert load_settings().log_level == "INFO"


def test_unknown_log_level_rejected() -> None:
    with pytest.raises(ValueError, match="logging level name, got 'VERBOSE'"):
        load_settings({"CHIEFTRAINER_LOG_LEVEL": "verbose"}, dotenv=False)


def test_level_names_are_case_insensitive() -> None:
    assert load_settings({"CHIEFTRAINER_LOG_LEVEL": "critical"}, dotenv=False).log_level == "CRITICAL"
