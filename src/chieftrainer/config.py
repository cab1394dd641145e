"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_DB_PATH = Path(".chieftrainer") / "state.db"
DEFAULT_ADVISORY_TIMEOUT = 8.0
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Resolved application settings."""

    db_path: Path = DEFAULT_DB_PATH
    advisory_url: str | None = None
    advisory_key: str | None = None
    advisory_timeout: float = DEFAULT_ADVISORY_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: Mapping[str, str] | None = None, *, dotenv: bool = True) -> Settings:
    """Build settings from environment variables, reading a local .env first."""
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    env = os.environ if environ is None else environ

    raw_timeout = env.get("CHIEFTRAINER_ADVISORY_TIMEOUT", "").strip()
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_ADVISORY_TIMEOUT
    except ValueError as exc:
        raise ValueError(f"CHIEFTRAINER_ADVISORY_TIMEOUT must be a number, got {raw_timeout!r}.") from exc
    if timeout <= 0:
        raise ValueError("CHIEFTRAINER_ADVISORY_TIMEOUT must be positive.")

    log_level = env.get("CHIEFTRAINER_LOG_LEVEL", "").strip().upper() or DEFAULT_LOG_LEVEL
    if log_level not in logging.getLevelNamesMapping():
        raise ValueError(f"CHIEFTRAINER_LOG_LEVEL must be a logging level name, got {log_level!r}.")

    db_path = env.get("CHIEFTRAINER_DB_PATH", "").strip()
    return Settings(
        db_path=Path(db_path) if db_path else DEFAULT_DB_PATH,
        advisory_url=env.get("CHIEFTRAINER_ADVISORY_URL", "").strip() or None,
        advisory_key=env.get("CHIEFTRAINER_ADVISORY_KEY", "").strip() or None,
        advisory_timeout=timeout,
        log_level=log_level,
    )
