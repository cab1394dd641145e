"""SQLite persistence for trainer state."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import cast

from . import __version__

SCHEMA_VERSION = 1
EXPORT_FORMAT_VERSION = 1

logger = logging.getLogger(__name__)


class ProgressStore:
    """Key/value store for persisted trainer state."""

    def __init__(self, db_path: Path | str) -> None:
        """Initialize database and schema."""
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_path)
        else:
            target = db_path
        self._conn = sqlite3.connect(target)
        self._conn.row_factory = sqlite3.Row
        self._apply_migrations()

    def _apply_migrations(self) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(self._conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            raise RuntimeError(f"Database schema version {current} is newer than supported {SCHEMA_VERSION}.")

        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """)

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                self._migrate_to_v1()
            with self._conn:
                self._conn.execute(f"PRAGMA user_version = {version}")
                self._conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now(UTC).isoformat()),
                )
            logger.info("Migrated state database to schema version %d", version)

    def _migrate_to_v1(self) -> None:
        """Create the key/value state table."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS app_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """)

    def load_state(self) -> dict[str, object]:
        """Return all stored keys with decoded values.

        Rows whose value is not valid JSON are skipped so the caller falls
        back to that key's default.
        """
        rows = self._conn.execute("SELECT key, value FROM app_state ORDER BY key").fetchall()
        state: dict[str, object] = {}
        for row in rows:
            key = str(row["key"])
            try:
                state[key] = json.loads(row["value"])
            except json.JSONDecodeError:
                logger.warning("Ignoring undecodable stored value for key %r", key)
        return state

    def save_state(self, state: Mapping[str, object]) -> None:
        """Write every key in one transaction."""
        now = datetime.now(UTC).isoformat()
        with self._conn:
            self._conn.executemany(
                """
                INSERT INTO app_state (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                [(key, json.dumps(value), now) for key, value in state.items()],
            )

    def clear_state(self) -> None:
        """Delete all stored keys."""
        with self._conn:
            self._conn.execute("DELETE FROM app_state")

    def export_state(self, export_path: Path | str) -> int:
        """Export stored state to a JSON file and return the number of keys written."""
        state = self.load_state()
        payload = {
            "format_version": EXPORT_FORMAT_VERSION,
            "exported_at": datetime.now(UTC).isoformat(),
            "source": {
                "app_version": __version__,
                "schema_version": SCHEMA_VERSION,
            },
            "state": state,
        }
        path = Path(export_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return len(state)

    def import_state(self, import_path: Path | str) -> int:
        """Replace stored state with an export file and return the number of keys written."""
        path = Path(import_path)
        raw_obj: object = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw_obj, dict):
            raise ValueError("Import file root must be a JSON object.")
        raw = cast(dict[str, object], raw_obj)

        format_version = raw.get("format_version", 0)
        if isinstance(format_version, bool) or not isinstance(format_version, int):
            raise ValueError("Import file has invalid format_version.")
        if format_version > EXPORT_FORMAT_VERSION:
            raise ValueError(
                f"Import file format version {format_version} is newer than supported {EXPORT_FORMAT_VERSION}."
            )

        state_obj = raw.get("state")
        if not isinstance(state_obj, dict):
            raise ValueError("Import file has no state object.")
        state = cast(dict[str, object], state_obj)

        self.clear_state()
        self.save_state(state)
        return len(state)

    def close(self) -> None:
        """Close db connection."""
        self._conn.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort connection cleanup."""
        try:
            self.close()
        except Exception:
            pass
