"""Explicit persisted state container and its key/value snapshot codec."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TypeVar

from .ledger import BoundedLedger
from .models import HISTORY_LIMIT, LEADERBOARD_LIMIT, POOL_SIZE, ExamRecord, HistoryEntry, Mode, Topic
from .sequence import RandBelow
from .tracker import ProgressTracker

logger = logging.getLogger(__name__)

THEMES = ("dark", "light")
DEFAULT_THEME = "dark"

T = TypeVar("T")


@dataclass
class TrainerState:
    """Everything that survives a restart."""

    tracker: ProgressTracker
    score: int = 0
    history: BoundedLedger[HistoryEntry] = field(default_factory=lambda: BoundedLedger(HISTORY_LIMIT))
    high_scores: BoundedLedger[ExamRecord] = field(default_factory=lambda: BoundedLedger(LEADERBOARD_LIMIT))
    theme: str = DEFAULT_THEME
    mode: Mode = Mode.PRACTICE
    topic: Topic = Topic.P2A1

    @classmethod
    def fresh(cls, pool_size: int = POOL_SIZE, randbelow: RandBelow = secrets.randbelow) -> TrainerState:
        """Return first-run state with new orderings for every topic."""
        return cls(tracker=ProgressTracker.create(pool_size, randbelow))

    def to_snapshot(self) -> dict[str, object]:
        """Return persisted keys mapped to JSON-ready values."""
        sequences, positions = self.tracker.to_snapshot()
        return {
            "score": self.score,
            "history": [entry.to_dict() for entry in self.history],
            "highScores": [record.to_dict() for record in self.high_scores],
            "theme": self.theme,
            "mode": self.mode.value,
            "topic": self.topic.name,
            "sequences": sequences,
            "positions": positions,
        }

    @classmethod
    def from_snapshot(
        cls,
        raw: Mapping[str, object],
        pool_size: int = POOL_SIZE,
        randbelow: RandBelow = secrets.randbelow,
    ) -> TrainerState:
        """Rebuild state from persisted keys.

        Each key is recovered independently: a missing or malformed value
        falls back to its default instead of failing the whole load.
        """
        tracker = ProgressTracker.from_snapshot(raw.get("sequences"), raw.get("positions"), pool_size, randbelow)

        score = raw.get("score", 0)
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            logger.warning("Resetting invalid saved score: %r", score)
            score = 0

        theme = raw.get("theme", DEFAULT_THEME)
        if theme not in THEMES:
            logger.warning("Resetting unknown saved theme: %r", theme)
            theme = DEFAULT_THEME

        return cls(
            tracker=tracker,
            score=score,
            history=BoundedLedger(HISTORY_LIMIT, _decode_rows(raw.get("history"), HistoryEntry.from_dict, "history")),
            high_scores=BoundedLedger(
                LEADERBOARD_LIMIT, _decode_rows(raw.get("highScores"), ExamRecord.from_dict, "highScores")
            ),
            theme=str(theme),
            mode=_decode_mode(raw.get("mode")),
            topic=_decode_topic(raw.get("topic")),
        )


def _decode_rows(raw: object, decode: Callable[[Mapping[str, object]], T], key: str) -> list[T]:
    """Decode a persisted list, dropping rows that do not parse."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Discarding malformed saved %s.", key)
        return []
    rows: list[T] = []
    for item in raw:
        if not isinstance(item, dict):
            logger.warning("Dropping malformed %s row: %r", key, item)
            continue
        try:
            rows.append(decode(item))
        except (KeyError, TypeError, ValueError):
            logger.warning("Dropping malformed %s row: %r", key, item)
    return rows


def _decode_mode(raw: object) -> Mode:
    if raw is None:
        return Mode.PRACTICE
    try:
        return Mode(raw)
    except ValueError:
        logger.warning("Resetting unknown saved mode: %r", raw)
        return Mode.PRACTICE


def _decode_topic(raw: object) -> Topic:
    if raw is None:
        return Topic.P2A1
    try:
        return Topic[str(raw)]
    except KeyError:
        logger.warning("Resetting unknown saved topic: %r", raw)
        return Topic.P2A1
