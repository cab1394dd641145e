"""Per-topic practice cursors over persisted question orderings."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping

from .models import POOL_SIZE, Topic
from .sequence import RandBelow, generate_sequence, generate_sequences, is_permutation

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Tracks how far the learner has advanced through each topic's ordering."""

    def __init__(
        self,
        sequences: Mapping[Topic, tuple[int, ...]],
        positions: Mapping[Topic, int] | None = None,
        pool_size: int = POOL_SIZE,
    ) -> None:
        """Initialize from one valid permutation per topic."""
        for topic in Topic:
            if topic not in sequences:
                raise ValueError(f"Missing sequence for {topic.name}.")
            if not is_permutation(sequences[topic], pool_size):
                raise ValueError(f"Sequence for {topic.name} is not a permutation of 1..{pool_size}.")
        self.pool_size = pool_size
        self._sequences = {topic: tuple(sequences[topic]) for topic in Topic}
        self._positions = {topic: 0 for topic in Topic}
        for topic, position in (positions or {}).items():
            if not 0 <= position < pool_size:
                raise ValueError(f"Position {position} for {topic.name} outside 0..{pool_size - 1}.")
            self._positions[topic] = position

    @classmethod
    def create(cls, pool_size: int = POOL_SIZE, randbelow: RandBelow = secrets.randbelow) -> ProgressTracker:
        """Return a tracker with fresh orderings and all cursors at zero."""
        return cls(generate_sequences(Topic, pool_size, randbelow), pool_size=pool_size)

    @classmethod
    def from_snapshot(
        cls,
        raw_sequences: object,
        raw_positions: object,
        pool_size: int = POOL_SIZE,
        randbelow: RandBelow = secrets.randbelow,
    ) -> ProgressTracker:
        """Rebuild a tracker from persisted JSON values.

        Valid orderings are kept as-is. A topic whose ordering is missing or
        corrupt gets a new one, and any unusable cursor restarts at zero.
        """
        sequences_map = raw_sequences if isinstance(raw_sequences, dict) else {}
        positions_map = raw_positions if isinstance(raw_positions, dict) else {}
        if raw_sequences is not None and not isinstance(raw_sequences, dict):
            logger.warning("Discarding malformed saved sequences.")
        if raw_positions is not None and not isinstance(raw_positions, dict):
            logger.warning("Discarding malformed saved positions.")

        sequences: dict[Topic, tuple[int, ...]] = {}
        positions: dict[Topic, int] = {}
        for topic in Topic:
            saved = sequences_map.get(topic.name)
            if is_permutation(saved, pool_size):
                sequences[topic] = tuple(saved)
            else:
                if saved is not None:
                    logger.warning("Regenerating corrupt sequence for %s.", topic.name)
                sequences[topic] = generate_sequence(pool_size, randbelow)

            position = positions_map.get(topic.name, 0)
            if isinstance(position, bool) or not isinstance(position, int) or not 0 <= position < pool_size:
                logger.warning("Resetting invalid saved position for %s: %r", topic.name, position)
                position = 0
            positions[topic] = position
        return cls(sequences, positions, pool_size)

    def to_snapshot(self) -> tuple[dict[str, list[int]], dict[str, int]]:
        """Return JSON-ready (sequences, positions) keyed by topic name."""
        sequences = {topic.name: list(sequence) for topic, sequence in self._sequences.items()}
        positions = {topic.name: position for topic, position in self._positions.items()}
        return sequences, positions

    def sequence(self, topic: Topic) -> tuple[int, ...]:
        return self._sequences[topic]

    def position(self, topic: Topic) -> int:
        return self._positions[topic]

    def progress_fraction(self, topic: Topic) -> float:
        """Return how far through the ordering the cursor sits, in ``[0, 1)``."""
        return self._positions[topic] / self.pool_size

    def current_index(self, topic: Topic) -> int:
        """Return the pool index under the topic's cursor."""
        return self._sequences[topic][self._positions[topic]]

    def advance(self, topic: Topic) -> None:
        """Move the cursor forward, wrapping to the start after the last slot."""
        self._positions[topic] = (self._positions[topic] + 1) % self.pool_size

    def reset(self, topic: Topic) -> None:
        """Move the cursor back to the start without reordering."""
        self._positions[topic] = 0
