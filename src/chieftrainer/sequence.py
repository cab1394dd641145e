"""High-entropy question ordering."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Iterable

from .models import Topic

logger = logging.getLogger(__name__)

RandBelow = Callable[[int], int]


def shuffle(values: list[int], randbelow: RandBelow = secrets.randbelow) -> list[int]:
    """Return a Fisher-Yates shuffled copy of `values`.

    Each swap index is drawn uniformly from ``[0, i]`` by `randbelow`, which
    defaults to the operating system entropy source.
    """
    result = list(values)
    for i in range(len(result) - 1, 0, -1):
        j = randbelow(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def generate_sequence(n: int, randbelow: RandBelow = secrets.randbelow) -> tuple[int, ...]:
    """Return a random permutation of pool indices ``1..n``."""
    if n <= 0:
        raise ValueError(f"Sequence length must be positive, got {n}.")
    return tuple(shuffle(list(range(1, n + 1)), randbelow))


def generate_sequences(
    topics: Iterable[Topic], n: int, randbelow: RandBelow = secrets.randbelow
) -> dict[Topic, tuple[int, ...]]:
    """Return one independent permutation per topic."""
    sequences = {topic: generate_sequence(n, randbelow) for topic in topics}
    logger.debug("Generated %d sequences of length %d", len(sequences), n)
    return sequences


def is_permutation(values: object, n: int) -> bool:
    """Return whether `values` is a list/tuple holding each of ``1..n`` exactly once."""
    if not isinstance(values, list | tuple) or len(values) != n:
        return False
    if any(isinstance(value, bool) or not isinstance(value, int) for value in values):
        return False
    return set(values) == set(range(1, n + 1))
