"""Bounded newest-first logs for answer history and exam results."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class BoundedLedger(Generic[T]):
    """Append-only log keeping the `limit` most recently appended entries.

    Entries are stored newest first. Eviction follows insertion order only,
    so an entry appended with an older timestamp still evicts the oldest
    insertion.
    """

    def __init__(self, limit: int, entries: Iterable[T] = ()) -> None:
        if limit <= 0:
            raise ValueError(f"Ledger limit must be positive, got {limit}.")
        self.limit = limit
        self._entries: list[T] = list(entries)[:limit]

    def append(self, entry: T) -> None:
        """Prepend one entry and drop whatever falls past the limit."""
        self._entries.insert(0, entry)
        del self._entries[self.limit :]

    def entries(self) -> tuple[T, ...]:
        """Return a newest-first snapshot."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(self.entries())
