import logging
import random

import pytest

from chieftrainer.models import Topic
from chieftrainer.sequence import generate_sequences, is_permutation
from chieftrainer.tracker import ProgressTracker


def _rng() -> random.Random:
    return random.Random(7)


def test_create_gives_every_topic_a_permutation_at_zero() -> None:
    tracker = ProgressTracker.create(pool_size=20, randbelow=_rng().randrange)
    for topic in Topic:
        assert is_permutation(tracker.sequence(topic), 20)
        assert tracker.position(topic) == 0
        assert tracker.current_index(topic) == tracker.sequence(topic)[0]


def test_advance_walks_the_ordering_and_wraps() -> None:
    tracker = ProgressTracker.create(pool_size=5, randbelow=_rng().randrange)
    order = tracker.sequence(Topic.P2A2)
    seen = []
    for _ in range(5):
        seen.append(tracker.current_index(Topic.P2A2))
        tracker.advance(Topic.P2A2)
    assert tuple(seen) == order
    assert tracker.position(Topic.P2A2) == 0
    assert tracker.current_index(Topic.P2A2) == order[0]


def test_advance_only_moves_one_topic() -> None:
    tracker = ProgressTracker.create(pool_size=10, randbelow=_rng().randrange)
    tracker.advance(Topic.P2B1)
    tracker.advance(Topic.P2B1)
    assert tracker.position(Topic.P2B1) == 2
    assert all(tracker.position(topic) == 0 for topic in Topic if topic is not Topic.P2B1)


def test_reset_keeps_ordering() -> None:
    tracker = ProgressTracker.create(pool_size=10, randbelow=_rng().randrange)
    before = tracker.sequence(Topic.P2A3)
    tracker.advance(Topic.P2A3)
    tracker.reset(Topic.P2A3)
    assert tracker.position(Topic.P2A3) == 0
    assert tracker.sequence(Topic.P2A3) == before


def test_constructor_rejects_bad_sequences_and_positions() -> None:
    sequences = generate_sequences(Topic, 4, _rng().randrange)
    broken = dict(sequences)
    broken[Topic.P2A1] = (1, 2, 2, 4)
    with pytest.raises(ValueError, match="not a permutation"):
        ProgressTracker(broken, pool_size=4)

    missing = dict(sequences)
    del missing[Topic.P2B3]
    with pytest.raises(ValueError, match="Missing sequence"):
        ProgressTracker(missing, pool_size=4)

    with pytest.raises(ValueError, match="outside"):
        ProgressTracker(sequences, {Topic.P2A1: 4}, pool_size=4)


def test_snapshot_round_trip_keeps_orderings_and_cursors() -> None:
    tracker = ProgressTracker.create(pool_size=12, randbelow=_rng().randrange)
    tracker.advance(Topic.P2A1)
    tracker.advance(Topic.P2B2)
    tracker.advance(Topic.P2B2)

    sequences, positions = tracker.to_snapshot()
    assert set(sequences) == {topic.name for topic in Topic}
    assert positions["P2B2"] == 2

    restored = ProgressTracker.from_snapshot(sequences, positions, pool_size=12, randbelow=_rng().randrange)
    for topic in Topic:
        assert restored.sequence(topic) == tracker.sequence(topic)
        assert restored.position(topic) == tracker.position(topic)


def test_from_snapshot_regenerates_only_corrupt_topics(caplog: pytest.LogCaptureFixture) -> None:
    tracker = ProgressTracker.create(pool_size=8, randbelow=_rng().randrange)
    sequences, positions = tracker.to_snapshot()
    sequences["P2A2"] = [1, 2, 3]
    del sequences["P2A3"]
    positions["P2A1"] = 8
    positions["P2B1"] = True

    with caplog.at_level(logging.WARNING, logger="chieftrainer.tracker"):
        restored = ProgressTracker.from_snapshot(sequences, positions, pool_size=8, randbelow=_rng().randrange)

    assert restored.sequence(Topic.P2B3) == tracker.sequence(Topic.P2B3)
    assert is_permutation(restored.sequence(Topic.P2A2), 8)
    assert is_permutation(restored.sequence(Topic.P2A3), 8)
    assert restored.position(Topic.P2A1) == 0
    assert restored.position(Topic.P2B1) == 0
    assert "Regenerating corrupt sequence for P2A2" in caplog.text
    assert "P2A3" not in caplog.text


def test_from_snapshot_accepts_non_mapping_values() -> None:
    restored = ProgressTracker.from_snapshot("garbage", [1, 2], pool_size=6, randbelow=_rng().randrange)
    for topic in Topic:
        assert is_permutation(restored.sequence(topic), 6)
        assert restored.position(topic) == 0


def test_progress_fraction_tracks_cursor() -> None:
    tracker = ProgressTracker.create(pool_size=4, randbelow=_rng().randrange)
    assert tracker.progress_fraction(Topic.P2A1) == 0.0
    tracker.advance(Topic.P2A1)
    assert tracker.progress_fraction(Topic.P2A1) == 0.25
