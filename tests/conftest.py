from __future__ import annotations

import random
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from chieftrainer.content_loader import QuestionBank  # noqa: E402
from chieftrainer.models import Question, QuestionType, Topic  # noqa: E402
from chieftrainer.progress import ProgressStore  # noqa: E402
from chieftrainer.session import SessionController  # noqa: E402


class FixedKeyBank(QuestionBank):
    """Bank whose every question has option B as the right answer."""

    def __init__(self, pool_size: int = 300) -> None:
        super().__init__(banks={}, pool_size=pool_size)

    def resolve(self, topic: Topic, pool_index: int) -> Question:
        if not 1 <= pool_index <= self.pool_size:
            raise ValueError(pool_index)
        return Question(
            id=f"{topic.code}-{pool_index:03d}",
            topic=topic,
            subject="Fixture",
            prompt=f"Question {pool_index}",
            options={"A": "wrong", "B": "right", "C": "also wrong", "D": "still wrong"},
            correct_key="B",
            explanation=f"Explanation {pool_index}",
            question_type=QuestionType.CALCULATION,
        )


@pytest.fixture
def randbelow() -> Callable[[int], int]:
    return random.Random(20240611).randrange


@pytest.fixture
def store() -> Iterator[ProgressStore]:
    db = ProgressStore(":memory:")
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fixed_bank() -> FixedKeyBank:
    return FixedKeyBank()


@pytest.fixture
def controller(store: ProgressStore, fixed_bank: FixedKeyBank, randbelow: Callable[[int], int]) -> SessionController:
    ticks = iter(range(1_000_000))
    ids = iter(range(1_000_000))
    ctrl = SessionController(
        store,
        fixed_bank,
        randbelow=randbelow,
        clock=lambda: 1_700_000_000_000 + next(ticks),
        new_record_id=lambda: f"exam-{next(ids)}",
    )
    ctrl.start()
    return ctrl
