"""Core domain models for exam practice and scoring."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TypeGuard

POOL_SIZE = 300
EXAM_LENGTH = 100
PASS_MARK = 65
HISTORY_LIMIT = 10
LEADERBOARD_LIMIT = 50


class Topic(Enum):
    """One examination paper."""

    P2A1 = ("2A1", "ASME I & VIII, Admin, Mechanics")
    P2A2 = ("2A2", "Thermodynamics, Metallurgy, Testing")
    P2A3 = ("2A3", "Boilers, Pumps, Water Treatment")
    P2B1 = ("2B1", "Prime Movers, IC Engines, Piping")
    P2B2 = ("2B2", "Control Systems, Fuels, Environmental")
    P2B3 = ("2B3", "Electrotechnology, Compression, Refrigeration")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def title(self) -> str:
        return self.value[1]

    @property
    def label(self) -> str:
        return f"{self.code} - {self.title}"


class CodeBook(Enum):
    """Reference code a question answer can be cited from."""

    ASME_I = "ASME Section I (Power Boilers)"
    ASME_II = "ASME Section II (Materials)"
    ASME_VIII = "ASME Section VIII (Pressure Vessels)"
    ASME_IX = "ASME Section IX (Welding)"
    ASME_B311 = "ASME B31.1 (Power Piping)"
    CSA_B51 = "CSA B51 (Boiler/PV Code)"
    API_612 = "API 612 (Special Purpose Turbines)"
    API_611 = "API 611 (General Purpose Turbines)"


class QuestionType(Enum):
    """How a question is answered."""

    CALCULATION = "calculation"
    CODE_LOOKUP = "code_lookup"


class Mode(Enum):
    """Top-level application mode, persisted to resume on restart."""

    PRACTICE = "practice"
    EXAM = "exam"
    SCOREBOARD = "scoreboard"


@dataclass(frozen=True)
class Question:
    """One fully resolved multiple-choice question."""

    id: str
    topic: Topic
    subject: str
    prompt: str
    options: dict[str, str]
    correct_key: str
    explanation: str
    question_type: QuestionType
    requires_citation: bool = False
    correct_citation: CodeBook | None = None


@dataclass(frozen=True)
class Feedback:
    """Grading result shown after an answer is selected."""

    is_correct: bool
    message: str
    explanation: str


@dataclass(frozen=True)
class HistoryEntry:
    """One answered question."""

    question_id: str
    topic: Topic
    subject: str
    is_correct: bool
    timestamp: int

    def to_dict(self) -> dict[str, object]:
        return {
            "questionId": self.question_id,
            "topic": self.topic.name,
            "subject": self.subject,
            "isCorrect": self.is_correct,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> HistoryEntry:
        """Build an entry from a persisted row, raising on malformed input."""
        question_id = raw["questionId"]
        subject = raw.get("subject", "")
        is_correct = raw["isCorrect"]
        timestamp = raw["timestamp"]
        if not isinstance(question_id, str) or not isinstance(subject, str):
            raise ValueError("History entry ids must be strings.")
        if not isinstance(is_correct, bool) or not _is_int(timestamp):
            raise ValueError("History entry has invalid result fields.")
        return cls(
            question_id=question_id,
            topic=Topic[str(raw["topic"])],
            subject=subject,
            is_correct=is_correct,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class ExamRecord:
    """Final result of one completed exam.

    `passed` always equals ``score >= pass_mark``; the mark is stored with the
    record so results from exams with a non-default mark stay checkable.
    """

    id: str
    topic: Topic
    score: int
    total: int
    timestamp: int
    passed: bool
    pass_mark: int = PASS_MARK

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "topic": self.topic.name,
            "score": self.score,
            "total": self.total,
            "timestamp": self.timestamp,
            "passed": self.passed,
            "passMark": self.pass_mark,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> ExamRecord:
        """Build a record from a persisted row, raising on malformed or inconsistent input."""
        record_id = raw["id"]
        score = raw["score"]
        total = raw["total"]
        timestamp = raw["timestamp"]
        passed = raw["passed"]
        pass_mark = raw.get("passMark", PASS_MARK)
        if not isinstance(record_id, str) or not isinstance(passed, bool):
            raise ValueError("Exam record has invalid id or pass flag.")
        if not (_is_int(score) and _is_int(total) and _is_int(timestamp) and _is_int(pass_mark)):
            raise ValueError("Exam record has invalid numeric fields.")
        if not 0 <= score <= total:
            raise ValueError(f"Exam record score {score} outside 0..{total}.")
        if passed != (score >= pass_mark):
            raise ValueError(f"Exam record pass flag disagrees with score {score} and pass mark {pass_mark}.")
        return cls(
            id=record_id,
            topic=Topic[str(raw["topic"])],
            score=score,
            total=total,
            timestamp=timestamp,
            passed=passed,
            pass_mark=pass_mark,
        )


def _is_int(value: object) -> TypeGuard[int]:
    """Return whether a decoded JSON value is an integer and not a bool."""
    return isinstance(value, int) and not isinstance(value, bool)
