"""Practice and exam flow state machine."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import uuid4

from .advisory import FALLBACK_ANALYSIS, FALLBACK_TIP, AdvisoryProvider, StaticAdvisor
from .content_loader import QuestionBank
from .models import EXAM_LENGTH, PASS_MARK, ExamRecord, Feedback, HistoryEntry, Mode, Question, Topic
from .progress import ProgressStore
from .sequence import RandBelow, generate_sequence
from .state import TrainerState

logger = logging.getLogger(__name__)

CORRECT_MESSAGE = "Correct."
INCORRECT_MESSAGE = "Incorrect."


@dataclass(frozen=True)
class ExamSession:
    """One in-progress exam. Never persisted."""

    topic: Topic
    question_indices: tuple[int, ...]
    position: int = 0
    correct_count: int = 0
    terminal: bool = False


@dataclass(frozen=True)
class Idle:
    """Nothing loaded yet."""


@dataclass(frozen=True)
class PracticeActive:
    """Open-ended practice on one topic's ordering."""

    topic: Topic


@dataclass(frozen=True)
class ExamActive:
    """A scored exam is running."""

    session: ExamSession


@dataclass(frozen=True)
class ExamFinished:
    """A scored exam has ended and been recorded."""

    session: ExamSession
    record: ExamRecord


@dataclass(frozen=True)
class Scoreboard:
    """Leaderboard overlay."""


SessionStatus = Idle | PracticeActive | ExamActive | ExamFinished | Scoreboard


@dataclass(frozen=True)
class AdvisoryRequest:
    """Identifies the question an advisory call was issued for."""

    question_id: str
    load_serial: int
    kind: str


def _now_ms() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)


def _new_record_id() -> str:
    return str(uuid4())


class SessionController:
    """Coordinates question flow, grading and persisted trainer state.

    The controller loads state once at construction and saves it explicitly
    after every transition that changes it.
    """

    def __init__(
        self,
        store: ProgressStore,
        bank: QuestionBank | None = None,
        advisor: AdvisoryProvider | None = None,
        *,
        exam_length: int = EXAM_LENGTH,
        pass_mark: int = PASS_MARK,
        randbelow: RandBelow = secrets.randbelow,
        clock: Callable[[], int] = _now_ms,
        new_record_id: Callable[[], str] = _new_record_id,
    ) -> None:
        self.store = store
        self.bank = bank or QuestionBank()
        self.advisor: AdvisoryProvider = advisor or StaticAdvisor()
        if not 0 < exam_length <= self.bank.pool_size:
            raise ValueError(f"Exam length {exam_length} must be within 1..{self.bank.pool_size}.")
        self.exam_length = exam_length
        self.pass_mark = pass_mark
        self._randbelow = randbelow
        self._clock = clock
        self._new_record_id = new_record_id

        self.status: SessionStatus = Idle()
        self.question: Question | None = None
        self.selected_option: str | None = None
        self.feedback: Feedback | None = None
        self.tip: str | None = None
        self.analysis: str | None = None
        self._load_serial = 0
        self.state = self.load()

    def load(self) -> TrainerState:
        """Read persisted state, creating and saving first-run state when empty."""
        raw = self.store.load_state()
        if not raw:
            state = TrainerState.fresh(self.bank.pool_size, self._randbelow)
            self.store.save_state(state.to_snapshot())
            logger.info("Initialized new trainer state")
            return state
        return TrainerState.from_snapshot(raw, self.bank.pool_size, self._randbelow)

    def save(self) -> None:
        """Write the current state to the store."""
        self.store.save_state(self.state.to_snapshot())

    @property
    def topic(self) -> Topic:
        return self.state.topic

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def score(self) -> int:
        return self.state.score

    def history(self) -> tuple[HistoryEntry, ...]:
        return self.state.history.entries()

    def high_scores(self) -> tuple[ExamRecord, ...]:
        return self.state.high_scores.entries()

    def progress(self) -> tuple[int, int]:
        """Return (position, total) for the active mode."""
        if isinstance(self.status, ExamActive):
            return (self.status.session.position, self.exam_length)
        if isinstance(self.status, ExamFinished):
            return (self.exam_length, self.exam_length)
        return (self.state.tracker.position(self.state.topic) + 1, self.bank.pool_size)

    def progress_fraction(self) -> float:
        """Return ``position / total`` from `progress`."""
        position, total = self.progress()
        return position / total

    def start(self) -> None:
        """Enter the persisted mode on app start; an unsaved exam resumes as practice."""
        if not isinstance(self.status, Idle):
            return
        if self.state.mode is Mode.SCOREBOARD:
            self.status = Scoreboard()
            self._clear_question()
        else:
            self._enter_practice(self.state.topic)
        self.save()

    def switch_topic(self, topic: Topic) -> None:
        """Practice a different topic, keeping every topic's cursor where it was."""
        self._enter_practice(topic)
        self.save()

    def switch_mode(self, mode: Mode) -> None:
        """Move to a top-level mode; leaving an exam abandons it unrecorded."""
        if mode is Mode.PRACTICE:
            self._enter_practice(self.state.topic)
            self.save()
        elif mode is Mode.EXAM:
            self.start_exam()
        else:
            self.show_scoreboard()

    def reset_topic(self) -> None:
        """Restart the active topic's ordering from the first slot."""
        self.state.tracker.reset(self.state.topic)
        self._enter_practice(self.state.topic)
        self.save()

    def select_option(self, key: str) -> Feedback | None:
        """Grade one answer for the current question.

        Returns None without changing anything when no question is loaded,
        when the current question already has feedback, or outside an
        answering state. Any other key is graded by equality with the correct
        key, so one that is not among the options is simply wrong.
        """
        if self.question is None or self.feedback is not None:
            return None
        if not isinstance(self.status, PracticeActive | ExamActive):
            return None

        is_correct = key == self.question.correct_key
        self.selected_option = key
        if isinstance(self.status, ExamActive):
            session = self.status.session
            self.status = ExamActive(replace(session, correct_count=session.correct_count + int(is_correct)))
        elif is_correct:
            self.state.score += 1

        self.state.history.append(
            HistoryEntry(
                question_id=self.question.id,
                topic=self.question.topic,
                subject=self.question.subject,
                is_correct=is_correct,
                timestamp=self._clock(),
            )
        )
        self.feedback = Feedback(
            is_correct=is_correct,
            message=CORRECT_MESSAGE if is_correct else INCORRECT_MESSAGE,
            explanation=self.question.explanation,
        )
        self.save()
        return self.feedback

    def next_question(self) -> None:
        """Advance to the next question in the active flow."""
        if isinstance(self.status, PracticeActive):
            topic = self.status.topic
            self.state.tracker.advance(topic)
            self._load_question(topic, self.state.tracker.current_index(topic))
            self.save()
        elif isinstance(self.status, ExamActive):
            session = self.status.session
            if session.position + 1 >= self.exam_length:
                self.finish_exam()
                return
            session = replace(session, position=session.position + 1)
            self.status = ExamActive(session)
            self._load_question(session.topic, session.question_indices[session.position])

    def start_exam(self, topic: Topic | None = None) -> ExamSession:
        """Begin a new exam, discarding any exam already in progress.

        The exam draws its own ordering and never moves the practice cursor.
        """
        topic = topic or self.state.topic
        indices = generate_sequence(self.bank.pool_size, self._randbelow)[: self.exam_length]
        session = ExamSession(topic=topic, question_indices=indices)
        self.status = ExamActive(session)
        self.state.topic = topic
        self.state.mode = Mode.EXAM
        self._load_question(topic, indices[0])
        logger.info("Started %d-question exam on %s", self.exam_length, topic.name)
        self.save()
        return session

    def finish_exam(self) -> ExamRecord | None:
        """Grade and record the running exam."""
        if not isinstance(self.status, ExamActive):
            return None
        session = self.status.session
        record = ExamRecord(
            id=self._new_record_id(),
            topic=session.topic,
            score=session.correct_count,
            total=self.exam_length,
            timestamp=self._clock(),
            passed=session.correct_count >= self.pass_mark,
            pass_mark=self.pass_mark,
        )
        self.state.high_scores.append(record)
        self.status = ExamFinished(replace(session, position=self.exam_length, terminal=True), record)
        self._clear_question()
        logger.info(
            "Finished exam on %s: %d/%d (%s)",
            record.topic.name,
            record.score,
            record.total,
            "pass" if record.passed else "fail",
        )
        self.save()
        return record

    def show_scoreboard(self) -> None:
        """Open the leaderboard, abandoning any unfinished exam."""
        self.status = Scoreboard()
        self.state.mode = Mode.SCOREBOARD
        self._clear_question()
        self.save()

    def close_scoreboard(self) -> None:
        """Return from the leaderboard to practice."""
        if not isinstance(self.status, Scoreboard):
            return
        self._enter_practice(self.state.topic)
        self.save()

    def toggle_theme(self) -> str:
        """Flip the display theme preference."""
        self.state.theme = "light" if self.state.theme == "dark" else "dark"
        self.save()
        return self.state.theme

    async def request_tip(self) -> str | None:
        """Fetch a study tip for the current question's topic.

        Tips are a practice aid: during an exam nothing is fetched and None is
        returned. None is also returned, leaving state untouched, if the
        learner has moved to another question by the time the tip arrives.
        """
        if self.question is None or not isinstance(self.status, PracticeActive):
            return None
        request = self._advisory_request("tip")
        try:
            text = await self.advisor.get_tip(self.question.topic)
        except Exception:
            logger.warning("Advisory tip provider failed", exc_info=True)
            text = FALLBACK_TIP
        return self._apply_advisory(request, text)

    async def request_analysis(self) -> str | None:
        """Fetch commentary on the answer just given to the current question."""
        question = self.question
        if question is None or self.selected_option is None or self.feedback is None:
            return None
        request = self._advisory_request("analysis")
        try:
            text = await self.advisor.get_analysis(
                question,
                question.options.get(self.selected_option, self.selected_option),
                self.feedback.is_correct,
                question.explanation,
                question.topic,
            )
        except Exception:
            logger.warning("Advisory analysis provider failed", exc_info=True)
            text = FALLBACK_ANALYSIS
        return self._apply_advisory(request, text)

    def _advisory_request(self, kind: str) -> AdvisoryRequest:
        assert self.question is not None
        return AdvisoryRequest(question_id=self.question.id, load_serial=self._load_serial, kind=kind)

    def _apply_advisory(self, request: AdvisoryRequest, text: str) -> str | None:
        """Store advisory text only if its question is still the current one."""
        current_id = self.question.id if self.question is not None else None
        if request.question_id != current_id or request.load_serial != self._load_serial:
            logger.debug("Dropping stale %s for question %s", request.kind, request.question_id)
            return None
        if request.kind == "tip":
            self.tip = text
        else:
            self.analysis = text
        return text

    def _enter_practice(self, topic: Topic) -> None:
        self.status = PracticeActive(topic)
        self.state.topic = topic
        self.state.mode = Mode.PRACTICE
        self._load_question(topic, self.state.tracker.current_index(topic))

    def _load_question(self, topic: Topic, pool_index: int) -> None:
        self.question = self.bank.resolve(topic, pool_index)
        self._reset_answer_state()

    def _clear_question(self) -> None:
        self.question = None
        self._reset_answer_state()

    def _reset_answer_state(self) -> None:
        self.selected_option = None
        self.feedback = None
        self.tip = None
        self.analysis = None
        self._load_serial += 1
