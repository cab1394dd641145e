"""Load bundled question banks and resolve pool indices into questions."""

from __future__ import annotations

import hashlib
import json
import random
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

from .models import POOL_SIZE, CodeBook, Question, QuestionType, Topic
from .solvers import SOLVERS, Worked

CONTENT_PACKAGE = "chieftrainer.content.banks"
OPTION_KEYS = ("A", "B", "C", "D")
# Scale factors tried in order when a worked problem's mistakes collide after formatting.
_FALLBACK_SCALES = (2, 0.5, 10, 0.1, 3)


@dataclass(frozen=True)
class BankEntry:
    """One question template from a topic bank.

    With a `solver`, the prompt and explanation are format templates filled
    from the drawn inputs, and `answer` is the template for every option
    (``{value}`` is the number). Without one, all text is used as written.
    """

    id: str
    subject: str
    question_type: QuestionType
    prompt: str
    answer: str
    distractors: tuple[str, ...]
    explanation: str
    citation: CodeBook | None
    solver: str | None = None


def _entry_from_dict(topic: Topic, raw: dict[str, Any]) -> BankEntry:
    """Build a bank entry from raw JSON content."""
    entry_id = str(raw["id"])
    answer = str(raw.get("answer", "")).strip()
    if not answer:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} has no answer.")
    question_type = QuestionType(str(raw.get("type", QuestionType.CALCULATION.value)))
    solver = raw.get("solver")
    if solver is not None:
        return _worked_entry(topic, entry_id, str(solver), question_type, answer, raw)

    distractors = tuple(str(value).strip() for value in raw.get("distractors", []) if str(value).strip())
    if not distractors:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} has no distractors.")
    if len(distractors) > len(OPTION_KEYS) - 1:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} has too many distractors.")
    if len({answer, *distractors}) != len(distractors) + 1:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} has duplicate options.")

    citation_name = raw.get("citation")
    try:
        citation = CodeBook[str(citation_name)] if citation_name else None
    except KeyError as exc:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} has unknown citation {citation_name!r}.") from exc
    if question_type is QuestionType.CODE_LOOKUP and citation is None:
        raise ValueError(f"Code lookup entry '{entry_id}' in {topic.name} needs a citation.")

    return BankEntry(
        id=entry_id,
        subject=str(raw.get("subject", "")),
        question_type=question_type,
        prompt=str(raw["prompt"]),
        answer=answer,
        distractors=distractors,
        explanation=str(raw.get("explanation", "")),
        citation=citation,
    )


def _worked_entry(
    topic: Topic, entry_id: str, solver: str, question_type: QuestionType, answer: str, raw: dict[str, Any]
) -> BankEntry:
    """Build a calculation entry whose numbers are drawn per pool slot."""
    if solver not in SOLVERS:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} has unknown solver {solver!r}.")
    if question_type is not QuestionType.CALCULATION:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} uses a solver but is not a calculation.")
    entry = BankEntry(
        id=entry_id,
        subject=str(raw.get("subject", "")),
        question_type=question_type,
        prompt=str(raw["prompt"]),
        answer=answer,
        distractors=(),
        explanation=str(raw.get("explanation", "")),
        citation=None,
        solver=solver,
    )
    try:
        _, _, distractors, _ = _render(entry, SOLVERS[solver](random.Random(0)))
    except (KeyError, IndexError, ValueError) as exc:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} has a bad template: {exc!r}") from exc
    if len(distractors) < len(OPTION_KEYS) - 1:
        raise ValueError(f"Entry '{entry_id}' in {topic.name} has an answer template without a value.")
    return entry


def _render(entry: BankEntry, worked: Worked) -> tuple[str, str, list[str], str]:
    """Fill a worked entry's templates, returning prompt, answer, distractors and explanation."""
    answer = entry.answer.format(value=worked.answer)
    scaled = tuple(worked.answer * scale for scale in _FALLBACK_SCALES)
    distractors: list[str] = []
    for value in (*worked.mistakes, *scaled):
        text = entry.answer.format(value=value)
        if text != answer and text not in distractors:
            distractors.append(text)
        if len(distractors) == len(OPTION_KEYS) - 1:
            break
    prompt = entry.prompt.format(**worked.values)
    explanation = entry.explanation.format(answer=answer, **worked.values)
    return prompt, answer, distractors, explanation


def _bank_from_dict(raw: dict[str, Any]) -> tuple[Topic, list[BankEntry]]:
    """Build one topic's entries from raw JSON content."""
    topic = Topic[str(raw["topic"])]
    entries = [_entry_from_dict(topic, item) for item in raw.get("entries", [])]
    if not entries:
        raise ValueError(f"Bank for {topic.name} has no entries.")
    seen: set[str] = set()
    for entry in entries:
        if entry.id in seen:
            raise ValueError(f"Duplicate entry id in {topic.name}: {entry.id}")
        seen.add(entry.id)
    return topic, entries


def load_banks() -> dict[Topic, list[BankEntry]]:
    """Load bundled question banks."""
    banks: dict[Topic, list[BankEntry]] = {}
    for entry in resources.files(CONTENT_PACKAGE).iterdir():
        if entry.name.endswith(".json"):
            _add_bank(banks, json.loads(entry.read_text(encoding="utf-8-sig")))
    _validate_all_topics_present(banks)
    return banks


def load_banks_from_dir(path: Path) -> dict[Topic, list[BankEntry]]:
    """Load banks from directory for tests/tools."""
    banks: dict[Topic, list[BankEntry]] = {}
    for file_path in sorted(path.glob("*.json")):
        _add_bank(banks, json.loads(file_path.read_text(encoding="utf-8-sig")))
    _validate_all_topics_present(banks)
    return banks


def _add_bank(banks: dict[Topic, list[BankEntry]], raw: dict[str, Any]) -> None:
    topic, entries = _bank_from_dict(raw)
    if topic in banks:
        raise ValueError(f"Duplicate bank for topic: {topic.name}")
    banks[topic] = entries


def _validate_all_topics_present(banks: dict[Topic, list[BankEntry]]) -> None:
    """Validate that every topic has a bank."""
    missing = [topic.name for topic in Topic if topic not in banks]
    if missing:
        raise ValueError(f"Missing question banks for: {', '.join(missing)}")


class QuestionBank:
    """Deterministic resolver from (topic, pool index) to a question."""

    def __init__(self, banks: dict[Topic, list[BankEntry]] | None = None, pool_size: int = POOL_SIZE) -> None:
        """Initialize from explicit banks or the bundled content."""
        self.banks = banks if banks is not None else load_banks()
        self.pool_size = pool_size

    def resolve(self, topic: Topic, pool_index: int) -> Question:
        """Return the question for a pool index in ``1..pool_size``.

        Worked entries draw their numbers, and every entry shuffles its
        options, from a generator seeded only by the topic and index, so
        repeated calls return equal questions.
        """
        if not 1 <= pool_index <= self.pool_size:
            raise ValueError(f"Pool index {pool_index} outside 1..{self.pool_size} for {topic.name}.")
        entries = self.banks[topic]
        entry = entries[(pool_index - 1) % len(entries)]
        rng = random.Random(_stable_seed(topic, pool_index))

        if entry.solver is None:
            prompt, explanation = entry.prompt, entry.explanation
            answer, distractors = entry.answer, list(entry.distractors)
        else:
            prompt, answer, distractors, explanation = _render(entry, SOLVERS[entry.solver](rng))
        texts = [answer, *distractors]
        rng.shuffle(texts)
        options = dict(zip(OPTION_KEYS, texts))
        correct_key = next(key for key, text in options.items() if text == answer)

        return Question(
            id=f"{topic.code}-{pool_index:03d}",
            topic=topic,
            subject=entry.subject,
            prompt=prompt,
            options=options,
            correct_key=correct_key,
            explanation=explanation,
            question_type=entry.question_type,
            requires_citation=entry.citation is not None,
            correct_citation=entry.citation,
        )


def _stable_seed(topic: Topic, pool_index: int) -> int:
    """Return a process-independent seed for one pool slot."""
    digest = hashlib.sha256(f"{topic.code}:{pool_index}".encode()).digest()
    return int.from_bytes(digest[:8], "big")
