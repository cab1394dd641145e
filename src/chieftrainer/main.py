"""Terminal front end for practice and exam sessions."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from .advisory import build_advisor
from .config import Settings, load_settings
from .content_loader import QuestionBank
from .models import Mode, Topic
from .progress import ProgressStore
from .session import ExamActive, ExamFinished, PracticeActive, Scoreboard, SessionController

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
QUIT_COMMANDS = {"q", ":q", ":quit"}
BACK_COMMANDS = {"b", ":b", "back"}


def _controller(settings: Settings) -> SessionController:
    """Create a controller over the configured database and advisor."""
    return SessionController(ProgressStore(settings.db_path), QuestionBank(), build_advisor(settings))


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="chieftrainer", description="Power engineering exam practice")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("play", help="Start the interactive trainer (default)")
    export_parser = subparsers.add_parser("export", help="Write saved progress to a JSON file")
    export_parser.add_argument("path")
    import_parser = subparsers.add_parser("import", help="Replace saved progress from a JSON file")
    import_parser.add_argument("path")
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        return 2
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "export":
        store = ProgressStore(settings.db_path)
        try:
            count = store.export_state(args.path)
        finally:
            store.close()
        print(f"Exported {count} keys to {args.path}")
        return 0
    if args.command == "import":
        store = ProgressStore(settings.db_path)
        try:
            count = store.import_state(args.path)
        except (OSError, ValueError) as exc:
            print(f"Import failed: {exc}")
            return 1
        finally:
            store.close()
        print(f"Imported {count} keys from {args.path}")
        return 0
    return play_shell(_controller(settings))


def play_shell(controller: SessionController, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run the interactive loop until the learner quits."""
    try:
        controller.start()
        while True:
            if isinstance(controller.status, Scoreboard):
                _render_scoreboard(controller, print_fn)
                choice = input_fn("Choose: ").strip().lower()
                if choice in QUIT_COMMANDS:
                    return 0
                if choice in BACK_COMMANDS or choice == "c":
                    controller.close_scoreboard()
                else:
                    print_fn("Invalid choice.")
                continue

            if isinstance(controller.status, ExamFinished):
                _render_exam_result(controller.status, print_fn)
                choice = input_fn("Choose: ").strip().lower()
                if choice in QUIT_COMMANDS:
                    return 0
                if choice == "p":
                    controller.switch_mode(Mode.PRACTICE)
                elif choice == "e":
                    controller.start_exam()
                elif choice == "s":
                    controller.show_scoreboard()
                else:
                    print_fn("Invalid choice.")
                continue

            _render_question(controller, print_fn)
            choice = input_fn("Answer or command: ").strip()
            if not _handle_command(controller, choice, input_fn, print_fn):
                return 0
    finally:
        controller.store.close()


def _handle_command(controller: SessionController, choice: str, input_fn: InputFn, print_fn: PrintFn) -> bool:
    """Apply one shell command. Returns False when the learner quits."""
    lowered = choice.lower()
    question = controller.question
    if lowered in QUIT_COMMANDS:
        return False
    if question is not None and choice.upper() in question.options:
        if controller.feedback is not None:
            print_fn("Already answered. Press n for the next question.")
        else:
            controller.select_option(choice.upper())
    elif lowered == "n":
        controller.next_question()
    elif lowered == "e":
        controller.start_exam()
    elif lowered == "p":
        controller.switch_mode(Mode.PRACTICE)
    elif lowered == "t":
        _switch_topic_flow(controller, input_fn, print_fn)
    elif lowered == "r":
        _reset_topic_flow(controller, input_fn, print_fn)
    elif lowered == "s":
        controller.show_scoreboard()
    elif lowered == "h":
        if isinstance(controller.status, ExamActive):
            print_fn("Tips are not available during an exam.")
        else:
            tip = asyncio.run(controller.request_tip())
            if tip:
                print_fn(f"Tip: {tip}")
    elif lowered == "i":
        if controller.feedback is None:
            print_fn("Answer the question first.")
        else:
            note = asyncio.run(controller.request_analysis())
            if note:
                print_fn(f"Analysis: {note}")
    elif lowered == "m":
        print_fn(f"Theme: {controller.toggle_theme()}")
    else:
        print_fn("Invalid choice.")
    return True


def _render_question(controller: SessionController, print_fn: PrintFn) -> None:
    """Print the current question, options and any feedback."""
    question = controller.question
    if question is None:
        return
    position, total = controller.progress()
    if isinstance(controller.status, ExamActive):
        session = controller.status.session
        header = f"=== Exam {session.topic.code} === Question {position + 1}/{total} | Correct: {session.correct_count}"
    elif isinstance(controller.status, PracticeActive):
        header = (
            f"=== Practice {controller.topic.code} === Slot {position}/{total} "
            f"({controller.progress_fraction():.0%}) | Score: {controller.score}"
        )
    else:
        header = "==="
    print_fn(f"\n{header}")
    print_fn(f"[{question.id}] {question.subject}")
    print_fn(question.prompt)
    for key in sorted(question.options):
        marker = "*" if key == controller.selected_option else " "
        print_fn(f"{marker}{key}) {question.options[key]}")

    feedback = controller.feedback
    if feedback is not None:
        print_fn(feedback.message)
        if not feedback.is_correct:
            print_fn(f"Correct answer: {question.correct_key}) {question.options[question.correct_key]}")
        if feedback.explanation:
            print_fn(f"Why: {feedback.explanation}")
        if question.correct_citation is not None:
            print_fn(f"Reference: {question.correct_citation.value}")
    print_fn("n) Next  e) Exam  p) Practice  t) Topic  r) Reset  s) Scores  h) Tip  i) Analysis  m) Theme  q) Quit")


def _render_exam_result(status: ExamFinished, print_fn: PrintFn) -> None:
    record = status.record
    verdict = "PASSED" if record.passed else "FAILED"
    print_fn(f"\n=== Exam {record.topic.code} complete ===")
    print_fn(f"Score: {record.score}/{record.total} - {verdict}")
    print_fn("p) Practice  e) New exam  s) Scores  q) Quit")


def _render_scoreboard(controller: SessionController, print_fn: PrintFn) -> None:
    """Print the exam leaderboard newest first."""
    print_fn("\n=== Exam Results ===")
    records = controller.high_scores()
    if not records:
        print_fn("No records yet. Complete an exam to start tracking.")
    else:
        header = f"{'Date':<16} {'Paper':<6} {'Score':>9} Result"
        print_fn(header)
        print_fn("-" * len(header))
        for record in records:
            score = f"{record.score}/{record.total}"
            verdict = "PASSED" if record.passed else "FAILED"
            print_fn(f"{_format_local_time(record.timestamp):<16} {record.topic.code:<6} {score:>9} {verdict}")
    print_fn("c) Close")
    print_fn("q) Quit")


def _switch_topic_flow(controller: SessionController, input_fn: InputFn, print_fn: PrintFn) -> None:
    topics = list(Topic)
    print_fn("\n=== Papers ===")
    for idx, topic in enumerate(topics, start=1):
        print_fn(f"{idx}) {topic.label}")
    print_fn("b) Back")
    choice = input_fn("Choose paper: ").strip().lower()
    if choice in BACK_COMMANDS:
        return
    if choice.isdigit() and 0 <= int(choice) - 1 < len(topics):
        controller.switch_topic(topics[int(choice) - 1])
        return
    print_fn("Invalid choice.")


def _reset_topic_flow(controller: SessionController, input_fn: InputFn, print_fn: PrintFn) -> None:
    confirm = input_fn(f"Reset practice progress for {controller.topic.code}? Type YES to confirm: ").strip()
    if confirm != "YES":
        print_fn("Reset cancelled.")
        return
    controller.reset_topic()
    print_fn(f"Practice for {controller.topic.code} restarts from the first question.")


def _format_local_time(timestamp_ms: int) -> str:
    """Format an epoch-millisecond timestamp in local time."""
    return datetime.fromtimestamp(timestamp_ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
