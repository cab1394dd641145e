import json
import random
import sqlite3
from pathlib import Path
from typing import Any

import pytest

import chieftrainer.main as main
from chieftrainer.advisory import STATIC_TIPS
from chieftrainer.content_loader import QuestionBank
from chieftrainer.models import Topic
from chieftrainer.progress import ProgressStore
from chieftrainer.session import SessionController


def _play(controller: SessionController, commands: list[str]) -> list[str]:
    inputs = iter(commands)
    outputs: list[str] = []
    code = main.play_shell(controller, input_fn=lambda _: next(inputs), print_fn=outputs.append)
    assert code == 0
    return outputs


def test_run_enters_play_shell(monkeypatch: Any, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    sentinel = object()
    monkeypatch.setattr(main, "_controller", lambda settings: sentinel)
    monkeypatch.setattr(main, "play_shell", lambda controller: 0 if controller is sentinel else 1)
    assert main.run([]) == 0
    assert main.run(["play"]) == 0


def test_answer_then_next_then_quit(controller: SessionController) -> None:
    outputs = _play(controller, ["b", "n", "q"])
    assert "Correct." in outputs
    assert any(line.startswith("Why: Explanation") for line in outputs)
    assert controller.score == 1
    assert controller.progress() == (2, 300)


def test_wrong_answer_shows_correct_option(controller: SessionController) -> None:
    outputs = _play(controller, ["c", "q"])
    assert "Incorrect." in outputs
    assert "Correct answer: B) right" in outputs


def test_second_answer_is_refused(controller: SessionController) -> None:
    outputs = _play(controller, ["b", "a", "q"])
    assert "Already answered. Press n for the next question." in outputs
    assert len(controller.history()) == 1


def test_invalid_choice_then_quit(controller: SessionController) -> None:
    outputs = _play(controller, ["zz", "q"])
    assert "Invalid choice." in outputs


def test_switch_topic(controller: SessionController) -> None:
    outputs = _play(controller, ["t", "9", "t", "b", "t", "3", "q"])
    assert "Invalid choice." in outputs
    assert "3) 2A3 - Boilers, Pumps, Water Treatment" in outputs
    assert controller.topic is Topic.P2A3


def test_reset_needs_confirmation(controller: SessionController) -> None:
    outputs = _play(controller, ["n", "r", "no", "r", "YES", "q"])
    assert "Reset cancelled." in outputs
    assert "Practice for 2A1 restarts from the first question." in outputs
    assert controller.progress() == (1, 300)


def test_tip_analysis_and_theme(controller: SessionController) -> None:
    outputs = _play(controller, ["h", "i", "a", "i", "m", "q"])
    assert f"Tip: {STATIC_TIPS[Topic.P2A1]}" in outputs
    assert "Answer the question first." in outputs
    assert any(line.startswith("Analysis: 'wrong' is not right.") for line in outputs)
    assert "Theme: light" in outputs


def test_tip_is_refused_during_exam(controller: SessionController) -> None:
    outputs = _play(controller, ["e", "h", "p", "h", "q"])
    assert "Tips are not available during an exam." in outputs
    assert [line for line in outputs if line.startswith("Tip: ")] == [f"Tip: {STATIC_TIPS[Topic.P2A1]}"]


def test_exam_to_scoreboard_flow(store: ProgressStore, fixed_bank: QuestionBank) -> None:
    controller = SessionController(
        store,
        fixed_bank,
        exam_length=2,
        pass_mark=2,
        randbelow=random.Random(5).randrange,
        clock=lambda: 1_700_000_000_000,
        new_record_id=lambda: "exam-1",
    )
    outputs = _play(controller, ["s", "c", "e", "b", "n", "b", "n", "x", "s", "c", "q"])
    assert "No records yet. Complete an exam to start tracking." in outputs
    assert any(line.lstrip().startswith("=== Exam 2A1 === Question 1/2") for line in outputs)
    assert "Score: 2/2 - PASSED" in outputs
    assert "Invalid choice." in outputs
    assert any("2A1" in line and "2/2" in line and "PASSED" in line for line in outputs if "Score:" not in line)
    assert len(controller.high_scores()) == 1


def test_shell_closes_store(controller: SessionController) -> None:
    _play(controller, ["q"])
    with pytest.raises(sqlite3.ProgrammingError):
        controller.store.load_state()


def test_export_and_import_commands(monkeypatch: Any, tmp_path: Path, capsys: Any) -> None:
    monkeypatch.chdir(tmp_path)
    db_path = tmp_path / "data" / "state.db"
    monkeypatch.setenv("CHIEFTRAINER_DB_PATH", str(db_path))
    seed = ProgressStore(db_path)
    seed.save_state({"score": 7, "theme": "light"})
    seed.close()

    export_path = tmp_path / "backup.json"
    assert main.run(["export", str(export_path)]) == 0
    assert "Exported 2 keys" in capsys.readouterr().out

    payload = json.loads(export_path.read_text(encoding="utf-8"))
    payload["state"]["score"] = 9
    export_path.write_text(json.dumps(payload), encoding="utf-8")
    assert main.run(["import", str(export_path)]) == 0
    assert "Imported 2 keys" in capsys.readouterr().out

    check = ProgressStore(db_path)
    assert check.load_state() == {"score": 9, "theme": "light"}
    check.close()


def test_import_rejects_bad_file(monkeypatch: Any, tmp_path: Path, capsys: Any) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CHIEFTRAINER_DB_PATH", str(tmp_path / "state.db"))
    bad = tmp_path / "bad.json"
    bad.write_text("[]", encoding="utf-8")
    assert main.run(["import", str(bad)]) == 1
    assert "Import failed" in capsys.readouterr().out
    assert main.run(["import", str(tmp_path / "missing.json")]) == 1


def test_bad_configuration_exits_with_message(monkeypatch: Any, tmp_path: Path, capsys: Any) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CHIEFTRAINER_LOG_LEVEL", "VERBOSE")
    assert main.run(["export", str(tmp_path / "out.json")]) == 2
    assert "Configuration error: CHIEFTRAINER_LOG_LEVEL" in capsys.readouterr().out
    assert not (tmp_path / "out.json").exists()
