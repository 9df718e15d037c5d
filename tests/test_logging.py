"""Tests for runner logging."""

import json

from droid_agent.runner.logging import StepLogger


def test_step_logger(tmp_path):
    logger = StepLogger(tmp_path / "run" / "journal.jsonl", echo=False)
    logger.open()
    assert logger.log_step("get_attribute", {"name": "text"}, result="OK") == 1
    assert logger.log_step("drag", {"x": 1, "y": 2}, error="not found") == 2
    logger.close()

    entries = logger.read_last_n(10)
    assert len(entries) == 2
    assert entries[0]["action"] == "get_attribute"
    assert entries[0]["result"] == "OK"
    assert entries[1]["error"] == "not found"
    assert entries[1]["step"] == 2


def test_read_last_n_limits(tmp_path):
    with StepLogger(tmp_path / "journal.jsonl", echo=False) as logger:
        for i in range(5):
            logger.log_step("children", {"i": i})

    entries = logger.read_last_n(2)
    assert [e["args"]["i"] for e in entries] == [3, 4]


def test_read_missing_file(tmp_path):
    assert StepLogger(tmp_path / "absent.jsonl").read_last_n() == []


def test_echo_to_stderr(tmp_path, capsys):
    with StepLogger(tmp_path / "journal.jsonl") as logger:
        logger.log_step("drag", {"x": 0.5})

    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err)["action"] == "drag"


def test_appends_across_sessions(tmp_path):
    path = tmp_path / "journal.jsonl"
    with StepLogger(path, echo=False) as logger:
        logger.log_step("a", {})
    with StepLogger(path, echo=False) as logger:
        logger.log_step("b", {})

    assert [e["action"] for e in logger.read_last_n()] == ["a", "b"]
