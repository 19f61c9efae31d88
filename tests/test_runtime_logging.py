from __future__ import annotations

from pathlib import Path

import pytest

import codcalc.runtime_logging as runtime_logging


@pytest.fixture
def log_file(tmp_path, monkeypatch) -> Path:
    path = Path(tmp_path) / "runtime_events.jsonl"
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", path)
    return path


def test_runtime_logging_append_and_read(log_file):
    runtime_logging.append_runtime_event(
        level="warning",
        event="test_event",
        message="Test warning.",
        context={"case": "append_and_read"},
    )
    events = runtime_logging.read_runtime_events(limit=10)
    assert len(events) == 1
    assert events[0]["event"] == "test_event"
    assert events[0]["level"] == "WARNING"
    assert events[0]["context"]["case"] == "append_and_read"


def test_runtime_logging_handles_malformed_lines(log_file):
    log_file.parent.mkdir(parents=True, exist_ok=True)
    log_file.write_text(
        '{"event":"ok","level":"INFO","timestamp_utc":"2026-01-01T00:00:00+00:00","message":"ok","context":{}}\n'
        "\n"
        "not-json\n",
        encoding="utf-8",
    )

    events = runtime_logging.read_runtime_events(limit=10)
    assert len(events) == 2
    assert events[0]["event"] == "ok"
    assert events[1]["event"] == "log_parse_error"


def test_exception_details_are_recorded(log_file):
    try:
        raise ValueError("bad day")
    except ValueError as exc:
        runtime_logging.append_runtime_event("error", "engine_failed", "Engine failed.", exc=exc)

    event = runtime_logging.read_runtime_events()[0]
    assert event["exception_type"] == "ValueError"
    assert event["exception_message"] == "bad day"
    assert "Traceback" in event["traceback"]


def test_warning_batch_is_one_event(log_file):
    runtime_logging.log_warning_batch("input_migration_warnings", [], {"source": "sidebar"})
    assert runtime_logging.read_runtime_events() == []

    runtime_logging.log_warning_batch("input_migration_warnings", ["a", "b"], {"source": "sidebar"})
    events = runtime_logging.read_runtime_events()
    assert len(events) == 1
    assert events[0]["message"] == "2 warning(s)."
    assert events[0]["context"] == {"source": "sidebar", "warnings": ["a", "b"]}


def test_events_frame_is_newest_first(log_file):
    for name in ("first", "second", "third"):
        runtime_logging.append_runtime_event("info", name, name, context={"tags": {"x"}})

    frame = runtime_logging.runtime_events_frame(runtime_logging.read_runtime_events(limit=2))
    assert list(frame.columns) == runtime_logging.EVENT_COLUMNS
    assert list(frame["event"]) == ["third", "second"]
    assert frame.loc[0, "context"] == '{"tags": ["x"]}'

    assert runtime_logging.runtime_events_frame([]).empty


def test_level_filter_and_counts(log_file):
    runtime_logging.append_runtime_event("error", runtime_logging.EVENT_GOAL_SEEK_FAILED, "no bracket")
    runtime_logging.append_runtime_event("verbose", "odd_level", "unknown levels become INFO")
    runtime_logging.append_runtime_event("warning", runtime_logging.EVENT_INPUT_WARNINGS, "1 warning(s).")

    events = runtime_logging.read_runtime_events()
    assert [e["level"] for e in events] == ["ERROR", "INFO", "WARNING"]
    assert runtime_logging.level_counts(events) == {"DEBUG": 0, "INFO": 1, "WARNING": 1, "ERROR": 1}

    errors = runtime_logging.read_runtime_events(level="error")
    assert [e["event"] for e in errors] == ["goal_seek_failed"]


def test_clear_runtime_events(log_file):
    runtime_logging.append_runtime_event("info", "x", "x")
    assert log_file.exists()
    runtime_logging.clear_runtime_events()
    assert not log_file.exists()
    assert runtime_logging.read_runtime_events() == []


def test_configure_log_root_expands_user_paths(monkeypatch):
    monkeypatch.setattr(runtime_logging, "LOG_DIR", runtime_logging.LOG_DIR)
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", runtime_logging.RUNTIME_EVENTS_LOG_FILE)

    root = runtime_logging.configure_log_root("~/codcalc_logs")
    assert "~" not in str(root)
    assert runtime_logging.RUNTIME_EVENTS_LOG_FILE == root / "runtime_events.jsonl"
    assert runtime_logging.configure_log_root("  ") == Path(".local_store")
