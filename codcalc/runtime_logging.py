"""Runtime diagnostics for the calculator UI.

Events are appended as one JSON object per line to ``runtime_events.jsonl`` under the
storage root (``CODCALC_STORAGE_ROOT``, default ``.local_store``). Writing an event must
never break a calculation, so write failures are dropped silently.
"""

from __future__ import annotations

import json
import os
import sys
import traceback
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd
from streamlit.runtime.scriptrunner import get_script_run_ctx


LOG_DIR = Path(".local_store")
RUNTIME_EVENTS_LOG_FILE = LOG_DIR / "runtime_events.jsonl"

_DEFAULT_LOG_DIR = Path(".local_store")
_STORAGE_ENV_VAR = "CODCALC_STORAGE_ROOT"
_LOG_FILE_NAME = "runtime_events.jsonl"

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
EVENT_COLUMNS = ["timestamp_utc", "level", "event", "message", "context"]

# Event names emitted by the app and the narrative client.
EVENT_INPUT_WARNINGS = "input_warnings"
EVENT_INTEGRITY_FAILED = "integrity_checks_failed"
EVENT_MODEL_RUN_FAILED = "model_run_failed"
EVENT_GOAL_SEEK_FAILED = "goal_seek_failed"
EVENT_NARRATIVE_FAILED = "narrative_failed"
EVENT_UNCAUGHT = "uncaught_exception"
EVENT_PARSE_ERROR = "log_parse_error"

_EXCEPTION_HOOK_INSTALLED = False


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _json_default(value: Any):
    if isinstance(value, (set, tuple)):
        return list(value)
    return str(value)


def _normalize_level(level: str) -> str:
    text = str(level).strip().upper()
    return text if text in LEVELS else "INFO"


def configure_log_root(path_value: str | Path | None) -> Path:
    """Point the runtime log at ``path_value`` (``~`` and env vars expanded); blank means the default."""
    global LOG_DIR, RUNTIME_EVENTS_LOG_FILE
    text = "" if path_value is None else str(path_value).strip()
    LOG_DIR = Path(os.path.expandvars(os.path.expanduser(text))) if text else _DEFAULT_LOG_DIR
    RUNTIME_EVENTS_LOG_FILE = LOG_DIR / _LOG_FILE_NAME
    return LOG_DIR


def runtime_log_path() -> str:
    return str(RUNTIME_EVENTS_LOG_FILE.resolve())


def _event_record(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None,
    exc: BaseException | None,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "timestamp_utc": _now_iso(),
        "level": _normalize_level(level),
        "event": str(event),
        "message": str(message),
        "context": context or {},
    }
    if exc is not None:
        record["exception_type"] = type(exc).__name__
        record["exception_message"] = str(exc)
        if exc.__traceback__ is not None:
            record["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return record


def append_runtime_event(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> None:
    line = json.dumps(_event_record(level, event, message, context, exc), default=_json_default, ensure_ascii=False)
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        with RUNTIME_EVENTS_LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError:
        pass


def log_warning_batch(event: str, warnings: list[str], context: dict[str, Any] | None = None) -> None:
    """Record a list of user-facing warnings as a single WARNING event."""
    if not warnings:
        return
    append_runtime_event(
        level="WARNING",
        event=event,
        message=f"{len(warnings)} warning(s).",
        context={**(context or {}), "warnings": list(warnings)},
    )


def _parse_line(line: str) -> dict[str, Any]:
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        return {
            "timestamp_utc": _now_iso(),
            "level": "ERROR",
            "event": EVENT_PARSE_ERROR,
            "message": "Malformed log line encountered.",
            "context": {"line": line},
        }


def read_runtime_events(limit: int = 200, level: str | None = None) -> list[dict[str, Any]]:
    """Oldest-first events from the last ``limit`` lines, optionally only one level."""
    if limit <= 0 or not RUNTIME_EVENTS_LOG_FILE.exists():
        return []
    try:
        lines = RUNTIME_EVENTS_LOG_FILE.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    events = [_parse_line(line) for line in lines[-int(limit) :] if line.strip()]
    if level is not None:
        wanted = _normalize_level(level)
        events = [e for e in events if str(e.get("level", "")).upper() == wanted]
    return events


def level_counts(events: list[dict[str, Any]]) -> dict[str, int]:
    counts = Counter(str(e.get("level", "")).upper() for e in events)
    return {lvl: counts.get(lvl, 0) for lvl in LEVELS}


def runtime_events_frame(events: list[dict[str, Any]]) -> pd.DataFrame:
    """Newest-first table of events with the context rendered as JSON text."""
    if not events:
        return pd.DataFrame(columns=EVENT_COLUMNS)
    df = pd.DataFrame(events).reindex(columns=EVENT_COLUMNS).fillna("")
    df["context"] = df["context"].apply(lambda c: json.dumps(c, default=_json_default, ensure_ascii=False))
    return df.iloc[::-1].reset_index(drop=True)


def clear_runtime_events() -> None:
    RUNTIME_EVENTS_LOG_FILE.unlink(missing_ok=True)


def install_global_exception_logging() -> None:
    """Log uncaught exceptions from Streamlit script runs; other processes keep the plain hook."""
    global _EXCEPTION_HOOK_INSTALLED
    if _EXCEPTION_HOOK_INSTALLED:
        return
    previous_hook = sys.excepthook

    def _hook(exc_type, exc, exc_tb):
        if get_script_run_ctx() is not None:
            append_runtime_event(level="ERROR", event=EVENT_UNCAUGHT, message=str(exc), exc=exc)
        previous_hook(exc_type, exc, exc_tb)

    sys.excepthook = _hook
    _EXCEPTION_HOOK_INSTALLED = True


configure_log_root(os.getenv(_STORAGE_ENV_VAR, ""))
