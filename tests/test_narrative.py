from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

import codcalc.narrative as narrative
import codcalc.runtime_logging as runtime_logging
from codcalc.metrics import compute_results


class _FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(content: str | None = None, error: Exception | None = None):
    return SimpleNamespace(chat=SimpleNamespace(completions=_FakeCompletions(content, error)))


@pytest.fixture
def log_file(tmp_path, monkeypatch) -> Path:
    path = Path(tmp_path) / "runtime_events.jsonl"
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", path)
    monkeypatch.setattr(narrative, "get_narrative_model", lambda: "test-model")
    return path


def test_payload_reports_rto_impact(base_inputs):
    results = compute_results(base_inputs)
    payload = narrative.build_narrative_payload(base_inputs, results, "MAD")

    assert payload["currency"] == "MAD"
    assert payload["funnel"]["rto_percentage"] == 30.0
    assert payload["financials"]["rto_impact"] == 6600.0
    assert payload["financials"]["net_profit"] == pytest.approx(19600.0)
    json.dumps(payload)


def test_missing_key_returns_rule_based_narrative(base_inputs, monkeypatch):
    monkeypatch.setattr(narrative, "get_openai_api_key", lambda: "")
    result = narrative.request_narrative(base_inputs, compute_results(base_inputs), "MAD")

    assert result.status == "fallback"
    assert result.message == narrative.NO_KEY_MESSAGE
    assert "profitable" in result.analysis
    assert len(result.tips) == 3


def test_fallback_flags_losses(base_inputs, monkeypatch):
    monkeypatch.setattr(narrative, "get_openai_api_key", lambda: "")
    inputs = {**base_inputs, "selling_price": 50.0}
    result = narrative.request_narrative(inputs, compute_results(inputs), "$")

    assert "losing money" in result.analysis
    assert len(result.tips) == 3


def test_model_reply_is_parsed(base_inputs, log_file):
    reply = '```json\n{"analysis": "Healthy funnel.", "tips": ["Cut CPL.", " ", "Add upsell."]}\n```'
    client = _client(reply)
    result = narrative.request_narrative(base_inputs, compute_results(base_inputs), "MAD", client=client)

    assert result.status == "ok"
    assert result.analysis == "Healthy funnel."
    assert result.tips == ["Cut CPL.", "Add upsell."]
    call = client.chat.completions.calls[0]
    assert call["model"] == "test-model"
    assert call["response_format"] == {"type": "json_object"}
    assert "SCENARIO DATA" in call["messages"][1]["content"]


def test_malformed_reply_fails_softly_and_is_logged(base_inputs, log_file):
    result = narrative.request_narrative(
        base_inputs, compute_results(base_inputs), "MAD", client=_client('{"verdict": "fine"}')
    )

    assert result.status == "failed"
    assert result.message == narrative.FAILURE_MESSAGE
    events = runtime_logging.read_runtime_events()
    assert events[-1]["event"] == "narrative_failed"
    assert events[-1]["context"]["error_type"] == "ValueError"


def test_api_errors_never_leak_the_key(base_inputs, log_file, monkeypatch):
    monkeypatch.setattr(narrative, "get_openai_api_key", lambda: "sk-secret-123")
    monkeypatch.setattr(
        narrative, "OpenAI", lambda api_key: _client(error=RuntimeError(f"401 invalid key {api_key}"))
    )
    result = narrative.request_narrative(base_inputs, compute_results(base_inputs), "MAD")

    assert result.status == "failed"
    assert "sk-secret-123" not in log_file.read_text(encoding="utf-8")
    assert "[REDACTED]" in runtime_logging.read_runtime_events()[-1]["context"]["error"]
