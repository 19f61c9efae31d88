from __future__ import annotations

from pathlib import Path

from launcher import port_from_env, streamlit_argv


def test_streamlit_argv_runs_app_with_optional_port():
    argv = streamlit_argv(Path("/opt/calc/app.py"))
    assert argv[:3] == ["streamlit", "run", str(Path("/opt/calc/app.py"))]
    assert "--browser.gatherUsageStats=false" in argv
    assert not any(a.startswith("--server.port") for a in argv)

    assert streamlit_argv(Path("app.py"), 8600)[-1] == "--server.port=8600"


def test_port_from_env_ignores_invalid_values():
    assert port_from_env("8502") == 8502
    assert port_from_env(" 9000 ") == 9000
    assert port_from_env(None) is None
    assert port_from_env("") is None
    assert port_from_env("http") is None
    assert port_from_env("70000") is None
