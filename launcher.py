"""Desktop launcher for the packaged COD cashflow calculator."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def _roots() -> tuple[Path, Path]:
    """(bundle root holding app.py, runtime root beside the executable)."""
    if getattr(sys, "frozen", False):
        return Path(getattr(sys, "_MEIPASS")), Path(sys.executable).resolve().parent
    here = Path(__file__).resolve().parent
    return here, here


def port_from_env(value: str | None) -> int | None:
    if not value or not value.strip().isdigit():
        return None
    port = int(value.strip())
    return port if 0 < port < 65536 else None


def streamlit_argv(app_path: Path, port: int | None = None) -> list[str]:
    argv = [
        "streamlit",
        "run",
        str(app_path),
        "--server.headless=false",
        "--browser.gatherUsageStats=false",
    ]
    if port:
        argv.append(f"--server.port={int(port)}")
    return argv


def main() -> None:
    bundle_root, runtime_root = _roots()

    # Runtime diagnostics land in .local_store beside the executable.
    os.chdir(runtime_root)
    os.environ.setdefault("CODCALC_STORAGE_ROOT", str(runtime_root / ".local_store"))
    os.environ.setdefault("STREAMLIT_BROWSER_GATHER_USAGE_STATS", "false")

    from streamlit.web import cli as stcli

    sys.argv = streamlit_argv(bundle_root / "app.py", port_from_env(os.environ.get("CODCALC_PORT")))
    raise SystemExit(stcli.main())


if __name__ == "__main__":
    main()
