"""Runtime configuration lookups (API keys, model names, hosted URL)."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

__all__ = ["get_openai_api_key", "get_narrative_model", "get_app_url"]

DEFAULT_NARRATIVE_MODEL = "gpt-4o-mini"
DEFAULT_APP_URL = "http://localhost:8501"


def _get_streamlit_secret(key: str) -> str:
    """Read ``key`` from st.secrets, or return "" when there is no secrets file or key."""
    try:
        import streamlit as st

        if key in st.secrets:
            return str(st.secrets[key]).strip()
        return ""
    except Exception:
        return ""


def _lookup(key: str, default: str = "") -> str:
    secret = _get_streamlit_secret(key)
    if secret:
        return secret
    # .env in the working directory; real environment variables win.
    load_dotenv(Path.cwd() / ".env", override=False)
    return os.environ.get(key, default).strip()


def get_openai_api_key() -> str:
    """OpenAI key from st.secrets, then the environment, then a local .env file."""
    return _lookup("OPENAI_API_KEY")


def get_narrative_model() -> str:
    return _lookup("CODCALC_NARRATIVE_MODEL", DEFAULT_NARRATIVE_MODEL) or DEFAULT_NARRATIVE_MODEL


def get_app_url() -> str:
    """Public URL of the hosted calculator, used in embed snippets."""
    return _lookup("CODCALC_APP_URL", DEFAULT_APP_URL) or DEFAULT_APP_URL
