from __future__ import annotations

import sys
from pathlib import Path

import pytest

RELAY_ENV_VARS = (
    "GEMINI_API_HOST",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_API_PATH",
    "UPSTREAM_OPEN_TIMEOUT_S",
    "RELAY_HOST",
    "PORT",
    "RELAY_DEFAULT_SCREEN",
    "RELAY_TTS_DIRECTIVES",
)


def pytest_configure() -> None:
    # Keep `import src...` working when running `pytest` from the repo root.
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Monkeypatch with every relay env var unset."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
