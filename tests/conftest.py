"""Pytest configuration and shared fixtures for claude-time tests."""

import pytest

from claude_time.app.metrics_store import MetricsStore


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Keep settings and log files out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("CLAUDE_TIME_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("CLAUDE_TIME_LOG_FILE", raising=False)
    monkeypatch.delenv("CLAUDE_TIME_PORT", raising=False)
    return tmp_path


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    """Fresh, empty MetricsStore."""
    return MetricsStore()
