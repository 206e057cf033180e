"""Tests for settings file reading and port resolution."""

import json
import logging

import pytest

import claude_time.io.settings as settings


@pytest.fixture
def isolated_config(isolated_dirs):
    return isolated_dirs / "config"


def write_settings(content):
    path = settings.get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    elif isinstance(content, str):
        path.write_text(content)
    else:
        path.write_text(json.dumps(content))
    return path


def test_config_path_under_xdg(isolated_config):
    assert settings.get_config_path() == isolated_config / "claude-time" / "settings.json"


def test_load_missing_file_returns_empty():
    assert settings.load_settings() == {}


def test_load_object():
    write_settings({"port": 5000, "other": "x"})

    assert settings.load_settings() == {"port": 5000, "other": "x"}


@pytest.mark.parametrize(
    "content",
    ["{broken", "[1, 2]", b"\xff\xfe not utf-8", "[" * 100_000 + "]" * 100_000],
    ids=["corrupt", "not-an-object", "not-utf8", "deeply-nested"],
)
def test_unreadable_file_returns_empty(content):
    write_settings(content)

    assert settings.load_settings() == {}


# ─── Port resolution ──────────────────────────────────────────────────────────


def test_default_port():
    assert settings.resolve_port() == 4318


def test_cli_port_wins(monkeypatch):
    monkeypatch.setenv(settings.PORT_ENV, "5001")
    write_settings({"port": 5002})

    assert settings.resolve_port(5000) == 5000


def test_env_beats_settings(monkeypatch):
    monkeypatch.setenv(settings.PORT_ENV, "5001")
    write_settings({"port": 5002})

    assert settings.resolve_port() == 5001


def test_settings_port_used_last():
    write_settings({"port": 5002})

    assert settings.resolve_port() == 5002


@pytest.mark.parametrize("bad", ["abc", "70000", "-1", ""])
def test_invalid_env_port_falls_through(monkeypatch, caplog, bad):
    monkeypatch.setenv(settings.PORT_ENV, bad)
    write_settings({"port": 5002})

    with caplog.at_level(logging.WARNING, logger="claude_time"):
        assert settings.resolve_port() == 5002
    assert "ignoring invalid port" in caplog.text


@pytest.mark.parametrize("bad", [True, "nope", 1.5e6, None])
def test_invalid_settings_port_uses_default(bad):
    write_settings({"port": bad})

    assert settings.resolve_port() == 4318


def test_infinite_settings_port_uses_default():
    write_settings('{"port": Infinity}')

    assert settings.resolve_port() == 4318


def test_port_zero_is_allowed():
    assert settings.resolve_port(0) == 0
