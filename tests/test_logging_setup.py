"""Tests for the runtime logging bootstrap."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

import claude_time.io.logging_setup as logging_setup


@pytest.fixture(autouse=True)
def detached_logger(monkeypatch):
    monkeypatch.delenv(logging_setup.LEVEL_ENV, raising=False)
    logging_setup.shutdown()
    yield
    logging_setup.shutdown()


def _flush():
    for handler in logging.getLogger("claude_time").handlers:
        handler.flush()


def test_configure_names_file_after_session_and_port(isolated_dirs):
    path = logging_setup.configure(session_name="my session/1", port=4318)

    assert path.parent == isolated_dirs / "logs"
    assert path.name.startswith("my-session-1-4318-")
    assert path.suffix == ".log"
    logger = logging.getLogger("claude_time")
    assert logger.propagate is False
    assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)


def test_first_record_identifies_the_run():
    path = logging_setup.configure(session_name="demo", port=5005)
    _flush()

    first_line = path.read_text().splitlines()[0]
    assert "session=demo port=5005" in first_line
    assert "level=INFO" in first_line


def test_second_configure_keeps_first_setup():
    first = logging_setup.configure(session_name="one", port=1)
    second = logging_setup.configure(session_name="two", port=2)

    assert second == first
    assert len(logging.getLogger("claude_time").handlers) == 2


@pytest.mark.parametrize("raw,expected", [("debug", logging.DEBUG), (" Warning ", logging.WARNING), ("chatty", logging.INFO), ("", logging.INFO)])
def test_resolve_level(monkeypatch, raw, expected):
    monkeypatch.setenv(logging_setup.LEVEL_ENV, raw)

    assert logging_setup.resolve_level() == expected


def test_level_applies_to_logger(monkeypatch):
    monkeypatch.setenv(logging_setup.LEVEL_ENV, "debug")

    logging_setup.configure(session_name="s", port=0)

    assert logging.getLogger("claude_time").level == logging.DEBUG


def test_explicit_log_file(tmp_path, monkeypatch):
    target = tmp_path / "nested" / "run.log"
    monkeypatch.setenv(logging_setup.FILE_ENV, str(target))

    path = logging_setup.configure(session_name="s", port=0)
    logging.getLogger("claude_time.test").info("hello file")
    _flush()

    assert path == target
    assert "hello file" in target.read_text()


def test_shutdown_detaches_handlers():
    logging_setup.configure(session_name="s", port=0)

    logging_setup.shutdown()

    logger = logging.getLogger("claude_time")
    assert logger.handlers == []
    assert logger.propagate is True
