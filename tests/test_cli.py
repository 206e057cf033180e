"""Tests for the CLI entry point and MonitorApp wiring."""

import asyncio
import io
import logging
import socket

import pytest
from rich.console import Console

import claude_time.cli as cli
from claude_time.pipeline.event_types import MetricDataPoint
from claude_time.pipeline.otlp_server import ServerState


def _app(port=0):
    out = io.StringIO()
    app = cli.MonitorApp(port, console=Console(file=out, width=100, color_system=None))
    return app, out


def test_parser_defaults():
    args = cli.build_parser().parse_args([])

    assert args.port is None
    assert args.session == "claude-time"
    assert args.setup is False


def test_setup_flag_prints_instructions_and_exits(capsys):
    assert cli.main(["--setup", "--port", "5555"]) == 0

    assert "OTEL_EXPORTER_OTLP_ENDPOINT=http://localhost:5555" in capsys.readouterr().out


def test_observer_ingests_and_prints_status():
    app, out = _app()

    app.on_metrics_received([MetricDataPoint("claude_code.token.usage", 1500, {"type": "input"})])

    assert app.store.total("input_tokens") == 1500
    assert "↑1.5K ↓0" in out.getvalue()


def test_show_dashboard_before_data_shows_setup():
    app, out = _app(port=4318)

    app.show_dashboard()

    assert "Waiting for Claude Code metrics" in out.getvalue()


def test_reset_stats_clears_store():
    app, out = _app()
    app.on_metrics_received([MetricDataPoint("claude_code.commit.count", 2, {})])

    app.reset_stats()

    assert app.store.has_received_data is False
    assert app.store.total("commit_count") == 0
    assert "Stats reset" in out.getvalue()


def test_run_returns_one_when_port_is_taken(monkeypatch):
    app, out = _app()

    async def fail_start():
        app.server.state = ServerState.FAILED
        return False

    monkeypatch.setattr(app.server, "start", fail_start)

    assert asyncio.run(app.run()) == 1
    assert "Could not listen" in out.getvalue()


def test_run_serves_until_stopped():
    app, out = _app()

    async def scenario():
        task = asyncio.create_task(app.run())
        while app.server.state is not ServerState.READY:
            await asyncio.sleep(0.01)
        await app.server.stop()
        return await asyncio.wait_for(task, timeout=5)

    assert asyncio.run(scenario()) == 0
    assert "OTLP receiver on http://127.0.0.1:" in out.getvalue()


def test_main_bind_failure_logs_session_header_and_detaches(tmp_path, monkeypatch):
    log_file = tmp_path / "run.log"
    monkeypatch.setenv("CLAUDE_TIME_LOG_FILE", str(log_file))

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
        blocker.bind(("127.0.0.1", 0))
        blocker.listen()
        port = blocker.getsockname()[1]
        assert cli.main(["--port", str(port), "--session", "demo"]) == 1

    text = log_file.read_text()
    assert f"session=demo port={port}" in text
    assert "failed to bind" in text
    assert logging.getLogger("claude_time").handlers == []
