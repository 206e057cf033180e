"""CLI entry point for claude-time."""

import argparse
import asyncio
import logging
import signal
import sys

from rich.console import Console

import claude_time.io.logging_setup
import claude_time.io.settings
from claude_time.app.metrics_store import MetricsStore
from claude_time.pipeline.event_types import MetricDataPoint
from claude_time.pipeline.otlp_server import OTLPServer
from claude_time.tui.dashboard import render_dashboard, render_status_line, render_waiting_panel

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Claude Code OTLP metrics monitor")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Loopback port for the OTLP/HTTP receiver (default: 4318). Env: CLAUDE_TIME_PORT",
    )
    parser.add_argument(
        "--session",
        type=str,
        default="claude-time",
        help="Session name used for the log file (default: claude-time)",
    )
    parser.add_argument(
        "--setup",
        action="store_true",
        default=False,
        help="Print the Claude Code exporter environment and exit.",
    )
    return parser


class MonitorApp:
    """Wires the receiver to the store and prints updates to the console."""

    def __init__(self, port: int, console: Console | None = None):
        self.console = console or Console()
        self.store = MetricsStore()
        self.server = OTLPServer(port=port, on_metrics_received=self.on_metrics_received)

    def on_metrics_received(self, data_points: list[MetricDataPoint]) -> None:
        self.store.ingest(data_points)
        self.console.print(
            "[dim]batch {}[/dim]{}".format(self.store.batch_count, render_status_line(self.store))
        )

    def show_dashboard(self) -> None:
        if not self.store.has_received_data:
            self.console.print(render_waiting_panel(self.server.port))
            return
        self.console.print(render_dashboard(self.store))

    def reset_stats(self) -> None:
        self.store.reset_all()
        self.console.print("[yellow]Stats reset[/yellow]")

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        # [LAW:dataflow-not-control-flow] Signal → action table; absent signals are skipped.
        actions = {"SIGUSR1": self.show_dashboard, "SIGHUP": self.reset_stats}
        for name, action in actions.items():
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            try:
                loop.add_signal_handler(signum, action)
            except (NotImplementedError, RuntimeError):
                logger.debug("signal %s unavailable on this platform", name)

    async def run(self) -> int:
        if not await self.server.start():
            self.console.print(
                "[red]Could not listen on 127.0.0.1:{} (see log).[/red]".format(self.server.port)
            )
            return 1
        self._install_signal_handlers(asyncio.get_running_loop())
        self.console.print("OTLP receiver on http://127.0.0.1:{}".format(self.server.port))
        self.console.print(render_waiting_panel(self.server.port))
        try:
            await self.server.serve_forever()
        finally:
            await self.server.stop()
        return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    port = claude_time.io.settings.resolve_port(args.port)

    if args.setup:
        Console().print(render_waiting_panel(port))
        return 0

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_path = claude_time.io.logging_setup.configure(session_name=args.session, port=port)
    logger.debug("logging to %s", log_path)

    app = MonitorApp(port)
    try:
        return asyncio.run(app.run())
    except KeyboardInterrupt:
        app.show_dashboard()
        logger.info("Server stopped")
        return 0
    finally:
        claude_time.io.logging_setup.shutdown()


if __name__ == "__main__":
    sys.exit(main())
