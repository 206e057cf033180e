"""Dashboard rendering logic - pure functions for building display renderables.

Reads MetricsStore totals and history; never mutates the store.
"""

from datetime import datetime, timezone

from rich.console import Group
from rich.table import Table
from rich.text import Text

from claude_time.app.metrics_store import MetricsStore, TOTAL_COST
from claude_time.core.formatting import (
    format_active_time,
    format_cost,
    format_full_number,
    format_token_count,
    format_updated_ago,
    sparkline,
)

EXPORTER_SETUP = (
    "export CLAUDE_CODE_ENABLE_TELEMETRY=1",
    "export OTEL_METRICS_EXPORTER=otlp",
    "export OTEL_EXPORTER_OTLP_PROTOCOL=http/json",
    "export OTEL_EXPORTER_OTLP_ENDPOINT=http://localhost:{port}",
    "export OTEL_METRIC_EXPORT_INTERVAL=10000",
)

# (label, history key, formatter, value style, sparkline style)
_TOKEN_ROWS = (
    ("Input", "input_tokens", format_full_number, "", "cyan"),
    ("Output", "output_tokens", format_full_number, "", "blue"),
    ("Cache Read", "cache_read_tokens", format_full_number, "", "dark_cyan"),
    ("Cache Create", "cache_creation_tokens", format_full_number, "", "aquamarine3"),
)
_ACTIVITY_ROWS = (
    ("Sessions", "session_count", format_full_number, "", "orange3"),
    ("Active Time", "active_time_seconds", format_active_time, "", "yellow"),
    ("Lines Added", "lines_added", format_full_number, "green", "green"),
    ("Lines Removed", "lines_removed", format_full_number, "red", "red"),
    ("Commits", "commit_count", format_full_number, "", "purple"),
    ("PRs", "pr_count", format_full_number, "", "slate_blue1"),
)


def render_status_line(store: MetricsStore) -> str:
    """Compact input/output token title, empty until data arrives."""
    if not store.has_received_data:
        return ""
    return " ↑{} ↓{}".format(
        format_token_count(store.total("input_tokens")),
        format_token_count(store.total("output_tokens")),
    )


def render_waiting_panel(port: int) -> Text:
    """Exporter setup instructions shown before the first export arrives."""
    text = Text()
    text.append("Waiting for Claude Code metrics...\n", style="dim")
    text.append("\nSetup:\n", style="bold")
    for line in EXPORTER_SETUP:
        text.append("  " + line.format(port=port) + "\n", style="dim")
    return text


def _section_header(title: str, icon: str, color: str) -> Text:
    return Text.assemble((icon + " ", color), (title, "bold " + color))


def _metric_table() -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(width=16)
    table.add_column(justify="right", min_width=12)
    table.add_column(min_width=12)
    return table


def _add_rows(table: Table, store: MetricsStore, rows) -> None:
    for label, key, fmt, value_style, spark_style in rows:
        table.add_row(
            label,
            Text(fmt(store.total(key)), style=value_style),
            Text(sparkline(store.samples(key)), style=spark_style),
        )


def _cost_table(store: MetricsStore) -> Table:
    table = _metric_table()
    table.add_row(
        "Total",
        Text(format_cost(store.total_cost), style="green"),
        Text(sparkline(store.samples(TOTAL_COST)), style="green"),
    )
    by_model = sorted(store.cost_by_model.items(), key=lambda item: item[1], reverse=True)
    # A single model's row would repeat the total.
    if len(by_model) > 1:
        for model, cost in by_model:
            table.add_row(model, Text(format_cost(cost), style="green"), "")
    return table


def render_dashboard(store: MetricsStore, now: datetime | None = None) -> Group:
    """Full dashboard: header, cost, tokens, activity."""
    now = now or datetime.now(timezone.utc)

    header = Text.assemble(("⚡ ", ""), ("ClaudeTime", "bold magenta"))
    if store.has_received_data:
        header.append("  ● Live", style="green")

    tokens = _metric_table()
    _add_rows(tokens, store, _TOKEN_ROWS)
    activity = _metric_table()
    _add_rows(activity, store, _ACTIVITY_ROWS)

    return Group(
        header,
        Text(format_updated_ago(store.last_update_time, now), style="dim"),
        Text(""),
        _section_header("Cost", "●", "green"),
        _cost_table(store),
        Text(""),
        _section_header("Tokens", "◆", "cyan"),
        tokens,
        Text(""),
        _section_header("Activity", "▲", "orange3"),
        activity,
    )
