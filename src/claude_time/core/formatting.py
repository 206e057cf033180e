"""Display formatters for metric totals.

Pure computation module with no I/O, no state, and no dependencies on other
claude_time modules.
"""

from collections.abc import Sequence
from datetime import datetime

SPARK_BLOCKS = "▁▂▃▄▅▆▇█"


# [LAW:one-source-of-truth] Canonical compact token formatter shared by renderers.
def format_token_count(value: float) -> str:
    """Compact token count: 1.2M, 68.9K, 950."""
    if value >= 1_000_000:
        return "{:.1f}M".format(value / 1_000_000)
    if value >= 1_000:
        return "{:.1f}K".format(value / 1_000)
    return str(int(value))


def format_full_number(value: float) -> str:
    """Comma-grouped whole number: 1,234,567."""
    return "{:,.0f}".format(value)


def format_cost(value: float) -> str:
    """USD cost. Sub-cent amounts keep four decimals so they don't read as $0.00."""
    if 0 < value < 0.01:
        return "${:.4f}".format(value)
    return "${:.2f}".format(value)


def sparkline(values: Sequence[float]) -> str:
    """Block-character sparkline. Needs at least two points."""
    if len(values) < 2:
        return ""
    low, high = min(values), max(values)
    span = high - low
    if span == 0:
        return SPARK_BLOCKS[0] * len(values)
    last = len(SPARK_BLOCKS) - 1
    return "".join(SPARK_BLOCKS[min(int((v - low) / span * last), last)] for v in values)


def format_active_time(seconds: float) -> str:
    """Duration as 42s, 3m 7s, or 2h 15m."""
    total_seconds = int(seconds)
    if total_seconds < 60:
        return f"{total_seconds}s"
    minutes, secs = divmod(total_seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m"


def format_updated_ago(last_update: datetime | None, now: datetime) -> str:
    """Freshness line shown under the dashboard header."""
    if last_update is None:
        return "No data yet"
    elapsed = (now - last_update).total_seconds()
    if elapsed < 5:
        return "Updated just now"
    if elapsed < 60:
        return f"Updated {int(elapsed)}s ago"
    if elapsed < 3600:
        return f"Updated {int(elapsed / 60)}m ago"
    return f"Updated {int(elapsed / 3600)}h ago"
