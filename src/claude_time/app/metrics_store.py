"""In-memory aggregation of Claude Code telemetry.

Routes decoded OTLP data points to cumulative counters, keeps a short history
of each total for sparklines, and exposes read-only views for renderers.

// [LAW:one-source-of-truth] The store is the only owner of metric state.
// Owned by the event loop thread; the pipeline writes, renderers only read.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TypedDict

from claude_time.app.counters import CumulativeCounter, TimeSeriesBuffer
from claude_time.pipeline.event_types import MetricDataPoint

logger = logging.getLogger(__name__)

TOKEN_USAGE = "claude_code.token.usage"
COST_USAGE = "claude_code.cost.usage"
SESSION_COUNT = "claude_code.session.count"
LINES_OF_CODE = "claude_code.lines_of_code.count"
COMMIT_COUNT = "claude_code.commit.count"
PR_COUNT = "claude_code.pr.count"
ACTIVE_TIME = "claude_code.active_time.duration"

UNKNOWN_MODEL = "unknown"
TOTAL_COST = "total_cost"

# Fixed counters, in display order. Each one also names its history buffer.
COUNTER_KEYS: tuple[str, ...] = (
    "input_tokens",
    "output_tokens",
    "cache_read_tokens",
    "cache_creation_tokens",
    "session_count",
    "lines_added",
    "lines_removed",
    "commit_count",
    "pr_count",
    "active_time_seconds",
)
HISTORY_KEYS: tuple[str, ...] = COUNTER_KEYS + (TOTAL_COST,)

# Metrics whose target counter is chosen by an attribute value.
_SUB_KEY_ATTRIBUTE: dict[str, str] = {
    TOKEN_USAGE: "type",
    LINES_OF_CODE: "type",
}

# [LAW:dataflow-not-control-flow] (metric name, sub-key) → counter key.
_ROUTES: dict[tuple[str, str | None], str] = {
    (TOKEN_USAGE, "input"): "input_tokens",
    (TOKEN_USAGE, "output"): "output_tokens",
    (TOKEN_USAGE, "cacheRead"): "cache_read_tokens",
    (TOKEN_USAGE, "cacheCreation"): "cache_creation_tokens",
    (SESSION_COUNT, None): "session_count",
    (LINES_OF_CODE, "added"): "lines_added",
    (LINES_OF_CODE, "removed"): "lines_removed",
    (COMMIT_COUNT, None): "commit_count",
    (PR_COUNT, None): "pr_count",
    (ACTIVE_TIME, None): "active_time_seconds",
}


def route_counter_key(point: MetricDataPoint) -> str | None:
    """Fixed counter key for a data point, or None if it has no fixed route."""
    attribute = _SUB_KEY_ATTRIBUTE.get(point.name)
    sub_key = point.attributes.get(attribute, "") if attribute is not None else None
    return _ROUTES.get((point.name, sub_key))


class MetricsSummary(TypedDict):
    input_tokens: float
    output_tokens: float
    cache_read_tokens: float
    cache_creation_tokens: float
    session_count: float
    lines_added: float
    lines_removed: float
    commit_count: float
    pr_count: float
    active_time_seconds: float
    total_cost: float
    cost_by_model: dict[str, float]
    has_received_data: bool
    last_update_time: datetime | None


class MetricsStore:
    """Aggregator for Claude Code OTLP metrics.

    Not thread-safe. ingest() and reset_all() must run on the same thread
    (the event loop) as every reader.
    """

    def __init__(self):
        self._counters: dict[str, CumulativeCounter] = {key: CumulativeCounter() for key in COUNTER_KEYS}
        self._cost_by_model: dict[str, CumulativeCounter] = {}
        self._history: dict[str, TimeSeriesBuffer] = {key: TimeSeriesBuffer() for key in HISTORY_KEYS}
        self.has_received_data = False
        self.last_update_time: datetime | None = None
        self._batch_count = 0

    # ─── Writes ─────────────────────────────────────────────────────────────

    def ingest(self, data_points: Iterable[MetricDataPoint]) -> None:
        """Apply one export batch in order, then record one history sample."""
        routed = 0
        for point in data_points:
            if self._apply(point):
                routed += 1
        self.has_received_data = True
        self.last_update_time = datetime.now(timezone.utc)
        self._batch_count += 1
        self._record_snapshot()
        logger.debug("ingested batch=%d routed_points=%d", self._batch_count, routed)

    def _apply(self, point: MetricDataPoint) -> bool:
        if point.name == COST_USAGE:
            model = point.attributes.get("model", UNKNOWN_MODEL)
            counter = self._cost_by_model.setdefault(model, CumulativeCounter())
            counter.update(point.value)
            return True

        key = route_counter_key(point)
        if key is None:
            return False
        self._counters[key].update(point.value)
        return True

    def _record_snapshot(self) -> None:
        for key, counter in self._counters.items():
            self._history[key].record(counter.total)
        self._history[TOTAL_COST].record(self.total_cost)

    def reset_all(self) -> None:
        """Forget every total and sample. The store is as new afterwards."""
        for counter in self._counters.values():
            counter.reset()
        self._cost_by_model.clear()
        for buffer in self._history.values():
            buffer.reset()
        self.has_received_data = False
        self.last_update_time = None
        self._batch_count = 0
        logger.info("metrics reset")

    # ─── Reads ──────────────────────────────────────────────────────────────

    @property
    def batch_count(self) -> int:
        """Batches ingested since construction or the last reset."""
        return self._batch_count

    @property
    def total_cost(self) -> float:
        return sum(counter.total for counter in self._cost_by_model.values())

    @property
    def cost_by_model(self) -> dict[str, float]:
        """Per-model cost totals (a copy)."""
        return {model: counter.total for model, counter in self._cost_by_model.items()}

    def total(self, key: str) -> float:
        """Current total of a fixed counter, or total_cost. Raises KeyError otherwise."""
        if key == TOTAL_COST:
            return self.total_cost
        return self._counters[key].total

    def samples(self, key: str) -> list[float]:
        """History for a key in HISTORY_KEYS, most recent last."""
        return self._history[key].samples

    def summary(self) -> MetricsSummary:
        """Snapshot of every total, for renderers."""
        return MetricsSummary(
            input_tokens=self.total("input_tokens"),
            output_tokens=self.total("output_tokens"),
            cache_read_tokens=self.total("cache_read_tokens"),
            cache_creation_tokens=self.total("cache_creation_tokens"),
            session_count=self.total("session_count"),
            lines_added=self.total("lines_added"),
            lines_removed=self.total("lines_removed"),
            commit_count=self.total("commit_count"),
            pr_count=self.total("pr_count"),
            active_time_seconds=self.total("active_time_seconds"),
            total_cost=self.total_cost,
            cost_by_model=self.cost_by_model,
            has_received_data=self.has_received_data,
            last_update_time=self.last_update_time,
        )
