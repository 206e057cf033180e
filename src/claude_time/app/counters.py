"""Reset-aware cumulative counter and fixed-size sample history.

Pure state containers with no dependencies on other claude_time modules.
"""

from collections import deque
from dataclasses import dataclass

HISTORY_CAPACITY = 30


@dataclass
class CumulativeCounter:
    """Running total of an OTLP cumulative counter across source restarts.

    The exporter reports a value that only grows for the lifetime of the
    reporting process. A drop means the process restarted and its counter
    began again from zero, so the last value seen before the drop is banked
    into accumulated_before_reset.

    Any decrease is treated as a restart. Out-of-order or duplicated exports
    are indistinguishable from a restart and inflate the total.
    """

    last_raw_value: float = 0.0
    accumulated_before_reset: float = 0.0

    @property
    def total(self) -> float:
        return self.accumulated_before_reset + self.last_raw_value

    def update(self, raw_value: float) -> None:
        if raw_value < self.last_raw_value:
            self.accumulated_before_reset += self.last_raw_value
        self.last_raw_value = raw_value

    def reset(self) -> None:
        self.last_raw_value = 0.0
        self.accumulated_before_reset = 0.0


class TimeSeriesBuffer:
    """FIFO history of per-batch totals. Oldest sample evicted past capacity."""

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        self._values: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._values.maxlen or 0

    @property
    def samples(self) -> list[float]:
        """Recorded samples, most recent last."""
        return list(self._values)

    def record(self, value: float) -> None:
        self._values.append(value)

    def reset(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)
