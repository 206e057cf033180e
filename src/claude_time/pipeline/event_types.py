"""Value types flowing through the ingestion pipeline.

// [LAW:one-source-of-truth] Wire-derived records are defined here and nowhere else.

This module is STABLE. Safe for `from` imports everywhere.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class MetricDataPoint:
    """One decoded OTLP data point: metric name, value, string attributes."""

    name: str
    value: float
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the attribute mapping so the record is immutable all the way down.
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))


@dataclass(frozen=True)
class HTTPRequest:
    """A complete request extracted by the framer."""

    method: str
    path: str
    body: bytes = b""
