"""OTLP/JSON metrics decoder.

Turns an OTLP HTTP/JSON metrics export into a flat list of MetricDataPoint
records. Best effort: every level of the document is checked for shape and a
mismatch drops that subtree instead of failing the whole decode.

// [LAW:dataflow-not-control-flow] Pure function. Bytes in, data points out.
"""

import json
import math
import re
from collections.abc import Iterator

from claude_time.pipeline.event_types import MetricDataPoint

# Metric kinds whose dataPoints carry a single numeric value.
_VALUE_KINDS = ("sum", "gauge")

# Strict decimal or exponent notation, as a JSON number would be written.
_NUMERIC_STRING = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def decode_metrics(data: bytes) -> list[MetricDataPoint]:
    """Decode an OTLP/JSON export body. Never raises; bad input yields []."""
    try:
        document = json.loads(data, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError, ValueError, RecursionError):
        return []
    if not isinstance(document, dict):
        return []
    return list(_iter_data_points(document))


def _reject_constant(name: str) -> float:
    # NaN and Infinity are not JSON.
    raise ValueError(f"non-standard JSON constant {name}")


def _dict_list(container: dict, key: str) -> list[dict]:
    """Return container[key] when it is a list of objects, else []."""
    value = container.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _iter_data_points(document: dict) -> Iterator[MetricDataPoint]:
    for resource_metrics in _dict_list(document, "resourceMetrics"):
        for scope_metrics in _dict_list(resource_metrics, "scopeMetrics"):
            for metric in _dict_list(scope_metrics, "metrics"):
                yield from _metric_data_points(metric)


def _metric_data_points(metric: dict) -> Iterator[MetricDataPoint]:
    name = metric.get("name")
    if not isinstance(name, str):
        return
    for kind in _VALUE_KINDS:
        body = metric.get(kind)
        if not isinstance(body, dict):
            continue
        for point in _dict_list(body, "dataPoints"):
            yield MetricDataPoint(
                name=name,
                value=extract_value(point),
                attributes=extract_attributes(point),
            )


def _finite_number(value: object) -> float | None:
    # JSON true/false decode to bool, which is an int subclass.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _parse_float(text: str) -> float | None:
    if _NUMERIC_STRING.fullmatch(text) is None:
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def extract_value(point: dict) -> float:
    """Numeric value of a data point.

    asInt wins over asDouble. OTLP/JSON encodes 64-bit integers as strings,
    so asInt is accepted either as a numeric string or as a JSON number.
    """
    as_int = point.get("asInt")
    as_double = point.get("asDouble")
    # First parsable candidate wins.
    candidates = (
        _parse_float(as_int) if isinstance(as_int, str) else None,
        _finite_number(as_int),
        _finite_number(as_double),
        _parse_float(as_double) if isinstance(as_double, str) else None,
    )
    for value in candidates:
        if value is not None:
            return value
    return 0.0


def extract_attributes(point: dict) -> dict[str, str]:
    """String-valued attributes of a data point. Other value types are dropped."""
    attrs: dict[str, str] = {}
    for attr in _dict_list(point, "attributes"):
        key = attr.get("key")
        value = attr.get("value")
        if not isinstance(key, str) or not isinstance(value, dict):
            continue
        string_value = value.get("stringValue")
        if isinstance(string_value, str):
            attrs[key] = string_value
    return attrs
