"""Payload builders for claude-time tests.

Re-exports the public builders for convenient imports:
    from tests.harness import make_export_bytes, make_http_request, ...
"""

from tests.harness.builders import (
    make_data_point,
    make_export,
    make_export_bytes,
    make_gauge_metric,
    make_http_request,
    make_sum_metric,
    string_attr,
    token_usage,
)

__all__ = [
    "make_data_point",
    "make_export",
    "make_export_bytes",
    "make_gauge_metric",
    "make_http_request",
    "make_sum_metric",
    "string_attr",
    "token_usage",
]
