"""Settings file I/O for claude-time.

Reads a JSON settings file at XDG_CONFIG_HOME/claude-time/settings.json.
The file is hand-edited; the program never writes it. Metric state is
never persisted.
"""

import json
import logging
import os
from pathlib import Path

from claude_time.pipeline.otlp_server import DEFAULT_PORT

logger = logging.getLogger(__name__)

PORT_ENV = "CLAUDE_TIME_PORT"


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / claude-time / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "claude-time" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, RecursionError):
        return {}
    return data if isinstance(data, dict) else {}


def _coerce_port(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        port = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None
    return port if 0 <= port <= 65535 else None


def resolve_port(cli_port: int | None = None) -> int:
    """Listening port: --port, then $CLAUDE_TIME_PORT, then settings "port", then 4318.

    Invalid values at any level are skipped.
    """
    candidates = (
        ("--port", cli_port),
        (PORT_ENV, os.environ.get(PORT_ENV)),
        ("settings", load_settings().get("port")),
    )
    for source, raw in candidates:
        if raw is None:
            continue
        port = _coerce_port(raw)
        if port is not None:
            return port
        logger.warning("ignoring invalid port from %s: %r", source, raw)
    return DEFAULT_PORT
