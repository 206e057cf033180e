"""Logging bootstrap for the claude-time receiver.

// [LAW:single-enforcer] Handlers are attached to the claude_time logger here and nowhere else.

Records go to stderr (stdout belongs to the dashboard) and to a rotating file
named after the session and the requested port. The first file record says
which session and port the run belongs to.
"""

import logging
import os
import re
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "claude_time"

LEVEL_ENV = "CLAUDE_TIME_LOG_LEVEL"
DIR_ENV = "CLAUDE_TIME_LOG_DIR"
FILE_ENV = "CLAUDE_TIME_LOG_FILE"
DEFAULT_LOG_DIR = "~/.local/share/claude-time/logs"

MAX_LOG_BYTES = 20 * 1024 * 1024
LOG_BACKUPS = 5

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def resolve_level() -> int:
    """Level from $CLAUDE_TIME_LOG_LEVEL. Unknown names mean INFO."""
    name = os.environ.get(LEVEL_ENV, "").strip().upper()
    if not name:
        return logging.INFO
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def log_file_path(session_name: str, port: int) -> Path:
    explicit = os.environ.get(FILE_ENV)
    if explicit:
        return Path(explicit)
    log_dir = Path(os.environ.get(DIR_ENV) or os.path.expanduser(DEFAULT_LOG_DIR))
    slug = _UNSAFE_CHARS.sub("-", session_name).strip("-_") or "session"
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"{slug}-{port}-{ts}.log"


def _file_handler(logger: logging.Logger) -> RotatingFileHandler | None:
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler):
            return handler
    return None


def configure(session_name: str, port: int) -> Path:
    """Attach the stderr and rotating-file handlers. Returns the log file path.

    A second call keeps the first configuration and returns its path.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    existing = _file_handler(logger)
    if existing is not None:
        return Path(existing.baseFilename)

    level = resolve_level()
    path = log_file_path(session_name, port)
    path.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    file_handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
    )

    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(console)
    logger.addHandler(file_handler)

    logger.info(
        "claude-time session=%s port=%d pid=%d level=%s",
        session_name,
        port,
        os.getpid(),
        logging.getLevelName(level),
    )
    return path


def shutdown() -> None:
    """Detach and close every handler configure() attached."""
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
