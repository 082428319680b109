"""Logging setup for the use_aws stdio server.

stdout carries the JSON-RPC stream, so records only ever go to stderr and,
when ``LOG_FILE`` is set, to that file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from use_aws_mcp.config import LoggingSettings, load_settings

logger = logging.getLogger(__name__)

_FORMATTER = logging.Formatter(
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _open_log_file(path: str) -> logging.Handler | None:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        logger.warning("Cannot write log file %s (%s); logging to stderr only", path, exc)
        return None
    handler.setFormatter(_FORMATTER)
    return handler


def configure_logging(settings: LoggingSettings | None = None) -> list[logging.Handler]:
    """Replace the root handlers with the server's stderr and file handlers.

    Returns the installed handlers.
    """
    if settings is None:
        settings = load_settings().logging

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(_FORMATTER)
    handlers: list[logging.Handler] = [stderr_handler]

    if settings.file:
        file_handler = _open_log_file(settings.file)
        if file_handler is not None:
            handlers.append(file_handler)

    logging.basicConfig(level=_parse_level(settings.level), handlers=handlers, force=True)
    return handlers
