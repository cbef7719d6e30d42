"""
Logging configuration — progress lines on stderr, optional log file.

main.py calls ``setup_logging`` once per process; module loggers
(``logging.getLogger(__name__)``) need nothing else. The CLI decides
the level: flag, then HOSTPROV_LOG_LEVEL, then INFO.
"""

from __future__ import annotations

import logging
import sys

_DATEFMT = "%Y-%m-%d %H:%M:%S"

# One timestamped line per progress message
_FMT_CONSOLE = "[%(asctime)s] %(message)s"

# Debug console and log file carry the origin of each record
_FMT_DETAILED = "[%(asctime)s] %(levelname)-5s %(name)s:%(lineno)d %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with this run's.

    Args:
        level: Console level name.
        log_file: Append records to this file as well.
        log_file_level: Level for ``log_file``; defaults to ``level``.
    """
    console_level = _parse_level(level)
    root = logging.getLogger()
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console_fmt = _FMT_DETAILED if console_level <= logging.DEBUG else _FMT_CONSOLE
    console.setFormatter(logging.Formatter(console_fmt, datefmt=_DATEFMT))
    root.addHandler(console)

    root_level = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FMT_DETAILED, datefmt=_DATEFMT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)


def _parse_level(level: str | None) -> int:
    """Level name to number; unknown or empty names mean INFO."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.INFO
