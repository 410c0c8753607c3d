"""
Logging setup for the SSG advisor.

Library modules only ever do ``logger = logging.getLogger(__name__)``. The
CLI calls ``configure_logging(config.logging)`` once per command, which
replaces whatever handlers the root logger had.

Handlers:
  - stderr, always. stdout is reserved for command output such as the
    ``recommend`` JSON record.
  - a log file, when ``log_file`` is non-empty (parent directories created).

With ``json_format = true`` every line is one JSON object::

    {"ts": "2026-10-17T15:00:00Z", "level": "INFO", "logger": "ssg_advisor.orchestrator", "msg": "..."}

Keys passed through ``extra=`` appear alongside ``msg``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ssg_advisor.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "ts": created.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(
            (k, v) for k, v in record.__dict__.items()
            if k not in _RECORD_ATTRS and not k.startswith("_")
        )
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    formatter.converter = _utc_timetuple
    return formatter


def _utc_timetuple(secs: float | None):
    return datetime.fromtimestamp(secs or 0, tz=timezone.utc).timetuple()


def configure_logging(config: "LoggingConfig") -> None:
    """Install stderr (and optional file) handlers on the root logger.

    Args:
        config: The ``[logging]`` section of ``AppConfig``.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    formatter = _make_formatter(config.json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
