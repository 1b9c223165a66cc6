"""JSON-lines logging on stderr.

stdout belongs to the asset URI, so every rbxupload logger writes to
stderr, one JSON object per line.  Protocol code attaches its step and
counters through ``extra_fields``::

    log = get_logger("rbxupload.cloud")
    log.debug("Operation pending", extra={"extra_fields": {"op": "poll", "delay": 1.0}})

which renders as::

    {"ts": "...", "level": "DEBUG", "logger": "rbxupload.cloud",
     "message": "Operation pending", "op": "poll", "delay": 1.0}

The CLI keeps these loggers at ``ERROR`` and drops them to ``DEBUG`` for
``--verbose`` through :func:`set_level`.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Render a record as ``ts``/``level``/``logger``/``message`` JSON.

    ``extra_fields`` entries become top-level keys.  A traceback or stack,
    when the call asked for one, lands under ``exception`` or
    ``stack_info``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if fields is not None:
            entry.update(fields)

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        # Asset ids, paths and enums fall back to str().
        return json.dumps(entry, default=str)


# Names that already carry our handler.
_configured_loggers: set[str] = set()


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


def get_logger(
    name: str = "rbxupload",
    *,
    level: int | str = logging.DEBUG,
    stream: Any | None = None,
) -> logging.Logger:
    """Return the logger *name*, attaching a JSON handler on first use.

    Parameters
    ----------
    name:
        Dotted module logger, e.g. ``"rbxupload.session"``.
    level:
        Initial level (``int`` or name).  Ignored once *name* is set up;
        :func:`set_level` changes it later.
    stream:
        Handler target, ``sys.stderr`` by default.
    """
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger

    logger.setLevel(_resolve_level(level))
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    # The handler above is the only output; a root handler would double it.
    logger.propagate = False
    _configured_loggers.add(name)
    return logger


def set_level(level: int | str) -> None:
    """Apply *level* to every logger set up by :func:`get_logger`."""
    resolved = _resolve_level(level)
    for name in _configured_loggers:
        logging.getLogger(name).setLevel(resolved)
