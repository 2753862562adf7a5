"""Logging configuration for the monitoring service.

The service writes to stdout only; the container runtime collects it.

Two output shapes are supported:

  _ContainerFormatter: one human-readable line per record, tagged with
    the request ID, for local runs and ``docker logs``.

  _JsonFormatter: one JSON object per line, for log aggregation.
    Request context attached by RequestContextMiddleware (request_id,
    method, path, status_code, duration_ms) becomes top-level keys.
    Set LOG_JSON=true to switch.

Credential material (passcodes, bearer tokens, session cookies) is never
passed to a logger anywhere in the service.  The formatters do not scrub
messages, so keep it that way at the call sites.
"""

from __future__ import annotations

import json
import logging
import sys


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter for container stdout.

    ISO-8601 timestamp with milliseconds, level, logger, request ID, message.
    Records logged outside a request show ``[-]``.
    """

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03d"

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s]  %(message)s",
            defaults={"request_id": "-"},
        )


class _JsonFormatter(logging.Formatter):
    """JSON Lines formatter: one object per record."""

    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "status_code",
        "duration_ms",
        "scheme",
    )

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Configure the root logger.

    Args:
        level_name: Log level string (debug/info/warning/error).  Unknown
                    names fall back to INFO.
        json_format: Emit JSON lines instead of the single-line text format.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # Keep third-party loggers from flooding at DEBUG
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
