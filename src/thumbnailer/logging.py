"""structlog setup shared by the worker, the CLI and the tests."""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from logging.config import dictConfig
from typing import Any

import structlog
import structlog.types
from structlog.contextvars import bound_contextvars, merge_contextvars
from structlog.stdlib import BoundLogger
from structlog.stdlib import get_logger as get_structlog_logger

SERVICE_NAME = "thumbnailer"
# Longest string value written to a log line; base64 thumbnails are cut here.
MAX_FIELD_LENGTH = 256


def add_service_name(
    _: Any, __: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def truncate_long_values(
    _: Any, __: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, str | bytes) and len(value) > MAX_FIELD_LENGTH:
            event_dict[key] = f"{value[:MAX_FIELD_LENGTH]!r}... ({len(value)} chars)"
    return event_dict


def configure_logging(level: str = "INFO", *, json_logs: bool = True) -> None:
    """Route structlog and stdlib logging to stderr.

    Log lines go to stderr so that ``python -m thumbnailer`` keeps stdout for
    the JSON response. ``json_logs=False`` switches to a plain console
    renderer for local runs.
    """

    level = level.upper()
    renderer: structlog.types.Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                }
            },
            "handlers": {
                "default": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                }
            },
            "loggers": {
                "": {"handlers": ["default"], "level": level},
                "celery": {"handlers": ["default"], "level": level, "propagate": False},
                "urllib3": {"level": "WARNING"},
            },
        }
    )

    processors: list[structlog.types.Processor] = [
        merge_contextvars,
        add_service_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        truncate_long_values,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.EventRenamer("message"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> BoundLogger:
    """Return a structured logger bound to *name*."""
    return get_structlog_logger(name)


@contextmanager
def request_context(**values: object) -> Iterator[None]:
    """Attach *values* to every log event emitted inside the block."""
    with bound_contextvars(**values):
        yield
