"""
structlog setup for the inspection service.

Every entry carries the identifiers of the request that produced it:
``trace_id`` (set by the request-id middleware), plus ``hive_id`` and
``inspection_id`` once a router has resolved which record it is working on.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

from src.config import get_settings

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")
hive_id_var: ContextVar[str] = ContextVar("hive_id", default="")
inspection_id_var: ContextVar[str] = ContextVar("inspection_id", default="")

_REQUEST_FIELDS: tuple[tuple[str, ContextVar[str]], ...] = (
    ("trace_id", trace_id_var),
    ("hive_id", hive_id_var),
    ("inspection_id", inspection_id_var),
)

# Client libraries that log every HTTP round trip at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore", "hpack", "postgrest", "urllib3", "multipart")


def _add_request_fields(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    for key, var in _REQUEST_FIELDS:
        value = var.get()
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def generate_trace_id() -> str:
    return uuid.uuid4().hex[:12]


def bind_record(*, hive_id: str | None = None, inspection_id: str | None = None) -> None:
    """Attach the hive and/or inspection being handled to the current request's logs."""
    if hive_id:
        hive_id_var.set(str(hive_id))
    if inspection_id:
        inspection_id_var.set(str(inspection_id))


def _renderer(production: bool) -> structlog.types.Processor:
    if production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging() -> None:
    """
    Route structlog and stdlib logging (uvicorn, supabase, httpx) through one
    handler on stdout. JSON in production, console output elsewhere.
    """
    settings = get_settings()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_request_fields,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.is_production),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(settings.log_level.upper())

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
