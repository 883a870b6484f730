"""
Structured logging for the resolver service.

Resolver and provider modules log through the stdlib ``logging`` module;
structlog renders those records together with the request context bound by
``RequestLoggingMiddleware``.
"""

import logging
import sys
from typing import Any, Optional

import structlog

from .config import settings
from .core.errors import ProviderChainExhausted, ResolverError

_QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def add_provider_context(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Lift the failing provider and task out of an attached exception."""
    exc_info = event_dict.get("exc_info")
    exc = exc_info[1] if isinstance(exc_info, tuple) else exc_info

    if isinstance(exc, ProviderChainExhausted):
        event_dict.setdefault("task", exc.task)
        exc = exc.latest_error
    if isinstance(exc, ResolverError) and exc.provider:
        event_dict.setdefault("provider", exc.provider)
    return event_dict


def _use_console(log_format: str, level: int) -> bool:
    if log_format == "console":
        return True
    if log_format == "json":
        return False
    return level == logging.DEBUG


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Override log level (default: settings.log_level)
        log_format: ``json``, ``console`` or ``auto`` (console at DEBUG only)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    console = _use_console((log_format or settings.log_format).lower(), level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_provider_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if console:
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Provider calls are reported by the fallback executor
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
