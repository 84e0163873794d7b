"""Structured logging configuration using structlog."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from decimal import Decimal
from typing import Any

import orjson
import structlog
from structlog.types import Processor

from src.core.config import Settings, settings
from src.tax.money import MonetaryValue

# Context variables for tax-return correlation
return_id_ctx: ContextVar[str | None] = ContextVar("return_id", default=None)
tax_year_ctx: ContextVar[int | None] = ContextVar("tax_year", default=None)


@contextmanager
def tax_return_context(return_id: str, tax_year: int | None = None) -> Iterator[None]:
    """Bind a tax return (and optionally its year) to every log event inside.

    Both variables are restored on exit, including when the body raises.
    """
    return_token = return_id_ctx.set(return_id)
    year_token = tax_year_ctx.set(tax_year)
    try:
        yield
    finally:
        tax_year_ctx.reset(year_token)
        return_id_ctx.reset(return_token)


def _add_context_vars(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add context variables to log events.

    Args:
        logger: The logger instance (unused).
        method_name: The logging method name (unused).
        event_dict: The log event dictionary.

    Returns:
        Updated event dictionary with context variables.
    """
    if return_id := return_id_ctx.get():
        event_dict["return_id"] = return_id
    if (tax_year := tax_year_ctx.get()) is not None:
        event_dict["tax_year"] = tax_year
    return event_dict


def _render_amounts(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Render MonetaryValue and Decimal fields as exact decimal strings."""
    for key, value in event_dict.items():
        if isinstance(value, (MonetaryValue, Decimal)):
            event_dict[key] = str(value)
    return event_dict


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    """Serialize log event to JSON using orjson.

    Anything orjson cannot encode natively (nested Decimals, enums inside
    lists) falls back to ``str``.
    """
    return orjson.dumps(obj, default=str).decode("utf-8")


def configure_logging(app_settings: Settings | None = None) -> None:
    """Configure structlog for the application.

    Development mode: ConsoleRenderer with colors for readability.
    Production mode: JSONRenderer with orjson for structured logging.

    Args:
        app_settings: Settings to read; defaults to the module-level instance.
    """
    cfg = app_settings or settings
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_context_vars,
        _render_amounts,
    ]

    log_format = cfg.log_format.lower() if cfg.log_format else None
    use_json = log_format == "json" or (log_format is None and cfg.environment != "development")

    if use_json:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if cfg.debug else logging.INFO,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name. Defaults to __name__ of caller.

    Returns:
        Configured structlog bound logger.
    """
    return structlog.get_logger(name)
