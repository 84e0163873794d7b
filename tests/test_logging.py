"""Tests for structured logging configuration."""

from decimal import Decimal

import orjson
import structlog

from src.core.config import Settings, settings
from src.core.logging import (
    _add_context_vars,
    _orjson_serializer,
    _render_amounts,
    configure_logging,
    return_id_ctx,
    tax_return_context,
    tax_year_ctx,
)
from src.tax.money import MonetaryValue


def _reset_structlog() -> None:
    """Reset structlog defaults to avoid test cross-talk."""
    structlog.reset_defaults()


def test_configure_logging_uses_json_when_log_format_json() -> None:
    """Use JSON logging when log_format=json, even in development."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "development"
        settings.log_format = "json"
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
        assert any(
            isinstance(processor, structlog.processors.EventRenamer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()


def test_configure_logging_uses_console_when_log_format_console() -> None:
    """Use console logging when log_format=console in development."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "development"
        settings.log_format = "console"
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.dev.ConsoleRenderer)
            for processor in processors
        )
        assert not any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()


def test_context_vars_added_when_set() -> None:
    """Return id and tax year are attached while set."""
    return_token = return_id_ctx.set("return-42")
    year_token = tax_year_ctx.set(2023)
    try:
        event = _add_context_vars(None, "info", {"event": "calc"})
    finally:
        tax_year_ctx.reset(year_token)
        return_id_ctx.reset(return_token)

    assert event == {"event": "calc", "return_id": "return-42", "tax_year": 2023}


def test_context_vars_omitted_when_unset() -> None:
    """Nothing is added outside a recalculation."""
    assert _add_context_vars(None, "info", {"event": "calc"}) == {"event": "calc"}


def test_serializer_renders_decimals_as_strings() -> None:
    """Amounts in log events keep their exact decimal text."""
    rendered = _orjson_serializer({"amount": Decimal("6307.50"), "rate": Decimal("0.22")})

    assert orjson.loads(rendered) == {"amount": "6307.50", "rate": "0.22"}


def test_tax_return_context_restores_on_error() -> None:
    """The context manager resets both variables even when the body raises."""
    try:
        with tax_return_context("return-7", 2024):
            assert return_id_ctx.get() == "return-7"
            assert tax_year_ctx.get() == 2024
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert return_id_ctx.get() is None
    assert tax_year_ctx.get() is None


def test_amounts_rendered_as_strings() -> None:
    """MonetaryValue and Decimal fields become exact strings before rendering."""
    event = _render_amounts(
        None,
        "info",
        {"event": "calc", "refund": MonetaryValue("3270"), "rate": Decimal("0.1262"), "count": 2},
    )

    assert event == {"event": "calc", "refund": "3270.00", "rate": "0.1262", "count": 2}


def test_configure_logging_accepts_explicit_settings() -> None:
    """Explicit settings override the module-level instance."""
    try:
        configure_logging(Settings(_env_file=None, environment="production"))

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
        assert _render_amounts in processors
    finally:
        _reset_structlog()
