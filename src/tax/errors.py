"""Typed failures raised by the tax calculation engine.

Callers translate these into user-facing messages or HTTP status codes.
The engine never retries and never swallows them.
"""

from __future__ import annotations


class TaxEngineError(Exception):
    """Base class for all tax engine failures."""


class ValidationError(TaxEngineError, ValueError):
    """Raised when a calculation input is malformed.

    Attributes:
        errors: Every problem found in the input, in discovery order.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid tax calculation input")


class UnknownScheduleError(TaxEngineError, LookupError):
    """Raised when no schedule exists for a (tax year, filing status) pair."""

    def __init__(self, kind: str, tax_year: int, filing_status: str | None = None):
        self.kind = kind
        self.tax_year = tax_year
        self.filing_status = filing_status
        key = f"{tax_year}" if filing_status is None else f"{tax_year} / {filing_status}"
        super().__init__(f"No {kind} configured for {key}")


class ScheduleConfigError(TaxEngineError, ValueError):
    """Raised when bracket, deduction, or credit configuration is malformed."""
