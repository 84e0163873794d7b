"""Pytest configuration and shared fixtures for tests."""

from collections.abc import Callable, Sequence

import pytest

from src.tax.engine import TaxEngine
from src.tax.models import (
    DeductionEntry,
    DeductionType,
    FilingStatus,
    IncomeEntry,
    IncomeType,
    OutcomeMode,
    TaxCalculationInput,
)
from src.tax.money import MonetaryValue

InputFactory = Callable[..., TaxCalculationInput]


@pytest.fixture
def engine() -> TaxEngine:
    """Create an engine over the built-in tables (withholding-aware).

    Returns:
        TaxEngine instance.
    """
    return TaxEngine()


@pytest.fixture
def credit_only_engine() -> TaxEngine:
    """Create an engine that models no withholding.

    Returns:
        TaxEngine instance in CREDIT_ONLY mode.
    """
    return TaxEngine(outcome_mode=OutcomeMode.CREDIT_ONLY)


@pytest.fixture
def make_input() -> InputFactory:
    """Factory for calculation inputs with sensible defaults.

    Income and deductions are given as (type, amount-string) pairs.

    Returns:
        Callable building a TaxCalculationInput.
    """

    def _make(
        income: Sequence[tuple[IncomeType, str]] = (),
        deductions: Sequence[tuple[DeductionType, str]] = (),
        filing_status: FilingStatus = FilingStatus.SINGLE,
        tax_year: int = 2023,
        dependent_count: int = 0,
        qualifying_child_count: int = 0,
    ) -> TaxCalculationInput:
        return TaxCalculationInput(
            filing_status=filing_status,
            tax_year=tax_year,
            income_entries=tuple(
                IncomeEntry(income_type=kind, amount=MonetaryValue(amount))
                for kind, amount in income
            ),
            deduction_entries=tuple(
                DeductionEntry(deduction_type=kind, amount=MonetaryValue(amount))
                for kind, amount in deductions
            ),
            dependent_count=dependent_count,
            qualifying_child_count=qualifying_child_count,
        )

    return _make
