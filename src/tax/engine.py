"""Tax calculation engine.

TaxEngine turns a TaxCalculationInput snapshot into a TaxCalculationResult:

1. Total income and AGI (no above-the-line adjustments are modeled)
2. Standard vs. itemized deduction selection
3. Marginal bracket liability
4. Child Tax Credit and EITC
5. Refund vs. amount owed, per OutcomeMode

The engine is a pure function of its input and its injected tables: no
state, no I/O, no logging. One instance may be shared across threads.

Example:
    >>> engine = TaxEngine()
    >>> result = engine.calculate_taxes(TaxCalculationInput(
    ...     filing_status=FilingStatus.SINGLE,
    ...     tax_year=2023,
    ...     income_entries=(IncomeEntry(IncomeType.W2_WAGES, MonetaryValue("75000")),),
    ... ))
    >>> str(result.taxable_income)
    '61150.00'
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from src.tax.brackets import BracketTable, LiabilityBreakdown
from src.tax.credits import CreditCalculator, CreditsResult
from src.tax.deductions import DeductionResolver, DeductionResult
from src.tax.errors import UnknownScheduleError, ValidationError
from src.tax.models import (
    MAX_TAX_YEAR,
    MIN_TAX_YEAR,
    DeductionEntry,
    DeductionType,
    FilingStatus,
    IncomeEntry,
    IncomeType,
    OutcomeMode,
    TaxCalculationInput,
    TaxCalculationResult,
)
from src.tax.money import MAX_AMOUNT, MonetaryValue
from src.tax.withholding import WithholdingEstimator
from src.tax.year_config import TAX_YEAR_CONFIGS, TaxYearConfig

DEFAULT_OUTCOME_MODE = OutcomeMode.WITHHOLDING_AWARE


@dataclass(frozen=True)
class TaxCalculationDetail:
    """Full working behind a TaxCalculationResult.

    Attributes:
        result: The nine headline figures.
        outcome_mode: Mode used to split refund vs. amount owed.
        deductions: Standard vs. itemized comparison.
        liability: Per-bracket breakdown of the tax liability.
        credits: Individual credits and totals.
        net_tax: Liability minus credits, floored at zero.
        estimated_withholding: Withholding estimate (None in CREDIT_ONLY mode).
    """

    result: TaxCalculationResult
    outcome_mode: OutcomeMode
    deductions: DeductionResult
    liability: LiabilityBreakdown
    credits: CreditsResult
    net_tax: MonetaryValue
    estimated_withholding: MonetaryValue | None


# =============================================================================
# Input validation
# =============================================================================


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_amount(label: str, amount: object, errors: list[str]) -> None:
    if not isinstance(amount, MonetaryValue):
        errors.append(f"{label}: amount must be a MonetaryValue, got {type(amount).__name__}")
    elif amount < MonetaryValue.zero():
        errors.append(f"{label}: amount must not be negative, got {amount}")
    elif amount.amount > MAX_AMOUNT:
        errors.append(f"{label}: amount must not exceed {MAX_AMOUNT}, got {amount}")


def validate_calculation_input(data: TaxCalculationInput) -> None:
    """Check a calculation input, collecting every problem found.

    Filing status is not checked here: an unrecognized status surfaces as
    UnknownScheduleError during schedule lookup.

    Raises:
        ValidationError: If any problem was found.
    """
    errors: list[str] = []

    if not _is_int(data.tax_year):
        errors.append(f"tax_year must be an integer, got {data.tax_year!r}")
    elif not MIN_TAX_YEAR <= data.tax_year <= MAX_TAX_YEAR:
        errors.append(
            f"tax_year must be between {MIN_TAX_YEAR} and {MAX_TAX_YEAR}, got {data.tax_year}"
        )

    for index, entry in enumerate(data.income_entries):
        label = f"income_entries[{index}]"
        if not isinstance(entry, IncomeEntry):
            errors.append(f"{label}: expected IncomeEntry, got {type(entry).__name__}")
            continue
        if not isinstance(entry.income_type, IncomeType):
            errors.append(f"{label}: unknown income type {entry.income_type!r}")
        _check_amount(label, entry.amount, errors)

    for index, entry in enumerate(data.deduction_entries):
        label = f"deduction_entries[{index}]"
        if not isinstance(entry, DeductionEntry):
            errors.append(f"{label}: expected DeductionEntry, got {type(entry).__name__}")
            continue
        if not isinstance(entry.deduction_type, DeductionType):
            errors.append(f"{label}: unknown deduction type {entry.deduction_type!r}")
        _check_amount(label, entry.amount, errors)

    counts_ok = True
    for name in ("dependent_count", "qualifying_child_count"):
        value = getattr(data, name)
        if not _is_int(value) or value < 0:
            errors.append(f"{name} must be a non-negative integer, got {value!r}")
            counts_ok = False

    if counts_ok and data.qualifying_child_count > data.dependent_count:
        errors.append(
            f"qualifying_child_count ({data.qualifying_child_count}) cannot exceed "
            f"dependent_count ({data.dependent_count})"
        )

    if errors:
        raise ValidationError(errors)


def _resolve_filing_status(data: TaxCalculationInput) -> FilingStatus:
    try:
        return FilingStatus(data.filing_status)
    except ValueError as exc:
        raise UnknownScheduleError("filing status", data.tax_year, str(data.filing_status)) from exc


# =============================================================================
# Engine
# =============================================================================


class TaxEngine:
    """Canonical tax calculator over injected yearly tables.

    Args:
        year_configs: Tables per tax year; defaults to the built-in registry.
        outcome_mode: Default refund/owed semantics for this engine.
        withholding: Withholding estimator used in WITHHOLDING_AWARE mode.
    """

    def __init__(
        self,
        year_configs: Mapping[int, TaxYearConfig] = TAX_YEAR_CONFIGS,
        outcome_mode: OutcomeMode = DEFAULT_OUTCOME_MODE,
        withholding: WithholdingEstimator | None = None,
    ):
        self.year_configs: Mapping[int, TaxYearConfig] = MappingProxyType(dict(year_configs))
        self.outcome_mode = OutcomeMode(outcome_mode)
        self.bracket_table = BracketTable.from_year_configs(self.year_configs)
        self.deduction_resolver = DeductionResolver.from_year_configs(self.year_configs)
        self.withholding = withholding or WithholdingEstimator()
        self._credit_calculators: Mapping[int, CreditCalculator] = MappingProxyType(
            {year: CreditCalculator(config.credit_rules) for year, config in self.year_configs.items()}
        )

    @property
    def supported_years(self) -> list[int]:
        return sorted(self.year_configs)

    def credit_calculator(self, tax_year: int) -> CreditCalculator:
        calculator = self._credit_calculators.get(tax_year)
        if calculator is None:
            raise UnknownScheduleError("credit rules", tax_year)
        return calculator

    def calculate_detailed(
        self,
        data: TaxCalculationInput,
        outcome_mode: OutcomeMode | None = None,
    ) -> TaxCalculationDetail:
        """Run the full calculation and keep the intermediate results.

        Args:
            data: Input snapshot.
            outcome_mode: Overrides the engine's default mode for this call.

        Returns:
            TaxCalculationDetail whose ``result`` is what calculate_taxes returns.

        Raises:
            ValidationError: If the input is malformed.
            UnknownScheduleError: If the year/status has no configured tables.
        """
        validate_calculation_input(data)
        mode = self.outcome_mode if outcome_mode is None else OutcomeMode(outcome_mode)
        filing_status = _resolve_filing_status(data)
        tax_year = data.tax_year
        zero = MonetaryValue.zero()

        total_income = MonetaryValue.total(entry.amount for entry in data.income_entries)
        adjusted_gross_income = total_income

        deductions = self.deduction_resolver.resolve(
            filing_status, tax_year, data.deduction_entries
        )
        taxable_income = (adjusted_gross_income - deductions.amount).floor_at_zero()

        liability = self.bracket_table.liability_breakdown(
            taxable_income, filing_status, tax_year
        )
        tax_liability = liability.total

        credits = self.credit_calculator(tax_year).compute(
            dependent_count=data.dependent_count,
            qualifying_child_count=data.qualifying_child_count,
            agi=adjusted_gross_income,
            filing_status=filing_status,
        )
        total_credits = credits.total_credits

        net_tax = (tax_liability - total_credits).floor_at_zero()

        if mode == OutcomeMode.WITHHOLDING_AWARE:
            withheld = self.withholding.estimate(data.income_entries)
            refund_amount = (withheld - net_tax).floor_at_zero()
            amount_owed = (net_tax - withheld).floor_at_zero()
        else:
            withheld = None
            refund_amount = max(total_credits - tax_liability, zero)
            amount_owed = net_tax

        result = TaxCalculationResult(
            total_income=total_income,
            adjusted_gross_income=adjusted_gross_income,
            standard_deduction=deductions.standard_amount,
            itemized_deduction=deductions.itemized_amount,
            taxable_income=taxable_income,
            tax_liability=tax_liability,
            total_credits=total_credits,
            refund_amount=refund_amount,
            amount_owed=amount_owed,
        )

        return TaxCalculationDetail(
            result=result,
            outcome_mode=mode,
            deductions=deductions,
            liability=liability,
            credits=credits,
            net_tax=net_tax,
            estimated_withholding=withheld,
        )

    def calculate_taxes(
        self,
        data: TaxCalculationInput,
        outcome_mode: OutcomeMode | None = None,
    ) -> TaxCalculationResult:
        """Calculate taxable income, liability, credits, and refund/owed."""
        return self.calculate_detailed(data, outcome_mode).result


# Built from the immutable built-in tables; safe to share
DEFAULT_ENGINE = TaxEngine()


def calculate_taxes(
    data: TaxCalculationInput,
    outcome_mode: OutcomeMode | None = None,
) -> TaxCalculationResult:
    """Calculate taxes with the built-in tables and default outcome mode."""
    return DEFAULT_ENGINE.calculate_taxes(data, outcome_mode)
