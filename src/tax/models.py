"""Input and result types for the tax calculation engine.

This module defines:
- FilingStatus, IncomeType, DeductionType: string enums shared with callers
- OutcomeMode: how refund vs. amount owed is decided
- IncomeEntry / DeductionEntry: single ledger lines
- TaxCalculationInput: the immutable snapshot the engine consumes
- TaxCalculationResult: the nine monetary figures the engine produces

All monetary fields are MonetaryValue (exact to the cent).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum

from src.tax.money import MonetaryValue

MIN_TAX_YEAR = 2020
MAX_TAX_YEAR = 2030


# =============================================================================
# Enumerations
# =============================================================================


class FilingStatus(str, Enum):
    """IRS filing status."""

    SINGLE = "SINGLE"
    MARRIED_FILING_JOINTLY = "MARRIED_FILING_JOINTLY"
    MARRIED_FILING_SEPARATELY = "MARRIED_FILING_SEPARATELY"
    HEAD_OF_HOUSEHOLD = "HEAD_OF_HOUSEHOLD"
    QUALIFYING_SURVIVING_SPOUSE = "QUALIFYING_SURVIVING_SPOUSE"


class IncomeType(str, Enum):
    """Category of an income entry."""

    W2_WAGES = "W2_WAGES"
    INTEREST = "INTEREST"
    DIVIDENDS = "DIVIDENDS"
    BUSINESS_INCOME = "BUSINESS_INCOME"
    CAPITAL_GAINS = "CAPITAL_GAINS"
    OTHER_INCOME = "OTHER_INCOME"
    UNEMPLOYMENT = "UNEMPLOYMENT"
    RETIREMENT_DISTRIBUTIONS = "RETIREMENT_DISTRIBUTIONS"
    SOCIAL_SECURITY = "SOCIAL_SECURITY"


class DeductionType(str, Enum):
    """Category of an itemized deduction entry."""

    MORTGAGE_INTEREST = "MORTGAGE_INTEREST"
    STATE_LOCAL_TAXES = "STATE_LOCAL_TAXES"
    CHARITABLE_CONTRIBUTIONS = "CHARITABLE_CONTRIBUTIONS"
    MEDICAL_EXPENSES = "MEDICAL_EXPENSES"
    BUSINESS_EXPENSES = "BUSINESS_EXPENSES"
    STUDENT_LOAN_INTEREST = "STUDENT_LOAN_INTEREST"
    IRA_CONTRIBUTIONS = "IRA_CONTRIBUTIONS"
    OTHER_DEDUCTIONS = "OTHER_DEDUCTIONS"


class OutcomeMode(str, Enum):
    """How the engine splits net tax into refund vs. amount owed.

    WITHHOLDING_AWARE compares net tax against estimated withholding.
    CREDIT_ONLY models no withholding: only credits in excess of liability
    produce a refund.
    """

    WITHHOLDING_AWARE = "WITHHOLDING_AWARE"
    CREDIT_ONLY = "CREDIT_ONLY"


# =============================================================================
# Entries and input snapshot
# =============================================================================


@dataclass(frozen=True)
class IncomeEntry:
    """A single income line.

    Attributes:
        income_type: Category used for withholding estimation.
        amount: Non-negative income amount.
        description: Optional free-text label (employer, payer).
    """

    income_type: IncomeType
    amount: MonetaryValue
    description: str | None = None


@dataclass(frozen=True)
class DeductionEntry:
    """A single itemized deduction line.

    Attributes:
        deduction_type: Deduction category.
        amount: Non-negative deduction amount.
        description: Optional free-text label.
    """

    deduction_type: DeductionType
    amount: MonetaryValue
    description: str | None = None


@dataclass(frozen=True)
class TaxCalculationInput:
    """Point-in-time snapshot of one tax return.

    Attributes:
        filing_status: Filing status for schedule lookup.
        tax_year: Tax year (2020-2030).
        income_entries: Income lines in caller order.
        deduction_entries: Itemized deduction lines in caller order.
        dependent_count: Total dependents (drives EITC tier).
        qualifying_child_count: Dependents that qualify for the Child Tax Credit.
    """

    filing_status: FilingStatus
    tax_year: int
    income_entries: tuple[IncomeEntry, ...] = ()
    deduction_entries: tuple[DeductionEntry, ...] = ()
    dependent_count: int = 0
    qualifying_child_count: int = 0

    def __post_init__(self) -> None:
        # Accept lists from callers but keep the snapshot immutable
        object.__setattr__(self, "income_entries", tuple(self.income_entries))
        object.__setattr__(self, "deduction_entries", tuple(self.deduction_entries))


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class TaxCalculationResult:
    """Outcome of a tax calculation.

    Attributes:
        total_income: Sum of all income entries.
        adjusted_gross_income: Total income after above-the-line adjustments
            (none are modeled, so equal to total_income).
        standard_deduction: Standard deduction for the filing status and year.
        itemized_deduction: Sum of itemized deduction entries.
        taxable_income: AGI minus the larger deduction, floored at zero.
        tax_liability: Tax from the marginal bracket schedule.
        total_credits: Child Tax Credit plus Earned Income Credit.
        refund_amount: Amount returned to the taxpayer.
        amount_owed: Amount the taxpayer still owes.
    """

    total_income: MonetaryValue
    adjusted_gross_income: MonetaryValue
    standard_deduction: MonetaryValue
    itemized_deduction: MonetaryValue
    taxable_income: MonetaryValue
    tax_liability: MonetaryValue
    total_credits: MonetaryValue
    refund_amount: MonetaryValue
    amount_owed: MonetaryValue

    @property
    def deduction_used(self) -> MonetaryValue:
        return max(self.standard_deduction, self.itemized_deduction)

    def to_record(self) -> dict[str, str]:
        """Serialize to decimal strings for persistence.

        Returns:
            Mapping of field name to a two-decimal string such as "6307.50".
        """
        return {f.name: str(getattr(self, f.name)) for f in fields(self)}
