"""Child Tax Credit and Earned Income Tax Credit with AGI phase-outs.

Both credits use a simplified rule set. Constants are carried in an
injected CreditRules value so they can vary by tax year without touching
the formulas.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from src.tax.models import FilingStatus
from src.tax.money import MonetaryValue

CHILD_TAX_CREDIT = "Child Tax Credit"
EARNED_INCOME_CREDIT = "Earned Income Credit"


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class CreditRules:
    """Credit constants for one tax year.

    Attributes:
        ctc_per_child: Base Child Tax Credit per qualifying child.
        ctc_threshold_joint: CTC phase-out threshold for married filing jointly.
        ctc_threshold_other: CTC phase-out threshold for every other status.
        ctc_phaseout_step: AGI increment that triggers one reduction.
        ctc_reduction_per_step: Credit lost per full increment over threshold.
        eitc_agi_limit: EITC applies only when AGI is strictly below this.
        eitc_max_credits: (minimum dependents, max credit) tiers, ascending.
            The last tier covers that many dependents or more.
        eitc_phaseout_start_joint: EITC phase-out start for married filing jointly.
        eitc_phaseout_start_other: EITC phase-out start for every other status.
        eitc_phaseout_rate: Credit lost per dollar of AGI past the start.
    """

    ctc_per_child: MonetaryValue = MonetaryValue("2000")
    ctc_threshold_joint: MonetaryValue = MonetaryValue("400000")
    ctc_threshold_other: MonetaryValue = MonetaryValue("200000")
    ctc_phaseout_step: MonetaryValue = MonetaryValue("1000")
    ctc_reduction_per_step: MonetaryValue = MonetaryValue("50")
    eitc_agi_limit: MonetaryValue = MonetaryValue("50000")
    eitc_max_credits: tuple[tuple[int, MonetaryValue], ...] = (
        (1, MonetaryValue("3733")),
        (2, MonetaryValue("6164")),
        (3, MonetaryValue("6935")),
    )
    eitc_phaseout_start_joint: MonetaryValue = MonetaryValue("25220")
    eitc_phaseout_start_other: MonetaryValue = MonetaryValue("19330")
    eitc_phaseout_rate: Decimal = Decimal("0.2106")

    def eitc_max_credit(self, dependent_count: int) -> MonetaryValue:
        """Maximum EITC for a dependent count (zero below the first tier)."""
        credit = MonetaryValue.zero()
        for min_dependents, amount in self.eitc_max_credits:
            if dependent_count >= min_dependents:
                credit = amount
        return credit


DEFAULT_CREDIT_RULES = CreditRules()


@dataclass(frozen=True)
class CreditItem:
    """Individual tax credit.

    Attributes:
        name: Name of the credit (e.g., "Child Tax Credit").
        amount: Credit amount after phase-out.
        refundable: Whether the credit is refundable (can exceed tax liability).
        form: IRS form for claiming this credit.
    """

    name: str
    amount: MonetaryValue
    refundable: bool
    form: str


@dataclass(frozen=True)
class CreditsResult:
    """Result of credits evaluation.

    Attributes:
        credits: Applicable credits with a nonzero amount.
        total_nonrefundable: Sum of non-refundable credits.
        total_refundable: Sum of refundable credits.
        total_credits: Grand total of all credits.
    """

    credits: tuple[CreditItem, ...]
    total_nonrefundable: MonetaryValue
    total_refundable: MonetaryValue
    total_credits: MonetaryValue

    def amount_for(self, name: str) -> MonetaryValue:
        return MonetaryValue.total(c.amount for c in self.credits if c.name == name)


# =============================================================================
# Calculator
# =============================================================================


class CreditCalculator:
    """Evaluate the Child Tax Credit and simplified EITC."""

    def __init__(self, rules: CreditRules = DEFAULT_CREDIT_RULES):
        self.rules = rules

    def child_tax_credit(
        self,
        qualifying_child_count: int,
        agi: MonetaryValue,
        filing_status: FilingStatus,
    ) -> MonetaryValue:
        """Calculate the Child Tax Credit after phase-out.

        The credit drops by a fixed amount for each full step of AGI over the
        threshold; partial steps do not count.

        Args:
            qualifying_child_count: Number of CTC-qualifying children.
            agi: Adjusted Gross Income.
            filing_status: Selects the phase-out threshold.

        Returns:
            CTC amount, never negative.
        """
        rules = self.rules
        if qualifying_child_count <= 0:
            return MonetaryValue.zero()

        base_credit = rules.ctc_per_child.times(qualifying_child_count)

        if filing_status == FilingStatus.MARRIED_FILING_JOINTLY:
            threshold = rules.ctc_threshold_joint
        else:
            threshold = rules.ctc_threshold_other

        if agi <= threshold:
            return base_credit

        steps = (agi - threshold).whole_multiples_of(rules.ctc_phaseout_step)
        reduction = rules.ctc_reduction_per_step.times(steps)
        return (base_credit - reduction).floor_at_zero()

    def earned_income_credit(
        self,
        dependent_count: int,
        agi: MonetaryValue,
        filing_status: FilingStatus,
    ) -> MonetaryValue:
        """Calculate the simplified Earned Income Tax Credit.

        Args:
            dependent_count: Total dependents; selects the max-credit tier.
            agi: Adjusted Gross Income.
            filing_status: Selects the phase-out start.

        Returns:
            EITC amount, never negative. Zero without dependents or when AGI
            reaches the income limit.
        """
        rules = self.rules
        if dependent_count <= 0 or agi >= rules.eitc_agi_limit:
            return MonetaryValue.zero()

        max_credit = rules.eitc_max_credit(dependent_count)

        if filing_status == FilingStatus.MARRIED_FILING_JOINTLY:
            phaseout_start = rules.eitc_phaseout_start_joint
        else:
            phaseout_start = rules.eitc_phaseout_start_other

        if agi < phaseout_start:
            return max_credit

        reduction = (agi - phaseout_start).times_rate(rules.eitc_phaseout_rate)
        return (max_credit - reduction).floor_at_zero()

    def compute(
        self,
        dependent_count: int,
        qualifying_child_count: int,
        agi: MonetaryValue,
        filing_status: FilingStatus,
    ) -> CreditsResult:
        """Evaluate all credits.

        Example:
            >>> calc = CreditCalculator()
            >>> result = calc.compute(2, 2, MonetaryValue("24000"),
            ...                       FilingStatus.MARRIED_FILING_JOINTLY)
            >>> str(result.total_credits)
            '10164.00'
        """
        credits: list[CreditItem] = []

        ctc_amount = self.child_tax_credit(qualifying_child_count, agi, filing_status)
        if not ctc_amount.is_zero():
            credits.append(
                CreditItem(
                    name=CHILD_TAX_CREDIT,
                    amount=ctc_amount,
                    refundable=False,
                    form="Schedule 8812",
                )
            )

        eitc_amount = self.earned_income_credit(dependent_count, agi, filing_status)
        if not eitc_amount.is_zero():
            credits.append(
                CreditItem(
                    name=EARNED_INCOME_CREDIT,
                    amount=eitc_amount,
                    refundable=True,
                    form="Schedule EIC",
                )
            )

        total_nonrefundable = MonetaryValue.total(c.amount for c in credits if not c.refundable)
        total_refundable = MonetaryValue.total(c.amount for c in credits if c.refundable)

        return CreditsResult(
            credits=tuple(credits),
            total_nonrefundable=total_nonrefundable,
            total_refundable=total_refundable,
            total_credits=total_nonrefundable + total_refundable,
        )
