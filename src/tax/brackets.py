"""Marginal tax-rate schedules and liability computation.

A schedule is an ascending run of contiguous brackets; the last bracket has
no upper bound. Liability is the sum over brackets of the income falling in
each bracket times that bracket's rate, applied low-to-high.

Example:
    >>> table = BracketTable.from_year_configs(TAX_YEAR_CONFIGS)
    >>> table.compute_liability(MonetaryValue("50000"), FilingStatus.SINGLE, 2023)
    MonetaryValue(amount=Decimal('6307.50'))
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING

from src.tax.errors import ScheduleConfigError, UnknownScheduleError
from src.tax.models import FilingStatus
from src.tax.money import MonetaryValue

if TYPE_CHECKING:
    from src.tax.year_config import TaxYearConfig

ScheduleKey = tuple[int, FilingStatus]


@dataclass(frozen=True)
class TaxBracket:
    """One marginal bracket.

    Attributes:
        lower_bound: Inclusive start of the bracket.
        upper_bound: End of the bracket, or None for the top bracket.
        rate: Marginal rate, e.g. Decimal("0.22").
    """

    lower_bound: MonetaryValue
    upper_bound: MonetaryValue | None
    rate: Decimal

    @property
    def width(self) -> MonetaryValue | None:
        if self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound


@dataclass(frozen=True)
class BracketSlice:
    """Portion of taxable income that fell into one bracket."""

    lower_bound: MonetaryValue
    upper_bound: MonetaryValue | None
    rate: Decimal
    taxable_amount: MonetaryValue
    tax: MonetaryValue


@dataclass(frozen=True)
class LiabilityBreakdown:
    """Per-bracket view of a liability computation.

    Attributes:
        taxable_income: Income the schedule was applied to.
        total: Sum of tax across slices.
        slices: Brackets the income reached, lowest first.
        marginal_rate: Rate of the highest bracket reached (0 if none).
        effective_rate: total / taxable_income, four decimal places.
    """

    taxable_income: MonetaryValue
    total: MonetaryValue
    slices: tuple[BracketSlice, ...]
    marginal_rate: Decimal
    effective_rate: Decimal


def build_schedule(
    bounds: Iterable[tuple[Decimal | str | None, Decimal | str]],
) -> tuple[TaxBracket, ...]:
    """Build contiguous brackets from ascending (upper_bound, rate) pairs.

    Lower bounds are derived: the first bracket starts at 0 and each later
    bracket starts where the previous one ended. None marks the top bracket.

    Args:
        bounds: Pairs like (Decimal("11000"), Decimal("0.10")), ending with
            (None, rate).

    Returns:
        Tuple of TaxBracket.
    """
    brackets: list[TaxBracket] = []
    lower = MonetaryValue.zero()
    for upper_bound, rate in bounds:
        upper = None if upper_bound is None else MonetaryValue(upper_bound)
        brackets.append(TaxBracket(lower_bound=lower, upper_bound=upper, rate=Decimal(rate)))
        if upper is not None:
            lower = upper
    return tuple(brackets)


def validate_schedule(
    brackets: Sequence[TaxBracket], label: str = "schedule"
) -> tuple[TaxBracket, ...]:
    """Check a schedule is contiguous, ascending, and ends unbounded.

    Raises:
        ScheduleConfigError: On the first structural problem found.
    """
    if not brackets:
        raise ScheduleConfigError(f"{label}: schedule has no brackets")

    if brackets[0].lower_bound != MonetaryValue.zero():
        raise ScheduleConfigError(f"{label}: first bracket must start at 0")

    for index, bracket in enumerate(brackets):
        if not Decimal("0") <= bracket.rate <= Decimal("1"):
            raise ScheduleConfigError(
                f"{label}: bracket {index} rate {bracket.rate} outside [0, 1]"
            )
        is_last = index == len(brackets) - 1
        if bracket.upper_bound is None:
            if not is_last:
                raise ScheduleConfigError(
                    f"{label}: only the last bracket may be unbounded (bracket {index})"
                )
            continue
        if is_last:
            raise ScheduleConfigError(f"{label}: last bracket must be unbounded")
        if bracket.upper_bound <= bracket.lower_bound:
            raise ScheduleConfigError(
                f"{label}: bracket {index} upper bound must exceed lower bound"
            )
        if brackets[index + 1].lower_bound != bracket.upper_bound:
            raise ScheduleConfigError(
                f"{label}: bracket {index + 1} must start at {bracket.upper_bound}"
            )

    return tuple(brackets)


class BracketTable:
    """Bracket schedules keyed by (tax year, filing status).

    The table is read-only after construction and safe to share across
    threads.
    """

    def __init__(self, schedules: Mapping[ScheduleKey, Sequence[TaxBracket]]):
        validated: dict[ScheduleKey, tuple[TaxBracket, ...]] = {}
        for (year, status), brackets in schedules.items():
            try:
                status = FilingStatus(status)
            except ValueError as exc:
                raise ScheduleConfigError(f"Unknown filing status in schedule: {status}") from exc
            validated[(year, status)] = validate_schedule(brackets, f"{year}/{status.value}")
        self._schedules: Mapping[ScheduleKey, tuple[TaxBracket, ...]] = MappingProxyType(
            validated
        )

    @classmethod
    def from_year_configs(cls, configs: Mapping[int, TaxYearConfig]) -> BracketTable:
        return cls(
            {
                (year, status): brackets
                for year, config in configs.items()
                for status, brackets in config.brackets.items()
            }
        )

    def keys(self) -> list[ScheduleKey]:
        return sorted(self._schedules, key=lambda key: (key[0], key[1].value))

    def schedule_for(
        self, filing_status: FilingStatus, tax_year: int
    ) -> tuple[TaxBracket, ...]:
        """Return the schedule for a key.

        Raises:
            UnknownScheduleError: If the key is not configured. No other
                filing status's schedule is ever substituted.
        """
        schedule = self._schedules.get((tax_year, filing_status))
        if schedule is None:
            raise UnknownScheduleError(
                "tax bracket schedule",
                tax_year,
                getattr(filing_status, "value", str(filing_status)),
            )
        return schedule

    def liability_breakdown(
        self,
        taxable_income: MonetaryValue,
        filing_status: FilingStatus,
        tax_year: int,
    ) -> LiabilityBreakdown:
        """Apply the marginal schedule and report each bracket's share.

        Args:
            taxable_income: Income after deductions.
            filing_status: Filing status for lookup.
            tax_year: Tax year for lookup.

        Returns:
            LiabilityBreakdown whose total is the tax liability.

        Raises:
            UnknownScheduleError: If no schedule exists for the key.
        """
        schedule = self.schedule_for(filing_status, tax_year)
        zero = MonetaryValue.zero()
        remaining = taxable_income
        total = zero
        slices: list[BracketSlice] = []

        for bracket in schedule:
            if remaining <= zero:
                break

            width = bracket.width
            in_bracket = remaining if width is None else min(remaining, width)
            tax = in_bracket.times_rate(bracket.rate)
            total += tax
            slices.append(
                BracketSlice(
                    lower_bound=bracket.lower_bound,
                    upper_bound=bracket.upper_bound,
                    rate=bracket.rate,
                    taxable_amount=in_bracket,
                    tax=tax,
                )
            )
            remaining -= in_bracket

        if taxable_income > zero:
            effective_rate = (total.amount / taxable_income.amount).quantize(
                Decimal("0.0001"), rounding=ROUND_HALF_UP
            )
        else:
            effective_rate = Decimal("0")

        return LiabilityBreakdown(
            taxable_income=taxable_income,
            total=total,
            slices=tuple(slices),
            marginal_rate=slices[-1].rate if slices else Decimal("0"),
            effective_rate=effective_rate,
        )

    def compute_liability(
        self,
        taxable_income: MonetaryValue,
        filing_status: FilingStatus,
        tax_year: int,
    ) -> MonetaryValue:
        """Return the marginal-bracket tax on ``taxable_income``."""
        return self.liability_breakdown(taxable_income, filing_status, tax_year).total
