"""Standard vs. itemized deduction selection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from src.tax.errors import ScheduleConfigError, UnknownScheduleError
from src.tax.models import DeductionEntry, DeductionType, FilingStatus
from src.tax.money import MonetaryValue

if TYPE_CHECKING:
    from src.tax.year_config import TaxYearConfig


@dataclass(frozen=True)
class DeductionResult:
    """Result of deduction calculation.

    Attributes:
        method: Either "standard" or "itemized".
        amount: The deduction amount to use.
        standard_amount: The standard deduction for this filing status.
        itemized_amount: The total itemized deductions provided.
        itemized_by_type: Itemized totals per deduction type, in first-seen order.
    """

    method: str
    amount: MonetaryValue
    standard_amount: MonetaryValue
    itemized_amount: MonetaryValue
    itemized_by_type: Mapping[DeductionType, MonetaryValue] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def itemizing_advantage(self) -> MonetaryValue:
        """Itemized minus standard; negative when the standard deduction wins."""
        return self.itemized_amount - self.standard_amount


class DeductionResolver:
    """Pick the larger of the standard deduction and itemized entries."""

    def __init__(self, standard_deductions: Mapping[tuple[int, FilingStatus], MonetaryValue]):
        for key, amount in standard_deductions.items():
            if amount < MonetaryValue.zero():
                raise ScheduleConfigError(f"Standard deduction for {key} is negative")
        self._standard: Mapping[tuple[int, FilingStatus], MonetaryValue] = MappingProxyType(
            dict(standard_deductions)
        )

    @classmethod
    def from_year_configs(cls, configs: Mapping[int, TaxYearConfig]) -> DeductionResolver:
        return cls(
            {
                (year, status): amount
                for year, config in configs.items()
                for status, amount in config.standard_deductions.items()
            }
        )

    def standard_deduction(self, filing_status: FilingStatus, tax_year: int) -> MonetaryValue:
        """Get the standard deduction for a filing status and year.

        Raises:
            UnknownScheduleError: If the (year, status) pair is not configured.
        """
        amount = self._standard.get((tax_year, filing_status))
        if amount is None:
            raise UnknownScheduleError(
                "standard deduction",
                tax_year,
                getattr(filing_status, "value", str(filing_status)),
            )
        return amount

    def resolve(
        self,
        filing_status: FilingStatus,
        tax_year: int,
        itemized_entries: Iterable[DeductionEntry],
    ) -> DeductionResult:
        """Compare standard deduction to itemized total and select the higher value.

        Args:
            filing_status: Filing status for lookup.
            tax_year: Tax year for lookup.
            itemized_entries: Itemized deduction entries (may be empty).

        Returns:
            DeductionResult with method and amount. Ties go to the standard
            deduction.

        Example:
            >>> result = resolver.resolve(FilingStatus.SINGLE, 2023, [mortgage_8500])
            >>> result.method
            'standard'  # because $13,850 > $8,500
        """
        standard_amount = self.standard_deduction(filing_status, tax_year)

        by_type: dict[DeductionType, MonetaryValue] = {}
        for entry in itemized_entries:
            by_type[entry.deduction_type] = (
                by_type.get(entry.deduction_type, MonetaryValue.zero()) + entry.amount
            )
        itemized_amount = MonetaryValue.total(by_type.values())

        if itemized_amount > standard_amount:
            method, amount = "itemized", itemized_amount
        else:
            method, amount = "standard", standard_amount

        return DeductionResult(
            method=method,
            amount=amount,
            standard_amount=standard_amount,
            itemized_amount=itemized_amount,
            itemized_by_type=MappingProxyType(by_type),
        )
