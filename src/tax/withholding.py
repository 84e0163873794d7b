"""Estimated federal withholding by income type.

Withholding is approximated from the income category rather than read from
W-2/1099 boxes. The estimate is only used to split net tax into refund vs.
amount owed in withholding-aware mode.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from types import MappingProxyType

from src.tax.errors import ScheduleConfigError
from src.tax.models import IncomeEntry, IncomeType
from src.tax.money import MonetaryValue

# Income types not listed withhold nothing
DEFAULT_WITHHOLDING_RATES: Mapping[IncomeType, Decimal] = MappingProxyType(
    {
        IncomeType.W2_WAGES: Decimal("0.15"),
        IncomeType.INTEREST: Decimal("0.10"),
        IncomeType.DIVIDENDS: Decimal("0.10"),
    }
)


class WithholdingEstimator:
    """Approximate tax already withheld at the source."""

    def __init__(self, rates: Mapping[IncomeType, Decimal] = DEFAULT_WITHHOLDING_RATES):
        for income_type, rate in rates.items():
            if not Decimal("0") <= rate <= Decimal("1"):
                raise ScheduleConfigError(
                    f"Withholding rate for {income_type} must be in [0, 1], got {rate}"
                )
        self.rates: Mapping[IncomeType, Decimal] = MappingProxyType(dict(rates))

    def rate_for(self, income_type: IncomeType) -> Decimal:
        return self.rates.get(income_type, Decimal("0"))

    def estimate(self, income_entries: Iterable[IncomeEntry]) -> MonetaryValue:
        """Sum estimated withholding across all income entries.

        Each entry's share is rounded to the cent before summing.

        Example:
            >>> WithholdingEstimator().estimate(
            ...     [IncomeEntry(IncomeType.W2_WAGES, MonetaryValue("60000"))]
            ... )
            MonetaryValue(amount=Decimal('9000.00'))
        """
        return MonetaryValue.total(
            entry.amount.times_rate(self.rate_for(entry.income_type))
            for entry in income_entries
        )
