"""Tax year-specific bracket schedules, standard deductions, and credit rules.

This module centralizes tax year-specific values so the calculation code
never hardcodes them. Each TaxYearConfig covers every filing status the
year supports; a missing status is a configuration gap, not something to
paper over with another status's numbers.

Example:
    >>> from src.tax.year_config import get_tax_year_config
    >>> config = get_tax_year_config(2023)
    >>> print(config.standard_deductions[FilingStatus.SINGLE])
    13850.00
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from src.tax.brackets import TaxBracket, build_schedule
from src.tax.credits import DEFAULT_CREDIT_RULES, CreditRules
from src.tax.errors import UnknownScheduleError
from src.tax.models import FilingStatus
from src.tax.money import MonetaryValue

SINGLE = FilingStatus.SINGLE
MFJ = FilingStatus.MARRIED_FILING_JOINTLY
MFS = FilingStatus.MARRIED_FILING_SEPARATELY
HOH = FilingStatus.HEAD_OF_HOUSEHOLD
QSS = FilingStatus.QUALIFYING_SURVIVING_SPOUSE

# 10/12/22/24/32/35/37 - unchanged since TCJA
FEDERAL_RATES = tuple(
    Decimal(rate) for rate in ("0.10", "0.12", "0.22", "0.24", "0.32", "0.35", "0.37")
)


@dataclass(frozen=True)
class TaxYearConfig:
    """Tax year-specific schedules and thresholds.

    All monetary values are MonetaryValue for precision in tax calculations.
    This dataclass is frozen to prevent accidental modification.

    Attributes:
        tax_year: The tax year these values apply to.
        brackets: Marginal bracket schedule per filing status.
        standard_deductions: Standard deduction per filing status.
        credit_rules: CTC/EITC constants for the year.
    """

    tax_year: int
    brackets: Mapping[FilingStatus, tuple[TaxBracket, ...]]
    standard_deductions: Mapping[FilingStatus, MonetaryValue]
    credit_rules: CreditRules = field(default=DEFAULT_CREDIT_RULES)

    @property
    def filing_statuses(self) -> list[FilingStatus]:
        return [status for status in FilingStatus if status in self.brackets]


def _federal_schedule(*upper_bounds: str) -> tuple[TaxBracket, ...]:
    """Pair six bracket ceilings with the seven federal rates."""
    bounds = [*upper_bounds, None]
    return build_schedule(zip(bounds, FEDERAL_RATES))


def _year(
    tax_year: int,
    brackets: dict[FilingStatus, tuple[TaxBracket, ...]],
    standard_deductions: dict[FilingStatus, str],
) -> TaxYearConfig:
    # Qualifying surviving spouse uses the joint schedule and deduction
    brackets.setdefault(QSS, brackets[MFJ])
    standard_deductions.setdefault(QSS, standard_deductions[MFJ])
    return TaxYearConfig(
        tax_year=tax_year,
        brackets=MappingProxyType(brackets),
        standard_deductions=MappingProxyType(
            {status: MonetaryValue(amount) for status, amount in standard_deductions.items()}
        ),
    )


# 2020 Configuration - IRS published values (Rev. Proc. 2019-44)
TAX_YEAR_2020 = _year(
    2020,
    {
        SINGLE: _federal_schedule("9875", "40125", "85525", "163300", "207350", "518400"),
        MFJ: _federal_schedule("19750", "80250", "171050", "326600", "414700", "622050"),
        MFS: _federal_schedule("9875", "40125", "85525", "163300", "207350", "311025"),
        HOH: _federal_schedule("14100", "53700", "85500", "163300", "207350", "518400"),
    },
    {SINGLE: "12400", MFJ: "24800", MFS: "12400", HOH: "18650"},
)

# 2021 Configuration - IRS published values (Rev. Proc. 2020-45)
TAX_YEAR_2021 = _year(
    2021,
    {
        SINGLE: _federal_schedule("9950", "40525", "86375", "164925", "209425", "523600"),
        MFJ: _federal_schedule("19900", "81050", "172750", "329850", "418850", "628300"),
        MFS: _federal_schedule("9950", "40525", "86375", "164925", "209425", "314150"),
        HOH: _federal_schedule("14200", "54200", "86350", "164900", "209400", "523600"),
    },
    {SINGLE: "12550", MFJ: "25100", MFS: "12550", HOH: "18800"},
)

# 2022 Configuration - IRS published values (Rev. Proc. 2021-45)
TAX_YEAR_2022 = _year(
    2022,
    {
        SINGLE: _federal_schedule("10275", "41775", "89075", "170050", "215950", "539900"),
        MFJ: _federal_schedule("20550", "83550", "178150", "340100", "431900", "647850"),
        MFS: _federal_schedule("10275", "41775", "89075", "170050", "215950", "323925"),
        HOH: _federal_schedule("14650", "55900", "89050", "170050", "215950", "539900"),
    },
    {SINGLE: "12950", MFJ: "25900", MFS: "12950", HOH: "19400"},
)

# 2023 Configuration - IRS published values (Rev. Proc. 2022-38)
TAX_YEAR_2023 = _year(
    2023,
    {
        SINGLE: _federal_schedule("11000", "44725", "95375", "182100", "231250", "578125"),
        MFJ: _federal_schedule("22000", "89450", "190750", "364200", "462500", "693750"),
        MFS: _federal_schedule("11000", "44725", "95375", "182100", "231250", "346875"),
        HOH: _federal_schedule("15700", "59850", "95350", "182100", "231250", "578100"),
    },
    {SINGLE: "13850", MFJ: "27700", MFS: "13850", HOH: "20800"},
)

# 2024 Configuration - IRS published values (Rev. Proc. 2023-34)
TAX_YEAR_2024 = _year(
    2024,
    {
        SINGLE: _federal_schedule("11600", "47150", "100525", "191950", "243725", "609350"),
        MFJ: _federal_schedule("23200", "94300", "201050", "383900", "487450", "731200"),
        MFS: _federal_schedule("11600", "47150", "100525", "191950", "243725", "365600"),
        HOH: _federal_schedule("16550", "63100", "100500", "191950", "243700", "609350"),
    },
    {SINGLE: "14600", MFJ: "29200", MFS: "14600", HOH: "21900"},
)

# 2025 Configuration - Rev. Proc. 2024-40 brackets, standard deductions as
# amended by the 2025 reconciliation act
TAX_YEAR_2025 = _year(
    2025,
    {
        SINGLE: _federal_schedule("11925", "48475", "103350", "197300", "250525", "626350"),
        MFJ: _federal_schedule("23850", "96950", "206700", "394600", "501050", "751600"),
        MFS: _federal_schedule("11925", "48475", "103350", "197300", "250525", "375800"),
        HOH: _federal_schedule("17000", "64850", "103350", "197300", "250500", "626350"),
    },
    {SINGLE: "15750", MFJ: "31500", MFS: "15750", HOH: "23625"},
)

# Registry of available tax year configurations
TAX_YEAR_CONFIGS: Mapping[int, TaxYearConfig] = MappingProxyType(
    {
        2020: TAX_YEAR_2020,
        2021: TAX_YEAR_2021,
        2022: TAX_YEAR_2022,
        2023: TAX_YEAR_2023,
        2024: TAX_YEAR_2024,
        2025: TAX_YEAR_2025,
    }
)


def get_tax_year_config(
    year: int, configs: Mapping[int, TaxYearConfig] = TAX_YEAR_CONFIGS
) -> TaxYearConfig:
    """Get configuration for a specific tax year.

    Args:
        year: The tax year (e.g., 2024).
        configs: Registry to search; defaults to the built-in tables.

    Returns:
        TaxYearConfig for the specified year.

    Raises:
        UnknownScheduleError: If no configuration exists for the requested year.

    Example:
        >>> config = get_tax_year_config(2024)
        >>> print(config.standard_deductions[FilingStatus.MARRIED_FILING_JOINTLY])
        29200.00
    """
    if year not in configs:
        raise UnknownScheduleError("tax tables", year)
    return configs[year]
