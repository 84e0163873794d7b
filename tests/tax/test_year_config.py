"""Tests for the built-in yearly tables."""

import pytest

from src.tax.brackets import validate_schedule
from src.tax.credits import DEFAULT_CREDIT_RULES
from src.tax.errors import UnknownScheduleError
from src.tax.models import FilingStatus
from src.tax.money import MonetaryValue
from src.tax.year_config import (
    FEDERAL_RATES,
    TAX_YEAR_CONFIGS,
    get_tax_year_config,
)


def test_registry_years() -> None:
    """2020 through 2025 are built in."""
    assert sorted(TAX_YEAR_CONFIGS) == [2020, 2021, 2022, 2023, 2024, 2025]


@pytest.mark.parametrize("year", sorted(TAX_YEAR_CONFIGS))
def test_every_year_covers_every_status(year: int) -> None:
    """Each year has a schedule and deduction for all five statuses."""
    config = get_tax_year_config(year)

    assert config.tax_year == year
    assert config.filing_statuses == list(FilingStatus)
    assert set(config.standard_deductions) == set(FilingStatus)
    assert config.credit_rules == DEFAULT_CREDIT_RULES


@pytest.mark.parametrize("year", sorted(TAX_YEAR_CONFIGS))
def test_schedules_are_well_formed(year: int) -> None:
    """Every built-in schedule passes structural validation."""
    config = get_tax_year_config(year)

    for status, schedule in config.brackets.items():
        validate_schedule(schedule, f"{year}/{status.value}")
        assert tuple(b.rate for b in schedule) == FEDERAL_RATES


def test_surviving_spouse_mirrors_joint() -> None:
    """Qualifying surviving spouse shares the joint tables."""
    config = get_tax_year_config(2024)

    assert (
        config.brackets[FilingStatus.QUALIFYING_SURVIVING_SPOUSE]
        == config.brackets[FilingStatus.MARRIED_FILING_JOINTLY]
    )
    assert config.standard_deductions[
        FilingStatus.QUALIFYING_SURVIVING_SPOUSE
    ] == MonetaryValue("29200")


def test_2023_single_ceilings() -> None:
    """2023 single ceilings match the published schedule."""
    schedule = get_tax_year_config(2023).brackets[FilingStatus.SINGLE]

    assert [b.upper_bound for b in schedule] == [
        MonetaryValue("11000"),
        MonetaryValue("44725"),
        MonetaryValue("95375"),
        MonetaryValue("182100"),
        MonetaryValue("231250"),
        MonetaryValue("578125"),
        None,
    ]


def test_unknown_year_raises() -> None:
    """Missing years raise rather than fall back to a neighbor."""
    with pytest.raises(UnknownScheduleError) as exc_info:
        get_tax_year_config(2026)

    assert exc_info.value.kind == "tax tables"
    assert str(exc_info.value) == "No tax tables configured for 2026"


def test_tables_are_read_only() -> None:
    """The built-in registry cannot be modified in place."""
    with pytest.raises(TypeError):
        TAX_YEAR_CONFIGS[2030] = TAX_YEAR_CONFIGS[2023]  # type: ignore[index]


def test_2020_joint_ceilings() -> None:
    """2020 joint ceilings match Rev. Proc. 2019-44."""
    schedule = get_tax_year_config(2020).brackets[FilingStatus.MARRIED_FILING_JOINTLY]

    assert [b.upper_bound for b in schedule] == [
        MonetaryValue("19750"),
        MonetaryValue("80250"),
        MonetaryValue("171050"),
        MonetaryValue("326600"),
        MonetaryValue("414700"),
        MonetaryValue("622050"),
        None,
    ]
