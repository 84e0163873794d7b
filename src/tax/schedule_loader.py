"""Load yearly tax tables from a JSON file.

Lets a deployment inject bracket schedules, standard deductions, and
credit constants without code changes. The file is parsed with orjson and
validated with pydantic; any problem is reported as ScheduleConfigError.

File shape:
    {
      "years": [
        {
          "tax_year": 2023,
          "brackets": {
            "SINGLE": [
              {"upper_bound": "11000", "rate": "0.10"},
              ...
              {"upper_bound": null, "rate": "0.37"}
            ]
          },
          "standard_deductions": {"SINGLE": "13850"},
          "credit_rules": {"ctc_per_child": "2000"}
        }
      ]
    }

Use strings for amounts and rates so no value passes through binary float.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel, Field, ValidationError, model_validator

from src.core.logging import get_logger
from src.tax.brackets import build_schedule, validate_schedule
from src.tax.credits import DEFAULT_CREDIT_RULES, CreditRules
from src.tax.errors import ScheduleConfigError
from src.tax.models import MAX_TAX_YEAR, MIN_TAX_YEAR, FilingStatus
from src.tax.money import MonetaryValue
from src.tax.year_config import TAX_YEAR_CONFIGS, TaxYearConfig

if TYPE_CHECKING:
    from src.core.config import Settings

logger = get_logger(__name__)


# =============================================================================
# File models
# =============================================================================


class BracketModel(BaseModel):
    """One bracket ceiling and its rate."""

    upper_bound: Decimal | None = Field(
        default=None, description="Bracket ceiling; null for the top bracket"
    )
    rate: Decimal = Field(ge=0, le=1, description="Marginal rate, e.g. 0.22")


class EitcTierModel(BaseModel):
    """EITC maximum credit for a minimum number of dependents."""

    min_dependents: int = Field(ge=1)
    max_credit: Decimal = Field(ge=0)


class CreditRulesModel(BaseModel):
    """Overrides for the default credit constants. Omitted fields keep defaults."""

    ctc_per_child: Decimal | None = Field(default=None, ge=0)
    ctc_threshold_joint: Decimal | None = Field(default=None, ge=0)
    ctc_threshold_other: Decimal | None = Field(default=None, ge=0)
    ctc_phaseout_step: Decimal | None = Field(default=None, gt=0)
    ctc_reduction_per_step: Decimal | None = Field(default=None, ge=0)
    eitc_agi_limit: Decimal | None = Field(default=None, ge=0)
    eitc_max_credits: list[EitcTierModel] | None = None
    eitc_phaseout_start_joint: Decimal | None = Field(default=None, ge=0)
    eitc_phaseout_start_other: Decimal | None = Field(default=None, ge=0)
    eitc_phaseout_rate: Decimal | None = Field(default=None, ge=0, le=1)

    def to_rules(self) -> CreditRules:
        overrides: dict[str, Any] = {}
        for name, value in self.model_dump(exclude_none=True).items():
            if name == "eitc_max_credits":
                tiers = sorted(value, key=lambda tier: tier["min_dependents"])
                overrides[name] = tuple(
                    (tier["min_dependents"], MonetaryValue(tier["max_credit"])) for tier in tiers
                )
            elif name == "eitc_phaseout_rate":
                overrides[name] = value
            else:
                overrides[name] = MonetaryValue(value)
        return dataclasses.replace(DEFAULT_CREDIT_RULES, **overrides)


class YearScheduleModel(BaseModel):
    """All tables for one tax year."""

    tax_year: int = Field(ge=MIN_TAX_YEAR, le=MAX_TAX_YEAR)
    brackets: dict[FilingStatus, list[BracketModel]]
    standard_deductions: dict[FilingStatus, Decimal]
    credit_rules: CreditRulesModel | None = None

    @model_validator(mode="after")
    def check_statuses_match(self) -> YearScheduleModel:
        """Every filing status needs both a schedule and a standard deduction."""
        bracket_statuses = set(self.brackets)
        deduction_statuses = set(self.standard_deductions)
        if bracket_statuses != deduction_statuses:
            missing = sorted(s.value for s in bracket_statuses ^ deduction_statuses)
            raise ValueError(
                f"{self.tax_year}: brackets and standard_deductions must cover the same "
                f"filing statuses (mismatch: {', '.join(missing)})"
            )
        return self


class ScheduleFileModel(BaseModel):
    """Top-level schedule file."""

    years: list[YearScheduleModel] = Field(min_length=1)

    @model_validator(mode="after")
    def check_unique_years(self) -> ScheduleFileModel:
        years = [year.tax_year for year in self.years]
        if len(years) != len(set(years)):
            raise ValueError("Each tax_year may appear only once")
        return self


# =============================================================================
# Loading
# =============================================================================


def _to_year_config(model: YearScheduleModel) -> TaxYearConfig:
    brackets = {}
    for status, rows in model.brackets.items():
        schedule = build_schedule((row.upper_bound, row.rate) for row in rows)
        brackets[status] = validate_schedule(schedule, f"{model.tax_year}/{status.value}")

    credit_rules = (
        model.credit_rules.to_rules() if model.credit_rules is not None else DEFAULT_CREDIT_RULES
    )
    return TaxYearConfig(
        tax_year=model.tax_year,
        brackets=MappingProxyType(brackets),
        standard_deductions=MappingProxyType(
            {status: MonetaryValue(amount) for status, amount in model.standard_deductions.items()}
        ),
        credit_rules=credit_rules,
    )


def parse_year_configs(payload: bytes | str) -> dict[int, TaxYearConfig]:
    """Parse schedule JSON into TaxYearConfig objects keyed by year.

    Raises:
        ScheduleConfigError: If the JSON is malformed or fails validation.
    """
    try:
        raw = orjson.loads(payload)
    except orjson.JSONDecodeError as exc:
        raise ScheduleConfigError(f"Schedule file is not valid JSON: {exc}") from exc

    try:
        parsed = ScheduleFileModel.model_validate(raw)
    except ValidationError as exc:
        raise ScheduleConfigError(f"Schedule file failed validation: {exc}") from exc

    return {year.tax_year: _to_year_config(year) for year in parsed.years}


def load_year_configs(path: str | Path) -> dict[int, TaxYearConfig]:
    """Read and parse a schedule file.

    Args:
        path: Location of the JSON schedule file.

    Returns:
        TaxYearConfig objects keyed by tax year.

    Raises:
        ScheduleConfigError: If the file cannot be read, parsed, or validated.
    """
    schedule_path = Path(path)
    try:
        payload = schedule_path.read_bytes()
    except OSError as exc:
        raise ScheduleConfigError(f"Cannot read schedule file {schedule_path}: {exc}") from exc

    configs = parse_year_configs(payload)
    logger.info(
        "Loaded tax schedules",
        path=str(schedule_path),
        tax_years=sorted(configs),
    )
    return configs


def resolve_year_configs(settings: Settings) -> Mapping[int, TaxYearConfig]:
    """Return the configured schedule file's tables, or the built-in ones."""
    if settings.tax_schedule_path:
        return load_year_configs(settings.tax_schedule_path)
    return TAX_YEAR_CONFIGS
