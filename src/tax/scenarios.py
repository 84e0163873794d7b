"""What-if scenario comparison.

Runs a baseline tax return and named variants through the same engine and
reports which result figures moved. Helpers derive variants from the
baseline without mutating it.

Example:
    >>> comparisons = compare_scenarios(engine, baseline, {
    ...     "extra_ira": with_additional_deduction(
    ...         baseline, DeductionType.IRA_CONTRIBUTIONS, MonetaryValue("6500")),
    ... })
    >>> [d.field for d in comparisons[0].deltas]
    ['itemized_deduction', ...]
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass

from src.tax.engine import TaxEngine
from src.tax.models import (
    DeductionEntry,
    DeductionType,
    FilingStatus,
    IncomeEntry,
    IncomeType,
    OutcomeMode,
    TaxCalculationInput,
    TaxCalculationResult,
)
from src.tax.money import MonetaryValue


@dataclass(frozen=True)
class ScenarioDelta:
    """One result field that differs between baseline and scenario.

    Attributes:
        field: Name of the TaxCalculationResult field.
        baseline_value: Value under the baseline.
        scenario_value: Value under the scenario.
        difference: scenario_value - baseline_value.
        direction: Either "increase" or "decrease".
    """

    field: str
    baseline_value: MonetaryValue
    scenario_value: MonetaryValue
    difference: MonetaryValue
    direction: str


@dataclass(frozen=True)
class ScenarioComparison:
    """A named scenario's result and how it differs from the baseline."""

    name: str
    result: TaxCalculationResult
    deltas: tuple[ScenarioDelta, ...]

    @property
    def net_benefit(self) -> MonetaryValue:
        """Change in (refund - amount owed); positive favors the taxpayer."""
        delta = {d.field: d.difference for d in self.deltas}
        zero = MonetaryValue.zero()
        return delta.get("refund_amount", zero) - delta.get("amount_owed", zero)


def diff_results(
    baseline: TaxCalculationResult, scenario: TaxCalculationResult
) -> tuple[ScenarioDelta, ...]:
    """List every result field whose value changed, in field order."""
    deltas: list[ScenarioDelta] = []
    for result_field in dataclasses.fields(TaxCalculationResult):
        before = getattr(baseline, result_field.name)
        after = getattr(scenario, result_field.name)
        if before == after:
            continue
        difference = after - before
        deltas.append(
            ScenarioDelta(
                field=result_field.name,
                baseline_value=before,
                scenario_value=after,
                difference=difference,
                direction="increase" if difference > MonetaryValue.zero() else "decrease",
            )
        )
    return tuple(deltas)


def compare_scenarios(
    engine: TaxEngine,
    baseline: TaxCalculationInput,
    scenarios: Mapping[str, TaxCalculationInput],
    outcome_mode: OutcomeMode | None = None,
) -> list[ScenarioComparison]:
    """Calculate each scenario and diff it against the baseline.

    Args:
        engine: Engine used for every calculation.
        baseline: The return as currently filed.
        scenarios: Variant inputs keyed by display name.
        outcome_mode: Optional mode override applied to every run.

    Returns:
        One ScenarioComparison per scenario, in mapping order.

    Raises:
        ValidationError / UnknownScheduleError: From the first failing input.
    """
    baseline_result = engine.calculate_taxes(baseline, outcome_mode)
    comparisons: list[ScenarioComparison] = []
    for name, scenario in scenarios.items():
        result = engine.calculate_taxes(scenario, outcome_mode)
        comparisons.append(
            ScenarioComparison(
                name=name,
                result=result,
                deltas=diff_results(baseline_result, result),
            )
        )
    return comparisons


def with_additional_income(
    data: TaxCalculationInput,
    income_type: IncomeType,
    amount: MonetaryValue,
    description: str | None = None,
) -> TaxCalculationInput:
    entry = IncomeEntry(income_type=income_type, amount=amount, description=description)
    return dataclasses.replace(data, income_entries=(*data.income_entries, entry))


def with_additional_deduction(
    data: TaxCalculationInput,
    deduction_type: DeductionType,
    amount: MonetaryValue,
    description: str | None = None,
) -> TaxCalculationInput:
    entry = DeductionEntry(deduction_type=deduction_type, amount=amount, description=description)
    return dataclasses.replace(data, deduction_entries=(*data.deduction_entries, entry))


def with_filing_status(
    data: TaxCalculationInput, filing_status: FilingStatus
) -> TaxCalculationInput:
    return dataclasses.replace(data, filing_status=filing_status)
