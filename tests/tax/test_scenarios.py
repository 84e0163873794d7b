"""Tests for what-if scenario comparison."""

import dataclasses

import pytest

from src.tax.engine import TaxEngine
from src.tax.errors import UnknownScheduleError
from src.tax.models import DeductionType, FilingStatus, IncomeType, OutcomeMode
from src.tax.money import MonetaryValue
from src.tax.scenarios import (
    compare_scenarios,
    diff_results,
    with_additional_deduction,
    with_additional_income,
    with_filing_status,
)


@pytest.fixture
def baseline(make_input):
    """Single filer, 2023, $75,000 wages."""
    return make_input(income=[(IncomeType.W2_WAGES, "75000")])


class TestCompareScenarios:
    """Tests for compare_scenarios."""

    def test_extra_deduction(self, engine: TaxEngine, baseline) -> None:
        """A $20,000 IRA deduction flips to itemizing and lowers the tax."""
        scenario = with_additional_deduction(
            baseline, DeductionType.IRA_CONTRIBUTIONS, MonetaryValue("20000")
        )

        [comparison] = compare_scenarios(engine, baseline, {"ira": scenario})

        assert comparison.name == "ira"
        assert [
            (d.field, str(d.baseline_value), str(d.scenario_value), d.direction)
            for d in comparison.deltas
        ] == [
            ("itemized_deduction", "0.00", "20000.00", "increase"),
            ("taxable_income", "61150.00", "55000.00", "decrease"),
            ("tax_liability", "8760.50", "7407.50", "decrease"),
            ("refund_amount", "2489.50", "3842.50", "increase"),
        ]
        assert comparison.net_benefit == MonetaryValue("1353.00")

    def test_extra_income(self, engine: TaxEngine, baseline) -> None:
        """$10,000 of business income costs $2,200 at the 22% bracket."""
        scenario = with_additional_income(
            baseline, IncomeType.BUSINESS_INCOME, MonetaryValue("10000"), "Side gig"
        )

        [comparison] = compare_scenarios(engine, baseline, {"side gig": scenario})

        assert comparison.result.tax_liability == MonetaryValue("10960.50")
        assert comparison.net_benefit == MonetaryValue("-2200")
        assert scenario.income_entries[-1].description == "Side gig"

    def test_multiple_scenarios_keep_order(self, engine: TaxEngine, baseline) -> None:
        """Comparisons come back in mapping order."""
        comparisons = compare_scenarios(
            engine,
            baseline,
            {
                "head of household": with_filing_status(
                    baseline, FilingStatus.HEAD_OF_HOUSEHOLD
                ),
                "unchanged": baseline,
            },
        )

        assert [c.name for c in comparisons] == ["head of household", "unchanged"]
        assert comparisons[0].result.standard_deduction == MonetaryValue("20800")
        assert comparisons[0].net_benefit > MonetaryValue.zero()
        assert comparisons[1].deltas == ()
        assert comparisons[1].net_benefit == MonetaryValue.zero()

    def test_outcome_mode_override(self, engine: TaxEngine, baseline) -> None:
        """A mode override applies to baseline and scenarios alike."""
        scenario = with_additional_deduction(
            baseline, DeductionType.IRA_CONTRIBUTIONS, MonetaryValue("20000")
        )

        [comparison] = compare_scenarios(
            engine, baseline, {"ira": scenario}, outcome_mode=OutcomeMode.CREDIT_ONLY
        )

        owed = [d for d in comparison.deltas if d.field == "amount_owed"]
        assert owed[0].difference == MonetaryValue("-1353.00")
        assert comparison.net_benefit == MonetaryValue("1353.00")

    def test_failing_scenario_raises(self, engine: TaxEngine, baseline) -> None:
        """Scenario errors propagate like any calculation error."""
        bad = dataclasses.replace(baseline, tax_year=2026)

        with pytest.raises(UnknownScheduleError):
            compare_scenarios(engine, baseline, {"bad": bad})


class TestHelpers:
    """Tests for scenario builders."""

    def test_helpers_do_not_mutate_baseline(self, baseline) -> None:
        """Derived inputs are new snapshots."""
        derived = with_additional_deduction(
            baseline, DeductionType.CHARITABLE_CONTRIBUTIONS, MonetaryValue("500")
        )

        assert baseline.deduction_entries == ()
        assert len(derived.deduction_entries) == 1
        assert derived.income_entries == baseline.income_entries

    def test_diff_identical_results(self, engine: TaxEngine, baseline) -> None:
        """Identical results have no deltas."""
        result = engine.calculate_taxes(baseline)

        assert diff_results(result, result) == ()
