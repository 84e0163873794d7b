"""Tests for the load-calculate-save recalculation service."""

from datetime import datetime, timezone

import pytest
from structlog.testing import capture_logs

from src.core.config import Settings
from src.core.logging import return_id_ctx, tax_year_ctx
from src.tax.engine import TaxEngine
from src.tax.errors import UnknownScheduleError, ValidationError
from src.tax.models import OutcomeMode, TaxCalculationResult
from src.tax.money import MonetaryValue
from src.tax.service import TaxRecalculationService, create_tax_engine
from src.tax.snapshot import TaxReturnSnapshot

FIXED_NOW = datetime(2024, 4, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryTaxReturnStore:
    """Dict-backed store recording every save."""

    def __init__(self, snapshots: dict[str, TaxReturnSnapshot]):
        self.snapshots = snapshots
        self.saved: list[tuple[str, TaxCalculationResult, datetime]] = []
        self.save_context: list[tuple[str | None, int | None]] = []

    def load_snapshot(self, return_id: str) -> TaxReturnSnapshot:
        return self.snapshots[return_id]

    def save_result(
        self, return_id: str, result: TaxCalculationResult, calculated_at: datetime
    ) -> None:
        self.saved.append((return_id, result, calculated_at))
        self.save_context.append((return_id_ctx.get(), tax_year_ctx.get()))


def _snapshot(return_id: str = "return-1", **overrides) -> TaxReturnSnapshot:
    data = {
        "return_id": return_id,
        "filing_status": "SINGLE",
        "tax_year": 2023,
        "income_entries": [{"income_type": "W2_WAGES", "amount": "75000"}],
        "deduction_entries": [{"deduction_type": "MORTGAGE_INTEREST", "amount": "8500"}],
    }
    data.update(overrides)
    return TaxReturnSnapshot.model_validate(data)


def _service(snapshot: TaxReturnSnapshot, engine: TaxEngine | None = None):
    store = InMemoryTaxReturnStore({snapshot.return_id: snapshot})
    service = TaxRecalculationService(store, engine or TaxEngine(), clock=lambda: FIXED_NOW)
    return service, store


class TestRecalculate:
    """Tests for TaxRecalculationService.recalculate."""

    def test_saves_result_with_timestamp(self) -> None:
        """The calculated result is written back with the clock time."""
        service, store = _service(_snapshot())

        result = service.recalculate("return-1")

        assert result.taxable_income == MonetaryValue("61150")
        assert result.refund_amount == MonetaryValue("2489.50")
        assert store.saved == [("return-1", result, FIXED_NOW)]

    def test_logs_outcome_with_context(self) -> None:
        """Start and completion are logged, with amounts as exact strings."""
        service, _ = _service(_snapshot())

        with capture_logs() as logs:
            service.recalculate("return-1")

        events = [entry["event"] for entry in logs]
        assert events == ["Recalculating tax return", "Tax return recalculated"]
        done = logs[-1]
        assert done["log_level"] == "info"
        assert done["tax_liability"] == "8760.50"
        assert done["calculated_at"] == FIXED_NOW.isoformat()

    def test_context_bound_while_saving(self) -> None:
        """The return id and tax year are bound while the result is written."""
        service, store = _service(_snapshot())

        service.recalculate("return-1")

        assert store.save_context == [("return-1", 2023)]

    def test_context_vars_reset_after_call(self) -> None:
        """Correlation context does not leak past the call."""
        service, _ = _service(_snapshot())

        service.recalculate("return-1")

        assert return_id_ctx.get() is None
        assert tax_year_ctx.get() is None

    def test_validation_failure_saves_nothing(self) -> None:
        """Invalid records raise and leave the stored figures untouched."""
        snapshot = _snapshot(income_entries=[{"income_type": "W2_WAGES", "amount": "-10"}])
        service, store = _service(snapshot)

        with capture_logs() as logs:
            with pytest.raises(ValidationError):
                service.recalculate("return-1")

        assert store.saved == []
        rejected = logs[-1]
        assert rejected["event"] == "Tax calculation rejected"
        assert rejected["log_level"] == "warning"
        assert rejected["error_type"] == "ValidationError"
        assert return_id_ctx.get() is None

    def test_oversized_amount_rejected(self) -> None:
        """A stored amount too large to calculate with is rejected and logged."""
        snapshot = _snapshot(income_entries=[{"income_type": "W2_WAGES", "amount": "1e30"}])
        service, store = _service(snapshot)

        with capture_logs() as logs:
            with pytest.raises(ValidationError):
                service.recalculate("return-1")

        assert store.saved == []
        assert logs[-1]["event"] == "Tax calculation rejected"

    def test_unknown_schedule_saves_nothing(self) -> None:
        """A year without tables raises UnknownScheduleError."""
        service, store = _service(_snapshot(tax_year=2026))

        with pytest.raises(UnknownScheduleError):
            service.recalculate("return-1")

        assert store.saved == []
        assert tax_year_ctx.get() is None

    def test_recalculation_reflects_changed_inputs(self) -> None:
        """Each call reads the latest snapshot."""
        service, store = _service(_snapshot())
        service.recalculate("return-1")

        store.snapshots["return-1"] = _snapshot(
            filing_status="HEAD_OF_HOUSEHOLD",
            dependents=[{"name": "Kid", "is_qualifying_child": True}],
        )
        updated = service.recalculate("return-1")

        assert updated.standard_deduction == MonetaryValue("20800")
        assert updated.total_credits == MonetaryValue("2000")
        assert len(store.saved) == 2


class TestCreateTaxEngine:
    """Tests for building an engine from settings."""

    def test_uses_configured_mode(self) -> None:
        """The settings' outcome mode becomes the engine default."""
        settings = Settings(_env_file=None, tax_outcome_mode="credit_only")

        with capture_logs() as logs:
            engine = create_tax_engine(settings)

        assert engine.outcome_mode == OutcomeMode.CREDIT_ONLY
        assert engine.supported_years == [2020, 2021, 2022, 2023, 2024, 2025]
        assert logs[0]["event"] == "Tax engine configured"
        assert logs[0]["outcome_mode"] == "CREDIT_ONLY"

    def test_credit_only_service(self) -> None:
        """A credit-only service owes the liability on wage income."""
        engine = create_tax_engine(Settings(_env_file=None, tax_outcome_mode="CREDIT_ONLY"))
        service, _ = _service(_snapshot(), engine)

        result = service.recalculate("return-1")

        assert result.amount_owed == MonetaryValue("8760.50")
        assert result.refund_amount == MonetaryValue.zero()
