"""Recalculate and persist a tax return's figures.

This is the caller side of the engine contract: read a snapshot, run the
pure engine, write the result back with a timestamp. Persistence itself is
behind the TaxReturnStore protocol; concurrency control over the stored
records belongs to the store implementation.

Example:
    >>> service = TaxRecalculationService(store, create_tax_engine(settings))
    >>> result = service.recalculate("return-123")
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from src.core.config import Settings
from src.core.logging import get_logger, tax_return_context
from src.tax.engine import TaxEngine
from src.tax.errors import TaxEngineError
from src.tax.models import TaxCalculationResult
from src.tax.schedule_loader import resolve_year_configs
from src.tax.snapshot import TaxReturnSnapshot

logger = get_logger(__name__)


class TaxReturnStore(Protocol):
    """Persistence operations the recalculation service needs."""

    def load_snapshot(self, return_id: str) -> TaxReturnSnapshot:
        """Read the current calculation inputs for a tax return."""
        ...

    def save_result(
        self,
        return_id: str,
        result: TaxCalculationResult,
        calculated_at: datetime,
    ) -> None:
        """Write calculated figures and last_calculated_at onto the return."""
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def create_tax_engine(settings: Settings) -> TaxEngine:
    """Build a TaxEngine from application settings.

    Raises:
        ScheduleConfigError: If a configured schedule file is unusable.
    """
    year_configs = resolve_year_configs(settings)
    logger.info(
        "Tax engine configured",
        outcome_mode=settings.tax_outcome_mode.value,
        tax_years=sorted(year_configs),
        schedule_path=settings.tax_schedule_path,
    )
    return TaxEngine(year_configs=year_configs, outcome_mode=settings.tax_outcome_mode)


class TaxRecalculationService:
    """Recompute a tax return after any change to its inputs.

    Call after an income/deduction entry is added, edited, or deleted, a
    dependent is added or removed, or the filing status changes.
    """

    def __init__(
        self,
        store: TaxReturnStore,
        engine: TaxEngine,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.engine = engine
        self.clock = clock

    def recalculate(self, return_id: str) -> TaxCalculationResult:
        """Load, calculate, and save one tax return.

        Args:
            return_id: Tax return identifier.

        Returns:
            The freshly calculated result (already saved).

        Raises:
            TaxEngineError: If the snapshot is invalid or has no schedule.
                Nothing is saved in that case.
        """
        with tax_return_context(return_id):
            snapshot = self.store.load_snapshot(return_id)

        with tax_return_context(return_id, snapshot.tax_year):
            logger.debug(
                "Recalculating tax return",
                filing_status=snapshot.filing_status,
                income_entries=len(snapshot.income_entries),
                deduction_entries=len(snapshot.deduction_entries),
                dependents=len(snapshot.dependents),
            )

            try:
                result = self.engine.calculate_taxes(snapshot.to_calculation_input())
            except TaxEngineError as exc:
                logger.warning(
                    "Tax calculation rejected",
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise

            calculated_at = self.clock()
            self.store.save_result(return_id, result, calculated_at)
            logger.info(
                "Tax return recalculated",
                taxable_income=str(result.taxable_income),
                tax_liability=str(result.tax_liability),
                refund_amount=str(result.refund_amount),
                amount_owed=str(result.amount_owed),
                calculated_at=calculated_at.isoformat(),
            )
            return result
