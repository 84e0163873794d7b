"""Tax return snapshot exchanged with the persistence layer.

The persistence collaborator reads income, deduction, and dependent records
for one tax return and hands them over as a TaxReturnSnapshot. The snapshot
converts itself into the engine's TaxCalculationInput.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from src.tax.errors import ValidationError
from src.tax.models import (
    DeductionEntry,
    DeductionType,
    FilingStatus,
    IncomeEntry,
    IncomeType,
    TaxCalculationInput,
)
from src.tax.money import MAX_AMOUNT, MonetaryValue


class IncomeRecord(BaseModel):
    """Persisted income entry."""

    income_type: str = Field(description="IncomeType name, e.g. W2_WAGES")
    amount: Decimal = Field(description="Income amount")
    description: str | None = Field(default=None, description="Employer or payer label")


class DeductionRecord(BaseModel):
    """Persisted itemized deduction entry."""

    deduction_type: str = Field(description="DeductionType name, e.g. MORTGAGE_INTEREST")
    amount: Decimal = Field(description="Deduction amount")
    description: str | None = Field(default=None, description="Free-text label")


class DependentRecord(BaseModel):
    """Persisted dependent."""

    name: str | None = Field(default=None, description="Dependent name")
    is_qualifying_child: bool = Field(
        default=False, description="Whether the dependent qualifies for the Child Tax Credit"
    )


class TaxReturnSnapshot(BaseModel):
    """Point-in-time read of one tax return's calculation inputs."""

    return_id: str = Field(description="Tax return identifier")
    filing_status: str = Field(description="FilingStatus name")
    tax_year: int = Field(description="Tax year")
    income_entries: list[IncomeRecord] = Field(default_factory=list)
    deduction_entries: list[DeductionRecord] = Field(default_factory=list)
    dependents: list[DependentRecord] = Field(default_factory=list)

    def to_calculation_input(self) -> TaxCalculationInput:
        """Convert persisted records into an engine input.

        Unknown income/deduction types and negative or out-of-range amounts are collected
        into a single ValidationError. An unrecognized filing status is
        passed through unchanged so schedule lookup rejects it.

        Raises:
            ValidationError: If any record cannot be converted.
        """
        errors: list[str] = []

        income_entries: list[IncomeEntry] = []
        for index, record in enumerate(self.income_entries):
            if record.income_type not in IncomeType.__members__:
                errors.append(f"income_entries[{index}]: unknown income type {record.income_type!r}")
                continue
            if record.amount < 0:
                errors.append(f"income_entries[{index}]: amount must not be negative")
                continue
            if not record.amount.is_finite() or record.amount > MAX_AMOUNT:
                errors.append(f"income_entries[{index}]: amount must not exceed {MAX_AMOUNT}")
                continue
            income_entries.append(
                IncomeEntry(
                    income_type=IncomeType[record.income_type],
                    amount=MonetaryValue(record.amount),
                    description=record.description,
                )
            )

        deduction_entries: list[DeductionEntry] = []
        for index, record in enumerate(self.deduction_entries):
            if record.deduction_type not in DeductionType.__members__:
                errors.append(
                    f"deduction_entries[{index}]: unknown deduction type {record.deduction_type!r}"
                )
                continue
            if record.amount < 0:
                errors.append(f"deduction_entries[{index}]: amount must not be negative")
                continue
            if not record.amount.is_finite() or record.amount > MAX_AMOUNT:
                errors.append(f"deduction_entries[{index}]: amount must not exceed {MAX_AMOUNT}")
                continue
            deduction_entries.append(
                DeductionEntry(
                    deduction_type=DeductionType[record.deduction_type],
                    amount=MonetaryValue(record.amount),
                    description=record.description,
                )
            )

        if errors:
            raise ValidationError(errors)

        filing_status: FilingStatus | str = self.filing_status
        if self.filing_status in FilingStatus.__members__:
            filing_status = FilingStatus[self.filing_status]

        return TaxCalculationInput(
            filing_status=filing_status,
            tax_year=self.tax_year,
            income_entries=tuple(income_entries),
            deduction_entries=tuple(deduction_entries),
            dependent_count=len(self.dependents),
            qualifying_child_count=sum(1 for d in self.dependents if d.is_qualifying_child),
        )
