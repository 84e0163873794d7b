"""Progressive income-tax calculation engine and year-specific configurations."""

from src.tax.brackets import BracketTable, LiabilityBreakdown, TaxBracket
from src.tax.credits import CreditCalculator, CreditRules, CreditsResult
from src.tax.deductions import DeductionResolver, DeductionResult
from src.tax.engine import TaxCalculationDetail, TaxEngine, calculate_taxes
from src.tax.errors import (
    ScheduleConfigError,
    TaxEngineError,
    UnknownScheduleError,
    ValidationError,
)
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
from src.tax.withholding import WithholdingEstimator
from src.tax.year_config import (
    TAX_YEAR_2020,
    TAX_YEAR_2021,
    TAX_YEAR_2022,
    TAX_YEAR_2023,
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    TAX_YEAR_CONFIGS,
    TaxYearConfig,
    get_tax_year_config,
)

__all__ = [
    # Engine
    "TaxEngine",
    "TaxCalculationDetail",
    "calculate_taxes",
    # Components
    "BracketTable",
    "TaxBracket",
    "LiabilityBreakdown",
    "DeductionResolver",
    "DeductionResult",
    "CreditCalculator",
    "CreditRules",
    "CreditsResult",
    "WithholdingEstimator",
    # Data structures
    "MonetaryValue",
    "FilingStatus",
    "IncomeType",
    "DeductionType",
    "OutcomeMode",
    "IncomeEntry",
    "DeductionEntry",
    "TaxCalculationInput",
    "TaxCalculationResult",
    # Errors
    "TaxEngineError",
    "ValidationError",
    "UnknownScheduleError",
    "ScheduleConfigError",
    # Year configuration
    "TaxYearConfig",
    "TAX_YEAR_2020",
    "TAX_YEAR_2021",
    "TAX_YEAR_2022",
    "TAX_YEAR_2023",
    "TAX_YEAR_2024",
    "TAX_YEAR_2025",
    "TAX_YEAR_CONFIGS",
    "get_tax_year_config",
]
