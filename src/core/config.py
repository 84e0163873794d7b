"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.tax.models import OutcomeMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # Tax engine
    tax_outcome_mode: OutcomeMode = OutcomeMode.WITHHOLDING_AWARE
    """Default refund/owed semantics (WITHHOLDING_AWARE or CREDIT_ONLY)."""

    tax_schedule_path: str | None = None
    """Optional JSON file replacing the built-in bracket/deduction tables."""

    @field_validator("tax_outcome_mode", mode="before")
    @classmethod
    def parse_outcome_mode(cls, value: object) -> object:
        """Accept mode names case-insensitively, with dashes or underscores."""
        if isinstance(value, str):
            normalized = value.strip().upper().replace("-", "_")
            if normalized not in OutcomeMode.__members__:
                allowed = ", ".join(OutcomeMode.__members__)
                raise ValueError(f"TAX_OUTCOME_MODE must be one of: {allowed}")
            return OutcomeMode[normalized]
        return value

    @field_validator("tax_schedule_path", mode="before")
    @classmethod
    def blank_path_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "Allowed values for TAX_OUTCOME_MODE are:",
        "  WITHHOLDING_AWARE, CREDIT_ONLY (case-insensitive)",
        "TAX_SCHEDULE_PATH must point to a JSON schedule file when set.",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
