"""Configuration settings for contractor invoicing."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Invoicing
    invoice_tax_rate: Decimal = Field(
        default=Decimal("0.05"),
        ge=0,
        validation_alias="INVOICE_TAX_RATE",
        description="Flat GST rate applied to the invoice subtotal",
    )
    invoice_due_days: int = Field(
        default=30,
        ge=0,
        validation_alias="INVOICE_DUE_DAYS",
        description="Calendar days from generation until an invoice is due",
    )

    # Scheduling
    schedule_period_count: int = Field(
        default=26,
        ge=1,
        validation_alias="SCHEDULE_PERIOD_COUNT",
        description="Periods materialized per schedule (26 = one year bi-weekly)",
    )
    deadline_horizon_days: int = Field(
        default=30,
        ge=0,
        validation_alias="DEADLINE_HORIZON_DAYS",
        description="Look-ahead window for upcoming submission deadlines",
    )

    # Company payroll calendar
    payroll_calendar_path: Path | None = Field(
        default=None,
        validation_alias="PAYROLL_CALENDAR_PATH",
        description="YAML payroll calendar; the packaged calendar when unset",
    )
    cut_off_horizon_days: int = Field(
        default=7,
        ge=0,
        validation_alias="CUT_OFF_HORIZON_DAYS",
        description="Look-ahead window for payroll calendar cut-off dates",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
