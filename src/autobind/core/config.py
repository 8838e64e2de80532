# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from decimal import Decimal

from beartype import beartype
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOBIND_",
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    # API
    api_env: str = Field(
        default="development",
        description="Deployment environment",
    )
    api_host: str = Field(default="0.0.0.0", description="Bind address")  # noqa: S104
    api_port: int = Field(default=8000, ge=1, le=65535, description="Bind port")
    api_cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed by the CORS middleware",
    )
    log_level: str = Field(default="INFO", description="Root log level")

    # Quote lifecycle
    quote_validity_days: int = Field(
        default=30,
        ge=1,
        le=90,
        description="Days a quote stays bindable after creation",
    )
    urgent_threshold_days: int = Field(
        default=3,
        ge=0,
        description="Days remaining at or below which a quote is urgent",
    )
    warning_threshold_days: int = Field(
        default=7,
        ge=0,
        description="Days remaining at or below which a quote shows a warning",
    )
    max_reference_attempts: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Reference number generation attempts before giving up",
    )
    policy_term_months: int = Field(
        default=12,
        ge=1,
        le=24,
        description="Length of a bound policy term",
    )
    activate_on_bind: bool = Field(
        default=False,
        description="Move a freshly bound policy straight to IN_FORCE when effective",
    )

    # Rating
    premium_ceiling_multiple: Decimal = Field(
        default=Decimal("100"),
        gt=0,
        description="Upper sanity bound on the final premium as a multiple of base",
    )
    max_total_discount_percent: Decimal | None = Field(
        default=Decimal("50"),
        gt=0,
        le=100,
        description=(
            "Cap on summed percentage discounts, 50% by industry convention "
            "(None disables it)"
        ),
    )
    flat_adjustments_in_percentage_base: bool = Field(
        default=False,
        description="Whether flat adjustments join the base that percentages apply to",
    )
    parallel_factor_resolution: bool = Field(
        default=False,
        description="Resolve the factor categories on a worker pool; the caller blocks on the join",
    )

    # Lookups
    lookup_cache_ttl_seconds: int = Field(
        default=86400,
        ge=0,
        description="Staleness tolerance for VIN, valuation and safety lookups",
    )

    @field_validator("api_env")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v not in allowed:
            raise ValueError(f"api_env must be one of {sorted(allowed)}")
        return v

    @field_validator("warning_threshold_days")
    @classmethod
    def validate_thresholds(cls, v: int, info: ValidationInfo) -> int:
        urgent = info.data.get("urgent_threshold_days")
        if urgent is not None and v < urgent:
            raise ValueError(
                "warning_threshold_days must not be below urgent_threshold_days"
            )
        return v

    @property
    @beartype
    def is_production(self) -> bool:
        return self.api_env == "production"


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
