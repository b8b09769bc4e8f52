from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BADGE_TARGETS: dict[str, float] = {
    "success_rate_multiplier": 2.0,
    "solved_target": 100.0,
    "contribution_offset": 50.0,
    "contribution_divisor": 2.0,
    "contest_target": 50.0,
    "rating_target": 2500.0,
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode")
    environment: str = Field(
        default="development",
        description="Runtime environment (development|staging|production)",
    )
    cf_key: str | None = Field(
        default=None,
        description="Codeforces API key used to sign requests",
    )
    cf_secret: str | None = Field(
        default=None,
        description="Codeforces API secret used to sign requests",
    )
    cf_base_url: str = Field(
        default="https://codeforces.com/api",
        description="Base URL for the Codeforces API",
    )
    cf_min_interval_seconds: float = Field(
        default=2.0,
        description="Minimum spacing between two upstream calls",
        ge=0,
    )
    cf_request_timeout_seconds: float = Field(
        default=15.0,
        description="HTTP timeout applied to each upstream call",
        gt=0,
    )
    cf_response_cache_seconds: float = Field(
        default=10.0,
        description="How long successful results are reused for identical calls (0 disables)",
        ge=0,
    )
    submission_fetch_count: int = Field(
        default=10000,
        description="Number of submissions requested from user.status",
        ge=1,
    )
    upcoming_contest_limit: int = Field(
        default=20,
        description="Maximum number of upcoming contests returned",
        ge=1,
    )
    consistency_window_weeks: int = Field(
        default=26,
        description="Trailing weeks considered by the consistency summary",
        ge=1,
    )
    heatmap_window_days: int = Field(
        default=365,
        description="Trailing days rendered by the zero-filled heatmap",
        ge=1,
    )
    score_rating_weight: float = Field(
        default=0.9,
        description="Weight of the current rating in the custom profile score",
    )
    score_secondary_weight: float = Field(
        default=0.1,
        description="Weight of the secondary engagement signal in the custom profile score",
    )
    badge_targets: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_BADGE_TARGETS),
        description="Targets and multipliers used by the badge progress formulas",
    )
    gemini_api_key: str | None = Field(
        default=None,
        description="API key used for Gemini-powered profile insights",
    )
    insights_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model used for profile insights",
    )
    insights_timeout_seconds: float = Field(
        default=60.0,
        description="Upper bound on a single insights generation",
        gt=0,
    )

    @field_validator("badge_targets", mode="before")
    @classmethod
    def _merge_badge_targets(cls, value: Any) -> dict[str, float]:
        if value in (None, "", {}):
            return dict(DEFAULT_BADGE_TARGETS)
        if not isinstance(value, dict):
            raise ValueError("BADGE_TARGETS must be a JSON object of numeric values")
        merged = dict(DEFAULT_BADGE_TARGETS)
        for key, item in value.items():
            if key not in DEFAULT_BADGE_TARGETS:
                raise ValueError(f"Unknown badge target '{key}'")
            try:
                merged[key] = float(item)
            except (TypeError, ValueError) as exc:
                raise ValueError("BADGE_TARGETS entries must be numeric") from exc
            if key != "contribution_offset" and merged[key] <= 0:
                raise ValueError(f"Badge target '{key}' must be positive")
        return merged

    @field_validator("cf_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def has_cf_credentials(self) -> bool:
        return bool((self.cf_key or "").strip() and (self.cf_secret or "").strip())


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
