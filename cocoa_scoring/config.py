"""Application configuration with comprehensive validation."""
from typing import Optional, Literal
from functools import lru_cache
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with production-grade validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Cocoa Contest Scoring Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # Snowflake (optional so the scoring core imports without credentials)
    SNOWFLAKE_ACCOUNT: Optional[str] = None
    SNOWFLAKE_USER: Optional[str] = None
    SNOWFLAKE_PASSWORD: Optional[SecretStr] = None
    SNOWFLAKE_DATABASE: Optional[str] = None
    SNOWFLAKE_SCHEMA: Optional[str] = None
    SNOWFLAKE_WAREHOUSE: Optional[str] = None
    SNOWFLAKE_ROLE: Optional[str] = None

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL_RESULTS: int = Field(default=300, ge=0)  # 5 minutes

    # Outlier filtering (global switch)
    OUTLIER_FILTERING_ENABLED: bool = True

    # Outlier filtering: initial results (sensory evaluations)
    INITIAL_OUTLIER_ENABLED: bool = True
    INITIAL_OUTLIER_SIGMA_THRESHOLD: float = Field(default=2.0, gt=0, le=5.0)
    INITIAL_OUTLIER_MIN_EVALUATIONS: int = Field(default=3, ge=1, le=50)
    INITIAL_OUTLIER_STRATEGY: Literal["exclude", "reduce_weight"] = "reduce_weight"
    INITIAL_OUTLIER_WEIGHT_REDUCTION_FACTOR: float = Field(default=0.5, ge=0.0, le=1.0)

    # Outlier filtering: final results (final evaluations)
    FINAL_OUTLIER_ENABLED: bool = True
    FINAL_OUTLIER_SIGMA_THRESHOLD: float = Field(default=2.0, gt=0, le=5.0)
    FINAL_OUTLIER_MIN_EVALUATIONS: int = Field(default=3, ge=1, le=50)
    FINAL_OUTLIER_STRATEGY: Literal["exclude", "reduce_weight"] = "reduce_weight"
    FINAL_OUTLIER_WEIGHT_REDUCTION_FACTOR: float = Field(default=0.5, ge=0.0, le=1.0)

    # Ranking
    TOP_N_DEFAULT: int = Field(default=10, ge=1, le=100)
    TOP_N_MAX: int = Field(default=100, ge=1, le=1000)

    @model_validator(mode="after")
    def validate_top_n(self):
        """Ensure the published default never exceeds the maximum page."""
        if self.TOP_N_DEFAULT > self.TOP_N_MAX:
            raise ValueError(
                f"TOP_N_DEFAULT ({self.TOP_N_DEFAULT}) must be <= TOP_N_MAX ({self.TOP_N_MAX})"
            )
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production has required settings."""
        if self.APP_ENV == "production":
            if self.DEBUG:
                raise ValueError("DEBUG must be False in production")
            if not self.SNOWFLAKE_ACCOUNT or self.SNOWFLAKE_PASSWORD is None:
                raise ValueError("Snowflake credentials required in production")
        return self

    @property
    def snowflake_configured(self) -> bool:
        return bool(self.SNOWFLAKE_ACCOUNT and self.SNOWFLAKE_USER and self.SNOWFLAKE_PASSWORD)


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
