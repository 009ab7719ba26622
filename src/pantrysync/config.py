"""Engine configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PANTRYSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Quantity arithmetic
    quantity_epsilon: float = 1e-9  # tolerance for float comparisons

    # Name matching
    min_partial_match_length: int = Field(default=2, ge=1)

    # Stock availability: legacy carve-out treating two count units as equal
    legacy_count_interchange: bool = True
    interchangeable_count_units: list[str] = Field(default_factory=lambda: ["個", "本"])

    # Defaults applied when turning shopping-list items into purchases
    default_purchase_unit: str = "個"
    default_best_before_days: int = Field(default=7, ge=0)
    default_storage_location: str = "冷蔵庫"

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "text"  # "json" forces the JSON formatter

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
