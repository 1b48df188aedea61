"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.models.evaluation import ScoringPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "MockPrep"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Databricks AI Gateway (text-generation oracle)
    databricks_host: str = ""
    databricks_token: str = ""
    oracle_endpoint: str = "/serving-endpoints/databricks-gemini-flash/invocations"
    oracle_timeout_seconds: float = Field(default=10.0, gt=0)
    oracle_max_tokens: int = 1024

    # Langfuse tracing (disabled unless both keys are set)
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    # Persistence
    storage_backend: str = "memory"  # Options: memory, file
    storage_dir: Path = Path(".data")

    # History retention
    session_history_limit: int = 50
    evaluation_history_limit: int = 100
    history_retention_days: int = 30

    # Question allocation
    questions_per_minute: float = 0.5
    role_question_share: float = 0.6
    company_question_limit: int = 3

    # Scoring policy (time-management thresholds are tunable, not fixed rules)
    low_variance_threshold: float = 100.0
    consistency_bonus: float = 5.0
    slow_response_seconds: float = 300.0
    slow_response_penalty: float = 5.0
    rushed_response_seconds: float = 60.0
    rushed_response_penalty: float = 10.0

    # CORS - stored as comma-separated string in env
    # Uses validation_alias to read from CORS_ORIGINS env var
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def oracle_enabled(self) -> bool:
        """The oracle is only reachable with a host and a token."""
        return bool(self.databricks_host and self.databricks_token)

    @property
    def langfuse_enabled(self) -> bool:
        return bool(self.langfuse_public_key and self.langfuse_secret_key)

    def scoring_policy(self) -> ScoringPolicy:
        """Build the aggregator's scoring policy from settings."""
        return ScoringPolicy(
            low_variance_threshold=self.low_variance_threshold,
            consistency_bonus=self.consistency_bonus,
            slow_response_seconds=self.slow_response_seconds,
            slow_response_penalty=self.slow_response_penalty,
            rushed_response_seconds=self.rushed_response_seconds,
            rushed_response_penalty=self.rushed_response_penalty,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
