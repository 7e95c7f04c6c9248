from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._utils import resolve_env_file_path

SimilarityMetric = Literal["token_overlap", "token_set_ratio", "ratio"]
TieBreak = Literal["frequency", "recency"]
AIBackend = Literal["ollama", "openai"]


class Settings(BaseSettings):
    """Classification service settings.

    Service settings use the FINCORE_ML_ prefix. Database credentials are
    shared with the dashboard backend and read from the plain POSTGRES_*
    variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINCORE_ML_",
        env_file=resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    postgres_host: str = Field(default="localhost", validation_alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, validation_alias="POSTGRES_PORT")
    postgres_user: str = Field(default="postgres", validation_alias="POSTGRES_USER")
    postgres_password: str = Field(default="", validation_alias="POSTGRES_PASSWORD")
    postgres_db: str = Field(default="fincore", validation_alias="POSTGRES_DB")
    database_echo: bool = False

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Decision thresholds
    rule_similarity_threshold: float = Field(default=0.80, ge=0.0, le=1.0)
    pattern_similarity_threshold: float = Field(default=0.80, ge=0.0, le=1.0)
    auto_validate_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    suggest_confidence: float = Field(default=0.60, ge=0.0, le=1.0)

    # Matching
    similarity_metric: SimilarityMetric = "token_overlap"
    rule_amount_tolerance: float = Field(default=0.01, ge=0.0)
    rule_amount_boost: float = Field(default=0.10, ge=0.0, le=1.0)

    # Learned patterns
    pattern_tie_break: TieBreak = "frequency"
    pattern_tie_epsilon: float = Field(default=0.02, ge=0.0)
    pattern_max_candidates: int = Field(default=200, ge=1)
    pattern_history_limit: int = Field(default=5000, ge=1)
    pattern_min_occurrences: int = Field(default=3, ge=1)
    pattern_confidence_cap: float = Field(default=0.95, ge=0.0, le=1.0)
    pattern_cache_ttl_seconds: float = Field(default=300.0, ge=0.0)
    pattern_cache_max_entries: int = Field(default=256, ge=1)

    # Transfer detection
    transfer_phrases_enabled: bool = True

    # AI fallback
    ai_enabled: bool = False
    ai_backend: AIBackend = "ollama"
    ai_base_url: str = "http://localhost:11434"
    ai_model: str = "qwen2.5:3b"
    ai_api_key: str | None = None
    ai_timeout_seconds: float = Field(default=20.0, gt=0.0)
    ai_max_concurrency: int = Field(default=4, ge=1)
    ai_confidence_cap: float = Field(default=0.75, ge=0.0, le=1.0)
    ai_temperature: float = Field(default=0.1, ge=0.0, le=2.0)

    # Logging
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_threshold_order(self) -> "Settings":
        if self.suggest_confidence > self.auto_validate_confidence:
            raise ValueError(
                "suggest_confidence must not exceed auto_validate_confidence"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
