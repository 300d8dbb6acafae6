"""Application settings and configuration."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

# Load .env file if present
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Model Configuration
    model_provider: str = Field(
        default="bedrock",
        pattern="^(bedrock|anthropic)$",
        description="Chat model backend used by the CLI (bedrock or anthropic)",
        validation_alias="MODEL_PROVIDER",
    )
    model_name: str = Field(
        default="anthropic.claude-3-7-sonnet-20250219-v1:0",
        description="Model to use (Bedrock model ID or Anthropic model name)",
        validation_alias="MODEL_NAME",
    )

    # Generation Settings
    base_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Temperature for the first attempt of each question",
        validation_alias="DEFAULT_TEMPERATURE",
    )
    temperature_step: float = Field(
        default=0.05,
        ge=0.0,
        le=0.5,
        description="Temperature added on each retry",
        validation_alias="TEMPERATURE_STEP",
    )
    max_tokens: int = Field(
        default=400,
        ge=16,
        le=4096,
        description="Token limit per generated question",
        validation_alias="MAX_TOKENS",
    )

    # Retry Settings
    max_attempts_per_question: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Generation attempts per question before falling back",
        validation_alias="MAX_ATTEMPTS",
    )
    batch_attempt_multiplier: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Batch attempt budget as a multiple of the question count",
        validation_alias="BATCH_ATTEMPT_MULTIPLIER",
    )
    attempt_timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        description="Hard timeout for a single generator call",
        validation_alias="ATTEMPT_TIMEOUT",
    )
    backoff_base_seconds: float = Field(
        default=0.1,
        ge=0.0,
        description="Delay after the first failed attempt; doubles each retry",
        validation_alias="BACKOFF_BASE",
    )
    backoff_max_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Cap on the delay between attempts",
        validation_alias="BACKOFF_MAX",
    )
    max_concurrency: int = Field(
        default=3,
        ge=1,
        le=32,
        description="Questions generated at the same time in a batch",
        validation_alias="MAX_CONCURRENCY",
    )

    # Quality Settings
    similarity_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Combined similarity above which a question is a near-duplicate",
        validation_alias="SIMILARITY_THRESHOLD",
    )
    min_similarity_length: int = Field(
        default=20,
        ge=1,
        description="Shorter cleaned texts are never compared",
        validation_alias="MIN_SIMILARITY_LENGTH",
    )
    word_overlap_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Word overlap ratio that accepts a free-text answer",
        validation_alias="WORD_OVERLAP_THRESHOLD",
    )
    concept_coverage_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Share of expected key concepts that accepts a free-text answer",
        validation_alias="CONCEPT_COVERAGE_THRESHOLD",
    )

    # Output Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level for the CLI",
        validation_alias="LOG_LEVEL",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "protected_namespaces": (),
    }

    @model_validator(mode="after")
    def check_backoff(self) -> "Settings":
        """Backoff cap must not be below the base delay."""
        if self.backoff_max_seconds < self.backoff_base_seconds:
            raise ValueError("backoff_max_seconds must be >= backoff_base_seconds")
        return self

    def batch_attempt_budget(self, count: int) -> int:
        """Total generator calls a batch of `count` questions may spend."""
        return self.batch_attempt_multiplier * count


# This is loaded the first time and then cached for further use
@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings object with loaded configuration
    """
    return Settings()
