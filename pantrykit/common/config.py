"""
Application configuration using Pydantic Settings
Reads from environment variables and .env file
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Inventory core settings from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Remote inventory API (GraphQL endpoint lives at {api_url}/graphql)
    api_url: str = Field(default="http://localhost:4000", alias="PANTRY_API_URL")
    transport_backend: str = Field(default="http", alias="TRANSPORT_BACKEND")

    # Local persistent key-value store (auth token, selected house, kitchen cache)
    local_store_url: str = Field(
        default="sqlite+aiosqlite:///./pantry_local.db", alias="LOCAL_STORE_URL"
    )

    # Application
    environment: str = Field(default="production", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    # Category classification
    classifier_ai_backend: str = Field(default="remote", alias="CLASSIFIER_AI_BACKEND")
    classifier_ai_threshold: float = Field(default=0.8, alias="CLASSIFIER_AI_THRESHOLD")
    classifier_cache_size: int = Field(default=512, alias="CLASSIFIER_CACHE_SIZE")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    anthropic_model: str = Field(default="claude-sonnet-4-5", alias="ANTHROPIC_MODEL")

    # Inventory defaults sent with createInventoryItem
    default_unit: str = Field(default="pieces", alias="DEFAULT_UNIT")
    default_location: str = Field(default="PANTRY", alias="DEFAULT_LOCATION")
    default_threshold: int = Field(default=2, alias="DEFAULT_THRESHOLD")

    # Monitoring
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")

    @property
    def graphql_url(self) -> str:
        """Full GraphQL endpoint URL"""
        return f"{self.api_url.rstrip('/')}/graphql"

    @validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @validator("environment")
    def validate_environment(cls, v):
        """Validate environment"""
        valid_envs = ["development", "staging", "production", "test"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of {valid_envs}")
        return v.lower()

    @validator("transport_backend")
    def validate_transport_backend(cls, v):
        """Validate transport backend"""
        valid_backends = ["http", "memory"]
        if v.lower() not in valid_backends:
            raise ValueError(f"TRANSPORT_BACKEND must be one of {valid_backends}")
        return v.lower()

    @validator("classifier_ai_backend")
    def validate_classifier_ai_backend(cls, v):
        """Validate AI categorization backend"""
        valid_backends = ["remote", "anthropic", "none"]
        if v.lower() not in valid_backends:
            raise ValueError(f"CLASSIFIER_AI_BACKEND must be one of {valid_backends}")
        return v.lower()

    @validator("classifier_ai_threshold")
    def validate_classifier_ai_threshold(cls, v):
        """Threshold is a confidence, so it must sit in [0, 1]"""
        if not 0 <= v <= 1:
            raise ValueError(f"CLASSIFIER_AI_THRESHOLD must be 0-1, got {v}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
