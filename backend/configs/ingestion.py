"""
Ingestion pipeline configuration settings.

Retry policy for the record -> embedding -> vector steps.

Dependencies: pydantic, pydantic_settings
System role: Retry/backoff configuration for note ingestion
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Note ingestion retry policy."""

    model_config = SettingsConfigDict(
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    max_attempts: int = Field(default=3, description="Attempts per step before giving up", ge=1)
    backoff_initial_seconds: float = Field(default=0.5, description="First retry delay", ge=0)
    backoff_max_seconds: float = Field(default=8.0, description="Maximum retry delay", ge=0)
    backoff_jitter_seconds: float = Field(default=0.5, description="Random jitter added to delays", ge=0)
    max_text_length: int = Field(default=20_000, description="Longest accepted note text", ge=1)
