"""
Generation model configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Chat model configuration for answer generation
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Chat model configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    generation_model: str = Field(
        default="gemini-2.5-flash",
        description="Google Gemini chat model ID",
    )
    temperature: float = Field(default=0.0, description="Sampling temperature", ge=0.0)
    call_timeout_seconds: float = Field(
        default=8.0,
        description="Upper bound for a single generation call",
        gt=0,
    )
