"""
Session configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Session TTL and token configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Login session configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        case_sensitive=False,
        extra="ignore",
    )

    ttl_seconds: int = Field(default=24 * 60 * 60, description="Session lifetime", ge=1)
    cookie_name: str = Field(default="session", description="Cookie carrying the session token")
    token_bytes: int = Field(default=32, description="Random bytes per session token", ge=16)
