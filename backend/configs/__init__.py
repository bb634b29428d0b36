"""
Configuration management module.

Settings are grouped per concern (database, vector index, model clients,
ingestion retries, sessions) and aggregated by Settings. Every field maps
to an environment variable with a concern-specific prefix.
"""

from backend.configs.ingestion import IngestionSettings
from backend.configs.session import SessionSettings
from backend.configs.settings import Settings, get_settings

__all__ = ["IngestionSettings", "SessionSettings", "Settings", "get_settings"]
