"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_notes_service,
    get_service_cache,
    get_session_service,
    get_session_token,
    get_settings_dependency,
    require_user,
)

__all__ = [
    "ServiceCache",
    "get_notes_service",
    "get_service_cache",
    "get_session_service",
    "get_session_token",
    "get_settings_dependency",
    "require_user",
]
