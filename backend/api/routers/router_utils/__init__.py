"""
Router utility functions.

Contains helpers extracted from router endpoints to keep them clean.
"""

from backend.api.routers.router_utils.error_handling import handle_service_errors

__all__ = [
    "handle_service_errors",
]
