"""Session management business logic."""

from .actor import SessionActor, SessionStore, derive_session_key

__all__ = ["SessionActor", "SessionStore", "derive_session_key"]
