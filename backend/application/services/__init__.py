"""Service orchestrators."""

from .notes_service import NotesService
from .reconciler import IndexReconciler
from .session_service import SessionService

__all__ = [
    "IndexReconciler",
    "NotesService",
    "SessionService",
]
