"""
Query API endpoints.

Routes: GET /query?text=...

Dependencies: backend.application.services.notes_service, backend.models
System role: Grounded question answering HTTP API
"""

from fastapi import APIRouter, Depends, Query

from backend.api.deps import get_notes_service, require_user
from backend.api.routers.router_utils import handle_service_errors
from backend.application.services.notes_service import NotesService
from backend.models.query import QueryResponse

router = APIRouter(prefix="/query", tags=["query"])


@router.get("", response_model=QueryResponse)
@handle_service_errors
async def answer_question(
    text: str | None = Query(default=None, description="Question; the default question is used when empty"),
    user_id: str = Depends(require_user),
    notes_service: NotesService = Depends(get_notes_service),
) -> QueryResponse:
    """
    Answer a question grounded in the caller's notes.

    Raises:
        HTTPException(400): Question too long
        HTTPException(502): Generation failed
        HTTPException(503): Embedding or index unavailable
    """
    return await notes_service.answer_question(text, owner_id=user_id)
