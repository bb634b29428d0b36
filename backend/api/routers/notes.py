"""
Note API endpoints.

Routes:
- POST /notes - Ingest a note (optional Idempotency-Key header)
- GET /notes - List the caller's notes
- GET /notes/{id} - Read one note
- DELETE /notes/{id} - Delete a note and its vector
- POST /notes/{id}/reindex - Rebuild a note's vector

Dependencies: backend.application.services.notes_service, backend.models
System role: Note management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Response, status

from backend.api.deps import get_notes_service, require_user
from backend.api.routers.router_utils import handle_service_errors
from backend.application.services.notes_service import NotesService
from backend.models.note import CreateNoteRequest, NoteCreatedResponse, NoteResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("", response_model=NoteCreatedResponse, status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_note(
    request: CreateNoteRequest,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    user_id: str = Depends(require_user),
    notes_service: NotesService = Depends(get_notes_service),
) -> NoteCreatedResponse:
    """
    Ingest a note for the authenticated user.

    Re-sending the same Idempotency-Key returns the note created by the first
    request instead of creating a duplicate.

    Raises:
        HTTPException(400): Empty text or reused key with different text
        HTTPException(500): Note creation failed
        HTTPException(503): Relational store unavailable
    """
    result = await notes_service.ingest_note(
        request.text,
        owner_id=user_id,
        idempotency_key=idempotency_key,
    )
    return NoteCreatedResponse(note_id=result.note_id)


@router.get("", response_model=list[NoteResponse])
@handle_service_errors
async def list_notes(
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(require_user),
    notes_service: NotesService = Depends(get_notes_service),
) -> list[NoteResponse]:
    """
    List the caller's notes, newest first.

    Notes whose indexing failed are included with their ingestion_status.
    """
    notes = await notes_service.list_notes(user_id, limit=limit, offset=offset)
    return [NoteResponse.model_validate(note.model_dump()) for note in notes]


@router.get("/{note_id}", response_model=NoteResponse)
@handle_service_errors
async def get_note(
    note_id: UUID,
    user_id: str = Depends(require_user),
    notes_service: NotesService = Depends(get_notes_service),
) -> NoteResponse:
    """
    Read one of the caller's notes.

    Raises:
        HTTPException(404): Note not found
    """
    note = await notes_service.get_note(note_id, user_id)
    return NoteResponse.model_validate(note.model_dump())


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_note(
    note_id: UUID,
    user_id: str = Depends(require_user),
    notes_service: NotesService = Depends(get_notes_service),
) -> Response:
    """
    Delete a note and its vector entry.

    Raises:
        HTTPException(404): Note not found
        HTTPException(503): A store was unavailable; retrying completes the delete
    """
    await notes_service.delete_note(note_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{note_id}/reindex", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def reindex_note(
    note_id: UUID,
    user_id: str = Depends(require_user),
    notes_service: NotesService = Depends(get_notes_service),
) -> Response:
    """
    Recompute a note's embedding and store its vector again.

    Repairs notes left unsearchable by a failed ingestion.

    Raises:
        HTTPException(404): Note not found
        HTTPException(500): Indexing gave up; the note stays FAILED
    """
    await notes_service.reindex_note(note_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
