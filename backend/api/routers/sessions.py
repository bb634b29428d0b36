"""
Session API endpoints.

Routes:
- GET /sessions/me - Current user for the presented token
- POST /sessions/logout - Invalidate the presented token

Login and signup live outside this service and call
SessionService.start_session once credentials are verified.

Dependencies: backend.application.services.session_service, backend.models
System role: Session management HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from backend.api.deps import (
    get_session_service,
    get_session_token,
    get_settings_dependency,
    require_user,
)
from backend.api.routers.router_utils import handle_service_errors
from backend.application.services.session_service import SessionService
from backend.configs import Settings
from backend.models.session import CurrentUserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("/me", response_model=CurrentUserResponse)
async def current_user(user_id: str = Depends(require_user)) -> CurrentUserResponse:
    """
    Return the user bound to the presented session.

    Raises:
        HTTPException(401): No valid session
    """
    return CurrentUserResponse(user_id=user_id)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def logout(
    token: str | None = Depends(get_session_token),
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings_dependency),
) -> Response:
    """
    Invalidate the presented session and clear the cookie; idempotent.

    Raises:
        HTTPException(503): Session store unavailable
    """
    if token:
        await session_service.end_session(token)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.session.cookie_name)
    return response
