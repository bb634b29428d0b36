"""
Health check API endpoint.

Routes: GET /health

Liveness only: answers without a session and without touching the
database, the vector index or the model providers.

Dependencies: fastapi, backend.configs
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend.api.deps.dependencies import get_settings_dependency
from backend.configs import Settings


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    environment: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings_dependency)) -> HealthResponse:
    return HealthResponse(status="healthy", environment=settings.environment)
