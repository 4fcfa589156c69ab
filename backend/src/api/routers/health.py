"""Health check endpoints."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies import get_note_service
from services.exceptions import PersistenceError
from services.note_service import NoteLifecycleService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    store: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    notes: NoteLifecycleService = Depends(get_note_service),
) -> HealthResponse:
    """Check application and key-value store health."""
    store_status = "healthy"
    try:
        notes.check_store()
    except PersistenceError:
        logger.exception("Key-value store health check failed")
        store_status = "unhealthy"

    return HealthResponse(
        status="healthy" if store_status == "healthy" else "degraded",
        store=store_status,
    )
