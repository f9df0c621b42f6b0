"""Liveness and readiness endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from netpoll.core.service import get_collector_service

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Process is up."""
    return {"status": "healthy"}


@router.get("/ready")
async def ready():
    """Ready once the initial roster has been resolved."""
    service = get_collector_service()
    if not service.initialized:
        return JSONResponse(status_code=503, content={"status": "starting"})
    return {"status": "ready"}
