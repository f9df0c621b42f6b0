"""Roster and sweep status endpoints."""

from fastapi import APIRouter

from netpoll.core.service import get_collector_service

router = APIRouter()


@router.get("/devices")
async def list_devices() -> dict:
    """Devices in the current roster snapshot."""
    devices = get_collector_service().snapshot.current
    return {
        "count": len(devices),
        "devices": [device.to_record() for device in devices],
    }


@router.get("/status")
async def collector_status() -> dict:
    """Roster size and sweep counters."""
    service = get_collector_service()
    return {
        "initialized": service.initialized,
        "roster": {
            "count": len(service.snapshot),
            "version": service.snapshot.version,
        },
        "sweeps": service.stats.model_dump(mode="json"),
    }
