from fastapi import APIRouter, Depends

from storage import get_storage
from storage.base import Storage

router = APIRouter()

SERVICE_NAME = "appshare-api"


@router.get("/health")
async def health_check(storage: Storage = Depends(get_storage)):
    """Liveness check that also reports which artifact storage backend is active."""
    return {"status": "healthy", "service": SERVICE_NAME, "storage": storage.provider_type}
