from fastapi import APIRouter, Depends

from storage_api.adapter import StorageAdapter
from storage_api.dependencies import get_storage_adapter
from storage_api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(adapter: StorageAdapter = Depends(get_storage_adapter)) -> HealthResponse:
    """
    Health check endpoint for monitoring API status.

    Reports how containers are mapped onto storage: `prefix` (folders inside
    one fixed bucket) or `bucket` (one bucket per container).
    """
    return HealthResponse(
        status="ok",
        storage_mode=adapter.settings.storage_mode,
        bucket=adapter.bucket_name,
    )
