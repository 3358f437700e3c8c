from fastapi import Request

from storage_api.adapter import StorageAdapter


def get_storage_adapter(request: Request) -> StorageAdapter:
    """The adapter owned by the running app."""
    return request.app.state.storage_adapter
