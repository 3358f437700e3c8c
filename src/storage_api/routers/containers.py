from typing import List

from fastapi import (
    APIRouter,
    Depends,
    Path,
    Request,
    Response,
    status
)

from storage_api.adapter import StorageAdapter
from storage_api.dependencies import get_storage_adapter
from storage_api.schemas import (
    Container,
    CreateContainerRequest,
    ErrorResponse,
    FileMetadata,
    GetFilesQueryParams,
    UploadResult,
)
from storage_api.transfer import handle_download_request, handle_upload_request

router = APIRouter(
    prefix="/containers",
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": ErrorResponse,
            "description": "The storage provider failed.",
        },
    },
)

NEXT_PAGE_TOKEN_HEADER = "X-Next-Page-Token"

# Handlers are sync so FastAPI runs the blocking boto3 calls in its threadpool.


@router.get("/", response_model=List[Container])
def get_containers(adapter: StorageAdapter = Depends(get_storage_adapter)) -> List[Container]:
    """List all containers."""
    return adapter.get_containers()


@router.post("/", response_model=Container, status_code=status.HTTP_200_OK)
def create_container(
    body: CreateContainerRequest,
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> Container:
    """Create a container: a bucket, or a folder marker inside the fixed bucket."""
    return adapter.create_container(body.name)


@router.get(
    "/{container}",
    response_model=Container,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Container not found."}},
)
def get_container(
    container: str = Path(..., description="The container name"),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> Container:
    """Look up a container."""
    return adapter.get_container(container)


@router.delete("/{container}", status_code=status.HTTP_204_NO_CONTENT)
def destroy_container(
    container: str = Path(..., description="The container name"),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> Response:
    """
    Destroy a container and, in prefix mode, every file in it.

    NOTE: DELETE requests MUST NOT return a body in the response.
    """
    adapter.destroy_container(container)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{container}/files", response_model=List[FileMetadata], response_model_exclude_none=True)
def get_files(
    response: Response,
    container: str = Path(..., description="The container name"),
    query_params: GetFilesQueryParams = Depends(),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> List[FileMetadata]:
    """
    List the files of a container.

    Without query parameters every file is returned. With `page_size` or
    `page_token` a single page is returned and the token of the next page, if
    any, is sent in the `X-Next-Page-Token` header.
    """
    if not query_params.paginated:
        return adapter.get_files(container)

    files, next_page_token = adapter.get_files_page(
        container,
        page_size=query_params.page_size,
        page_token=query_params.page_token,
    )
    if next_page_token:
        response.headers[NEXT_PAGE_TOKEN_HEADER] = next_page_token
    return files


@router.get(
    "/{container}/files/{file:path}",
    response_model=FileMetadata,
    response_model_exclude_none=True,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "File not found."}},
)
def get_file(
    container: str = Path(..., description="The container name"),
    file: str = Path(..., description="The file name"),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> FileMetadata:
    """Retrieve file metadata."""
    return adapter.get_file(container, file)


@router.delete("/{container}/files/{file:path}", status_code=status.HTTP_204_NO_CONTENT)
def remove_file(
    container: str = Path(..., description="The container name"),
    file: str = Path(..., description="The file name"),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> Response:
    """Delete a file. Deleting a file that does not exist succeeds."""
    adapter.remove_file(container, file)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{container}/upload",
    response_model=UploadResult,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Not exactly one file part."}},
    openapi_extra={
        "requestBody": {
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "properties": {"file": {"type": "string", "format": "binary"}},
                    }
                }
            }
        }
    },
)
async def upload(
    request: Request,
    container: str = Path(..., description="The container name"),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> UploadResult:
    """Upload one file with a `multipart/form-data` request."""
    return await handle_upload_request(adapter, request, container)


@router.get(
    "/{container}/download/{file:path}",
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "File not found."},
        status.HTTP_200_OK: {
            "description": "The file content.",
            "content": {
                "application/octet-stream": {
                    "schema": {"type": "string", "format": "binary"},
                },
            },
        },
    },
)
def download(
    container: str = Path(..., description="The container name"),
    file: str = Path(..., description="The file name"),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> Response:
    """Download a file as an attachment."""
    return handle_download_request(adapter, container, file)
