####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storage_api.settings import MAX_LIST_PAGE_SIZE

CONTAINER_NAME_PATTERN = r"^[^/]+$"


class Container(BaseModel):
    """A bucket, or a simulated folder inside the fixed bucket."""
    name: str = Field(
        description="The container name.",
        json_schema_extra={"example": "docs"},
    )


class CreateContainerRequest(BaseModel):
    """Request body for `POST /v1/containers/`."""
    name: str = Field(
        min_length=1,
        pattern=CONTAINER_NAME_PATTERN,
        description="The container name. Must not contain `/`.",
        json_schema_extra={"example": "docs"},
    )


class FileMetadata(BaseModel):
    """Metadata of a file, as reported by the storage provider."""
    name: str = Field(
        description="The file name relative to its container.",
        json_schema_extra={"example": "readme.txt"},
    )
    last_modified: datetime = Field(description="The last modified date of the file.")
    etag: str = Field(description="The provider's content fingerprint, without quotes.")
    size: int = Field(description="The size of the file in bytes.")
    content_type: Optional[str] = Field(default=None, description="The MIME type of the file.")
    metadata: Optional[Dict[str, str]] = Field(default=None, description="User-defined object metadata.")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "readme.txt",
                "lastModified": "2024-01-01T00:00:00Z",
                "etag": "5d41402abc4b2a76b9719d911017c592",
                "size": 512,
            }
        },
    )


class GetFilesQueryParams(BaseModel):
    """Query parameters for `GET /v1/containers/{container}/files`."""
    page_size: Optional[int] = Field(
        None,
        ge=1,
        le=MAX_LIST_PAGE_SIZE,
        description="Return a single page of at most this many files.",
    )
    page_token: Optional[str] = Field(
        None,
        description="The token for the next page, from the `X-Next-Page-Token` header.",
    )

    @property
    def paginated(self) -> bool:
        return self.page_size is not None or self.page_token is not None


class UploadResult(BaseModel):
    """Response model for `POST /v1/containers/{container}/upload`."""
    container: str
    name: str
    bucket: str
    key: str
    etag: str
    size: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "container": "docs",
                "name": "readme.txt",
                "bucket": "my-bucket",
                "key": "docs/readme.txt",
                "etag": "5d41402abc4b2a76b9719d911017c592",
                "size": 512,
            }
        }
    )


class ErrorResponse(BaseModel):
    """Body of every error response."""
    message: str
    status_code: int = Field(alias="statusCode")


class HealthResponse(BaseModel):
    status: str
    storage_mode: str
    bucket: Optional[str] = None
