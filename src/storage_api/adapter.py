"""
Storage adapter mapping containers and files onto S3 buckets and keys.

Two layouts are supported, chosen by whether a fixed bucket is configured:

- prefix mode (`s3_bucket_name` set): every container is a key prefix
  `container/` inside the fixed bucket, marked by a zero-byte object at that
  key; files are stored at `container/file`.
- bucket mode (`s3_bucket_name` unset): every container is its own bucket and
  files are stored at `file`.

`StorageAdapter.resolve` is the only place that knows about the two layouts.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterator, List, NamedTuple, Optional, Tuple

from storage_api.errors import ProviderError
from storage_api.s3.client import create_s3_client
from storage_api.s3.delete_objects import delete_s3_bucket, delete_s3_object, delete_s3_objects
from storage_api.s3.read_objects import (
    fetch_common_prefixes,
    fetch_s3_object,
    fetch_s3_object_metadata,
    fetch_s3_objects_metadata,
    fetch_s3_objects_using_page_token,
    get_bucket_location,
    iter_s3_objects,
    list_buckets,
)
from storage_api.s3.upload_stream import S3UploadStream
from storage_api.s3.write_objects import create_s3_bucket, upload_s3_object
from storage_api.schemas import Container, FileMetadata
from storage_api.settings import Settings
from storage_api.utils.decorators import log_execution_time, raises_provider_error

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

DELIMITER = "/"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ObjectLocation(NamedTuple):
    """Where a container or file lives. `key` is a prefix when no file is given."""
    bucket: str
    key: str


class DownloadStream:
    """
    An object body exposed as an iterator of byte chunks.

    Wraps the provider's streaming body directly; chunks are pulled from the
    network as the iterator is consumed.
    """

    def __init__(self, body: Any, content_type: Optional[str], content_length: Optional[int], chunk_size: int):
        self._body = body
        self.content_type = content_type or DEFAULT_CONTENT_TYPE
        self.content_length = content_length
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self._body.iter_chunks(chunk_size=self.chunk_size):
                if chunk:
                    yield chunk
        finally:
            self.close()

    def close(self) -> None:
        self._body.close()


def normalize_etag(etag: Optional[str]) -> str:
    """Strip the surrounding quotes S3 puts around ETags."""
    return (etag or "").strip('"')


def normalize_last_modified(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class StorageAdapter:
    """Container/file operations over one S3 client."""

    def __init__(self, settings: Settings, s3_client: Optional["S3Client"] = None):
        self.settings = settings
        self.bucket_name = settings.s3_bucket_name
        self.s3_client = s3_client or create_s3_client(settings)
        logger.info(f"Storage adapter ready in {settings.storage_mode} mode"
                    + (f" (bucket: {self.bucket_name})" if self.bucket_name else ""))

    @property
    def is_prefix_mode(self) -> bool:
        return bool(self.bucket_name)

    # Key/bucket resolver

    def resolve(self, container: str, file: Optional[str] = None) -> ObjectLocation:
        """
        Map `(container, file)` onto `(bucket, key)`.

        Without `file`, the key is the container's prefix: `container/` in
        prefix mode, empty in bucket mode.
        """
        if self.is_prefix_mode:
            return ObjectLocation(self.bucket_name, f"{container}{DELIMITER}{file or ''}")
        return ObjectLocation(container, file or "")

    def relative_name(self, container: str, key: str) -> str:
        """Inverse of `resolve` for keys listed inside a container."""
        prefix = self.resolve(container).key
        if prefix and key.startswith(prefix):
            return key[len(prefix):]
        return key

    # Containers

    @log_execution_time
    @raises_provider_error
    def get_containers(self) -> List[Container]:
        if self.is_prefix_mode:
            prefixes = fetch_common_prefixes(
                self.bucket_name,
                self.s3_client,
                delimiter=DELIMITER,
                page_size=self.settings.list_page_size,
            )
            return [Container(name=prefix.strip(DELIMITER)) for prefix in prefixes]
        return [Container(name=name) for name in list_buckets(self.s3_client)]

    @log_execution_time
    @raises_provider_error
    def create_container(self, name: str) -> Container:
        location = self.resolve(name)
        if self.is_prefix_mode:
            upload_s3_object(location.bucket, location.key, b"", self.s3_client)
        else:
            create_s3_bucket(location.bucket, self.s3_client, region=self.settings.aws_region)
        logger.info(f"Created container {name}")
        return Container(name=name)

    @log_execution_time
    @raises_provider_error
    def get_container(self, name: str) -> Container:
        location = self.resolve(name)
        if self.is_prefix_mode:
            fetch_s3_object_metadata(location.bucket, location.key, self.s3_client)
        else:
            get_bucket_location(location.bucket, self.s3_client)
        return Container(name=name)

    @log_execution_time
    @raises_provider_error
    def destroy_container(self, name: str) -> None:
        location = self.resolve(name)
        # every key under the prefix (or in the bucket), nested ones and the marker included
        keys = (
            obj["Key"]
            for obj in iter_s3_objects(
                location.bucket,
                self.s3_client,
                prefix=location.key,
                page_size=self.settings.list_page_size,
            )
        )
        deleted = delete_s3_objects(location.bucket, keys, self.s3_client)
        if not self.is_prefix_mode:
            # the bucket must be empty before it can go
            delete_s3_bucket(location.bucket, self.s3_client)
        logger.info(f"Destroyed container {name} ({deleted} keys deleted)")

    # Files

    def _to_file_metadata(self, container: str, obj: Any) -> FileMetadata:
        return FileMetadata(
            name=self.relative_name(container, obj["Key"]),
            last_modified=normalize_last_modified(obj["LastModified"]),
            etag=normalize_etag(obj.get("ETag")),
            size=int(obj.get("Size", 0)),
        )

    def _to_file_list(self, container: str, objects: Any) -> List[FileMetadata]:
        files = (self._to_file_metadata(container, obj) for obj in objects)
        # the folder marker resolves to an empty name
        return [f for f in files if f.name != ""]

    @log_execution_time
    @raises_provider_error
    def get_files(self, container: str) -> List[FileMetadata]:
        """Every file directly inside `container`, across all list pages."""
        location = self.resolve(container)
        objects = iter_s3_objects(
            location.bucket,
            self.s3_client,
            prefix=location.key,
            delimiter=DELIMITER,
            page_size=self.settings.list_page_size,
        )
        return self._to_file_list(container, objects)

    @log_execution_time
    @raises_provider_error
    def get_files_page(
        self,
        container: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> Tuple[List[FileMetadata], Optional[str]]:
        """
        One page of files directly inside `container`.

        :return: The files of the page and the token of the next page, or None on the last page.
            The folder marker is filtered out, so a page may hold one entry fewer than `page_size`.
        """
        location = self.resolve(container)
        max_keys = page_size or self.settings.list_page_size
        if page_token:
            objects, next_page_token = fetch_s3_objects_using_page_token(
                location.bucket,
                page_token,
                self.s3_client,
                prefix=location.key,
                delimiter=DELIMITER,
                max_keys=max_keys,
            )
        else:
            objects, next_page_token = fetch_s3_objects_metadata(
                location.bucket,
                self.s3_client,
                prefix=location.key,
                delimiter=DELIMITER,
                max_keys=max_keys,
            )
        return self._to_file_list(container, objects), next_page_token

    @log_execution_time
    @raises_provider_error
    def get_file(self, container: str, file: str) -> FileMetadata:
        location = self.resolve(container, file)
        response = fetch_s3_object_metadata(location.bucket, location.key, self.s3_client)
        return FileMetadata(
            name=file,
            last_modified=normalize_last_modified(response["LastModified"]),
            etag=normalize_etag(response.get("ETag")),
            size=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType"),
            metadata=response.get("Metadata"),
        )

    @log_execution_time
    @raises_provider_error
    def remove_file(self, container: str, file: str) -> None:
        location = self.resolve(container, file)
        delete_s3_object(location.bucket, location.key, self.s3_client)
        logger.info(f"Removed {file} from container {container}")

    def upload_stream(self, container: str, file: str, content_type: Optional[str] = None) -> S3UploadStream:
        """
        Open a writable sink for `(container, file)`.

        Returns immediately; the provider is first contacted when a full part
        is buffered or the sink is closed.
        """
        location = self.resolve(container, file)
        return S3UploadStream(
            self.s3_client,
            location.bucket,
            location.key,
            part_size=self.settings.upload_part_size,
            content_type=content_type,
        )

    @log_execution_time
    @raises_provider_error
    def download_stream(self, container: str, file: str) -> DownloadStream:
        """Open the object for reading; its body is streamed, never buffered whole."""
        location = self.resolve(container, file)
        response = fetch_s3_object(location.bucket, location.key, self.s3_client)
        return DownloadStream(
            response["Body"],
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength"),
            chunk_size=self.settings.download_chunk_size,
        )


__all__ = [
    "DownloadStream",
    "ObjectLocation",
    "ProviderError",
    "StorageAdapter",
    "normalize_etag",
]
