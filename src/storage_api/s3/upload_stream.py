"""Writable sink that streams bytes into an S3 object with multipart upload."""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from storage_api.settings import MIN_UPLOAD_PART_SIZE
from storage_api.utils.decorators import raises_provider_error

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

UploadDetails = Dict[str, Any]
UploadCallback = Callable[[UploadDetails], None]


class S3UploadStream:
    """
    File-like, write-only handle bound to one `(bucket, key)`.

    Bytes are buffered until a full part is available and then sent with
    `upload_part`; the multipart upload is only created when the first part is
    flushed. Bodies smaller than one part are sent with a single `put_object`
    on `close()`.

    Done callbacks receive the final object details and run at most once,
    after the provider has acknowledged the whole object. A failed or aborted
    upload never runs them.

    Usage:
        with adapter.upload_stream("docs", "readme.txt") as sink:
            sink.add_done_callback(print)
            sink.write(b"hello")
    """

    def __init__(
        self,
        s3_client: "S3Client",
        bucket_name: str,
        object_key: str,
        part_size: int = MIN_UPLOAD_PART_SIZE,
        content_type: Optional[str] = None,
    ):
        if part_size < MIN_UPLOAD_PART_SIZE:
            raise ValueError(f"part_size must be at least {MIN_UPLOAD_PART_SIZE} bytes")
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.object_key = object_key
        self.part_size = part_size
        self.content_type = content_type or "application/octet-stream"

        self._buffer = bytearray()
        self._parts: List[Dict[str, Any]] = []
        self._upload_id: Optional[str] = None
        self._size = 0
        self._callbacks: List[UploadCallback] = []
        self._details: Optional[UploadDetails] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def details(self) -> Optional[UploadDetails]:
        """Final object details, once the upload has completed."""
        return self._details

    def add_done_callback(self, callback: UploadCallback) -> None:
        """Run `callback(details)` when the upload completes (immediately if it already has)."""
        if self._details is not None:
            callback(self._details)
        else:
            self._callbacks.append(callback)

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ValueError("I/O operation on closed upload stream")
        return self._write(data)

    @raises_provider_error
    def _write(self, data: bytes) -> int:
        self._buffer.extend(data)
        self._size += len(data)
        while len(self._buffer) >= self.part_size:
            part = bytes(self._buffer[:self.part_size])
            del self._buffer[:self.part_size]
            self._upload_part(part)
        return len(data)

    @raises_provider_error
    def close(self) -> None:
        """Flush the remaining bytes and complete the upload."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._upload_id is None:
                details = self._put_whole_object()
            else:
                details = self._complete_multipart_upload()
        except Exception:
            self._abort_multipart_upload()
            raise
        finally:
            self._buffer = bytearray()

        self._details = details
        logger.info(f"Uploaded s3://{self.bucket_name}/{self.object_key} ({self._size} bytes)")
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(details)

    def abort(self) -> None:
        """Discard the upload; nothing is stored and no callback runs."""
        if self._closed:
            return
        self._closed = True
        self._buffer = bytearray()
        self._callbacks = []
        self._abort_multipart_upload()

    def __enter__(self) -> "S3UploadStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def _upload_part(self, data: bytes) -> None:
        if self._upload_id is None:
            response = self.s3_client.create_multipart_upload(
                Bucket=self.bucket_name,
                Key=self.object_key,
                ContentType=self.content_type,
            )
            self._upload_id = response["UploadId"]
            logger.debug(f"Started multipart upload {self._upload_id} for {self.object_key}")

        part_number = len(self._parts) + 1
        try:
            response = self.s3_client.upload_part(
                Bucket=self.bucket_name,
                Key=self.object_key,
                UploadId=self._upload_id,
                PartNumber=part_number,
                Body=data,
            )
        except Exception:
            self._closed = True
            self._abort_multipart_upload()
            raise
        self._parts.append({"ETag": response["ETag"], "PartNumber": part_number})
        logger.debug(f"Uploaded part {part_number} of {self.object_key} ({len(data)} bytes)")

    def _put_whole_object(self) -> UploadDetails:
        response = self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=self.object_key,
            Body=bytes(self._buffer),
            ContentType=self.content_type,
        )
        return {
            "Bucket": self.bucket_name,
            "Key": self.object_key,
            "ETag": response.get("ETag"),
            "Size": self._size,
        }

    def _complete_multipart_upload(self) -> UploadDetails:
        if self._buffer:
            self._upload_part(bytes(self._buffer))
        response = self.s3_client.complete_multipart_upload(
            Bucket=self.bucket_name,
            Key=self.object_key,
            UploadId=self._upload_id,
            MultipartUpload={"Parts": self._parts},
        )
        details: UploadDetails = {
            "Bucket": self.bucket_name,
            "Key": self.object_key,
            "ETag": response.get("ETag"),
            "Size": self._size,
        }
        if response.get("Location"):
            details["Location"] = response["Location"]
        return details

    def _abort_multipart_upload(self) -> None:
        if self._upload_id is None:
            return
        upload_id, self._upload_id = self._upload_id, None
        try:
            self.s3_client.abort_multipart_upload(
                Bucket=self.bucket_name,
                Key=self.object_key,
                UploadId=upload_id,
            )
            logger.info(f"Aborted multipart upload {upload_id} for {self.object_key}")
        except Exception as e:
            logger.error(f"Error aborting multipart upload {upload_id}: {str(e)}")
