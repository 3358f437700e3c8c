"""
HTTP upload/download handlers.

These move file bodies between an HTTP request/response and the storage
adapter without holding a whole object in memory.
"""

import logging
from typing import Any, Dict, List
from urllib.parse import quote

import anyio
from fastapi import HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from starlette.datastructures import UploadFile

from storage_api.adapter import DELIMITER, StorageAdapter, normalize_etag
from storage_api.errors import ProviderError, provider_error_response
from storage_api.schemas import UploadResult

logger = logging.getLogger(__name__)

# bytes read from the parsed form part per write to the upload sink
UPLOAD_READ_CHUNK_SIZE = 1024 * 1024


def content_disposition(file_name: str) -> str:
    """`attachment` disposition header value for `file_name`."""
    file_name = file_name.split("/")[-1]
    try:
        file_name.encode("latin-1")
    except UnicodeEncodeError:
        return f"attachment; filename*=UTF-8''{quote(file_name)}"
    escaped = file_name.replace("\\", "\\\\").replace('"', '\\"')
    return f'attachment; filename="{escaped}"'


async def handle_upload_request(adapter: StorageAdapter, request: Request, container: str) -> UploadResult:
    """
    Store the single file part of a multipart request in `container`.

    Exactly one file part is accepted; requests with none or several are
    rejected with 400 before anything is written to storage.
    """
    form = await request.form()
    try:
        file_parts: List[UploadFile] = [
            value for _, value in form.multi_items() if isinstance(value, UploadFile)
        ]
        if not file_parts:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No file part found in the request"
            )
        if len(file_parts) > 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Expected one file part, got {len(file_parts)}"
            )

        part = file_parts[0]
        if not part.filename:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="The file part has no filename"
            )
        # listings only show the first level of a container
        if DELIMITER in part.filename:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File names may not contain '{DELIMITER}'"
            )

        sink = adapter.upload_stream(container, part.filename, content_type=part.content_type)
        uploaded: List[Dict[str, Any]] = []
        sink.add_done_callback(uploaded.append)

        try:
            while chunk := await part.read(UPLOAD_READ_CHUNK_SIZE):
                await run_in_threadpool(sink.write, chunk)
        except BaseException:
            # also runs when the request task is cancelled
            with anyio.CancelScope(shield=True):
                await run_in_threadpool(sink.abort)
            raise
        await run_in_threadpool(sink.close)
    finally:
        await form.close()

    details = uploaded[0]
    logger.info(f"Uploaded {part.filename} to container {container} ({details['Size']} bytes)")
    return UploadResult(
        container=container,
        name=part.filename,
        bucket=details["Bucket"],
        key=details["Key"],
        etag=normalize_etag(details.get("ETag")),
        size=details["Size"],
    )


def handle_download_request(adapter: StorageAdapter, container: str, file: str) -> Response:
    """
    Stream `(container, file)` back as an attachment.

    Provider failures become a JSON error response carrying the provider's status code.
    """
    try:
        stream = adapter.download_stream(container, file)
    except ProviderError as e:
        logger.warning(f"Download of {file} from container {container} failed: {e.status_code} {e.message}")
        return provider_error_response(e)

    headers = {"Content-Disposition": content_disposition(file)}
    if stream.content_length is not None:
        headers["Content-Length"] = str(stream.content_length)
    return StreamingResponse(
        content=stream,
        media_type=stream.content_type,
        headers=headers,
    )
