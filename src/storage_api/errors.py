"""Error type raised by the storage adapter, and the FastAPI handlers that render errors."""

import logging
from typing import Any, Dict, Optional, Union

import pydantic
from botocore.exceptions import ClientError
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

DEFAULT_STATUS_CODE = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProviderError(Exception):
    """
    A failure reported by (or while talking to) the storage provider.

    Only the message and the HTTP status code of the original error are kept.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code or DEFAULT_STATUS_CODE

    @classmethod
    def from_exception(cls, err: Optional[BaseException]) -> "ProviderError":
        """Build a `ProviderError` from any provider-layer exception."""
        if isinstance(err, ProviderError):
            return err

        if isinstance(err, ClientError):
            response = err.response or {}
            error = response.get("Error") or {}
            status_code = (response.get("ResponseMetadata") or {}).get("HTTPStatusCode")
            message = error.get("Message") or error.get("Code") or type(err).__name__
            return cls(message=message, status_code=status_code)

        status_code = getattr(err, "status_code", None)
        if err is None:
            message = "Unknown Error"
        else:
            message = str(err) or type(err).__name__
        return cls(message=message, status_code=status_code if isinstance(status_code, int) else None)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "statusCode": self.status_code}

    def __repr__(self) -> str:
        return f"ProviderError(status_code={self.status_code}, message={self.message!r})"


def provider_error_response(exc: ProviderError) -> JSONResponse:
    """Render a `ProviderError` as a JSON response carrying its status code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_provider_errors(request: Request, exc: ProviderError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} failed: {exc.status_code} {exc.message}")
    return provider_error_response(exc)


async def handle_http_exceptions(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render `HTTPException`s with the same body shape as provider errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail), "statusCode": exc.status_code},
        headers=getattr(exc, "headers", None),
    )


async def handle_pydantic_validation_errors(
    request: Request, exc: Union[pydantic.ValidationError, RequestValidationError]
) -> JSONResponse:
    """Return a 422 listing what failed validation."""
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "message": "Validation error",
            "statusCode": status.HTTP_422_UNPROCESSABLE_ENTITY,
            "detail": [{"msg": error["msg"], "loc": list(error["loc"])} for error in errors],
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as e:  # pylint: disable=broad-except
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(e)}")
        return JSONResponse(
            status_code=DEFAULT_STATUS_CODE,
            content={"message": "Internal server error", "statusCode": DEFAULT_STATUS_CODE},
        )
