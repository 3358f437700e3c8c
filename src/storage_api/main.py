from textwrap import dedent
import logging
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from storage_api.adapter import StorageAdapter
from storage_api.errors import (
    ProviderError,
    handle_broad_exceptions,
    handle_http_exceptions,
    handle_provider_errors,
    handle_pydantic_validation_errors,
)
from storage_api.routers.containers import router as containers_router
from storage_api.routers.health import router as health_router
from storage_api.settings import Settings

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, storage_adapter: Optional[StorageAdapter] = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()

    app = FastAPI(
        title="Storage API",
        summary="Containers and files on S3-compatible object storage",
        version="v1",
        description=dedent(
            """\
        Containers map either to buckets or to folders inside one fixed bucket,
        depending on whether `S3_BUCKET_NAME` is set.

        | Helpful Links | Notes |
        | --- | --- |
        | [FastAPI Documentation](https://fastapi.tiangolo.com/) | |
        | [boto3 S3 reference](https://boto3.amazonaws.com/v1/documentation/api/latest/reference/services/s3.html) | |
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Next-Page-Token"],
    )
    app.state.settings = settings
    app.state.storage_adapter = storage_adapter or StorageAdapter(settings)

    app.include_router(containers_router, prefix="/v1", tags=["containers"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=ProviderError,
        handler=handle_provider_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=StarletteHTTPException,
        handler=handle_http_exceptions,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    logger.info(f"{settings.app_name} created in {settings.storage_mode} mode")
    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    logging.basicConfig(level=settings.log_level)
    app = create_app(settings)
    uvicorn.run(app, host="0.0.0.0", port=8000)
