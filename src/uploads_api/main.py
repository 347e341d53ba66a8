from textwrap import dedent
import logging
import time

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles

from uploads_api.adapters.storage import CloudinaryStorage, LocalDiskStorage
from uploads_api.config.settings import Settings
from uploads_api.errors import (
    LocalStorageError,
    handle_broad_exceptions,
    handle_pydantic_validation_errors,
    handle_request_validation_errors,
)
from uploads_api.routers.health import router as health_router
from uploads_api.routers.uploads import router as uploads_router
from uploads_api.services.pipeline import ListingOrchestrator, UploadOrchestrator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


class UploadsStaticFiles(StaticFiles):
    """Static files a frontend on another origin is allowed to embed."""

    def file_response(self, *args, **kwargs):
        response = super().file_response(*args, **kwargs)
        response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Uploads API",
        summary="Upload and list images",
        version="v1",
        description=dedent(
            """\
        Accepts JPEG, PNG and GIF uploads up to 5 MB.

        | Storage | When |
        | --- | --- |
        | Cloudinary | `CLOUDINARY_API_KEY`, `CLOUDINARY_API_SECRET` and `CLOUDINARY_CLOUD_NAME` are all set |
        | Local disk | otherwise, and as a fallback when a Cloudinary upload fails |
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
    )

    # must stay inside CORSMiddleware
    app.middleware("http")(handle_broad_exceptions)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Backend choice is fixed for the lifetime of the process
    remote_configured = settings.remote_storage_configured
    local_storage = LocalDiskStorage(settings.uploads_path, settings.public_base_url)
    remote_storage = CloudinaryStorage.from_settings(settings)
    try:
        local_storage.ensure_directory()
    except LocalStorageError as e:
        logger.error("Uploads directory unavailable at %s: %s", settings.uploads_path, e)

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.remote_configured = remote_configured
    app.state.upload_orchestrator = UploadOrchestrator(
        local=local_storage,
        remote=remote_storage,
        remote_configured=remote_configured,
        debug=settings.is_development,
    )
    app.state.listing_orchestrator = ListingOrchestrator(
        local=local_storage,
        remote=remote_storage,
        remote_configured=remote_configured,
        debug=settings.is_development,
    )
    logger.info(
        "Storage backend: %s (uploads dir %s)",
        "cloudinary" if remote_configured else "local",
        settings.uploads_path,
    )

    app.include_router(uploads_router, prefix="/api", tags=["uploads"])
    app.include_router(health_router, tags=["health"])
    app.mount(
        "/uploads",
        UploadsStaticFiles(directory=settings.uploads_path, check_dir=False),
        name="uploads",
    )

    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_request_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
