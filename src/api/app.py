"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.logging import configure_logging, get_logger
from src.api.routes import exports_router
from src.api.middleware import RequestContextMiddleware
from src.export import ExportError
from src.models.schemas import SCHEMA_VERSION
from src.storage import FileStorageError

logger = get_logger(__name__)

APP_VERSION = "1.0.0"

# HTTP status per export error code; unknown codes are server errors
EXPORT_ERROR_STATUS = {
    "MISSING_RENDERING_CONTEXT": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "ASSET_LOAD_FAILED": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "ASSET_LOAD_TIMEOUT": status.HTTP_504_GATEWAY_TIMEOUT,
    "CANVAS_TOO_LARGE": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "schema_version": SCHEMA_VERSION,
        "error_code": error_code,
        "message": message,
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    logger.info("application_startup", message="Starting Room Planner Export API")

    yield

    logger.info("application_shutdown", message="Shutting down Room Planner Export API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Room Planner Export API",
        description=(
            "Exports a room planner drawing as a watermarked PNG, or as a PDF "
            "with the drawing and a table of room and image dimensions."
        ),
        version=APP_VERSION,
        lifespan=lifespan,
    )

    # Last added = first executed: CORS -> RequestContext
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    app.include_router(exports_router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle validation errors with structured response."""
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Invalid request data",
            {"errors": jsonable_errors(exc)},
        )

    @app.exception_handler(ExportError)
    async def export_exception_handler(
        request: Request,
        exc: ExportError,
    ) -> JSONResponse:
        """Map export failures to their documented status codes."""
        status_code = EXPORT_ERROR_STATUS.get(
            exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        logger.warning(
            "export_error",
            error_code=exc.error_code,
            error=str(exc),
            status_code=status_code,
        )
        return _error_response(status_code, exc.error_code, str(exc), exc.details)

    @app.exception_handler(FileStorageError)
    async def storage_exception_handler(
        request: Request,
        exc: FileStorageError,
    ) -> JSONResponse:
        """Handle failures writing persisted exports."""
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            exc.error_code,
            str(exc),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error(
            "unhandled_exception",
            error=str(exc),
            path=request.url.path,
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
        )

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": APP_VERSION}

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors reduced to JSON-safe fields."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
