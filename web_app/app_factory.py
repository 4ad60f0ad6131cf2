"""FastAPI application factory."""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortlink.common.logging_config import get_logger
from shortlink.exceptions import (
    DuplicateCode,
    ExhaustedRetries,
    InvalidInput,
    NotFound,
    ShortLinkError,
    StorageError,
)
from .api import api_router
from .web import web_router, redirect_router
from .middleware.logging import LoggingMiddleware


ERROR_STATUS = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    ExhaustedRetries: status.HTTP_503_SERVICE_UNAVAILABLE,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    DuplicateCode: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: ShortLinkError) -> int:
    """HTTP status for a service error."""
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI, logger: logging.Logger) -> None:
    """Translate service errors into ``{"error", "description"}`` bodies."""

    async def handle_service_error(request: Request, exc: ShortLinkError):
        code = status_for(exc)
        if code < 500:
            return JSONResponse(status_code=code, content=exc.to_dict())

        # Server-side detail stays in the log
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.description}")
        return JSONResponse(
            status_code=code,
            content={"error": exc.kind, "description": exc.default_description},
        )

    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "Malformed request") if errors else "Malformed request"
        error = InvalidInput(f"Invalid request: {detail}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_dict())

    app.add_exception_handler(ShortLinkError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)


def create_app(
    config,
    service_instance=None,
    lifespan=None,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Configuration instance
        service_instance: Ready LinkService (tests); otherwise set by ``lifespan``
        lifespan: Optional lifespan context that builds the service at startup
        logger: Optional logger

    Returns:
        Configured FastAPI app
    """
    logger = logger or get_logger("shortlink.web")

    app = FastAPI(
        title="Url Shortener",
        description="Shorten long URLs and redirect short links",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.logger = logger
    app.state.service = service_instance

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware, logger=logger)

    register_error_handlers(app, logger)

    # Order matters: with an empty prefix the redirect route is a catch-all
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])
    app.include_router(redirect_router, prefix=config.path_prefix, tags=["Redirect"])

    return app
