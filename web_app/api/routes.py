"""API routes implementation."""

import asyncio
import logging
from functools import partial

from fastapi import APIRouter, Request, status
from datetime import datetime, timezone

from .schemas import (
    ShortenRequest,
    ShortenResponse,
    LinkResponse,
    HealthResponse,
    ErrorResponse,
)

router = APIRouter()


def _log_abandoned(logger: logging.Logger, task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(f"Shorten failed after client disconnect: {exc!r}")
    else:
        logger.info(f"Shorten completed after client disconnect: {task.result().short_code}")


async def run_shielded(coro, logger: logging.Logger):
    """Await ``coro`` so that cancelling the caller does not cancel it.

    If the caller is cancelled the work keeps running and its outcome,
    including any exception, is logged when it finishes.
    """
    task = asyncio.ensure_future(coro)
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        task.add_done_callback(partial(_log_abandoned, logger))
        raise


async def shorten_link(request: Request, body: ShortenRequest) -> ShortenResponse:
    """Shared by POST /api/shorten and POST /shorten."""
    service = request.app.state.service

    # A client disconnect must not cancel the insert half-way
    link = await run_shielded(service.shorten(body.long_url), request.app.state.logger)

    return ShortenResponse.from_link(link)


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid long URL"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
        503: {"model": ErrorResponse, "description": "No unique short code could be allocated"},
    },
    summary="Create short URL",
    description="Create a shortened URL for a long http(s) URL.",
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL."""
    return await shorten_link(request, body)


@router.get(
    "/links/{short_code}",
    response_model=LinkResponse,
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed short code"},
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Get link information",
    description="Get the stored link for a short code.",
)
async def get_link_info(request: Request, short_code: str):
    """Get information about a shortened URL."""
    service = request.app.state.service

    link = await service.get_link(short_code)

    return LinkResponse.from_link(link)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service and its store are healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
