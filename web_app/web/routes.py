"""Web interface routes implementation."""

import os
from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from shortlink.exceptions import NotFound
from ..api.routes import shorten_link
from ..api.schemas import ShortenRequest, ShortenResponse

router = APIRouter()
redirect_router = APIRouter()

template_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
templates = Jinja2Templates(directory=template_dir)


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def homepage(request: Request):
    """Serve the shorten form."""
    return templates.TemplateResponse(request, "index.html")


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def shorten_url_web(request: Request, body: ShortenRequest):
    """Form endpoint used by the index page."""
    return await shorten_link(request, body)


@router.get("/health", include_in_schema=False)
async def health_check_web(request: Request):
    """Health check endpoint (simple version for load balancers)."""
    service = request.app.state.service

    health = await service.health_check()

    if health["overall"]:
        return {"status": "healthy"}

    failing = [name for name in ("database", "cache") if not health[name]]
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "unhealthy",
            "description": f"Service unhealthy: {', '.join(failing)} unavailable",
        },
    )


@redirect_router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Permanently redirect a short code to its long URL."""
    service = request.app.state.service

    try:
        long_url = await service.resolve(short_code)
    except NotFound as e:
        if not _wants_html(request):
            raise
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"short_code": short_code, "description": e.description},
            status_code=status.HTTP_404_NOT_FOUND,
        )

    return RedirectResponse(url=long_url, status_code=status.HTTP_308_PERMANENT_REDIRECT)
