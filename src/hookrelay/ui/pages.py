"""
HTML pages: the application shell and relay pages.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.templating import Jinja2Templates

from hookrelay.directory.models import DirectoryContext
from hookrelay.directory.resolver import DEFAULT_SUBMIT_PATH

logger = logging.getLogger(__name__)

# Setup paths
UI_DIR = Path(__file__).parent
TEMPLATES_DIR = UI_DIR / "templates"
STATIC_DIR = UI_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["pages"])


def render_shell(request: Request, directory: Optional[DirectoryContext] = None):
    """
    Render the application shell.

    With a directory context the page title names the directory and the
    submission form posts to the directory's route.
    """
    config = request.app.state.config
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": directory.title if directory else config.app_title,
            "app_title": config.app_title,
            "submit_path": directory.submit_path if directory else DEFAULT_SUBMIT_PATH,
            "directory": directory,
            "cooldown_seconds": int(config.throttle.cooldown_seconds),
        },
    )


def static_fallback(segment: str) -> Optional[Path]:
    """Return a top-level static file matching the segment, if any."""
    candidate = (STATIC_DIR / segment).resolve()
    if candidate.parent != STATIC_DIR.resolve() or not candidate.is_file():
        return None
    return candidate


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Main page with the submission and registration forms."""
    return render_shell(request)


@router.get("/{directory}")
async def directory_page(request: Request, directory: str):
    """
    Relay page for a registered directory.

    Unregistered or reserved segments fall through to static files and
    then to 404.
    """
    context = request.app.state.resolver.resolve(directory)
    if context is not None:
        return render_shell(request, context)

    fallback = static_fallback(directory)
    if fallback is not None:
        return FileResponse(fallback)

    raise HTTPException(status_code=404, detail="Not found")
