"""
Pages Router

HTML pages that need server-side handling. Everything else under the
public directory is served by the static mount in main.py.

- GET /login.html - always public
- GET /admin.html - requires an authenticated admin session, otherwise
  redirects to /login.html
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import FileResponse, RedirectResponse, Response

from gold2money.core.sessions import Session, get_current_session

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)

LOGIN_PAGE = "/login.html"


@router.get("/login.html")
async def login_page(request: Request) -> FileResponse:
    return FileResponse(request.app.state.settings.public_dir / "login.html")


@router.get("/admin.html")
async def admin_page(
    request: Request,
    session: Session = Depends(get_current_session),
) -> Response:
    """Serve the admin page to authenticated sessions only."""
    if not session.is_authenticated:
        logger.info("Unauthenticated admin page request, redirecting to login")
        return RedirectResponse(LOGIN_PAGE, status_code=status.HTTP_302_FOUND)

    return FileResponse(
        request.app.state.settings.protected_dir / "admin.html",
        headers={"Cache-Control": "no-store"},
    )
