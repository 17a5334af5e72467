# Auth router — Spotify login redirect, OAuth callback, status, logout.
# Created: 2026-10-19

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from playdeck.api.deps import Services, current_session, get_services, session_cookie
from playdeck.api.schemas import AuthStatus, OkResponse
from playdeck.security.sessions import SESSION_COOKIE, Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _cookie_samesite(services: Services) -> str:
    settings = services.settings
    if settings.cookie_samesite == "none" and not settings.cookie_secure:
        # Browsers drop SameSite=None cookies without Secure
        return "lax"
    return settings.cookie_samesite


def _set_session_cookie(response: Response, services: Services, value: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=value,
        httponly=True,
        secure=services.settings.cookie_secure,
        samesite=_cookie_samesite(services),
        path="/",
        max_age=services.sessions.max_age,
    )


@router.get("/auth/login")
async def login(services: Services = Depends(get_services)):
    """Redirect the browser to the Spotify consent screen."""
    return RedirectResponse(services.flow.build_login_redirect(), status_code=302)


@router.get("/callback")
async def callback(
    request: Request,
    code: str = Query(""),
    error: str = Query(""),
    state: str = Query(""),
    services: Services = Depends(get_services),
):
    """Spotify redirects here after consent. Stores tokens and marks this browser."""
    result = await services.flow.handle_callback(
        code=code or None, error=error or None, state=state or None
    )

    response = RedirectResponse(services.settings.frontend_origin, status_code=302)
    existing = services.sessions.resolve(session_cookie(request))
    if existing is None or existing.identity != result.identity:
        _set_session_cookie(response, services, services.sessions.create(result.identity))
    return response


@router.get("/auth/status", response_model=AuthStatus)
async def auth_status(
    services: Services = Depends(get_services),
    session: Session | None = Depends(current_session),
):
    """Report whether this browser holds a session AND the server holds a refresh token."""
    if session is None:
        return AuthStatus(authed=False)
    record = services.store.load(session.identity)
    return AuthStatus(authed=bool(record and record.refresh_token))


@router.post("/auth/logout", response_model=OkResponse)
async def logout(
    services: Services = Depends(get_services),
    session: Session | None = Depends(current_session),
):
    """Forget the stored tokens and every browser session bound to them."""
    if session is not None:
        services.store.clear(session.identity)
        services.sessions.revoke_identity(session.identity)
        logger.info("Logged out %s", session.identity)

    response = JSONResponse(content=OkResponse().model_dump())
    response.delete_cookie(
        key=SESSION_COOKIE,
        path="/",
        secure=services.settings.cookie_secure,
        httponly=True,
        samesite=_cookie_samesite(services),
    )
    return response


# Misrouted frontend calls that picked up the /callback prefix
@router.get("/callback/api/{rest:path}", include_in_schema=False)
@router.get("/callback/auth/{rest:path}", include_in_schema=False)
async def strip_callback_prefix(request: Request, rest: str):
    path = request.url.path.removeprefix("/callback")
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return RedirectResponse(path, status_code=307)
