# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-19

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request

from playdeck.auth.credentials import CredentialStore
from playdeck.auth.flow import AuthorizationFlow
from playdeck.auth.oauth import SpotifyOAuthClient
from playdeck.auth.tokens import TokenManager
from playdeck.config import Settings
from playdeck.proxy import SpotifyProxy
from playdeck.security.sessions import SESSION_COOKIE, Session, SessionGate, SessionRegistry


@dataclass
class Services:
    """Everything a request handler may need, built once per app."""

    settings: Settings
    store: CredentialStore
    oauth: SpotifyOAuthClient
    tokens: TokenManager
    flow: AuthorizationFlow
    sessions: SessionRegistry
    gate: SessionGate
    proxy: SpotifyProxy


def get_services(request: Request) -> Services:
    return request.app.state.services


def session_cookie(request: Request) -> str | None:
    return request.cookies.get(SESSION_COOKIE)


def current_session(
    request: Request, services: Services = Depends(get_services)
) -> Session | None:
    """The caller's live session, or None. Never raises."""
    return services.sessions.resolve(session_cookie(request))


def require_session(request: Request, services: Services = Depends(get_services)) -> Session:
    """Session gate as a dependency.

    Usage::

        router = APIRouter(dependencies=[Depends(require_session)])

    Raises NotAuthorized (403) when the browser holds no live session marker,
    regardless of what the credential store contains.
    """
    session = services.gate.authorize(session_cookie(request))
    request.state.session = session
    return session
