"""FastAPI application factory and uvicorn runner.

``create_app()`` wires the credential store, OAuth client, token manager,
authorization flow, session registry and proxy into ``app.state.services``,
then adds CORS for the configured frontend origin, response headers, a
single error handler for the PlaydeckError taxonomy, and the routers.
"""

from __future__ import annotations

import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from playdeck import __version__
from playdeck.api import mount_routers
from playdeck.api.deps import Services
from playdeck.api.schemas import ErrorResponse
from playdeck.auth.credentials import CredentialStore, FileCredentialStore
from playdeck.auth.expiring import ExpiringSet
from playdeck.auth.flow import AuthorizationFlow
from playdeck.auth.oauth import SpotifyOAuthClient
from playdeck.auth.tokens import TokenManager
from playdeck.config import Settings, get_oauth_dir, get_settings
from playdeck.errors import ConfigError, PlaydeckError
from playdeck.proxy import SpotifyProxy
from playdeck.security.sessions import SessionGate, SessionRegistry

logger = logging.getLogger(__name__)

_NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def build_services(
    settings: Settings,
    store: CredentialStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Services:
    """Construct the service graph. *transport* replaces the network in tests."""
    store = store or FileCredentialStore(get_oauth_dir(settings))
    oauth = SpotifyOAuthClient(
        client_id=settings.spotify_client_id,
        client_secret=settings.spotify_client_secret,
        redirect_uri=settings.spotify_redirect_uri,
        transport=transport,
    )
    tokens = TokenManager(store, oauth, margin=settings.token_refresh_margin_seconds)
    flow = AuthorizationFlow(
        oauth,
        store,
        used_codes=ExpiringSet(ttl=settings.used_code_ttl_seconds),
        strict_state=settings.strict_oauth_state,
    )
    sessions = SessionRegistry(settings.session_secret, ttl_hours=settings.session_ttl_hours)
    return Services(
        settings=settings,
        store=store,
        oauth=oauth,
        tokens=tokens,
        flow=flow,
        sessions=sessions,
        gate=SessionGate(sessions),
        proxy=SpotifyProxy(tokens, transport=transport),
    )


def create_app(
    settings: Settings | None = None,
    store: CredentialStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the playdeck FastAPI application.

    Raises:
        ConfigError: client credentials or the session secret are unset.
    """
    settings = settings or get_settings()
    missing = settings.missing_required()
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")

    app = FastAPI(
        title="playdeck",
        description="Spotify dashboard backend: OAuth token lifecycle and Web API proxy.",
        version=__version__,
    )
    app.state.services = build_services(settings, store=store, transport=transport)

    # --- CORS -----------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # --- Response headers -------------------------------------------------
    @app.middleware("http")
    async def response_headers_middleware(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.path.startswith("/api/"):
            response.headers.update(_NO_CACHE_HEADERS)
        return response

    # --- Errors -----------------------------------------------------------
    @app.exception_handler(PlaydeckError)
    async def playdeck_error_handler(request: Request, exc: PlaydeckError):
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.detail
            )
        return JSONResponse(
            status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump()
        )

    mount_routers(app)

    logger.info(
        "playdeck ready: frontend=%s redirect_uri=%s",
        settings.frontend_origin,
        settings.spotify_redirect_uri,
    )
    return app


def run_server(host: str | None = None, port: int | None = None, dev: bool = False) -> None:
    """Start the server with uvicorn."""
    import uvicorn

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "playdeck.server:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        app = create_app(settings)
        uvicorn.run(app, host=host, port=port, log_config=None)
