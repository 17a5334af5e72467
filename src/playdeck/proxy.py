# API Proxy — forwards a logical request to the Spotify Web API with the user's bearer token.
# Created: 2026-10-19
#
# Pure pass-through: no retries, no caching. Upstream status and body are
# relayed as-is, including error payloads and 204s.

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from playdeck.auth.credentials import DEFAULT_IDENTITY
from playdeck.auth.tokens import TokenManager
from playdeck.errors import NotAuthenticated, UpstreamUnavailable

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE = "https://api.spotify.com/v1"

_MUTATING = frozenset({"POST", "PUT", "PATCH", "DELETE"})


@dataclass
class UpstreamResponse:
    """Status, body and content type exactly as Spotify sent them."""

    status_code: int
    content: bytes = b""
    content_type: str | None = None

    @property
    def is_empty(self) -> bool:
        """True for 204 No Content, e.g. nothing currently playing."""
        return self.status_code == 204

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


class SpotifyProxy:
    """Attach a valid access token to generic Web API calls."""

    def __init__(
        self,
        tokens: TokenManager,
        base_url: str = SPOTIFY_API_BASE,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15,
    ):
        self.tokens = tokens
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    async def forward(
        self,
        method: str,
        upstream_path: str,
        query: str | dict[str, str] | None = None,
        body: bytes | None = None,
        identity: str = DEFAULT_IDENTITY,
    ) -> UpstreamResponse:
        """Issue one upstream call and return its raw outcome.

        Args:
            method: HTTP method.
            upstream_path: Path under the versioned base, e.g. ``/me/player``.
            query: Raw query string or mapping, passed through unchanged.
            body: JSON body for mutating calls, passed through unchanged.

        Raises:
            NotAuthenticated: no credentials; upstream is not contacted.
            TokenRefreshFailed: the access token was stale and could not be refreshed.
            UpstreamUnavailable: Spotify could not be reached.
        """
        token = await self.tokens.get_valid_access_token(identity)
        if not token:
            raise NotAuthenticated()

        method = method.upper()
        headers = {"Authorization": f"Bearer {token}"}
        content = None
        if method in _MUTATING:
            content = body or b""
            if body:
                headers["Content-Type"] = "application/json"

        url = f"{self.base_url}/{upstream_path.lstrip('/')}"
        if isinstance(query, str):
            # Raw query strings go out exactly as received
            if query:
                url = f"{url}?{query}"
            query = None

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.request(
                    method,
                    url,
                    params=query or None,
                    content=content,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.error("Spotify API %s %s failed: %s", method, upstream_path, e)
            raise UpstreamUnavailable(detail=str(e)) from e

        if resp.status_code >= 400:
            logger.info("Spotify API %s %s -> %s", method, upstream_path, resp.status_code)

        if resp.status_code == 204:
            return UpstreamResponse(status_code=204)

        return UpstreamResponse(
            status_code=resp.status_code,
            content=resp.content,
            content_type=resp.headers.get("content-type"),
        )
