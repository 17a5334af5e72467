# Spotify OAuth client — authorize URL, code exchange, token refresh.
# Created: 2026-10-19
#
# Talks to accounts.spotify.com only. Persistence is left to the callers
# (AuthorizationFlow for exchanges, TokenManager for refreshes).

from __future__ import annotations

import logging
import time
import urllib.parse
from dataclasses import dataclass

import httpx

from playdeck.auth.credentials import DEFAULT_IDENTITY, CredentialRecord
from playdeck.errors import CodeExchangeFailed, PlaydeckError, TokenRefreshFailed

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"

# Everything the proxy routes need. Missing scopes show up as upstream 403s.
SCOPES: list[str] = [
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "user-read-private",
    "user-read-email",
    "user-top-read",
    "user-read-recently-played",
    "user-library-modify",
]


@dataclass
class TokenGrant:
    """Parsed token endpoint response."""

    access_token: str
    expires_in: float
    refresh_token: str | None = None
    token_type: str = "Bearer"
    scope: str = ""

    def to_record(
        self, identity: str = DEFAULT_IDENTITY, now: float | None = None
    ) -> CredentialRecord:
        issued = time.time() if now is None else now
        return CredentialRecord(
            identity=identity,
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            token_type=self.token_type,
            expires_at=issued + self.expires_in,
            scopes=self.scope.split() if self.scope else [],
        )


class SpotifyOAuthClient:
    """Authorization code flow against the Spotify accounts service.

    Client credentials go out as HTTP Basic auth on the token endpoint and
    never appear in anything sent to the browser.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: list[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15,
    ):
        self.client_id = client_id
        self._client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes or SCOPES)
        self._transport = transport
        self._timeout = timeout

    def get_auth_url(self, state: str) -> str:
        """Build the consent URL the browser is redirected to.

        Args:
            state: Anti-forgery nonce echoed back on the callback.
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "scope": " ".join(self.scopes),
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        return f"{AUTHORIZE_URL}?{urllib.parse.urlencode(params)}"

    async def exchange_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for access + refresh tokens.

        Raises:
            CodeExchangeFailed: the token endpoint rejected the code or was unreachable.
        """
        grant = await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
            CodeExchangeFailed,
        )
        logger.info("Exchanged authorization code for Spotify tokens")
        return grant

    async def refresh(self, refresh_token: str) -> TokenGrant:
        """Mint a new access token from *refresh_token*.

        Raises:
            TokenRefreshFailed: the token endpoint rejected the refresh or was unreachable.
        """
        return await self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            TokenRefreshFailed,
        )

    async def _token_request(
        self, form: dict[str, str], error_cls: type[PlaydeckError]
    ) -> TokenGrant:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    TOKEN_URL,
                    data=form,
                    auth=(self.client_id, self._client_secret),
                )
        except httpx.HTTPError as e:
            logger.warning("Spotify token endpoint unreachable (%s): %s", form["grant_type"], e)
            raise error_cls(detail=str(e)) from e

        if not resp.is_success:
            logger.warning(
                "Spotify token endpoint returned %s for %s: %s",
                resp.status_code,
                form["grant_type"],
                resp.text[:200],
            )
            raise error_cls(detail=resp.text)

        try:
            data = resp.json()
            return TokenGrant(
                access_token=data["access_token"],
                expires_in=float(data.get("expires_in", 3600)),
                refresh_token=data.get("refresh_token"),
                token_type=data.get("token_type", "Bearer"),
                scope=data.get("scope", ""),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Malformed token response for %s: %s", form["grant_type"], e)
            raise error_cls(detail=f"malformed token response: {e}") from e
