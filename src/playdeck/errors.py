# Error taxonomy shared by the auth flow, token manager, gate and proxy.
# Created: 2026-10-19
#
# Each error carries the HTTP status it surfaces as; server.py installs one
# handler that renders {"error": message}.

from __future__ import annotations


class PlaydeckError(Exception):
    """Base error with an HTTP status and a browser-safe message."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        self.message = message or self.default_message
        # Server-side context (upstream payloads etc.), never sent to the browser
        self.detail = detail
        super().__init__(self.message)


class ConfigError(PlaydeckError):
    """Required configuration is missing or invalid."""

    default_message = "Invalid configuration"


class NotAuthenticated(PlaydeckError):
    """No usable credential record for the identity."""

    status_code = 401
    default_message = "Not authenticated"


class NotAuthorized(PlaydeckError):
    """The calling browser has no valid session marker."""

    status_code = 403
    default_message = "Not authorized"


class AuthorizationDenied(PlaydeckError):
    """Spotify returned ``error`` on the callback, or the state was rejected."""

    status_code = 400

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Spotify auth error: {reason}")


class MissingAuthorizationCode(PlaydeckError):
    status_code = 400
    default_message = "Missing Spotify authorization code"


class CodeExchangeFailed(PlaydeckError):
    """The token endpoint rejected an authorization code."""

    status_code = 502
    default_message = "Spotify authentication failed"


class TokenRefreshFailed(PlaydeckError):
    """The token endpoint rejected a refresh. Stored credentials are kept."""

    status_code = 502
    default_message = "Token refresh failed"


class UpstreamUnavailable(PlaydeckError):
    """The Web API could not be reached at all (no status to relay)."""

    status_code = 502
    default_message = "Spotify API error"
