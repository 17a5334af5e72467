"""HMAC-signed session cookie values with TTL.

Cookie format: ``{session_id}:{expires_unix}:{hex_hmac}``

The signature covers ``{session_id}:{expires_unix}`` and is keyed with the
server's ``SESSION_SECRET``, so rotating the secret invalidates every cookie
in circulation.  A valid signature only proves the cookie was minted here;
the session id must still be live in the SessionRegistry.
"""

import hashlib
import hmac
import secrets
import time

__all__ = ["new_session_id", "create_session_token", "verify_session_token"]


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


def create_session_token(session_id: str, secret: str, ttl_hours: int = 168) -> str:
    """Sign *session_id* into a cookie value that expires after *ttl_hours*."""
    expires = int(time.time()) + ttl_hours * 3600
    payload = f"{session_id}:{expires}"
    return f"{payload}:{_sign(secret, payload)}"


def verify_session_token(token: str, secret: str) -> str | None:
    """Return the session id if *token* is authentic and unexpired, else None."""
    parts = token.rsplit(":", 2)
    if len(parts) != 3:
        return None

    session_id, expires_str, sig = parts
    if not session_id:
        return None
    try:
        expires = int(expires_str)
    except ValueError:
        return None

    if time.time() > expires:
        return None

    expected = _sign(secret, f"{session_id}:{expires_str}")
    if not hmac.compare_digest(sig, expected):
        return None
    return session_id


def _sign(key: str, message: str) -> str:
    return hmac.new(key.encode(), message.encode(), hashlib.sha256).hexdigest()
