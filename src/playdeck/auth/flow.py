# Authorization Flow Handler — login redirect and the /callback exchange.
# Created: 2026-10-19
#
# Browsers sometimes deliver the same callback twice. Spotify rejects a
# replayed code, so codes are remembered for a few minutes and a duplicate
# is treated as success without a second exchange.

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from playdeck.auth.credentials import DEFAULT_IDENTITY, CredentialStore
from playdeck.auth.expiring import ExpiringSet
from playdeck.auth.oauth import SpotifyOAuthClient
from playdeck.errors import AuthorizationDenied, MissingAuthorizationCode

logger = logging.getLogger(__name__)

USED_CODE_TTL = 300.0  # 5 minutes
STATE_TTL = 600.0  # 10 minutes


@dataclass
class CallbackResult:
    """Outcome of a successful (or duplicate) callback."""

    identity: str
    duplicate: bool = False


class AuthorizationFlow:
    """Drives the one-time OAuth exchange and seeds the credential store."""

    def __init__(
        self,
        oauth: SpotifyOAuthClient,
        store: CredentialStore,
        identity: str = DEFAULT_IDENTITY,
        used_codes: ExpiringSet | None = None,
        pending_states: ExpiringSet | None = None,
        strict_state: bool = False,
    ):
        self.oauth = oauth
        self.store = store
        self.identity = identity
        self.used_codes = used_codes or ExpiringSet(ttl=USED_CODE_TTL)
        self.pending_states = pending_states or ExpiringSet(ttl=STATE_TTL)
        # "{state}:{code}" for each exchange that passed the state check
        self.accepted_pairs = ExpiringSet(ttl=self.used_codes.ttl)
        self.strict_state = strict_state

    def build_login_redirect(self) -> str:
        """Return the Spotify consent URL carrying a fresh state nonce."""
        state = secrets.token_hex(12)
        self.pending_states.add(state)
        return self.oauth.get_auth_url(state)

    async def handle_callback(
        self,
        code: str | None = None,
        error: str | None = None,
        state: str | None = None,
    ) -> CallbackResult:
        """Process the query of a ``/callback`` hit.

        Returns a CallbackResult when the browser should be marked authorized
        and sent back to the frontend.

        Raises:
            AuthorizationDenied: Spotify reported ``error``, or the state is unknown
                while strict state checking is on. In strict mode a duplicate code
                must repeat the state of its original exchange.
            MissingAuthorizationCode: no ``code`` in the query.
            CodeExchangeFailed: Spotify rejected the code; nothing was stored.
        """
        logger.info(
            "Callback hit: code=%s error=%s state=%s",
            bool(code),
            error or None,
            f"{state[:6]}…" if state else None,
        )

        if error:
            raise AuthorizationDenied(error)
        if not code:
            raise MissingAuthorizationCode()

        pair = f"{state}:{code}"
        if not self.used_codes.add(code):
            if self.strict_state and pair not in self.accepted_pairs:
                logger.warning("Duplicate callback code with a different state; rejecting")
                raise AuthorizationDenied("invalid_state")
            logger.warning("Duplicate callback code; skipping exchange")
            return CallbackResult(identity=self.identity, duplicate=True)

        if not state or state not in self.pending_states:
            if self.strict_state:
                self.used_codes.discard(code)
                raise AuthorizationDenied("invalid_state")
            logger.warning("Callback state was not issued by this server")
        else:
            self.pending_states.discard(state)
            self.accepted_pairs.add(pair)

        try:
            grant = await self.oauth.exchange_code(code)
        except Exception:
            # Let a retry with the same code reach Spotify again
            self.used_codes.discard(code)
            self.accepted_pairs.discard(pair)
            raise

        record = grant.to_record(identity=self.identity)
        if not record.refresh_token:
            # Keep a previous refresh token if Spotify omitted one
            previous = self.store.load(self.identity)
            if previous is not None:
                record.refresh_token = previous.refresh_token

        self.store.save(record)
        logger.info("Stored Spotify credentials for %s", self.identity)
        return CallbackResult(identity=self.identity)
