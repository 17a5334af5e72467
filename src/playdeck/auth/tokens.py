# Token Lifecycle Manager — hands out a valid Spotify access token, refreshing lazily.
# Created: 2026-10-19

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import replace

from playdeck.auth.credentials import DEFAULT_IDENTITY, CredentialStore
from playdeck.auth.oauth import SpotifyOAuthClient

logger = logging.getLogger(__name__)

# Refresh when the access token has less than this many seconds left.
MIN_REFRESH_MARGIN = 5.0


class TokenManager:
    """Get a valid access token for an identity, refreshing if expired.

    The fresh path is a local read of the credential store. Concurrent
    callers that find the token stale share one refresh: the first takes the
    per-identity lock, the rest re-check the store once it is released.
    """

    def __init__(
        self,
        store: CredentialStore,
        oauth: SpotifyOAuthClient,
        margin: float = MIN_REFRESH_MARGIN,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.oauth = oauth
        self.margin = max(margin, MIN_REFRESH_MARGIN)
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_valid_access_token(self, identity: str = DEFAULT_IDENTITY) -> str | None:
        """Return an access token valid for at least ``margin`` seconds.

        Returns None if the identity has never authorized (or logged out).

        Raises:
            TokenRefreshFailed: the refresh was rejected. Stored credentials are
                left in place so a transient failure doesn't force a re-login.
        """
        record = self.store.load(identity)
        if record is None or not record.refresh_token:
            return None

        if record.is_fresh(self.margin, now=self._clock()):
            return record.access_token

        lock = self._locks.setdefault(identity, asyncio.Lock())
        async with lock:
            # Another request may have refreshed while we waited
            record = self.store.load(identity)
            if record is None or not record.refresh_token:
                return None
            if record.is_fresh(self.margin, now=self._clock()):
                return record.access_token

            grant = await self.oauth.refresh(record.refresh_token)

            # Logout or a new login may have landed while the refresh was in flight
            current = self.store.load(identity)
            if current is None or current.refresh_token != record.refresh_token:
                logger.info("Discarding refreshed token for %s: credentials changed", identity)
                if current is None or not current.refresh_token:
                    return None
                return current.access_token

            updated = replace(
                current,
                access_token=grant.access_token,
                token_type=grant.token_type,
                expires_at=self._clock() + grant.expires_in,
                refresh_token=grant.refresh_token or record.refresh_token,
            )
            self.store.save(updated)
            logger.info("Refreshed Spotify access token for %s", identity)
            return updated.access_token
