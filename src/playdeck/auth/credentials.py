# Credential Store — durable holder of Spotify access/refresh tokens per identity.
# Created: 2026-10-19
#
# File-backed by default ({oauth dir}/{identity}.json, chmod 0600, atomic replace).
# The in-memory variant backs tests and ephemeral deployments.

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Single-tenant deployment: every browser session binds to this identity.
DEFAULT_IDENTITY = "spotify"


@dataclass
class CredentialRecord:
    """Spotify token set for one authenticated identity."""

    access_token: str
    refresh_token: str | None = None
    expires_at: float = 0.0  # Unix timestamp
    identity: str = DEFAULT_IDENTITY
    token_type: str = "Bearer"
    scopes: list[str] = field(default_factory=list)

    def is_fresh(self, margin: float, now: float | None = None) -> bool:
        """True if the access token outlives *now* by more than *margin* seconds."""
        now = time.time() if now is None else now
        return bool(self.access_token) and self.expires_at > now + margin


class CredentialStore(Protocol):
    """Identity → credential record mapping."""

    def load(self, identity: str = DEFAULT_IDENTITY) -> CredentialRecord | None: ...

    def save(self, record: CredentialRecord) -> None: ...

    def clear(self, identity: str = DEFAULT_IDENTITY) -> bool: ...


class MemoryCredentialStore:
    """Process-local store. Records are copied in and out so callers can't alias them."""

    def __init__(self) -> None:
        self._records: dict[str, dict] = {}

    def load(self, identity: str = DEFAULT_IDENTITY) -> CredentialRecord | None:
        data = self._records.get(identity)
        if data is None:
            return None
        return CredentialRecord(**json.loads(json.dumps(data)))

    def save(self, record: CredentialRecord) -> None:
        self._records[record.identity] = asdict(record)

    def clear(self, identity: str = DEFAULT_IDENTITY) -> bool:
        return self._records.pop(identity, None) is not None


class FileCredentialStore:
    """File-based store at ``{directory}/{identity}.json``.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace``, so a reader never sees a half-written record.
    Unreadable or malformed files load as ``None``.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, identity: str) -> Path:
        return self.directory / f"{identity}.json"

    def load(self, identity: str = DEFAULT_IDENTITY) -> CredentialRecord | None:
        """Load the record for *identity*. Returns None if missing or corrupt."""
        path = self._path(identity)
        if not path.exists():
            return None

        try:
            data = json.loads(path.read_text())
            return CredentialRecord(**data)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Ignoring unreadable credential record %s: %s", path, e)
            return None

    def save(self, record: CredentialRecord) -> None:
        """Atomically overwrite the record for ``record.identity``."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(record.identity)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.directory, prefix=f".{record.identity}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as fh:
                json.dump(asdict(record), fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp_name, stat.S_IRUSR | stat.S_IWUSR)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved credential record for %s", record.identity)

    def clear(self, identity: str = DEFAULT_IDENTITY) -> bool:
        """Delete the record for *identity*. Returns True if one existed."""
        path = self._path(identity)
        if path.exists():
            path.unlink()
            logger.info("Cleared credential record for %s", identity)
            return True
        return False
