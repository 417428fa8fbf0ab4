"""Persist one login (cookies + timestamp) per identity and platform as JSON."""
from __future__ import annotations

import fcntl
import json
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

from autoapply.log import get_logger
from autoapply.models import AuthSession, utcnow

log = get_logger(__name__)

SESSION_TTL = timedelta(days=7)

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def sanitize_identity(identity: str) -> str:
    return _UNSAFE.sub("_", identity)


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class SessionStore:
    """File-backed session records.

    Reads fail soft: a missing, unreadable, corrupt or stale record is reported
    as ``None`` so the caller simply logs in again.
    """

    def __init__(
        self,
        directory: Path,
        *,
        ttl: timedelta = SESSION_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.directory = Path(directory)
        self.ttl = ttl
        self._clock = clock

    def path_for(self, identity: str, platform: str) -> Path:
        return self.directory / f"{sanitize_identity(identity)}_{platform}.json"

    def is_fresh(self, session: AuthSession) -> bool:
        # Exactly ``ttl`` old is still usable
        return self._clock() - session.last_login <= self.ttl

    def status(self, identity: str, platform: str) -> AuthSession | None:
        """Stored record regardless of age, or None."""
        path = self.path_for(identity, platform)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                _lock(f, exclusive=False)
                try:
                    data = json.load(f)
                finally:
                    _unlock(f)
            return AuthSession.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            log.warning("Unreadable session record %s: %s", path.name, exc)
            return None

    def load(self, identity: str, platform: str) -> AuthSession | None:
        session = self.status(identity, platform)
        if session is None:
            log.debug("No stored %s session for %s", platform, identity)
            return None
        if not session.is_valid:
            log.info("Stored %s session for %s is marked invalid", platform, identity)
            return None
        if not self.is_fresh(session):
            log.info("Stored %s session for %s has expired", platform, identity)
            return None
        return session

    def save(self, identity: str, platform: str, session: AuthSession) -> bool:
        path = self.path_for(identity, platform)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                _lock(f)
                try:
                    json.dump(session.to_dict(), f, indent=2)
                finally:
                    _unlock(f)
        except (OSError, TypeError, ValueError) as exc:
            log.error("Failed to save %s session for %s: %s", platform, identity, exc)
            return False
        log.info("Saved %s session for %s", platform, identity)
        return True

    def clear(self, identity: str, platform: str) -> None:
        try:
            self.path_for(identity, platform).unlink(missing_ok=True)
        except OSError as exc:
            log.warning("Could not remove %s session for %s: %s", platform, identity, exc)
