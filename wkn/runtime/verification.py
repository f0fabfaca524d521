from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

from wkn.core import settings

logger = logging.getLogger(__name__)


@dataclass
class PendingCode:
    code: str
    expires_at: float


class VerificationStore:
    """
    In-memory email verification state, keyed by email.

    Holds the pending code sent to an address and, once the code has been
    confirmed, a verified flag. Both expire after `ttl_seconds`. Nothing is
    persisted; a restart forgets everything.
    """

    def __init__(self, ttl_seconds: int | None = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.VERIFICATION_CODE_TTL_SECONDS
        self._clock = clock
        self._codes: Dict[str, PendingCode] = {}
        self._verified: Dict[str, float] = {}

    def put_code(self, email: str, code: str) -> None:
        self._codes[email] = PendingCode(code=code, expires_at=self._clock() + self.ttl_seconds)

    def discard_code(self, email: str) -> None:
        self._codes.pop(email, None)

    def confirm(self, email: str, code: str) -> bool:
        """Consume a matching live code and mark the email verified."""
        pending = self._codes.get(email)
        if pending is None:
            return False
        if pending.expires_at <= self._clock():
            del self._codes[email]
            return False
        if pending.code != code:
            return False
        del self._codes[email]
        self._verified[email] = self._clock() + self.ttl_seconds
        return True

    def is_verified(self, email: str) -> bool:
        expires_at = self._verified.get(email)
        if expires_at is None:
            return False
        if expires_at <= self._clock():
            del self._verified[email]
            return False
        return True

    def clear_verified(self, email: str) -> None:
        self._verified.pop(email, None)

    def purge_expired(self) -> int:
        now = self._clock()
        stale_codes = [email for email, p in self._codes.items() if p.expires_at <= now]
        stale_flags = [email for email, exp in self._verified.items() if exp <= now]
        for email in stale_codes:
            del self._codes[email]
        for email in stale_flags:
            del self._verified[email]
        return len(stale_codes) + len(stale_flags)

    def clear(self) -> None:
        self._codes.clear()
        self._verified.clear()


# process-wide store shared by all requests
verification_store = VerificationStore()


def get_verification_store() -> VerificationStore:
    return verification_store


async def purge_expired_codes(store: VerificationStore, interval_seconds: float = 60) -> None:
    """Background task: drop expired codes and verified flags every interval."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = store.purge_expired()
        if removed:
            logger.debug("purged %d expired verification entries", removed)
