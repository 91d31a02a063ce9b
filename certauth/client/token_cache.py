"""Single-slot client token cache with an expiry safety margin."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import timedelta

from certauth.client.types import AcquiredToken, CachedToken
from certauth.core.clock import Clock, utc_now
from certauth.core.logging import get_logger
from certauth.crypto.types import Certificate

AcquireFn = Callable[[Certificate], Awaitable[AcquiredToken]]

SAFETY_MARGIN = timedelta(seconds=30)


class TokenCache:
    """Hold the most recent token for the default identity.

    A cached token is served while ``now < expires_at - safety_margin``;
    otherwise the default identity is exchanged again. Calls that pass an
    override identity always acquire and never read or write the slot.
    Acquisition failures propagate unchanged and leave the slot empty.
    """

    def __init__(
        self,
        acquire: AcquireFn,
        default_identity: Certificate,
        safety_margin: timedelta = SAFETY_MARGIN,
        now: Clock | None = None,
    ) -> None:
        self._acquire = acquire
        self._default_identity = default_identity
        self._safety_margin = safety_margin
        self._now = now or utc_now
        self._cached: CachedToken | None = None
        self._lock = asyncio.Lock()
        self.logger = get_logger("client.token_cache")

    @property
    def cached(self) -> CachedToken | None:
        return self._cached

    def _fresh(self) -> CachedToken | None:
        cached = self._cached
        if cached is not None and self._now() < cached.expires_at - self._safety_margin:
            return cached
        return None

    async def get_token(self, override_identity: Certificate | None = None) -> str:
        """Return a usable access token, acquiring one if needed."""
        if override_identity is not None:
            acquired = await self._acquire(override_identity)
            return acquired.access_token

        fresh = self._fresh()
        if fresh is not None:
            return fresh.access_token

        async with self._lock:
            fresh = self._fresh()
            if fresh is not None:
                return fresh.access_token
            self.logger.info("Acquiring new access token")
            self._cached = None
            acquired = await self._acquire(self._default_identity)
            self._cached = CachedToken(
                access_token=acquired.access_token,
                expires_at=self._now() + timedelta(seconds=acquired.expires_in),
            )
            return acquired.access_token

    def invalidate(self) -> None:
        """Drop the cached token."""
        self._cached = None
