"""
Key rotation and retry around calls to the generation backend.

Every backend call goes through KeyRotator.with_key_rotation. A cached
client is reused across calls until its key gets rate limited; then the
key is put on cooldown, the client is dropped and the call is retried
with the next available key.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

from exceptions import AllCredentialsExhaustedError, RetryBudgetExhaustedError
from key_pool import DEFAULT_COOLDOWN_SECONDS, KeyPool, mask_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_MARKERS = (
    "429",
    "too many requests",
    "resource_exhausted",
    "quota_exceeded",
    "rate_limit_exceeded",
)


def is_rate_limit_error(exc: BaseException) -> bool:
    """Check if an exception signals rate limit or quota exhaustion."""
    message = str(exc).lower()
    if any(marker in message for marker in RATE_LIMIT_MARKERS):
        return True

    # openai uses .status_code, google api_core uses .code
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if value is None:
            continue
        if value == 429:
            return True
        if isinstance(value, str) and value.strip().lower() in RATE_LIMIT_MARKERS:
            return True
    return False


class KeyRotator:
    """
    Owns the key pool and the single cached client bound to one of its keys.

    Pool and cache updates are serialized with a lock that is never held
    across the backend call or the backoff sleep. A failed attempt only
    drops the cached client if it is still bound to the key that failed,
    so a concurrent request that already rotated to a fresh key keeps it.
    """

    def __init__(
        self,
        pool: KeyPool,
        client_factory: Callable[[str], Any],
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.pool = pool
        self._client_factory = client_factory
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.cooldown_seconds = cooldown_seconds
        self._sleep = sleep
        self._bound: Optional[Tuple[str, Any]] = None
        self._lock = asyncio.Lock()

    @property
    def current_key(self) -> Optional[str]:
        return self._bound[0] if self._bound else None

    async def _get_client(self) -> Optional[Tuple[str, Any]]:
        async with self._lock:
            if self._bound is None:
                key = self.pool.acquire()
                if key is None:
                    return None
                self._bound = (key, self._client_factory(key))
            return self._bound

    async def _rotate_away(self, key: str) -> None:
        async with self._lock:
            # A concurrent request may already have put this key on cooldown
            if self.pool.is_available(key):
                logger.warning(f"Rate limit hit for key {mask_key(key)}, rotating to next key")
                self.pool.mark_rate_limited(key, self.cooldown_seconds)
            else:
                logger.info(f"Key {mask_key(key)} is already cooling down")
            if self._bound is not None and self._bound[0] == key:
                self._bound = None

    def invalidate(self) -> None:
        """Drop the cached client."""
        self._bound = None

    async def with_key_rotation(self, work: Callable[[Any], Awaitable[T]]) -> T:
        """
        Run `work` with a client, rotating keys on rate limit errors.

        The call ends at whichever runs out first: the retry budget or the
        keys. With the default cooldown, a pool smaller than the budget
        raises AllCredentialsExhaustedError once every key has failed,
        before all `max_retries` attempts are made.

        Args:
            work: Coroutine function that takes a ready client and returns a result

        Returns:
            Whatever `work` returns on the first successful attempt

        Raises:
            AllCredentialsExhaustedError: No key is available when a client is needed
            RetryBudgetExhaustedError: Every attempt was rate limited
            Exception: Any non rate limit error raised by `work`, unchanged
        """
        retries_left = self.max_retries
        attempts = 0
        last_error: Optional[Exception] = None

        while True:
            bound = await self._get_client()
            if bound is None:
                logger.warning("No API key available, all keys are rate limited")
                if last_error is not None:
                    raise AllCredentialsExhaustedError() from last_error
                raise AllCredentialsExhaustedError()

            key, client = bound
            attempts += 1
            try:
                return await work(client)
            except Exception as e:
                if not is_rate_limit_error(e):
                    raise
                last_error = e

            await self._rotate_away(key)
            retries_left -= 1
            if retries_left <= 0:
                logger.error(f"Retry budget exhausted after {attempts} attempts")
                raise RetryBudgetExhaustedError(last_error, attempts) from last_error

            await self._sleep(self.backoff_seconds)
