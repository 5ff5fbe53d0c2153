"""
API key pool with per-key rate limit cooldowns.

Keys are handed out first-fit in the order they were configured, so the
first key carries the load until the backend rate limits it.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 60


def mask_key(key: str) -> str:
    """Short prefix of a key that is safe to log."""
    return f"{key[:6]}..."


@dataclass
class CredentialRecord:
    """Rate limit state for one API key."""

    identifier: str
    last_used_at: float = 0.0
    is_rate_limited: bool = False
    rate_limit_reset_at: float = 0.0

    def is_available(self, now: float) -> bool:
        # The flag is never cleared; an expired cooldown alone makes the key usable
        return not self.is_rate_limited or now >= self.rate_limit_reset_at


class KeyPool:
    """Fixed set of API keys and their cooldowns."""

    def __init__(self, credentials: Iterable[str], clock: Callable[[], float] = time.time):
        self._clock = clock
        self._records: List[CredentialRecord] = []
        self.initialize(credentials)

    def initialize(self, credentials: Iterable[str]) -> None:
        """
        Reset the pool to one available record per key.

        Raises:
            ConfigurationError: If no keys are given.
        """
        records = [CredentialRecord(identifier=key) for key in credentials]
        if not records:
            raise ConfigurationError("No Gemini API keys configured")
        self._records = records
        logger.info(f"Key pool initialized with {len(records)} key(s)")

    def acquire(self) -> Optional[str]:
        """Return the first available key, or None if every key is cooling down."""
        now = self._clock()
        for record in self._records:
            if record.is_available(now):
                record.last_used_at = now
                return record.identifier
        return None

    def mark_rate_limited(self, identifier: str, cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS) -> None:
        record = self._find(identifier)
        if record is None:
            return

        record.is_rate_limited = True
        record.rate_limit_reset_at = self._clock() + cooldown_seconds

        if self.acquire():
            logger.info("Switched to next available API key")
        else:
            logger.warning("All API keys are currently rate limited")

    def is_available(self, identifier: str) -> bool:
        """Whether a key could be acquired now; unknown keys are never available."""
        record = self._find(identifier)
        return record is not None and record.is_available(self._clock())

    def available_count(self) -> int:
        now = self._clock()
        return sum(1 for record in self._records if record.is_available(now))

    def snapshot(self) -> List[dict]:
        """Masked view of every record, for diagnostics."""
        now = self._clock()
        return [
            {
                "key": mask_key(record.identifier),
                "available": record.is_available(now),
                "rate_limited": record.is_rate_limited,
                "reset_in_seconds": max(0, int(record.rate_limit_reset_at - now)),
            }
            for record in self._records
        ]

    def _find(self, identifier: str) -> Optional[CredentialRecord]:
        for record in self._records:
            if record.identifier == identifier:
                return record
        return None

    def __len__(self) -> int:
        return len(self._records)
