"""In-memory TTL cache mapping user identifiers to accountIds."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

USER_CACHE_TTL_SECONDS = 60 * 60


@dataclass
class CacheEntry:
    account_id: str
    inserted_at: float


class UserCache:
    """Identifier -> accountId cache with a fixed one-hour TTL.

    Keys are lower-cased, so identifiers differing only in case share an
    entry. Expired entries are dropped when they are next read.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[str, CacheEntry] = {}
        self._clock = clock
        self._lock = threading.Lock()
        self.ttl_seconds = USER_CACHE_TTL_SECONDS

    def get(self, identifier: str) -> Optional[str]:
        key = identifier.lower()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at < self.ttl_seconds:
                logger.debug("Cache hit for user: %s", identifier)
                return entry.account_id
            del self._entries[key]
        logger.debug("Cache entry expired for user: %s", identifier)
        return None

    def set(self, identifier: str, account_id: str):
        with self._lock:
            self._entries[identifier.lower()] = CacheEntry(
                account_id=account_id,
                inserted_at=self._clock(),
            )
        logger.debug("Cached user: %s -> %s", identifier, account_id)

    def clear(self):
        with self._lock:
            self._entries.clear()
        logger.debug("User cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
