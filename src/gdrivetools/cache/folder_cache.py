"""Process-wide, token-partitioned cache of resolved Drive folders."""

from __future__ import annotations

import hashlib
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from gdrivetools.models import CacheEntry, FolderIdentity
from gdrivetools.util.time import now_utc

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC: float = 3600.0
FINGERPRINT_LENGTH: int = 16


def fingerprint(token: str) -> str:
    """
    Return a short, stable value derived from an access token.

    Used only to partition cache keys per caller so one tenant never reads
    folders another tenant resolved. It is cache-key hygiene, not an access
    control check: the full token is never stored or logged.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


class FolderCache:
    """
    Expiring cache mapping (token fingerprint, folder id) -> FolderIdentity.

    Notes:
        - Every read re-validates the owner fingerprint; a mismatch is a miss
          and evicts the entry.
        - Expired entries are evicted lazily on access and by `sweep_expired`,
          which callers run at the start of tool operations. There is no timer.
        - Operations never raise; the cache is best-effort.
        - Map operations hold a lock so one instance can be shared by threads.
    """

    def __init__(
        self,
        ttl: float | timedelta = DEFAULT_TTL_SEC,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._ttl = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
        self._clock = clock or now_utc
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, token: str, folder_id: str) -> Optional[FolderIdentity]:
        fp = fingerprint(token)
        key = (fp, folder_id)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[key]
                logger.debug("[folder_cache] expired; folder_id:%s;owner:%s", folder_id, fp)
                return None
            if entry.owner_fingerprint != fp:
                del self._entries[key]
                logger.debug("[folder_cache] owner mismatch; folder_id:%s", folder_id)
                return None
            return entry.data

    def set(self, token: str, folder_id: str, identity: FolderIdentity) -> None:
        fp = fingerprint(token)
        entry = CacheEntry(
            data=identity,
            owner_fingerprint=fp,
            expires_at=self._clock() + self._ttl,
        )
        with self._lock:
            self._entries[(fp, folder_id)] = entry

    def invalidate(self, token: str, folder_id: str) -> None:
        with self._lock:
            self._entries.pop((fingerprint(token), folder_id), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep_expired(self) -> int:
        """Evict every expired entry. Returns the number of evicted entries."""
        now = self._clock()
        with self._lock:
            stale = [key for key, entry in self._entries.items() if entry.expires_at < now]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("[folder_cache] swept expired entries; count:%d", len(stale))
        return len(stale)

    def entries_for_token(self, token: str) -> dict[str, FolderIdentity]:
        """Return live entries owned by `token`, keyed by folder id."""
        fp = fingerprint(token)
        now = self._clock()
        with self._lock:
            return {
                folder_id: entry.data
                for (owner, folder_id), entry in self._entries.items()
                if owner == fp and entry.owner_fingerprint == fp and not entry.is_expired(now)
            }

    def find_child(self, token: str, parent_id: str, name: str) -> Optional[FolderIdentity]:
        """Return a cached folder named exactly `name` directly under `parent_id`."""
        for identity in self.entries_for_token(token).values():
            if identity.parent_id == parent_id and identity.name == name:
                return identity
        return None


_default_cache: Optional[FolderCache] = None
_default_lock = threading.Lock()


def default_folder_cache() -> FolderCache:
    """Return the process-wide cache used when none is injected."""
    global _default_cache
    with _default_lock:
        if _default_cache is None:
            _default_cache = FolderCache()
        return _default_cache
