"""Expiring cache for orphan scan results.

Keys are derived from the :class:`ScanConfiguration` so that each distinct
set of options has its own entry.  A cached value is only valid for the
content snapshot it was computed from; callers must invalidate it whenever
the site's content, metadata or navigation changes.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Protocol, Tuple
from urllib.parse import quote

from app.models.scan import DEFAULT_REDIRECT_KEY, OrphanResult, ScanConfiguration

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 12 * 60 * 60
_KEY_PREFIX = "orphans"


class ResultCache(Protocol):
    def get(self, key: str) -> Optional[OrphanResult]: ...

    def put(self, key: str, value: OrphanResult, ttl_seconds: float) -> None: ...

    def invalidate(self, key: str) -> None: ...


def _encode_redirect_key(redirect_key: str) -> str:
    """Percent-encode *redirect_key*; a blank key means the default field."""
    return quote(redirect_key or DEFAULT_REDIRECT_KEY, safe="")


def cache_key(config: ScanConfiguration, namespace: str = "") -> str:
    """Return the deterministic cache key for *config*.

    Distinct configurations get distinct keys: the redirect key is
    percent-encoded as-is (case and punctuation kept) and the protocol mode,
    taken from a fixed set, closes the key.

    Example: ``example.com:orphans_pages_only_redirect_url_to_https``.
    """
    scope = "pages_only" if config.exclude_posts else "all"
    redirect = _encode_redirect_key(config.redirect_key)
    key = f"{_KEY_PREFIX}_{scope}_{redirect}_{config.protocol_mode}"
    return f"{namespace}:{key}" if namespace else key


def variant_keys(config: ScanConfiguration, namespace: str = "") -> Tuple[str, str]:
    """Return the keys for both include/exclude variants of *config*."""
    return (
        cache_key(config.model_copy(update={"exclude_posts": True}), namespace),
        cache_key(config.model_copy(update={"exclude_posts": False}), namespace),
    )


class InMemoryResultCache:
    """Process-local :class:`ResultCache` with per-entry expiry.

    Concurrent writers for the same key simply overwrite each other.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[float, OrphanResult]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[OrphanResult]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
        return value.model_copy(deep=True)

    def put(self, key: str, value: OrphanResult, ttl_seconds: float = CACHE_TTL_SECONDS) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value.model_copy(deep=True))

    def invalidate(self, key: str) -> None:
        with self._lock:
            if self._entries.pop(key, None) is not None:
                logger.info("Cache: invalidated %s", key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
