"""Orphan detection: published pages minus every internally linked URL."""

import logging
import time
from typing import Callable, List, Optional

from app.models.scan import OrphanResult, ScanConfiguration
from app.services.cache import CACHE_TTL_SECONDS, ResultCache, cache_key, variant_keys
from app.services.content_store import SiteStore
from app.services.extractor import DEFAULT_MAX_DURATION, collect_linked_urls
from app.services.inventory import index_pages

logger = logging.getLogger(__name__)


def find_orphans(
    store: SiteStore,
    config: ScanConfiguration,
    cache: Optional[ResultCache] = None,
    namespace: str = "",
    max_duration: float = DEFAULT_MAX_DURATION,
    clock: Callable[[], float] = time.monotonic,
) -> OrphanResult:
    """Return every published page that nothing on the site links to.

    The result maps normalized URL to page id in inventory order.  When a
    *cache* is given, a fresh entry for ``cache_key(config, namespace)`` is
    returned as-is and a newly computed result is stored for
    :data:`CACHE_TTL_SECONDS`.

    Raises:
        ScanTimeoutError: when link extraction exceeds *max_duration*.
    """
    key = cache_key(config, namespace)
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            logger.info("Orphan scan: cache hit for %s", key)
            return cached

    started = clock()
    inventory, collisions = index_pages(store, config.include_listable, config.protocol_mode)
    linked = collect_linked_urls(store, config, max_duration=max_duration, clock=clock)

    orphans = {url: page_id for url, page_id in inventory.items() if url not in linked}
    result = OrphanResult(orphans=orphans, collisions=collisions)
    logger.info(
        "Orphan scan: %d of %d pages unlinked (%d linked URLs, %.2fs)",
        len(orphans),
        len(inventory),
        len(linked),
        clock() - started,
    )

    if cache is not None:
        cache.put(key, result, CACHE_TTL_SECONDS)
    return result


def invalidate_cached_results(
    cache: ResultCache,
    config: ScanConfiguration,
    namespace: str = "",
) -> List[str]:
    """Drop the cached results of *config*, for both include/exclude variants.

    Call on any content, metadata or navigation change, and when the active
    configuration is replaced.  Returns the keys that were invalidated.
    """
    keys = list(variant_keys(config, namespace))
    for key in keys:
        cache.invalidate(key)
    return keys
