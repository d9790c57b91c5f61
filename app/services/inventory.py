"""Enumerate the published pages that take part in an orphan scan."""

import logging
from typing import Dict, List, Tuple

from app.models.scan import ProtocolMode, UrlCollision
from app.services.content_store import ALL_PAGE_TYPES, STRUCTURAL_PAGE_TYPES, ContentStore
from app.services.normalizer import normalize_url

logger = logging.getLogger(__name__)


def index_pages(
    store: ContentStore,
    include_listable: bool,
    protocol_mode: ProtocolMode = "none",
) -> Tuple[Dict[str, int], List[UrlCollision]]:
    """Map each published page's normalized canonical URL to its id.

    Pages whose canonical URL cannot be normalized are left out.  When two
    pages share a normalized URL the later one overwrites the earlier one;
    every such clash is also returned as a :class:`UrlCollision`.
    """
    types = ALL_PAGE_TYPES if include_listable else STRUCTURAL_PAGE_TYPES
    inventory: Dict[str, int] = {}
    claimants: Dict[str, List[int]] = {}

    for page in store.list_published_pages(types):
        url = normalize_url(store.get_canonical_url(page.id), protocol_mode)
        if url is None:
            logger.debug("Inventory: page %s has no comparable URL, skipped", page.id)
            continue
        claimants.setdefault(url, []).append(page.id)
        inventory[url] = page.id

    collisions = [
        UrlCollision(url=url, page_ids=ids) for url, ids in claimants.items() if len(ids) > 1
    ]
    for collision in collisions:
        logger.warning(
            "Inventory: %d pages share %s, keeping page %s",
            len(collision.page_ids),
            collision.url,
            collision.page_ids[-1],
        )
    return inventory, collisions


def build_inventory(
    store: ContentStore,
    include_listable: bool,
    protocol_mode: ProtocolMode = "none",
) -> Dict[str, int]:
    """Return ``{normalized URL: page id}`` for every published candidate page."""
    inventory, _ = index_pages(store, include_listable, protocol_mode)
    return inventory
