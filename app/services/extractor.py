"""Collect every internal link target referenced anywhere on a site.

Links come from three places: the body markup of each published page, the
per-page redirect metadata field, and the entries of every navigation
collection.  Each reference is resolved against the page it was found on,
normalized, and kept only when it points back into the site.
"""

import logging
import time
from typing import Callable, Iterable, Optional, Set

from app.models.scan import DEFAULT_REDIRECT_KEY, ProtocolMode, ScanConfiguration
from app.models.site import NavigationCollection, Page
from app.services.content_store import ALL_PAGE_TYPES, ContentStore, SiteStore
from app.services.link_tokenizer import find_link_references
from app.services.normalizer import is_internal, normalize_url
from app.services.resolver import resolve_url

logger = logging.getLogger(__name__)

# Default wall-clock budget for scanning a whole site (seconds)
DEFAULT_MAX_DURATION = 300


class ScanTimeoutError(RuntimeError):
    """The link scan ran past its time budget; the caller may retry with more."""

    def __init__(self, max_duration: float, pages_scanned: int) -> None:
        super().__init__(
            f"Link scan exceeded {max_duration:g}s after {pages_scanned} pages."
        )
        self.max_duration = max_duration
        self.pages_scanned = pages_scanned


def _internal(
    reference: str,
    base_url: str,
    home_url: str,
    normalized_home: Optional[str],
    protocol_mode: ProtocolMode,
) -> Optional[str]:
    """Resolve, normalize and filter one reference; *None* when external or unusable."""
    normalized = normalize_url(resolve_url(reference, base_url, home_url), protocol_mode)
    if is_internal(normalized, normalized_home):
        return normalized
    return None


def extract_page_links(
    page: Page,
    redirect_key: str,
    base_url: str,
    home_url: str,
    protocol_mode: ProtocolMode = "none",
    store: Optional[ContentStore] = None,
) -> Set[str]:
    """Return the normalized internal URLs that *page* links to.

    Args:
        page:          Page whose body and metadata are scanned.
        redirect_key:  Metadata field naming a redirect target; blank means
                       ``redirect_url``.
        base_url:      Canonical URL of *page*, used for relative references.
        home_url:      Site home URL deciding what counts as internal.
        protocol_mode: Scheme unification applied during normalization.
        store:         Metadata source; defaults to ``page.meta``.
    """
    normalized_home = normalize_url(home_url, protocol_mode)
    links: Set[str] = set()

    for reference in find_link_references(page.content):
        url = _internal(reference, base_url, home_url, normalized_home, protocol_mode)
        if url:
            links.add(url)

    key = redirect_key or DEFAULT_REDIRECT_KEY
    if store is not None:
        redirect_value = store.get_metadata_field(page.id, key)
    else:
        redirect_value = page.meta.get(key)
    if redirect_value:
        url = _internal(
            redirect_value.split("#", 1)[0], base_url, home_url, normalized_home, protocol_mode
        )
        if url:
            links.add(url)

    return links


def extract_navigation_links(
    collections: Iterable[NavigationCollection],
    home_url: str,
    protocol_mode: ProtocolMode = "none",
) -> Set[str]:
    """Return the normalized internal targets of every navigation entry.

    Relative entry URLs are resolved against *home_url*.
    """
    normalized_home = normalize_url(home_url, protocol_mode)
    links: Set[str] = set()
    for collection in collections:
        for entry in collection.entries:
            target = entry.url.split("#", 1)[0].strip()
            if not target:
                continue
            url = _internal(target, home_url, home_url, normalized_home, protocol_mode)
            if url:
                links.add(url)
    return links


def _check_deadline(
    clock: Callable[[], float], deadline: float, max_duration: float, scanned: int, total: int
) -> None:
    if clock() > deadline:
        logger.error(
            "Link scan timed out after %d of %d pages (%.0fs budget)", scanned, total, max_duration
        )
        raise ScanTimeoutError(max_duration, scanned)


def collect_linked_urls(
    store: SiteStore,
    config: ScanConfiguration,
    max_duration: float = DEFAULT_MAX_DURATION,
    clock: Callable[[], float] = time.monotonic,
) -> Set[str]:
    """Scan every published page and navigation collection for internal links.

    All published pages are scanned regardless of ``config.exclude_posts``;
    a structural page linked only from a blog post is still linked.

    Raises:
        ScanTimeoutError: when the scan runs longer than *max_duration* seconds.
            No partial result is returned.
    """
    home_url = store.get_home_url()
    deadline = clock() + max_duration
    linked: Set[str] = set()

    pages = store.list_published_pages(ALL_PAGE_TYPES)
    for scanned, page in enumerate(pages):
        _check_deadline(clock, deadline, max_duration, scanned, len(pages))
        base_url = store.get_canonical_url(page.id)
        linked |= extract_page_links(
            page,
            config.redirect_key,
            base_url,
            home_url,
            config.protocol_mode,
            store=store,
        )

    _check_deadline(clock, deadline, max_duration, len(pages), len(pages))
    linked |= extract_navigation_links(
        store.list_navigation_collections(), home_url, config.protocol_mode
    )
    logger.debug("Link scan found %d internal URLs across %d pages", len(linked), len(pages))
    return linked
