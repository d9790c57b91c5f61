"""Human-readable details for orphan pages, tolerant of pages that vanished."""

from datetime import datetime
from typing import List

from app.models.orphan_response import PageDetails
from app.models.scan import OrphanResult
from app.services.content_store import ContentStore

_TYPE_LABELS = {"post": "Post", "page": "Page"}
_DATE_FORMAT = "%Y-%m-%d %H:%M"
_MISSING = "N/A"


def _format_date(value: str) -> str:
    if not value:
        return _MISSING
    try:
        return datetime.fromisoformat(value).strftime(_DATE_FORMAT)
    except ValueError:
        return value


def get_page_details(store: ContentStore, page_id: int, url: str = "") -> PageDetails:
    """Return display details for *page_id*.

    A page that is no longer in the store produces a degraded record
    (type ``"Deleted"``, title ``"Page Not Found"``) instead of an error.
    """
    page = store.get_page(page_id)
    if page is None:
        return PageDetails(
            id=page_id,
            type="Deleted",
            url=url,
            title="Page Not Found",
            published=_MISSING,
            modified=_MISSING,
            author=_MISSING,
        )

    return PageDetails(
        id=page.id,
        type=_TYPE_LABELS.get(page.type, page.type),
        url=url or page.link,
        title=page.title,
        published=_format_date(page.date),
        modified=_format_date(page.modified),
        categories=", ".join(page.categories),
        tags=", ".join(page.tags),
        author=page.author or _MISSING,
    )


def describe_orphans(store: ContentStore, result: OrphanResult) -> List[PageDetails]:
    """Join every orphan in *result* with its page details, keeping result order."""
    return [get_page_details(store, page_id, url) for url, page_id in result.orphans.items()]
