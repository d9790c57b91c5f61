"""Collaborator interfaces the orphan scan reads from, plus a snapshot-backed store."""

from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from app.models.site import NavigationCollection, Page, PageType, SiteSnapshot

PUBLISHED = "publish"
ALL_PAGE_TYPES: Sequence[PageType] = ("post", "page")
STRUCTURAL_PAGE_TYPES: Sequence[PageType] = ("page",)


class ContentStore(Protocol):
    def list_published_pages(self, types: Iterable[PageType]) -> List[Page]: ...

    def get_page(self, page_id: int) -> Optional[Page]: ...

    def get_metadata_field(self, page_id: int, key: str) -> Optional[str]: ...

    def get_canonical_url(self, page_id: int) -> str: ...


class NavigationStore(Protocol):
    def list_navigation_collections(self) -> List[NavigationCollection]: ...


class SiteIdentity(Protocol):
    def get_home_url(self) -> str: ...


class SiteStore(ContentStore, NavigationStore, SiteIdentity, Protocol):
    """Everything an orphan scan needs from the surrounding application."""


class SnapshotContentStore:
    """Serve all three collaborator interfaces from a :class:`SiteSnapshot`.

    The snapshot is indexed once; pages keep the order in which the CMS
    delivered them.
    """

    def __init__(self, snapshot: SiteSnapshot) -> None:
        self._snapshot = snapshot
        self._pages: Dict[int, Page] = {page.id: page for page in snapshot.pages}

    def list_published_pages(self, types: Iterable[PageType]) -> List[Page]:
        wanted = set(types)
        return [
            page
            for page in self._pages.values()
            if page.status == PUBLISHED and page.type in wanted
        ]

    def get_page(self, page_id: int) -> Optional[Page]:
        return self._pages.get(page_id)

    def get_metadata_field(self, page_id: int, key: str) -> Optional[str]:
        page = self._pages.get(page_id)
        if page is None:
            return None
        return page.meta.get(key)

    def get_canonical_url(self, page_id: int) -> str:
        page = self._pages.get(page_id)
        return page.link if page else ""

    def list_navigation_collections(self) -> List[NavigationCollection]:
        return list(self._snapshot.navigation)

    def get_home_url(self) -> str:
        return self._snapshot.home_url
