"""Tests for app.services.inventory."""

from app.models.site import Page, SiteSnapshot
from app.services.content_store import SnapshotContentStore
from app.services.inventory import build_inventory, index_pages


def _store(*pages: Page) -> SnapshotContentStore:
    return SnapshotContentStore(SiteSnapshot(home_url="https://example.com/", pages=list(pages)))


class TestBuildInventory:
    def test_maps_normalized_url_to_id(self):
        store = _store(
            Page(id=1, type="page", link="https://example.com/about"),
            Page(id=2, type="post", link="https://example.com/hello/?p=2"),
        )
        assert build_inventory(store, include_listable=True) == {
            "https://example.com/about/": 1,
            "https://example.com/hello/": 2,
        }

    def test_excluding_listable_keeps_structural_pages_only(self):
        store = _store(
            Page(id=1, type="page", link="https://example.com/about/"),
            Page(id=2, type="post", link="https://example.com/hello/"),
        )
        assert build_inventory(store, include_listable=False) == {"https://example.com/about/": 1}

    def test_unpublished_pages_are_left_out(self):
        store = _store(
            Page(id=1, link="https://example.com/about/"),
            Page(id=2, link="https://example.com/wip/", status="draft"),
            Page(id=3, link="https://example.com/old/", status="trash"),
        )
        assert list(build_inventory(store, include_listable=True).values()) == [1]

    def test_pages_without_comparable_url_are_left_out(self):
        store = _store(Page(id=1, link=""), Page(id=2, link="/relative/"))
        assert build_inventory(store, include_listable=True) == {}

    def test_protocol_mode_applies_to_keys(self):
        store = _store(Page(id=1, link="http://example.com/about/"))
        assert build_inventory(store, True, "to_https") == {"https://example.com/about/": 1}

    def test_insertion_order_follows_store(self):
        store = _store(
            Page(id=3, link="https://example.com/c/"),
            Page(id=1, link="https://example.com/a/"),
            Page(id=2, link="https://example.com/b/"),
        )
        assert list(build_inventory(store, True).values()) == [3, 1, 2]


class TestCollisions:
    def test_last_page_wins(self):
        store = _store(
            Page(id=1, link="https://example.com/dup"),
            Page(id=2, link="https://example.com/dup/"),
        )
        assert build_inventory(store, True) == {"https://example.com/dup/": 2}

    def test_collisions_are_reported(self):
        store = _store(
            Page(id=1, link="https://example.com/dup"),
            Page(id=2, link="https://example.com/unique/"),
            Page(id=3, link="https://example.com/dup/?x=1"),
        )
        inventory, collisions = index_pages(store, True)
        assert inventory["https://example.com/dup/"] == 3
        assert len(collisions) == 1
        assert collisions[0].url == "https://example.com/dup/"
        assert collisions[0].page_ids == [1, 3]

    def test_no_collisions(self):
        store = _store(Page(id=1, link="https://example.com/a/"))
        _, collisions = index_pages(store, True)
        assert collisions == []
