"""Tests for app.services.cache."""

from app.models.scan import OrphanResult, ScanConfiguration
from app.services.cache import (
    CACHE_TTL_SECONDS,
    InMemoryResultCache,
    cache_key,
    variant_keys,
)


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestCacheKey:
    def test_default_configuration(self):
        assert cache_key(ScanConfiguration()) == "orphans_all_redirect_url_none"

    def test_pages_only_and_protocol(self):
        config = ScanConfiguration(exclude_posts=True, protocol_mode="to_https")
        assert cache_key(config) == "orphans_pages_only_redirect_url_to_https"

    def test_redirect_key_is_percent_encoded(self):
        config = ScanConfiguration(redirect_key="My Redirect!")
        assert cache_key(config) == "orphans_all_My%20Redirect%21_none"

    def test_blank_redirect_key_shares_default_key(self):
        assert cache_key(ScanConfiguration(redirect_key="")) == cache_key(ScanConfiguration())

    def test_redirect_key_case_is_significant(self):
        assert cache_key(ScanConfiguration(redirect_key="Redirect_URL")) != cache_key(
            ScanConfiguration(redirect_key="redirect_url")
        )

    def test_redirect_key_punctuation_is_significant(self):
        assert cache_key(ScanConfiguration(redirect_key="redirect url")) != cache_key(
            ScanConfiguration(redirect_key="redirecturl")
        )

    def test_namespace_prefix(self):
        assert cache_key(ScanConfiguration(), "example.com") == "example.com:orphans_all_redirect_url_none"

    def test_variant_keys(self):
        assert variant_keys(ScanConfiguration(exclude_posts=True)) == (
            "orphans_pages_only_redirect_url_none",
            "orphans_all_redirect_url_none",
        )


class TestInMemoryResultCache:
    def test_miss_returns_none(self):
        assert InMemoryResultCache().get("missing") is None

    def test_put_then_get(self):
        cache = InMemoryResultCache()
        result = OrphanResult(orphans={"https://example.com/a/": 1})
        cache.put("k", result, CACHE_TTL_SECONDS)
        assert cache.get("k") == result

    def test_entry_expires_after_ttl(self):
        clock = _FakeClock()
        cache = InMemoryResultCache(clock=clock)
        cache.put("k", OrphanResult(), 60)
        clock.now += 59
        assert cache.get("k") is not None
        clock.now += 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_default_ttl_is_twelve_hours(self):
        assert CACHE_TTL_SECONDS == 43200

    def test_invalidate(self):
        cache = InMemoryResultCache()
        cache.put("k", OrphanResult(), 60)
        cache.invalidate("k")
        assert cache.get("k") is None

    def test_invalidate_unknown_key_is_noop(self):
        InMemoryResultCache().invalidate("nope")

    def test_returned_value_is_a_copy(self):
        cache = InMemoryResultCache()
        cache.put("k", OrphanResult(orphans={"https://example.com/a/": 1}), 60)
        cache.get("k").orphans["https://example.com/b/"] = 2
        assert cache.get("k").orphans == {"https://example.com/a/": 1}

    def test_last_writer_wins(self):
        cache = InMemoryResultCache()
        cache.put("k", OrphanResult(orphans={"https://example.com/a/": 1}), 60)
        cache.put("k", OrphanResult(orphans={"https://example.com/b/": 2}), 60)
        assert cache.get("k").orphans == {"https://example.com/b/": 2}
