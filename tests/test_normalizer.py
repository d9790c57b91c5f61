"""Tests for app.services.normalizer."""

import pytest

from app.services.normalizer import has_extension, is_internal, normalize_url


class TestNormalizeUrl:
    def test_strips_port_query_and_fragment(self):
        assert normalize_url("https://Example.com:8080/Foo?x=1#frag") == "https://Example.com/Foo/"

    def test_host_case_is_preserved(self):
        assert normalize_url("https://EXAMPLE.com/a/") == "https://EXAMPLE.com/a/"

    def test_adds_trailing_slash_without_extension(self):
        assert normalize_url("https://example.com/about") == "https://example.com/about/"

    def test_keeps_existing_trailing_slash(self):
        assert normalize_url("https://example.com/about/") == "https://example.com/about/"

    def test_file_path_is_not_slash_terminated(self):
        assert normalize_url("https://example.com/img/logo.png") == "https://example.com/img/logo.png"

    def test_dotted_segment_counts_as_extension(self):
        assert normalize_url("https://example.com/docs/v1.2") == "https://example.com/docs/v1.2"

    def test_bare_host_gets_root_slash(self):
        assert normalize_url("https://example.com") == "https://example.com/"
        assert normalize_url("https://example.com") == normalize_url("https://example.com/")

    def test_path_is_percent_decoded(self):
        assert normalize_url("https://example.com/caf%C3%A9") == "https://example.com/café/"

    def test_decoded_path_keeps_plus_sign(self):
        assert normalize_url("https://example.com/a+b/") == "https://example.com/a+b/"

    def test_encoded_file_name(self):
        assert (
            normalize_url("https://example.com/file%20name.pdf")
            == "https://example.com/file name.pdf"
        )

    def test_userinfo_is_dropped(self):
        assert normalize_url("https://user:pw@example.com/a") == "https://example.com/a/"

    def test_ipv6_host_port_is_dropped(self):
        assert normalize_url("http://[::1]:8080/a") == "http://[::1]/a/"

    def test_scheme_is_lowercased(self):
        assert normalize_url("HTTP://example.com/a") == "http://example.com/a/"

    @pytest.mark.parametrize("value", [None, "", "/relative/path", "page.html", "mailto:me@example.com"])
    def test_non_comparable_input_returns_none(self, value):
        assert normalize_url(value) is None

    def test_malformed_ipv6_returns_none(self):
        assert normalize_url("http://[::1/broken") is None


class TestProtocolMode:
    def test_force_https(self):
        assert normalize_url("http://x/y.png", "to_https") == "https://x/y.png"

    def test_force_https_is_case_insensitive(self):
        assert normalize_url("HTTP://x/y/", "to_https") == "https://x/y/"

    def test_force_http(self):
        assert normalize_url("https://x/y", "to_http") == "http://x/y/"

    def test_force_https_leaves_https_alone(self):
        assert normalize_url("https://x/y", "to_https") == "https://x/y/"

    def test_other_schemes_are_not_rewritten(self):
        assert normalize_url("ftp://x/y", "to_https") == "ftp://x/y/"

    def test_none_mode_keeps_scheme(self):
        assert normalize_url("http://x/y", "none") == "http://x/y/"


class TestIdempotence:
    @pytest.mark.parametrize(
        "url",
        [
            "https://Example.com:8080/Foo?x=1#frag",
            "http://example.com",
            "https://example.com/a/b.html?q=1",
            "https://example.com/caf%C3%A9/",
            "https://example.com/docs/v1.2",
        ],
    )
    def test_normalizing_twice_changes_nothing(self, url):
        once = normalize_url(url)
        assert normalize_url(once) == once


class TestHasExtension:
    def test_plain_segment(self):
        assert has_extension("/about") is False

    def test_file_segment(self):
        assert has_extension("/a/b.html") is True

    def test_extension_on_directory_segment(self):
        assert has_extension("/a.b/") is True

    def test_trailing_dot_is_not_an_extension(self):
        assert has_extension("/a/file.") is False

    def test_root(self):
        assert has_extension("/") is False


class TestIsInternal:
    _HOME = "https://example.com/"

    def test_same_site_page(self):
        assert is_internal("https://example.com/about/", self._HOME) is True

    def test_home_itself(self):
        assert is_internal("https://example.com/", self._HOME) is True

    def test_other_host(self):
        assert is_internal("https://other.com/about/", self._HOME) is False

    def test_host_sharing_a_prefix(self):
        assert is_internal("https://example.com.evil/", "https://example.com") is False

    def test_scheme_mismatch_is_external(self):
        assert is_internal("http://example.com/about/", self._HOME) is False

    def test_subdirectory_install(self):
        home = "https://example.com/blog/"
        assert is_internal("https://example.com/blog/post/", home) is True
        assert is_internal("https://example.com/shop/", home) is False

    def test_none_is_never_internal(self):
        assert is_internal(None, self._HOME) is False
        assert is_internal("https://example.com/", None) is False
