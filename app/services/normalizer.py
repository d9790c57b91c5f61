"""URL normalisation: reduce equivalent addresses to one comparable string.

A normalized URL is ``scheme://host`` followed by the percent-decoded path.
Port, userinfo, query string and fragment are always dropped.  Paths whose
last segment has no file extension are slash-terminated, so ``/about`` and
``/about/`` compare equal while ``/logo.png`` is left alone.
"""

import posixpath
import re
from typing import Optional
from urllib.parse import unquote, urlsplit

from app.models.scan import ProtocolMode

_HTTP_PREFIX_RE = re.compile(r"^http:", re.IGNORECASE)
_HTTPS_PREFIX_RE = re.compile(r"^https:", re.IGNORECASE)


def has_extension(path: str) -> bool:
    """Return True when the last segment of *path* looks like a file name."""
    basename = posixpath.basename(path.rstrip("/"))
    _, dot, ext = basename.rpartition(".")
    return bool(dot and ext)


def trailing_slash(path: str) -> str:
    return path.rstrip("/") + "/"


def _host_from_netloc(netloc: str) -> str:
    """Strip userinfo and port from *netloc*, keeping the host's case."""
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        # IPv6 literal, e.g. "[::1]:8080"
        end = host.find("]")
        return host[: end + 1] if end != -1 else ""
    return host.partition(":")[0]


def unify_protocol(url: str, protocol_mode: ProtocolMode = "none") -> str:
    if protocol_mode == "to_https":
        return _HTTP_PREFIX_RE.sub("https:", url, count=1)
    if protocol_mode == "to_http":
        return _HTTPS_PREFIX_RE.sub("http:", url, count=1)
    return url


def normalize_url(url: Optional[str], protocol_mode: ProtocolMode = "none") -> Optional[str]:
    """Return the normalized form of *url*, or *None* when it cannot be compared.

    Empty input and URLs without a scheme or host (relative references,
    ``mailto:`` links, unparseable strings) yield *None* rather than raising.
    """
    if not url:
        return None

    url = unify_protocol(url.strip(), protocol_mode)
    try:
        parts = urlsplit(url)
    except ValueError:
        return None

    host = _host_from_netloc(parts.netloc)
    if not parts.scheme or not host:
        return None

    path = unquote(parts.path)
    if not has_extension(path):
        path = trailing_slash(path)

    return f"{parts.scheme}://{host}{path}"


def is_internal(normalized_url: Optional[str], normalized_home: Optional[str]) -> bool:
    """Return True when *normalized_url* lives under the site's *normalized_home*.

    Both arguments must already be normalized.  The home URL is compared as a
    slash-terminated prefix, so ``https://example.com.evil/`` is never
    mistaken for ``https://example.com/`` and a site installed under
    ``/blog/`` only claims URLs below that directory.
    """
    if not normalized_url or not normalized_home:
        return False
    home = trailing_slash(normalized_home)
    return normalized_url == home or normalized_url.startswith(home)
