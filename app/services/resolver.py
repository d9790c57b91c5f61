"""Resolve link references found in content into absolute URLs."""

import posixpath
import re
from typing import Optional
from urllib.parse import urlsplit

from app.services.normalizer import has_extension, trailing_slash

# Any "scheme:" prefix (http:, https:, mailto:, tel:, data:, …)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*:", re.IGNORECASE)

# One "/segment/../" step; applied repeatedly until nothing matches.
_PARENT_SEGMENT_RE = re.compile(r"/[^/]+/\.\./")


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def collapse_dot_segments(path: str) -> str:
    """Remove ``/./`` segments and fold ``/segment/../`` pairs one at a time."""
    while "/./" in path:
        path = path.replace("/./", "/")
    while _PARENT_SEGMENT_RE.search(path):
        path = _PARENT_SEGMENT_RE.sub("/", path, count=1)
    return path


def resolve_url(reference: str, base_url: str, root_url: Optional[str] = None) -> str:
    """Turn *reference* into an absolute URL.

    Args:
        reference: Link value as written in content.  Fragment-only values
            must already have been discarded by the caller.
        base_url:  Absolute URL of the page the reference was found on.
        root_url:  Site home URL whose origin anchors root- and
            path-relative references.  Defaults to the origin of *base_url*.

    Absolute references (anything carrying a scheme) are returned unchanged,
    protocol-relative ones borrow the scheme of *base_url*.
    """
    reference = reference.strip()
    if _SCHEME_RE.match(reference):
        return reference

    if reference.startswith("//"):
        return f"{urlsplit(base_url).scheme}:{reference}"

    origin = _origin(root_url or base_url)

    if reference.startswith("/"):
        return origin + collapse_dot_segments(reference)

    base_path = urlsplit(base_url).path or "/"
    if has_extension(base_path):
        base_path = posixpath.dirname(base_path)
    base_path = trailing_slash(base_path)

    return origin + collapse_dot_segments(base_path + reference)
