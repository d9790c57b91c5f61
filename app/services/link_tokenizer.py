"""Pattern-based scanner for link-bearing attributes in raw markup.

Grammar (case-insensitive)::

    reference := NAME "=" QUOTE VALUE [ "#" FRAGMENT ] QUOTE
    NAME      := "href" | "src" | "srcset"   (also matches data-src, data-href, …)
    VALUE     := "http" ["s"] "://" <no quotes>
               | <no quotes, no colon>

Values with any other scheme (``mailto:``, ``javascript:``, ``data:``) never
match the second branch, which keeps non-navigational links out.  The
scanner works on text rather than a parsed DOM so it also sees links inside
shortcodes, comments and inline scripts.
"""

import re
from typing import List

_LINK_ATTR_RE = re.compile(
    r"""(href|src|srcset)\s*=\s*["']"""
    r"""(https?://[^"']+?|[^:"']+?)"""
    r"""(?:\#[^"']*)?["']""",
    re.IGNORECASE,
)


def _split_srcset(value: str) -> List[str]:
    """Return the URL part of each ``url [descriptor]`` candidate."""
    candidates: List[str] = []
    for candidate in value.split(","):
        url = candidate.strip().split(" ")[0]
        if url:
            candidates.append(url)
    return candidates


def find_link_references(content: str) -> List[str]:
    """Return every link reference in *content*, fragments removed.

    Order follows the position in *content*; duplicates are kept.
    Fragment-only references (``href="#top"``) yield nothing.
    """
    if not content:
        return []

    references: List[str] = []
    for match in _LINK_ATTR_RE.finditer(content):
        attr, value = match.group(1).lower(), match.group(2)
        value = value.split("#", 1)[0].strip()
        if not value:
            continue
        if attr == "srcset":
            references.extend(_split_srcset(value))
        else:
            references.append(value)
    return references
