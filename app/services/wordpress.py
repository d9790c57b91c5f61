"""Load a site snapshot from the WordPress REST API."""

import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from app.models.site import NavigationCollection, NavigationEntry, Page, SiteSnapshot
from app.services.url_guard import guard_request, validate_url

logger = logging.getLogger(__name__)

_WP_API_TIMEOUT = 15
_WP_PAGE_SIZE = 100
# Upper bound per resource type, protects against runaway pagination
MAX_ITEMS_HARD_LIMIT = 10_000

_CONTENT_RESOURCES = ("posts", "pages")
_CONTENT_FIELDS = "id,type,status,link,title,content,meta,date,modified,author,categories,tags"


def _api_url(base_url: str, path: str = "") -> str:
    return urljoin(base_url.rstrip("/") + "/", f"wp-json/{path}")


def _rendered_text(value) -> str:
    """Return the plain text of a ``{"rendered": "<html>"}`` field."""
    raw = value.get("rendered", "") if isinstance(value, dict) else str(value or "")
    if not raw:
        return ""
    return BeautifulSoup(raw, "lxml").get_text(strip=True)


def _meta_strings(meta) -> Dict[str, str]:
    """Flatten REST ``meta`` into ``{key: str}``; WordPress sends ``[]`` when empty."""
    if not isinstance(meta, dict):
        return {}
    flat: Dict[str, str] = {}
    for key, value in meta.items():
        if isinstance(value, list):
            value = value[0] if value else ""
        if value is None or isinstance(value, (dict, list)):
            continue
        flat[str(key)] = str(value)
    return flat


async def _fetch_site_home(client: httpx.AsyncClient, base_url: str) -> str:
    """Return the site's home URL from the REST index.

    Raises:
        ValueError: if the site does not expose the WordPress REST API.
        httpx.HTTPError: on network errors.
    """
    resp = await client.get(_api_url(base_url))
    resp.raise_for_status()
    try:
        index = resp.json()
    except ValueError:
        index = None
    if not isinstance(index, dict) or "namespaces" not in index:
        raise ValueError(f"{base_url} does not expose the WordPress REST API.")
    return index.get("home") or index.get("url") or base_url


async def _fetch_wp_resource(
    client: httpx.AsyncClient,
    base_url: str,
    resource: str,
    fields: str,
    required: bool = False,
) -> List[dict]:
    """Fetch all items of a WordPress REST resource type with automatic pagination.

    Errors on *required* resources propagate; optional resources (taxonomies,
    users) degrade to whatever was fetched so far.

    Raises:
        RuntimeError: if a *required* resource has more than
            ``MAX_ITEMS_HARD_LIMIT`` items; a truncated list would be scanned
            as if it were complete.
    """
    results: List[dict] = []
    page = 1
    api_url = _api_url(base_url, f"wp/v2/{resource}")

    while True:
        try:
            resp = await client.get(
                api_url,
                params={"per_page": _WP_PAGE_SIZE, "page": page, "_fields": fields},
            )
            # 400 indicates that the requested page number is beyond the total
            # pages available (WordPress REST API convention).
            if resp.status_code == 400 and page > 1:
                break
            resp.raise_for_status()
            items = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            if required:
                raise
            logger.warning("WP API error fetching %s page %d: %s", resource, page, exc)
            break

        if not isinstance(items, list) or not items:
            break
        results.extend(items)
        total_pages = int(resp.headers.get("X-WP-TotalPages", 1))
        truncated = len(results) > MAX_ITEMS_HARD_LIMIT or (
            len(results) == MAX_ITEMS_HARD_LIMIT and page < total_pages
        )
        if truncated:
            if required:
                raise RuntimeError(
                    f"{base_url} has more than {MAX_ITEMS_HARD_LIMIT} {resource}; "
                    "refusing to scan a partial list."
                )
            logger.warning("WP API: %s capped at %d items", resource, MAX_ITEMS_HARD_LIMIT)
            break
        if page >= total_pages:
            break
        page += 1

    return results[:MAX_ITEMS_HARD_LIMIT]


def _names_by_id(items: List[dict]) -> Dict[int, str]:
    return {item["id"]: str(item.get("name", "")) for item in items if "id" in item}


def _item_to_page(
    item: dict,
    categories: Dict[int, str],
    tags: Dict[int, str],
    authors: Dict[int, str],
) -> Optional[Page]:
    """Convert a single WordPress REST API item to a :class:`Page`."""
    if "id" not in item:
        return None
    page_type = item.get("type")
    if page_type not in ("post", "page"):
        return None

    content = item.get("content") or {}
    return Page(
        id=item["id"],
        type=page_type,
        status=item.get("status") or "publish",
        link=item.get("link") or "",
        title=_rendered_text(item.get("title")),
        content=content.get("rendered", "") if isinstance(content, dict) else str(content),
        meta=_meta_strings(item.get("meta")),
        date=item.get("date") or "",
        modified=item.get("modified") or "",
        author=authors.get(item.get("author"), ""),
        categories=[categories[c] for c in item.get("categories") or [] if c in categories],
        tags=[tags[t] for t in item.get("tags") or [] if t in tags],
    )


def _group_menu_items(items: List[dict], menus: Dict[int, str]) -> List[NavigationCollection]:
    grouped: Dict[int, List[NavigationEntry]] = {}
    for item in items:
        url = item.get("url")
        if not url:
            continue
        grouped.setdefault(item.get("menus") or 0, []).append(
            NavigationEntry(url=url, order=item.get("menu_order") or 0)
        )
    return [
        NavigationCollection(
            name=menus.get(menu_id, f"menu-{menu_id}"),
            entries=sorted(entries, key=lambda e: e.order),
        )
        for menu_id, entries in grouped.items()
    ]


async def load_site_snapshot(
    base_url: str,
    auth: Optional[Tuple[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SiteSnapshot:
    """Read posts, pages, taxonomy names, authors and menus of a WordPress site.

    Menu items are only readable with credentials (an application password
    passed as *auth*); without them the snapshot has no navigation.  With
    credentials the menus are required like posts and pages, so a snapshot
    never silently lacks navigation it should have.

    Every request, including each redirect hop, passes through
    :func:`guard_request`.

    Raises:
        ValueError: if the URL (or a redirect target) is blocked or the site
            is not WordPress.
        httpx.HTTPError: when posts, pages or (with *auth*) menus cannot be
            fetched.
        RuntimeError: when posts or pages exceed ``MAX_ITEMS_HARD_LIMIT``.
    """
    validate_url(base_url)
    async with httpx.AsyncClient(
        timeout=_WP_API_TIMEOUT,
        follow_redirects=True,
        auth=httpx.BasicAuth(*auth) if auth else None,
        event_hooks={"request": [guard_request]},
        transport=transport,
    ) as client:
        home_url = await _fetch_site_home(client, base_url)

        categories = _names_by_id(await _fetch_wp_resource(client, base_url, "categories", "id,name"))
        tags = _names_by_id(await _fetch_wp_resource(client, base_url, "tags", "id,name"))
        authors = _names_by_id(await _fetch_wp_resource(client, base_url, "users", "id,name"))

        pages: List[Page] = []
        for resource in _CONTENT_RESOURCES:
            items = await _fetch_wp_resource(
                client, base_url, resource, _CONTENT_FIELDS, required=True
            )
            for item in items:
                page = _item_to_page(item, categories, tags, authors)
                if page:
                    pages.append(page)

        navigation: List[NavigationCollection] = []
        if auth:
            menus = _names_by_id(
                await _fetch_wp_resource(client, base_url, "menus", "id,name", required=True)
            )
            menu_items = await _fetch_wp_resource(
                client, base_url, "menu-items", "id,url,menus,menu_order", required=True
            )
            navigation = _group_menu_items(menu_items, menus)

    logger.info(
        "Loaded %d pages and %d menus from %s", len(pages), len(navigation), base_url
    )
    return SiteSnapshot(home_url=home_url, pages=pages, navigation=navigation)
