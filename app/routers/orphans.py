"""Orphan page detection endpoints."""

import io
import logging
import math
from typing import List, Literal
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.models.orphan_request import InvalidateRequest, OrphanRequest
from app.models.orphan_response import InvalidateResponse, OrphanResponse
from app.models.scan import ScanConfiguration
from app.services.cache import InMemoryResultCache
from app.services.content_store import SnapshotContentStore
from app.services.details import describe_orphans
from app.services.export import build_csv, csv_filename
from app.services.extractor import ScanTimeoutError
from app.services.reconciler import find_orphans, invalidate_cached_results
from app.services.settings import ScanSettingsStore
from app.services.wordpress import load_site_snapshot

logger = logging.getLogger(__name__)

# Seconds a client should wait before retrying a scan that timed out
RETRY_AFTER_SECONDS = 60

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()

result_cache = InMemoryResultCache()
settings_store = ScanSettingsStore()


def _cache_namespace(site: str, with_navigation: bool) -> str:
    """Cache namespace of *site*; scans that read navigation menus get their own."""
    return f"{site}:nav" if with_navigation else site


def _invalidate_site(site: str, config: ScanConfiguration) -> List[str]:
    keys: List[str] = []
    for with_navigation in (False, True):
        keys += invalidate_cached_results(
            result_cache, config, namespace=_cache_namespace(site, with_navigation)
        )
    return keys


@router.post(
    "/orphans",
    response_model=OrphanResponse,
    summary="Detect orphan pages on a WordPress site",
    description=(
        "Reads every published post and page of the site at *url* through the "
        "WordPress REST API, collects all internal links from content, redirect "
        "custom fields and navigation menus, and returns the published pages "
        "that nothing links to.\n\n"
        "Pass `?format=csv` to download the full result as a CSV file."
    ),
)
@limiter.limit("5/minute")
async def detect_orphans(
    request: Request,
    body: OrphanRequest,
    format: Literal["json", "csv"] = Query(default="json", description="Output format: 'json' or 'csv'."),
) -> OrphanResponse | StreamingResponse:
    """Scan *url* for orphan pages and return one page of results."""
    url = str(body.url)
    site = urlparse(url).netloc
    config = body.to_config()
    logger.info(
        "Orphan scan request received",
        extra={"url": url, "exclude_posts": config.exclude_posts, "protocol_mode": config.protocol_mode},
    )

    previous = settings_store.update(site, config)
    if previous is not None:
        _invalidate_site(site, previous)

    auth = None
    if body.username and body.app_password:
        auth = (body.username, body.app_password.get_secret_value())

    try:
        snapshot = await load_site_snapshot(url, auth=auth)
    except ValueError as exc:
        logger.warning("Invalid or blocked URL: %s – %s", url, exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except (httpx.HTTPError, RuntimeError) as exc:
        logger.error("Error loading site content from %s: %s", url, exc)
        raise HTTPException(status_code=502, detail=str(exc))

    store = SnapshotContentStore(snapshot)
    try:
        result = await run_in_threadpool(
            find_orphans,
            store,
            config,
            cache=result_cache,
            namespace=_cache_namespace(site, auth is not None),
            max_duration=body.max_duration,
        )
    except ScanTimeoutError as exc:
        logger.error("Orphan scan of %s timed out: %s", url, exc)
        raise HTTPException(
            status_code=503,
            detail=f"{exc} Retry with a larger max_duration.",
            headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
        )

    details = describe_orphans(store, result)

    if format == "csv":
        return StreamingResponse(
            io.StringIO(build_csv(details)),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{csv_filename()}"'},
        )

    start = (body.page - 1) * body.per_page
    return OrphanResponse(
        site_url=url,
        configuration=config,
        orphans_found=len(details),
        page=body.page,
        per_page=body.per_page,
        total_pages=math.ceil(len(details) / body.per_page),
        orphans=details[start : start + body.per_page],
        collisions=result.collisions,
    )


@router.post(
    "/orphans/invalidate",
    response_model=InvalidateResponse,
    summary="Discard cached orphan results after a content change",
    description=(
        "Call whenever posts, custom fields or menus of the site change.  Drops "
        "the cached results of the site's active scan configuration (both the "
        "'all' and 'pages only' variants, with and without navigation menus)."
    ),
)
async def invalidate(body: InvalidateRequest) -> InvalidateResponse:
    url = str(body.url)
    site = urlparse(url).netloc

    update = {}
    if body.redirect_key is not None:
        update["redirect_key"] = body.redirect_key
    if body.protocol_mode is not None:
        update["protocol_mode"] = body.protocol_mode
    config = settings_store.get(site).model_copy(update=update)

    keys = _invalidate_site(site, config)
    return InvalidateResponse(site_url=url, invalidated_keys=keys)
