"""Keep site loading away from internal networks.

:func:`validate_url` checks a single URL.  :func:`guard_request` is an httpx
request hook running the same check on every request a client sends,
redirect hops included, so a public site cannot bounce the loader onto an
internal address.
"""

import ipaddress
import logging
import socket
from typing import Iterator, Union
from urllib.parse import urlsplit

import httpx

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = {"http", "https"}


def _resolved_addresses(hostname: str) -> Iterator[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror:
        # Unresolvable hosts fail later with a connection error.
        return
    for info in infos:
        # Drop IPv6 zone ids ("fe80::1%eth0")
        raw_ip = str(info[4][0]).split("%")[0]
        try:
            yield ipaddress.ip_address(raw_ip)
        except ValueError:
            continue


def _is_private_address(hostname: str) -> bool:
    """Return True if any address of *hostname* is not publicly routable."""
    return any(
        addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved
        for addr in _resolved_addresses(hostname)
    )


def validate_url(url: str) -> None:
    """Raise ValueError unless *url* is an http(s) URL on a public host."""
    parts = urlsplit(url)
    if parts.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parts.scheme}' is not allowed. Use http or https.")
    if not parts.hostname:
        raise ValueError("URL must have a valid hostname.")
    if _is_private_address(parts.hostname):
        raise ValueError(f"Requests to private/internal addresses are not allowed: {parts.hostname}")


async def guard_request(request: httpx.Request) -> None:
    """httpx ``request`` event hook: refuse to send *request* to a blocked URL.

    Raises:
        ValueError: from :func:`validate_url`; the request is never sent.
    """
    try:
        validate_url(str(request.url))
    except ValueError:
        logger.warning("Blocked request to %s", request.url)
        raise
