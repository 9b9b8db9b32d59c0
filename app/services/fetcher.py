import asyncio
import ipaddress
import logging
import socket
from typing import Literal, NamedTuple, Optional
from urllib.parse import urljoin, urlparse

import httpx

from app.config import Settings, get_settings
from app.exceptions import FetchError, NetworkError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = {"http", "https"}

TransportMode = Literal["direct", "proxied"]


class TransportConfig(NamedTuple):
    mode: TransportMode = "direct"
    proxy_base: str = "https://cors-anywhere.herokuapp.com/"
    timeout: float = 10.0
    max_content_size: int = 10 * 1024 * 1024
    max_redirects: int = 10

    @classmethod
    def from_settings(
        cls, mode: Optional[TransportMode] = None, settings: Optional[Settings] = None
    ) -> "TransportConfig":
        settings = settings or get_settings()
        return cls(
            mode=mode or settings.default_transport,
            proxy_base=settings.proxy_base,
            timeout=settings.fetch_timeout,
            max_content_size=settings.max_content_size,
            max_redirects=settings.max_redirects,
        )


async def _is_private_address(hostname: str, timeout: Optional[float] = None) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address.

    Resolution runs on the event loop's resolver so concurrent fetches do not
    wait on each other's lookups.
    """
    loop = asyncio.get_running_loop()
    try:
        infos = await asyncio.wait_for(loop.getaddrinfo(hostname, None), timeout)
    except socket.gaierror:
        return False
    except asyncio.TimeoutError as exc:
        raise ValueError(f"DNS lookup for '{hostname}' timed out.") from exc

    for info in infos:
        # Strip IPv6 zone IDs (e.g. "::1%eth0" → "::1")
        raw_ip = info[4][0].split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


async def _validate_url(url: str, timeout: Optional[float] = None) -> None:
    """Raise ValueError if *url* fails SSRF / scheme validation."""
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL must have a valid hostname.")

    if await _is_private_address(hostname, timeout):
        raise ValueError("Requests to private/internal addresses are not allowed.")


def build_request_url(url: str, transport: TransportConfig) -> str:
    """Return the address actually requested for *url* under *transport*."""
    if transport.mode == "proxied":
        return f"{transport.proxy_base}{url}"
    return url


async def fetch_html(
    url: str,
    transport: TransportConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Fetch *url* through *transport* and return the response body as text.

    Redirects are followed manually so that every hop is validated against
    the SSRF rules before the next request is made.  No retries are made.

    Raises:
        FetchError: the server answered with a non-2xx status.
        NetworkError: the URL was rejected, the transport failed, or the body
            exceeded ``max_content_size``.
    """
    request_url = build_request_url(url, transport)
    try:
        await _validate_url(url, transport.timeout)
        if request_url != url:
            await _validate_url(request_url, transport.timeout)

        if client is not None:
            return await _fetch(client, url, request_url, transport)
        async with httpx.AsyncClient(follow_redirects=False, timeout=transport.timeout) as own_client:
            return await _fetch(own_client, url, request_url, transport)
    except ValueError as exc:
        raise NetworkError(url, str(exc)) from exc
    except httpx.TimeoutException as exc:
        raise NetworkError(url, "The target URL timed out.") from exc
    except httpx.RequestError as exc:
        raise NetworkError(url, str(exc) or type(exc).__name__) from exc


async def _fetch(
    client: httpx.AsyncClient, url: str, request_url: str, transport: TransportConfig
) -> str:
    current_url = request_url
    for _ in range(transport.max_redirects + 1):
        async with client.stream("GET", current_url, follow_redirects=False) as response:
            if response.is_redirect:
                location = response.headers.get("location", "")
                next_url = urljoin(current_url, location)
                await _validate_url(next_url, transport.timeout)
                logger.debug("Redirect %s -> %s", current_url, next_url)
                current_url = next_url
                continue

            if not response.is_success:
                raise FetchError(url, response.status_code, response.reason_phrase)

            content_length = response.headers.get("content-length")
            if content_length and int(content_length) > transport.max_content_size:
                raise NetworkError(url, "Response body exceeds the maximum allowed size.")

            chunks = []
            total = 0
            async for chunk in response.aiter_bytes():
                total += len(chunk)
                if total > transport.max_content_size:
                    raise NetworkError(url, "Response body exceeds the maximum allowed size.")
                chunks.append(chunk)

            return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")

    raise NetworkError(url, "Too many redirects.")
