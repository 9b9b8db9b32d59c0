"""Input normalisation: line splitting, URL syntax checks and canonical rewriting."""

import re
from typing import Iterable, List, Sequence
from urllib.parse import urlparse

# Scheme optional, dotted host with a 2-3 character TLD, optional port and path.
_URL_RE = re.compile(
    r"^(https?://)?([a-z0-9-]+\.)+[a-z0-9]{2,3}(:\d+)?(/[^\s]*)?$",
    re.IGNORECASE,
)
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

DEFAULT_WWW_DOMAINS = ("purina.com",)


def split_input(text: str) -> List[str]:
    """Return the non-blank, trimmed lines of *text* in order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def is_valid_url(value: str) -> bool:
    """Return True when *value* looks like a fetchable URL."""
    return bool(_URL_RE.match(value))


def find_invalid_urls(candidates: Iterable[str]) -> List[str]:
    return [url for url in candidates if not is_valid_url(url)]


def normalize_url(value: str, www_domains: Sequence[str] = DEFAULT_WWW_DOMAINS) -> str:
    """Return *value* with an explicit scheme and, where required, a ``www.`` host.

    A missing scheme becomes ``https://``.  When the host is one of
    *www_domains* (or a subdomain of one) and lacks the ``www.`` prefix,
    ``www.`` is inserted right after the scheme.  Applying the function
    twice is a no-op.
    """
    url = value
    if not _SCHEME_RE.match(url):
        url = f"https://{url}"

    scheme, rest = url.split("://", 1)
    host = (urlparse(url).hostname or "").lower()
    if _in_www_family(host, www_domains) and not host.startswith("www."):
        url = f"{scheme}://www.{rest}"

    return url


def _in_www_family(host: str, www_domains: Sequence[str]) -> bool:
    return any(host == d.lower() or host.endswith("." + d.lower()) for d in www_domains)
