"""URL resolution, registrable-domain scoping, and scheme helpers.

URLs are handled as raw strings: resolution is the only transformation applied, so
two links that differ by a trailing slash or query order stay distinct.
"""

from __future__ import annotations

from typing import Iterable, Sequence
from urllib.parse import urljoin, urlsplit

from .constants import DEFAULT_VALID_SCHEMES


def resolve_url(base_url: str, href: str | None) -> str | None:
    """Resolve a possibly relative reference against `base_url`.

    Returns `None` when either side cannot be parsed.
    """

    if href is None:
        return None

    try:
        return urljoin(base_url, href.strip())
    except ValueError:
        return None


def host_of(url: str) -> str:
    """Return the raw host of `url` with userinfo and port removed.

    Case is preserved. Raises `ValueError` for unparsable URLs.
    """

    netloc = urlsplit(url).netloc
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        return host if end < 0 else host[: end + 1]
    return host.partition(":")[0]


def registrable_domain(host: str) -> str:
    """Return the last two dot-separated labels of `host`, or `host` itself."""

    labels = host.split(".")
    if len(labels) >= 2:
        return ".".join(labels[-2:])
    return host


def is_same_domain(url: str, other_url: str) -> bool:
    """Return True when both URLs share a registrable domain (case-sensitive)."""

    return registrable_domain(host_of(url)) == registrable_domain(host_of(other_url))


def filter_same_domain(urls: Iterable[str], scope_url: str) -> list[str]:
    """Keep URLs sharing `scope_url`'s registrable domain, preserving order.

    Unparsable URLs are dropped.
    """

    scope_domain = registrable_domain(host_of(scope_url))
    kept: list[str] = []
    for url in urls:
        try:
            domain = registrable_domain(host_of(url))
        except ValueError:
            continue
        if domain == scope_domain:
            kept.append(url)
    return kept


def url_scheme(url: str) -> str:
    """Return the lowercase scheme of `url`; raises `ValueError` if unparsable."""

    return urlsplit(url).scheme.lower()


def has_valid_scheme(url: str, valid_schemes: Sequence[str] = DEFAULT_VALID_SCHEMES) -> bool:
    """Return True if the URL scheme is in `valid_schemes`."""

    try:
        scheme = url_scheme(url)
    except ValueError:
        return False
    return scheme in {item.lower() for item in valid_schemes}


__all__ = [
    "filter_same_domain",
    "has_valid_scheme",
    "host_of",
    "is_same_domain",
    "registrable_domain",
    "resolve_url",
    "url_scheme",
]
