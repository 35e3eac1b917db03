"""Single-request page fetching and page-record assembly."""

from __future__ import annotations

from hashlib import sha1
import logging
import time
from typing import Mapping

import requests

from .config import CrawlConfig
from .constants import (
    DEFAULT_CONTENT_MIME,
    DEFAULT_HTTP_PROTO,
    REDIRECT_STATUS_MAX,
    REDIRECT_STATUS_MIN,
)
from .errors import FetchError
from .parsers import HTMLExtractor, HTMLExtractorConfig, page_from_data
from .types import Cookie, Page, PageRequest, PageResponse
from .url import resolve_url


LOGGER = logging.getLogger(__name__)

_HTTP_VERSIONS = {9: "HTTP/0.9", 10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2.0"}


def url_uid(url: str) -> str:
    """Stable content-independent identifier for a URL (SHA-1 hex)."""

    return sha1(url.encode("utf-8")).hexdigest()


def content_mime(headers: Mapping[str, str]) -> str:
    """Return the media type part of `Content-Type`, defaulting to text/html."""

    mime = (headers.get("Content-Type") or "").split(";", maxsplit=1)[0].strip()
    return mime or DEFAULT_CONTENT_MIME


def redirect_location(status_code: int, headers: Mapping[str, str], base_url: str) -> str | None:
    """Return the absolute redirect target for a 3xx response, if any."""

    if not REDIRECT_STATUS_MIN <= status_code < REDIRECT_STATUS_MAX:
        return None
    location = headers.get("Location")
    if not location:
        return None
    return resolve_url(base_url, location)


def _parse_cookie_header(value: str | None) -> list[Cookie]:
    cookies: list[Cookie] = []
    for chunk in (value or "").split(";"):
        name, sep, cookie_value = chunk.strip().partition("=")
        if sep and name:
            cookies.append(Cookie(name=name, value=cookie_value))
    return cookies


def _response_cookies(response: requests.Response) -> list[Cookie]:
    return [
        Cookie(
            name=cookie.name,
            value=cookie.value or "",
            domain=cookie.domain or "",
            httponly=cookie.has_nonstandard_attr("HttpOnly"),
        )
        for cookie in response.cookies
    ]


def _content_length(headers: Mapping[str, str], body: bytes) -> int:
    # Chunked or malformed responses report the body size.
    try:
        return int(headers.get("Content-Length", ""))
    except ValueError:
        return len(body)


def _response_proto(response: requests.Response) -> str:
    version = getattr(response.raw, "version", None)
    return _HTTP_VERSIONS.get(version, DEFAULT_HTTP_PROTO)


class Fetcher:
    """Fetch one URL per call with `requests`, never following redirects.

    3xx responses come back as ordinary pages; their `Location` target is added
    to the page links so the crawl loop discovers it like any other link.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        session: requests.Session | None = None,
        extractor: HTMLExtractor | None = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.extractor = extractor or HTMLExtractor(
            HTMLExtractorConfig(remove_invisibles=config.remove_invisibles)
        )
        self._owns_session = session is None

    def fetch(self, url: str, method: str = "GET") -> Page:
        """Fetch `url` and assemble its page record.

        Raises `FetchError` on transport failures; the error's `page` carries the
        request and timing fields.
        """

        started = time.perf_counter()
        prepared: requests.PreparedRequest | None = None

        try:
            prepared = self.session.prepare_request(
                requests.Request(method, url, headers=self.config.headers)
            )
            response = self.session.send(
                prepared,
                allow_redirects=False,
                timeout=self.config.timeout_seconds,
                verify=self.config.verify_tls,
            )
        except requests.RequestException as exc:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            page = self._bare_page(url, prepared, elapsed_ms)
            page.error = str(exc) or exc.__class__.__name__
            raise FetchError(page.error, page) from exc

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return self.page_from_response(url, prepared, response, elapsed_ms)

    def page_from_response(
        self,
        url: str,
        prepared: requests.PreparedRequest,
        response: requests.Response,
        elapsed_ms: int,
    ) -> Page:
        body = response.content or b""

        page = page_from_data(body, url, extractor=self.extractor)
        page.response = PageResponse(
            headers=dict(response.headers),
            proto=_response_proto(response),
            status_code=response.status_code,
            content_length=_content_length(response.headers, body),
            content_mime=content_mime(response.headers),
            cookies=_response_cookies(response),
        )

        location = redirect_location(response.status_code, response.headers, url)
        if location is not None and location not in page.resp_info.hrefs:
            page.resp_info.hrefs.append(location)

        self._fill_request_fields(page, url, prepared, elapsed_ms)
        return page

    def _bare_page(
        self,
        url: str,
        prepared: requests.PreparedRequest | None,
        elapsed_ms: int,
    ) -> Page:
        page = Page()
        self._fill_request_fields(page, url, prepared, elapsed_ms)
        return page

    def _fill_request_fields(
        self,
        page: Page,
        url: str,
        prepared: requests.PreparedRequest | None,
        elapsed_ms: int,
    ) -> None:
        page.url = url
        page.uid = url_uid(url)
        page.crawl_time = int(time.time())
        page.resp_duration = elapsed_ms
        page.crawler_id = self.config.crawler_id

        if prepared is None:
            page.request = PageRequest(headers=dict(self.config.headers), proto=DEFAULT_HTTP_PROTO)
            return

        headers = dict(prepared.headers)
        body = prepared.body or b""
        page.request = PageRequest(
            headers=headers,
            proto=DEFAULT_HTTP_PROTO,
            content_length=len(body),
            cookies=_parse_cookie_header(headers.get("Cookie")),
        )

    def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""

        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "Fetcher",
    "content_mime",
    "redirect_location",
    "url_uid",
]
