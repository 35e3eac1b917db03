"""Exception taxonomy for the crawler.

Recoverable errors (`FetchError`) are logged by the crawl loop and the page is still
recorded. `CrawlAbortedError` and `StorageError` stop the crawl.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import Page


class CrawlError(Exception):
    """Base class for crawler errors."""


class FetchError(CrawlError):
    """Transport-level failure while fetching one URL.

    `page` holds the partially assembled record (request and timing fields only).
    """

    def __init__(self, message: str, page: "Page") -> None:
        super().__init__(message)
        self.page = page


class CrawlAbortedError(CrawlError):
    """The pre-fetch hook rejected a URL; the whole crawl stops."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Crawl aborted by before_crawl hook at {url!r}")
        self.url = url


class StorageError(CrawlError):
    """Page records could not be written or read."""


class ResumeError(CrawlError):
    """Replaying persisted records failed part-way through."""

    def __init__(self, message: str, count: int) -> None:
        super().__init__(message)
        self.count = count


__all__ = [
    "CrawlAbortedError",
    "CrawlError",
    "FetchError",
    "ResumeError",
    "StorageError",
]
