"""Crawl loop orchestration: select, fetch, extract, persist, expand."""

from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import Any, Callable

from .config import CrawlConfig
from .errors import CrawlAbortedError, FetchError, ResumeError, StorageError
from .fetcher import Fetcher
from .frontier import Frontier
from .storage import Storage
from .types import CrawlStats, Page
from .url import filter_same_domain, url_scheme


LOGGER = logging.getLogger(__name__)

BeforeCrawlHook = Callable[[str], str]
AfterCrawlHook = Callable[[Page, Exception | None], list[str]]


class Crawler:
    """Orchestrates frontier, fetcher, and storage for one crawl session.

    Hooks:
    - `before_crawl(url) -> url` may rewrite a URL before it is fetched. Raising
      from it aborts the crawl with `CrawlAbortedError`.
    - `after_crawl(page, fetch_error) -> links` replaces the links used to expand
      the frontier. Raising from it is logged and the extracted links are used.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        fetcher: Fetcher | None = None,
        storage: Storage | None = None,
        frontier: Frontier | None = None,
        before_crawl: BeforeCrawlHook | None = None,
        after_crawl: AfterCrawlHook | None = None,
    ) -> None:
        self.config = config

        self.fetcher = fetcher if fetcher is not None else Fetcher(config)
        self.storage = storage if storage is not None else Storage(config.storage_folder)
        self.frontier = frontier if frontier is not None else Frontier()
        self.before_crawl = before_crawl
        self.after_crawl = after_crawl

        self.stats = CrawlStats()
        self.page_count = 0

        self._owns_fetcher = fetcher is None

    def crawl(self, start_url: str | None = None) -> int:
        """Crawl until the frontier has no unvisited URL left.

        Returns the number of pages crawled by this call.
        """

        crawled_before = self.page_count
        crawl_start_first = False

        if start_url:
            url_scheme(start_url)  # unparsable seeds raise ValueError here
            self.frontier.add_discovered([start_url])
            if self.frontier.is_visited(start_url):
                LOGGER.info("Start url already crawled, skipping: %s", start_url)
            else:
                crawl_start_first = True

        while True:
            if crawl_start_first:
                url = start_url
                crawl_start_first = False
            else:
                url = self.frontier.next()

            if url is None:
                LOGGER.info("No more links. Crawled %d page(s).", self.page_count)
                break

            if self._crawl_url(url, start_url) and self.config.delay_ms > 0:
                time.sleep(self.config.delay_ms / 1000)

        self.stats.finish()
        return self.page_count - crawled_before

    def _crawl_url(self, url: str, start_url: str | None) -> bool:
        """Process one frontier URL; returns True when a fetch was attempted."""

        self.frontier.mark_visited(url)
        url = self._apply_before_crawl(url)
        self.frontier.mark_visited(url)

        try:
            scheme = url_scheme(url)
        except ValueError as exc:
            LOGGER.warning("Error while parsing url %r: %s", url, exc)
            self.stats.skipped_invalid_url += 1
            return False

        if scheme not in self.config.valid_schemes:
            LOGGER.info("Scheme invalid, skipping url: %s", url)
            self.stats.skipped_scheme += 1
            return False

        fetch_error: FetchError | None = None
        try:
            page = self.fetcher.fetch(url)
        except FetchError as exc:
            LOGGER.warning("Fetch failed for %s: %s", url, exc)
            self.stats.fetch_errors += 1
            fetch_error = exc
            page = exc.page

        LOGGER.info(
            "Fetched site: %s status=%d bytes=%d",
            url,
            page.response.status_code,
            len(page.response_body),
        )

        links = self._apply_after_crawl(page, fetch_error)

        self.storage.save_page(page)
        self.page_count += 1
        self.stats.pages_crawled += 1

        if start_url and self.config.scope_to_domain:
            links = filter_same_domain(links, start_url)
        self.stats.links_offered += len(links)
        self.frontier.add_discovered(links)
        return True

    def _apply_before_crawl(self, url: str) -> str:
        if self.before_crawl is None:
            return url
        try:
            return self.before_crawl(url)
        except Exception as exc:
            raise CrawlAbortedError(url) from exc

    def _apply_after_crawl(self, page: Page, fetch_error: Exception | None) -> list[str]:
        links = list(page.resp_info.hrefs)
        if self.after_crawl is None:
            return links
        try:
            return list(self.after_crawl(page, fetch_error))
        except Exception as exc:
            LOGGER.warning("After page crawl error for %s: %s", page.url, exc)
            self.stats.hook_errors += 1
            return links

    def resume(self, folder: str | Path | None = None) -> int:
        """Replay persisted page records into the frontier.

        Each record's URL (after `before_crawl`) is marked visited and its links
        (after `after_crawl`) are added as discovered. Domain scoping is not
        applied here. Returns the number of records replayed; a record that
        cannot be loaded raises `ResumeError` carrying the partial count.
        """

        target = folder if folder is not None else self.config.storage_folder
        if not target:
            return 0

        files = self.storage.page_info_files(target)
        count = 0

        for path in files:
            try:
                page = self.storage.load_page(path)
            except StorageError as exc:
                raise ResumeError(str(exc), count) from exc

            url = page.url
            if self.before_crawl is not None:
                try:
                    url = self.before_crawl(url)
                except Exception as exc:
                    LOGGER.warning("before_crawl rejected stored url %s: %s", page.url, exc)
                    url = page.url

            links = self._apply_after_crawl(page, None)

            self.frontier.mark_visited(page.url)
            self.frontier.mark_visited(url)
            self.frontier.add_discovered(links)
            count += 1

        self.stats.pages_resumed += count
        LOGGER.info("Resumed %d page record(s) from %s", count, target)
        return count

    def prune_to_domain(self, scope_url: str) -> int:
        """Drop frontier entries outside `scope_url`'s registrable domain."""

        removed = self.frontier.prune_to_domain(scope_url)
        LOGGER.info("Pruned %d url(s) outside the domain of %s", removed, scope_url)
        return removed

    def summary(self) -> dict[str, Any]:
        return {
            "page_count": self.page_count,
            "storage_folder": str(self.storage.folder) if self.storage.enabled else None,
            "frontier": self.frontier.snapshot(),
            "stats": self.stats.to_json(),
        }

    def close(self) -> None:
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self) -> "Crawler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "AfterCrawlHook",
    "BeforeCrawlHook",
    "Crawler",
]
