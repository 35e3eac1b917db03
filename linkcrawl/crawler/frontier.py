"""In-memory crawl frontier: every known URL plus its visited flag."""

from __future__ import annotations

from typing import Iterable

from .url import host_of, registrable_domain


class Frontier:
    """Set of known URLs with a visited/unvisited flag per entry.

    - Keys are raw URL strings compared by exact equality.
    - Re-discovering a known URL never resets its visited flag.
    - `next` returns an arbitrary unvisited URL; callers must not rely on order.

    Not thread-safe: the crawl loop is the only mutator. A parallel crawler
    would need to make `next` + `mark_visited` one atomic step.
    """

    def __init__(self, *, visited_urls: Iterable[str] | None = None) -> None:
        self._links: dict[str, bool] = {}
        self._unvisited: set[str] = set()

        if visited_urls:
            self.add_visited(visited_urls)

    def add_discovered(self, urls: Iterable[str]) -> int:
        """Insert unknown URLs as unvisited; returns how many were new."""

        added = 0
        for url in urls:
            if url in self._links:
                continue
            self._links[url] = False
            self._unvisited.add(url)
            added += 1
        return added

    def add_visited(self, urls: Iterable[str]) -> None:
        """Insert or flag URLs as already crawled."""

        for url in urls:
            self._links[url] = True
            self._unvisited.discard(url)

    def mark_visited(self, url: str) -> None:
        self.add_visited([url])

    def is_visited(self, url: str) -> bool:
        return self._links.get(url, False)

    def next(self) -> str | None:
        """Return any unvisited URL, or `None` when the frontier is exhausted."""

        for url in self._unvisited:
            return url
        return None

    def prune_to_domain(self, scope_url: str) -> int:
        """Drop entries outside `scope_url`'s registrable domain.

        Entries that cannot be parsed are dropped as well. Returns the number of
        removed entries.
        """

        scope_domain = registrable_domain(host_of(scope_url))
        removed = 0
        for url in list(self._links):
            try:
                keep = registrable_domain(host_of(url)) == scope_domain
            except ValueError:
                keep = False
            if keep:
                continue
            del self._links[url]
            self._unvisited.discard(url)
            removed += 1
        return removed

    def urls(self) -> set[str]:
        """Return a snapshot of all known URLs."""

        return set(self._links)

    def pending_count(self) -> int:
        return len(self._unvisited)

    def visited_count(self) -> int:
        return len(self._links) - len(self._unvisited)

    def snapshot(self) -> dict[str, int]:
        """Return frontier counters for logs/summary reporting."""

        return {
            "known_urls": len(self._links),
            "visited": self.visited_count(),
            "pending": self.pending_count(),
        }

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, url: object) -> bool:
        return url in self._links


__all__ = ["Frontier"]
