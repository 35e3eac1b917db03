"""Filesystem-backed storage for page records.

Each page becomes a file pair in one flat folder, named by crawl time:
`<crawl_time>.httpi` holds the JSON record and `<crawl_time>.respbin` the raw
response body. Write failures raise `StorageError`, which the crawl loop does not
catch.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

from .constants import JSON_INDENT, PAGE_INFO_SUFFIX, RESPONSE_BODY_SUFFIX
from .errors import StorageError
from .types import Page


LOGGER = logging.getLogger(__name__)


class Storage:
    """Persist page records under a single folder.

    An empty `folder` disables persistence: `save_page` becomes a no-op.
    """

    def __init__(self, folder: str | Path | None) -> None:
        self.folder = Path(folder) if folder else None

    @property
    def enabled(self) -> bool:
        return self.folder is not None

    def save_page(self, page: Page) -> Path | None:
        """Write the body and JSON record of `page`; returns the record path."""

        if self.folder is None:
            return None

        try:
            self.folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create storage folder {self.folder}: {exc}") from exc

        stem = self._free_stem(self.folder, str(page.crawl_time))
        info_path = self.folder / f"{stem}{PAGE_INFO_SUFFIX}"
        body_path = self.folder / f"{stem}{RESPONSE_BODY_SUFFIX}"

        try:
            self._atomic_write_bytes(body_path, page.response_body)
            self._atomic_write_json(info_path, page.to_json())
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"Cannot write page {page.url!r} to {info_path}: {exc}") from exc

        LOGGER.debug("Saved %s to %s", page.url, info_path)
        return info_path

    @staticmethod
    def _free_stem(folder: Path, base: str) -> str:
        # Pages crawled within the same second get a numeric suffix.
        stem = base
        counter = 0
        while (folder / f"{stem}{PAGE_INFO_SUFFIX}").exists():
            counter += 1
            stem = f"{base}_{counter}"
        return stem

    def page_info_files(self, folder: str | Path | None = None) -> list[Path]:
        """Return `.httpi` record paths in `folder` (default: storage folder)."""

        target = Path(folder) if folder else self.folder
        if target is None:
            return []

        try:
            entries = sorted(target.iterdir())
        except OSError as exc:
            raise StorageError(f"Cannot list page records in {target}: {exc}") from exc

        return [path for path in entries if path.is_file() and path.name.endswith(PAGE_INFO_SUFFIX)]

    @staticmethod
    def load_page(path: str | Path, *, with_content: bool = False) -> Page:
        """Load one page record; optionally attach its `.respbin` body."""

        info_path = Path(path)
        try:
            payload = json.loads(info_path.read_text(encoding="utf-8"))
            page = Page.from_json(payload)
        except (OSError, ValueError, TypeError) as exc:
            raise StorageError(f"Cannot load page record {info_path}: {exc}") from exc

        if with_content:
            body_path = info_path.with_name(
                info_path.name[: -len(PAGE_INFO_SUFFIX)] + RESPONSE_BODY_SUFFIX
            )
            try:
                page.response_body = body_path.read_bytes()
            except OSError as exc:
                LOGGER.warning("Missing response body for %s: %s", info_path, exc)

        return page

    @staticmethod
    def _atomic_write_bytes(path: Path, data: bytes) -> None:
        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
        )
        try:
            with os.fdopen(tmp_fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

    @classmethod
    def _atomic_write_json(cls, path: Path, payload: Mapping[str, Any]) -> None:
        content = json.dumps(payload, ensure_ascii=False, indent=JSON_INDENT) + "\n"
        cls._atomic_write_bytes(path, content.encode("utf-8"))


__all__ = ["Storage"]
