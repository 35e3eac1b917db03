"""Typed crawler configuration with JSON/YAML load/save helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml  # type: ignore

from .constants import (
    DEFAULT_CRAWLER_ID,
    DEFAULT_DELAY_MS,
    DEFAULT_HTTP_HEADERS,
    DEFAULT_INCLUDE_HIDDEN_LINKS,
    DEFAULT_SCOPE_TO_DOMAIN,
    DEFAULT_STORAGE_FOLDER,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_VALID_SCHEMES,
    DEFAULT_VERIFY_TLS,
    JSON_INDENT,
    SUPPORTED_CONFIG_SUFFIXES,
)
from .types import JSONDict


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"Invalid bool for '{key}': {value!r}")


def _as_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid int for '{key}': {value!r}") from exc


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid float for '{key}': {value!r}") from exc


def _as_str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Invalid list for '{key}': {value!r}")
    return [str(item) for item in value]


def _coerce_headers(value: Any) -> dict[str, str]:
    """Collapse header mappings to single values.

    A list value keeps only its first element; an empty list drops the header.
    """

    if not isinstance(value, Mapping):
        raise ValueError(f"Invalid headers mapping: {value!r}")

    headers: dict[str, str] = {}
    for key, raw in value.items():
        if isinstance(raw, (list, tuple)):
            if not raw:
                continue
            raw = raw[0]
        headers[str(key)] = str(raw)
    return headers


@dataclass(slots=True)
class CrawlConfig:
    """Top-level crawler configuration used by crawler/fetcher/storage."""

    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HTTP_HEADERS))
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    delay_ms: int = DEFAULT_DELAY_MS
    include_hidden_links: bool = DEFAULT_INCLUDE_HIDDEN_LINKS
    valid_schemes: list[str] = field(default_factory=lambda: list(DEFAULT_VALID_SCHEMES))
    scope_to_domain: bool = DEFAULT_SCOPE_TO_DOMAIN
    storage_folder: str = DEFAULT_STORAGE_FOLDER
    verify_tls: bool = DEFAULT_VERIFY_TLS
    crawler_id: int = DEFAULT_CRAWLER_ID

    def __post_init__(self) -> None:
        self.headers = _coerce_headers(self.headers)
        self.valid_schemes = [
            scheme.strip().lower() for scheme in self.valid_schemes if scheme and scheme.strip()
        ]
        self.storage_folder = (self.storage_folder or "").strip()

        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        if not self.valid_schemes:
            raise ValueError("valid_schemes must list at least one scheme")

    @property
    def persist_pages(self) -> bool:
        """Whether fetched pages are written to `storage_folder`."""

        return bool(self.storage_folder)

    @property
    def remove_invisibles(self) -> bool:
        return not self.include_hidden_links

    def to_dict(self) -> JSONDict:
        """Serialize config for logs and reproducibility."""

        return {
            "headers": dict(self.headers),
            "timeout_seconds": self.timeout_seconds,
            "delay_ms": self.delay_ms,
            "include_hidden_links": self.include_hidden_links,
            "valid_schemes": list(self.valid_schemes),
            "scope_to_domain": self.scope_to_domain,
            "storage_folder": self.storage_folder,
            "verify_tls": self.verify_tls,
            "crawler_id": self.crawler_id,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CrawlConfig":
        """Build config from a parsed dictionary; missing keys take defaults."""

        unknown = set(payload) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        return cls(
            headers=_coerce_headers(payload.get("headers", DEFAULT_HTTP_HEADERS)),
            timeout_seconds=_as_float(
                payload.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
                "timeout_seconds",
            ),
            delay_ms=_as_int(payload.get("delay_ms", DEFAULT_DELAY_MS), "delay_ms"),
            include_hidden_links=_as_bool(
                payload.get("include_hidden_links", DEFAULT_INCLUDE_HIDDEN_LINKS),
                "include_hidden_links",
            ),
            valid_schemes=_as_str_list(
                payload.get("valid_schemes", DEFAULT_VALID_SCHEMES),
                "valid_schemes",
            ),
            scope_to_domain=_as_bool(
                payload.get("scope_to_domain", DEFAULT_SCOPE_TO_DOMAIN),
                "scope_to_domain",
            ),
            storage_folder=str(payload.get("storage_folder", DEFAULT_STORAGE_FOLDER) or ""),
            verify_tls=_as_bool(payload.get("verify_tls", DEFAULT_VERIFY_TLS), "verify_tls"),
            crawler_id=_as_int(payload.get("crawler_id", DEFAULT_CRAWLER_ID), "crawler_id"),
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML config at {path} must be a mapping at top level")
    return data


def load_config(path: str | Path) -> CrawlConfig:
    """Load CrawlConfig from JSON/YAML path."""

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ValueError(
            f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
        )

    if suffix == ".json":
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    else:
        payload = _load_yaml(config_path)

    if not isinstance(payload, dict):
        raise ValueError(f"Config at {config_path} must be a mapping")

    return CrawlConfig.from_dict(payload)


def save_config(config: CrawlConfig, path: str | Path) -> None:
    """Save CrawlConfig as JSON or YAML based on file extension."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = out_path.suffix.lower()
    payload = config.to_dict()

    if suffix == ".json":
        out_path.write_text(
            json.dumps(payload, indent=JSON_INDENT, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        return

    if suffix in {".yaml", ".yml"}:
        out_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        return

    raise ValueError(
        f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
    )


__all__ = [
    "CrawlConfig",
    "load_config",
    "save_config",
]
