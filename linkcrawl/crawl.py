"""CLI entrypoint for crawler execution."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any

from linkcrawl.crawler import (
    CrawlAbortedError,
    CrawlConfig,
    Crawler,
    ResumeError,
    StorageError,
    load_config,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl a site breadth-style and store every fetched page.",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to JSON/YAML crawl config.",
    )
    parser.add_argument(
        "--seed",
        type=str,
        default=None,
        help="Start URL. Optional when resuming an existing storage folder.",
    )
    parser.add_argument(
        "--storage_folder",
        type=str,
        default=None,
        help="Folder for .httpi/.respbin page files. Empty string disables storage.",
    )
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Replay page records found in the storage folder before crawling.",
    )
    parser.add_argument(
        "--prune_to_seed_domain",
        action="store_true",
        help="After resuming, drop known urls outside the seed's domain.",
    )
    parser.add_argument(
        "--scope_to_domain",
        dest="scope_to_domain",
        action="store_true",
        default=None,
        help="Only follow links on the seed's registrable domain.",
    )
    parser.add_argument(
        "--include_hidden_links",
        dest="include_hidden_links",
        action="store_true",
        default=None,
        help="Keep anchors hidden with display:none or visibility:hidden.",
    )

    parser.add_argument("--delay_ms", type=int, default=None)
    parser.add_argument("--timeout_seconds", type=float, default=None)
    parser.add_argument("--crawler_id", type=int, default=None)
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        help="Request header as 'Name: value' (repeatable).",
    )
    parser.add_argument(
        "--scheme",
        action="append",
        default=[],
        help="Allowed url scheme (repeatable). Overrides config schemes if provided.",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification.",
    )

    parser.add_argument(
        "--print_stats_json",
        action="store_true",
        help="Print full stats JSON in stdout after run.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    return parser.parse_args(argv)


def _parse_header_specs(specs: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for spec in specs:
        name, sep, value = spec.partition(":")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid --header '{spec}'. Use 'Name: value'.")
        headers[name] = value.strip()
    return headers


def build_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config is not None:
        payload: dict[str, Any] = load_config(args.config).to_dict()
    else:
        payload = CrawlConfig().to_dict()

    if args.storage_folder is not None:
        payload["storage_folder"] = args.storage_folder
    if args.scope_to_domain is not None:
        payload["scope_to_domain"] = args.scope_to_domain
    if args.include_hidden_links is not None:
        payload["include_hidden_links"] = args.include_hidden_links

    if args.delay_ms is not None:
        payload["delay_ms"] = args.delay_ms
    if args.timeout_seconds is not None:
        payload["timeout_seconds"] = args.timeout_seconds
    if args.crawler_id is not None:
        payload["crawler_id"] = args.crawler_id

    if args.header:
        payload["headers"] = {**payload["headers"], **_parse_header_specs(args.header)}
    if args.scheme:
        payload["valid_schemes"] = list(args.scheme)
    if args.insecure:
        payload["verify_tls"] = False

    return CrawlConfig.from_dict(payload)


def setup_logging(log_path: Path | None, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # urllib3 logs every connection at DEBUG; keep crawler logs readable.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def print_summary(result: dict[str, Any], *, print_stats_json: bool) -> None:
    stats = result.get("stats", {})
    frontier = result.get("frontier", {})

    print("\n=== Crawl Complete ===")
    print(f"pages: {result.get('page_count')}")
    print(f"storage_folder: {result.get('storage_folder')}")

    print("\n--- Frontier ---")
    for key in ["known_urls", "visited", "pending"]:
        if key in frontier:
            print(f"{key}: {frontier[key]}")

    print("\n--- Core Stats ---")
    for key in [
        "pages_crawled",
        "pages_resumed",
        "fetch_errors",
        "skipped_scheme",
        "skipped_invalid_url",
        "hook_errors",
    ]:
        if key in stats:
            print(f"{key}: {stats[key]}")

    if print_stats_json:
        print("\n--- Full Stats JSON ---")
        print(json.dumps(stats, indent=2, sort_keys=True))


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = build_config(args)
    except Exception as exc:
        setup_logging(None, verbose=args.verbose)
        logging.error("Failed to build config: %s", exc)
        return 2

    log_path = Path(config.storage_folder) / "crawl.log" if config.persist_pages else None
    setup_logging(log_path, verbose=args.verbose)

    if not args.seed and not args.resume:
        logging.error("Nothing to do: pass --seed and/or --resume.")
        return 2

    logging.info(
        "Starting crawl: seed=%s, storage_folder=%s, resume=%s",
        args.seed,
        config.storage_folder or "(disabled)",
        args.resume,
    )

    try:
        with Crawler(config) as crawler:
            if args.resume:
                crawler.resume()
                if args.prune_to_seed_domain and args.seed:
                    crawler.prune_to_domain(args.seed)
            crawler.crawl(args.seed)
            result = crawler.summary()
    except KeyboardInterrupt:
        logging.error("Interrupted by user")
        return 130
    except ResumeError as exc:
        logging.error("Resume failed after %d record(s): %s", exc.count, exc)
        return 1
    except (CrawlAbortedError, StorageError):
        logging.exception("Crawl stopped")
        return 1
    except Exception:
        logging.exception("Crawl execution failed")
        return 1

    print_summary(result, print_stats_json=args.print_stats_json)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
