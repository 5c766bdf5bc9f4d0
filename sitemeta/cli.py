"""Command-line entry point for fetching link-preview metadata."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from .client import SiteMetaClient, validate_url
from .config import ExtractionConfig
from .errors import SiteMetaError
from .models import SiteMetadata

logger = logging.getLogger("sitemeta.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    defaults = ExtractionConfig.from_env()
    parser = argparse.ArgumentParser(
        description="Fetch title, description and preview image for web pages.",
    )
    parser.add_argument("urls", nargs="+", help="One or more URLs to inspect")
    parser.add_argument(
        "--http-timeout",
        type=float,
        default=defaults.http_timeout,
        help="Timeout in seconds for the plain HTTP fetch",
    )
    parser.add_argument(
        "--browser-timeout",
        type=float,
        default=defaults.browser_timeout,
        help="Overall timeout in seconds for the headless-browser render",
    )
    parser.add_argument(
        "--settle-delay",
        type=float,
        default=defaults.settle_delay,
        help="Seconds to wait after the body is ready before capturing HTML",
    )
    parser.add_argument(
        "--user-agent",
        default=defaults.user_agent,
        help="User-Agent header sent with the HTTP fetch",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=defaults.strict_meta_match,
        help="Match meta tags by attribute name instead of attribute position",
    )
    parser.add_argument(
        "--static-only",
        action="store_true",
        help="Skip the headless-browser fallback",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print one JSON object per URL",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def format_metadata(meta: SiteMetadata) -> str:
    lines = [
        f"Title: {meta.title or ''}",
        f"Description: {meta.description or ''}",
        f"Image: {meta.image or ''}",
        f"URL: {meta.source_url}",
    ]
    if meta.canonical_url:
        lines.append(f"Canonical: {meta.canonical_url}")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = ExtractionConfig(
        http_timeout=args.http_timeout,
        browser_timeout=args.browser_timeout,
        settle_delay=args.settle_delay,
        user_agent=args.user_agent,
        strict_meta_match=args.strict,
    )

    failures = 0
    with SiteMetaClient(config) as client:
        for idx, url in enumerate(args.urls):
            try:
                if args.static_only:
                    meta = client.extract_static(validate_url(url))
                else:
                    meta = client.get_site_meta(url)
            except SiteMetaError as exc:
                logger.error("Failed to fetch metadata for %s: %s", url, exc)
                failures += 1
                continue

            if args.json:
                sys.stdout.write(json.dumps(meta.to_dict(), ensure_ascii=False) + "\n")
            else:
                if idx:
                    sys.stdout.write("\n")
                sys.stdout.write(format_metadata(meta) + "\n")
    sys.stdout.flush()

    logger.debug("%d/%d URLs succeeded", len(args.urls) - failures, len(args.urls))
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
