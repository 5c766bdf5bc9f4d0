"""Resolve title, description, image and canonical URL from a parsed page.

Meta tags are matched positionally: only the first attribute of a ``<meta>``
element is compared against the known discriminators, and the second
attribute supplies the value. ``<meta content="x" name="description">`` is
therefore not recognised. Passing ``strict=True`` switches to matching the
discriminator anywhere on the element and reading ``content`` instead.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, NavigableString, Tag

from .models import MetaTag, SiteMetadata

DESCRIPTION_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("name", "description"),
    ("property", "og:description"),
    ("name", "twitter:description"),
)
IMAGE_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("property", "og:image"),
    ("name", "twitter:image"),
)


def _attribute_pairs(tag: Tag) -> Tuple[Tuple[str, str], ...]:
    pairs = []
    for key, value in tag.attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(value)
        pairs.append((key, "" if value is None else str(value)))
    return tuple(pairs)


def find_head(document: BeautifulSoup) -> Optional[Tag]:
    return document.find("head")


def find_title(head: Tag) -> Optional[str]:
    """Return the first text child of the first ``<title>``, untouched."""
    title = head.find("title")
    if title is None or not title.contents:
        return None
    first = title.contents[0]
    if isinstance(first, NavigableString):
        return str(first)
    return None


def collect_meta_tags(head: Tag) -> List[MetaTag]:
    return [MetaTag(_attribute_pairs(tag)) for tag in head.find_all("meta")]


def match_meta(
    tags: Sequence[MetaTag],
    patterns: Sequence[Tuple[str, str]],
    strict: bool = False,
) -> Optional[str]:
    """Scan ``tags`` in document order and return the value of the first match.

    Within one element the patterns are tried in the given order; the first
    element matching any of them wins.
    """
    for tag in tags:
        if strict:
            for key, expected in patterns:
                if tag.get(key) == expected:
                    content = tag.get("content")
                    if content is not None:
                        return content
            continue

        if len(tag.attributes) < 2:
            continue
        for key, expected in patterns:
            if tag.key == key and tag.value == expected:
                return tag.secondary_value
    return None


def resolve_url(value: Optional[str], base_url: str) -> Optional[str]:
    """Make ``value`` absolute against ``base_url``; keep it raw if that fails."""
    if not value:
        return value
    try:
        if urlsplit(value).scheme:
            return value
        return urljoin(base_url, value)
    except ValueError:
        return value


def find_canonical(head: Tag) -> Optional[str]:
    for link in head.find_all("link"):
        rel = link.get("rel") or ""
        if "canonical" in rel.lower().split():
            href = link.get("href")
            if href:
                return href
    return None


def resolve(document: BeautifulSoup, source_url: str, strict: bool = False) -> SiteMetadata:
    """Build :class:`SiteMetadata` from ``document``. Missing data stays empty."""
    head = find_head(document)
    if head is None:
        return SiteMetadata(source_url=source_url)

    tags = collect_meta_tags(head)
    return SiteMetadata(
        source_url=source_url,
        title=find_title(head),
        description=match_meta(tags, DESCRIPTION_PATTERNS, strict=strict),
        image=resolve_url(match_meta(tags, IMAGE_PATTERNS, strict=strict), source_url),
        canonical_url=resolve_url(find_canonical(head), source_url),
    )
