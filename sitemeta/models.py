"""Data models produced and consumed by the extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class SiteMetadata:
    """Link-preview metadata describing a single page."""

    source_url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    canonical_url: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {
            "title": self.title or "",
            "description": self.description or "",
            "image": self.image or "",
            "url": self.source_url,
            "canonical_url": self.canonical_url or "",
        }


@dataclass(frozen=True)
class MetaTag:
    """Ordered attribute pairs of one ``<meta>`` element, in source order."""

    attributes: Tuple[Tuple[str, str], ...]

    @property
    def key(self) -> Optional[str]:
        return self.attributes[0][0] if self.attributes else None

    @property
    def value(self) -> Optional[str]:
        return self.attributes[0][1] if self.attributes else None

    @property
    def secondary_key(self) -> Optional[str]:
        return self.attributes[1][0] if len(self.attributes) > 1 else None

    @property
    def secondary_value(self) -> Optional[str]:
        return self.attributes[1][1] if len(self.attributes) > 1 else None

    def get(self, name: str) -> Optional[str]:
        """Return the first value stored under ``name`` regardless of position."""
        for key, value in self.attributes:
            if key == name:
                return value
        return None
