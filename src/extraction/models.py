"""Internal value types passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Platform(str, Enum):
    MEDIUM = "Medium"
    SUBSTACK = "Substack"
    WORDPRESS = "WordPress"
    GHOST = "Ghost"
    CUSTOM = "Custom"


@dataclass(frozen=True)
class FetchResult:
    """Raw page as delivered by the Fetcher.

    ``rendered_text`` and ``discovered_image`` are only set when the page
    went through the headless browser.
    """

    url: str
    html: str
    rendered_text: str | None = None
    discovered_image: str | None = None

    @property
    def rendered(self) -> bool:
        return self.rendered_text is not None


@dataclass
class ExtractionResult:
    """Paragraphs produced by one extraction strategy."""

    strategy: str
    paragraphs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ArticleMetadata:
    title: str
    author: str
    publish_date: str | None = None
    featured_image: str | None = None
    images: tuple[str, ...] = ()


@dataclass(frozen=True)
class NormalizedText:
    paragraphs: list[str]
    content: str
    word_count: int
    estimated_read_time: str
