"""Title, author, date and image resolution with documented defaults."""

from __future__ import annotations

from urllib.parse import urljoin

from .document import ContentDocument
from .models import ArticleMetadata, Platform
from .platforms import rules_for

DEFAULT_TITLE = "Untitled"
DEFAULT_AUTHOR = "Unknown Author"

# Generic byline heuristics, tried after the platform rule.
BYLINE_SELECTORS: tuple[str, ...] = (
    "a[rel='author']",
    "[itemprop='author'] [itemprop='name']",
    "[itemprop='author']",
    "[class*='author']",
    "[class*='byline']",
)

# Longer matches are author bio boxes, not bylines.
_MAX_BYLINE_CHARS = 100


def resolve_title(document: ContentDocument, platform: Platform) -> str:
    rules = rules_for(platform)
    if rules is not None:
        title = document.select_text(rules.title)
        if title:
            return title
    return document.heading_text() or document.title_text() or DEFAULT_TITLE


def resolve_author(document: ContentDocument, platform: Platform) -> str:
    rules = rules_for(platform)
    if rules is not None:
        author = _first_byline(document, rules.author)
        if author:
            return author
    return (
        _first_byline(document, BYLINE_SELECTORS)
        or document.meta_content("author", "article:author")
        or DEFAULT_AUTHOR
    )


def _first_byline(document: ContentDocument, selectors: tuple[str, ...]) -> str | None:
    for candidate in document.select_texts(selectors):
        if len(candidate) <= _MAX_BYLINE_CHARS:
            return _strip_by(candidate)
    return None


def _strip_by(byline: str) -> str:
    if byline.lower().startswith("by "):
        return byline[3:].strip()
    return byline


def resolve_publish_date(document: ContentDocument, platform: Platform) -> str | None:
    rules = rules_for(platform)
    if rules is not None and rules.date:
        date = document.select_attr(rules.date, "datetime") or document.select_text(rules.date)
        if date:
            return date
    return (
        document.meta_content("article:published_time", "datePublished", "publishedDate")
        or document.select_attr(("time[datetime]",), "datetime")
    )


def resolve_featured_image(
    document: ContentDocument,
    platform: Platform,
    discovered_image: str | None = None,
) -> str | None:
    if discovered_image:
        return urljoin(document.url, discovered_image)
    rules = rules_for(platform)
    if rules is not None and rules.image:
        src = document.select_attr(rules.image, "src") or document.select_attr(rules.image, "data-src")
        if src and not src.startswith("data:"):
            return urljoin(document.url, src)
    image = document.meta_content("og:image", "twitter:image")
    return urljoin(document.url, image) if image else None


def resolve_metadata(
    document: ContentDocument,
    platform: Platform,
    discovered_image: str | None = None,
) -> ArticleMetadata:
    featured = resolve_featured_image(document, platform, discovered_image)

    images: list[str] = []
    if featured:
        images.append(featured)
    for src in document.image_urls(document.find_main_content_region()):
        if src not in images:
            images.append(src)

    return ArticleMetadata(
        title=resolve_title(document, platform),
        author=resolve_author(document, platform),
        publish_date=resolve_publish_date(document, platform),
        featured_image=featured,
        images=tuple(images),
    )
