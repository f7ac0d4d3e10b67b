"""Publishing-platform detection and per-platform selector rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable
from urllib.parse import urlparse

from .document import ContentDocument
from .models import Platform

logger = logging.getLogger(__name__)

PlatformPredicate = Callable[[str, ContentDocument], bool]


@dataclass
class PlatformRegistration:
    """A platform label with the predicate that recognises it."""

    platform: Platform
    predicate: PlatformPredicate
    name: str = ""


class PlatformDetector:
    """Ordered predicate list; the first match wins, ``default`` always matches."""

    def __init__(self, default: Platform = Platform.CUSTOM) -> None:
        self._registrations: list[PlatformRegistration] = []
        self._default = default

    def register(self, platform: Platform, predicate: PlatformPredicate, name: str = "") -> None:
        self._registrations.append(
            PlatformRegistration(platform=platform, predicate=predicate, name=name or predicate.__name__),
        )

    def detect(self, url: str, document: ContentDocument) -> Platform:
        for reg in self._registrations:
            if reg.predicate(url, document):
                logger.debug(
                    "platform detected",
                    extra={"url": url, "platform": reg.platform.value, "rule": reg.name},
                )
                return reg.platform
        return self._default


def _host_contains(fragment: str) -> PlatformPredicate:
    def predicate(url: str, document: ContentDocument) -> bool:
        host = (urlparse(url).hostname or "").lower()
        return fragment in host

    predicate.__name__ = f"host_contains[{fragment}]"
    return predicate


def _generator_starts_with(prefix: str) -> PlatformPredicate:
    def predicate(url: str, document: ContentDocument) -> bool:
        generator = document.meta_content("generator") or ""
        return generator.lower().startswith(prefix.lower())

    predicate.__name__ = f"generator[{prefix}]"
    return predicate


def _html_contains(*needles: str) -> PlatformPredicate:
    def predicate(url: str, document: ContentDocument) -> bool:
        return any(needle in document.html for needle in needles)

    predicate.__name__ = f"html_contains[{','.join(needles)}]"
    return predicate


def _medium_app_meta(url: str, document: ContentDocument) -> bool:
    """Custom-domain Medium publications still advertise the Medium app."""
    package = document.meta_content("al:android:package") or ""
    app_name = document.meta_content("twitter:app:name:iphone") or ""
    return package == "com.medium.reader" or app_name == "Medium"


def build_default_detector() -> PlatformDetector:
    """Hosted-domain checks first, then self-hosted fingerprints."""
    detector = PlatformDetector()

    detector.register(Platform.MEDIUM, _host_contains("medium.com"))
    detector.register(Platform.SUBSTACK, _host_contains("substack.com"))
    detector.register(Platform.WORDPRESS, _host_contains("wordpress.com"))
    detector.register(Platform.GHOST, _host_contains("ghost.io"))

    detector.register(Platform.GHOST, _generator_starts_with("Ghost"))
    detector.register(Platform.WORDPRESS, _generator_starts_with("WordPress"))
    detector.register(Platform.WORDPRESS, _html_contains("wp-content", "https://api.w.org/"))
    detector.register(Platform.SUBSTACK, _html_contains("substackcdn.com"))
    detector.register(Platform.MEDIUM, _medium_app_meta)

    return detector


@dataclass(frozen=True)
class PlatformRules:
    """CSS selector candidates for one platform, each list tried in order."""

    title: tuple[str, ...] = ()
    author: tuple[str, ...] = ()
    date: tuple[str, ...] = ()
    image: tuple[str, ...] = ()
    content: tuple[str, ...] = ()
    # Short paragraphs containing one of these are UI labels, not prose.
    exclude_phrases: tuple[str, ...] = field(default_factory=tuple)


PLATFORM_RULES: dict[Platform, PlatformRules] = {
    Platform.MEDIUM: PlatformRules(
        title=("h1[data-testid='storyTitle']", "article h1", "h1"),
        author=("[data-testid='authorName']", "a[data-testid='authorName']", "a[rel='author']"),
        date=("[data-testid='storyPublishDate']", "article time"),
        image=("article figure img", "article img"),
        content=("article section", "article"),
        exclude_phrases=("min read", "follow", "sign up", "listen", "share", "member-only story"),
    ),
    Platform.SUBSTACK: PlatformRules(
        title=("h1.post-title", "h1"),
        author=(".byline-wrapper a", ".post-header .profile-hover-card-target a", "a.pencraft[href*='/@']"),
        date=(".post-date", ".post-header time"),
        image=(".available-content figure img", ".available-content img"),
        content=(".available-content .body.markup", ".body.markup", ".available-content"),
        exclude_phrases=("subscribe", "share", "thanks for reading", "leave a comment", "upgrade to paid"),
    ),
    Platform.WORDPRESS: PlatformRules(
        title=("h1.entry-title", "h1.post-title", "h1.wp-block-post-title"),
        author=(".author .fn", ".byline a", ".entry-author a", "a[rel='author']"),
        date=("time.entry-date", "time.published", ".posted-on time"),
        image=(".wp-post-image", ".entry-content img"),
        content=(".entry-content", ".post-content", ".wp-block-post-content"),
        exclude_phrases=("share this:", "like this:", "related", "loading...", "posted in"),
    ),
    Platform.GHOST: PlatformRules(
        title=("h1.article-title", "h1.post-full-title", "h1.gh-article-title"),
        author=(".author-name a", ".post-full-byline-meta h4 a", ".gh-article-author-name a"),
        date=("time.byline-meta-date", "time.post-full-meta-date", ".gh-article-meta time"),
        image=(".article-image img", ".post-full-image img", ".gh-article-image img"),
        content=(".gh-content", ".post-full-content", ".post-content"),
        exclude_phrases=("subscribe", "sign up for more like this", "share this post"),
    ),
}


def rules_for(platform: Platform) -> PlatformRules | None:
    return PLATFORM_RULES.get(platform)
