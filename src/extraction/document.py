"""Typed access to a parsed HTML page.

Strategies never walk the DOM themselves; they ask a ``ContentDocument``
for regions, leaf text and metadata. ``SoupDocument`` is the BeautifulSoup
implementation.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Protocol, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

LEAF_TAGS: tuple[str, ...] = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote")

# Chrome regions whose text never belongs to the article body.
CHROME_SELECTORS: tuple[str, ...] = ("nav", "header", "footer", "aside", ".sidebar", ".comments")

# Tried in order; the first region that yields narratable text wins.
MAIN_REGION_SELECTORS: tuple[str, ...] = (
    "article",
    "[role='main']",
    "main",
    "[class*='content']",
    "[class*='post']",
    "[class*='article']",
)

LEGACY_CONTAINER_TAGS: tuple[str, ...] = ("font", "td")

# Share of a container's text its nested containers must hold before the
# nested ones are used in its place.
_LEGACY_NESTED_SHARE = 0.5

_STRIP_TAGS = ("script", "style", "noscript", "template", "svg")


class ContentDocument(Protocol):
    """Capabilities the extraction strategies need from a parsed page."""

    url: str
    html: str

    def main_content_regions(self) -> Iterator[Any]: ...

    def find_main_content_region(self) -> Any: ...

    def collect_leaf_text_nodes(
        self, region: Any, exclude_selectors: Sequence[str] = CHROME_SELECTORS
    ) -> list[str]: ...

    def select_region(self, selectors: Sequence[str]) -> Any | None: ...

    def select_texts(self, selectors: Sequence[str]) -> Iterator[str]: ...

    def select_text(self, selectors: Sequence[str]) -> str | None: ...

    def select_attr(self, selectors: Sequence[str], attr: str) -> str | None: ...

    def meta_content(self, *keys: str) -> str | None: ...

    def heading_text(self) -> str | None: ...

    def title_text(self) -> str | None: ...

    def image_urls(self, region: Any | None = None) -> list[str]: ...

    def legacy_text_blocks(self) -> list[str]: ...


class SoupDocument:
    """``ContentDocument`` backed by BeautifulSoup with the lxml parser."""

    def __init__(self, html: str, url: str) -> None:
        self.url = url
        self.html = html
        self._soup = BeautifulSoup(html, "lxml")
        for tag in self._soup.find_all(_STRIP_TAGS):
            tag.decompose()
        # Keep <br> as a line break so legacy markup still splits.
        for br in self._soup.find_all("br"):
            br.replace_with("\n")

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    # --- regions ---

    def main_content_regions(self) -> Iterator[Tag]:
        """Yield candidate article containers, most plausible first, body last."""
        seen: set[int] = set()
        for selector in MAIN_REGION_SELECTORS:
            region = self._soup.select_one(selector)
            if region is not None and id(region) not in seen:
                seen.add(id(region))
                yield region
        body = self._soup.body or self._soup
        if id(body) not in seen:
            yield body

    def find_main_content_region(self) -> Tag:
        return next(self.main_content_regions())

    def select_region(self, selectors: Sequence[str]) -> Tag | None:
        for selector in selectors:
            region = self._soup.select_one(selector)
            if region is not None:
                return region
        return None

    def collect_leaf_text_nodes(
        self,
        region: Tag,
        exclude_selectors: Sequence[str] = CHROME_SELECTORS,
    ) -> list[str]:
        """Text of leaf content elements under *region*, in document order.

        An element that contains other content elements is skipped because
        its children are collected individually. Elements inside chrome
        regions are skipped too.
        """
        excluded: set[int] = set()
        for selector in exclude_selectors:
            for el in self._soup.select(selector):
                excluded.add(id(el))

        texts: list[str] = []
        for el in region.find_all(LEAF_TAGS):
            if el.find(LEAF_TAGS) is not None:
                continue
            if self._inside(el, excluded, stop=region):
                continue
            text = el.get_text()
            if text.strip():
                texts.append(text)
        return texts

    @staticmethod
    def _inside(el: Tag, excluded: set[int], stop: Tag) -> bool:
        if id(el) in excluded:
            return True
        for parent in el.parents:
            if parent is stop:
                # The region itself may be a chrome element; still honour it.
                return id(parent) in excluded
            if id(parent) in excluded:
                return True
        return False

    # --- metadata ---

    def select_texts(self, selectors: Sequence[str]) -> Iterator[str]:
        """Non-empty text of every match, selector by selector, in document order."""
        for selector in selectors:
            for el in self._soup.select(selector):
                text = " ".join(el.get_text().split())
                if text:
                    yield text

    def select_text(self, selectors: Sequence[str]) -> str | None:
        return next(self.select_texts(selectors), None)

    def select_attr(self, selectors: Sequence[str], attr: str) -> str | None:
        for selector in selectors:
            el = self._soup.select_one(selector)
            if el is None:
                continue
            value = el.get(attr)
            if isinstance(value, list):
                value = " ".join(value)
            if value and value.strip():
                return value.strip()
        return None

    def meta_content(self, *keys: str) -> str | None:
        """First non-empty ``content`` of a meta tag matching name or property."""
        wanted = [k.lower() for k in keys]
        metas = self._soup.find_all("meta")
        for key in wanted:
            for meta in metas:
                name = (meta.get("name") or meta.get("property") or meta.get("itemprop") or "").lower()
                if name == key:
                    content = (meta.get("content") or "").strip()
                    if content:
                        return content
        return None

    def heading_text(self) -> str | None:
        return self.select_text(("h1",))

    def title_text(self) -> str | None:
        tag = self._soup.find("title")
        if tag is None:
            return None
        text = " ".join(tag.get_text().split())
        return text or None

    def image_urls(self, region: Tag | None = None) -> list[str]:
        """Absolute image URLs under *region* (whole page if omitted), in order."""
        root = region if region is not None else self._soup
        urls: list[str] = []
        for img in root.find_all("img"):
            src = img.get("src") or img.get("data-src")
            if not src or src.startswith("data:"):
                continue
            urls.append(urljoin(self.url, src.strip()))
        return urls

    def legacy_text_blocks(self) -> list[str]:
        """Text of legacy presentational containers (``font``, ``td``).

        A container is used whole unless nested containers hold most of its
        text, in which case those are used instead. Inline ``<font>`` inside
        a prose cell therefore stays part of the cell.
        """
        blocks: list[str] = []
        consumed: set[int] = set()
        for el in self._soup.find_all(LEGACY_CONTAINER_TAGS):
            if id(el) in consumed:
                continue
            text = el.get_text()
            total = len(text.strip())
            if not total:
                continue
            nested = el.find_all(LEGACY_CONTAINER_TAGS)
            outer_nested = [c for c in nested if c.find_parent(LEGACY_CONTAINER_TAGS) is el]
            nested_chars = sum(len(c.get_text().strip()) for c in outer_nested)
            if outer_nested and nested_chars >= total * _LEGACY_NESTED_SHARE:
                continue
            consumed.update(id(c) for c in nested)
            blocks.append(text)
        return blocks
