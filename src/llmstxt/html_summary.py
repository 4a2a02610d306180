from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from .rewrite import TitleRewriteRule, rewrite_title
from .url_utils import parse_section

DESCRIPTION_SELECTORS = (
    'meta[name="description"]',
    'meta[property="og:description"]',
    'meta[name="twitter:description"]',
)

# Probed in order; the first one with non-blank inner HTML is the page content
MAIN_CONTENT_SELECTORS = (
    "main",
    "[role=main]",
    ".content, #content, .post, .docs, .article",
    "article",
    "body",
)


class HtmlDocument:
    """Minimal query interface over a parsed HTML page."""

    def __init__(self, soup: BeautifulSoup, raw: str) -> None:
        self._soup = soup
        self.raw = raw

    @classmethod
    def load(cls, html: str) -> "HtmlDocument":
        return cls(BeautifulSoup(html, "html.parser"), html)

    def select_first(self, selector: str) -> Optional[Tag]:
        return self._soup.select_one(selector)

    def select_all(self, selector: str) -> List[Tag]:
        return self._soup.select(selector)

    def text(self, selector: str) -> str:
        el = self.select_first(selector)
        return el.get_text() if el is not None else ""

    def attr(self, selector: str, name: str) -> Optional[str]:
        el = self.select_first(selector)
        if el is None:
            return None
        value = el.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        return value

    def inner_html(self, selector: str) -> str:
        el = self.select_first(selector)
        return el.decode_contents() if el is not None else ""


@dataclass(frozen=True)
class ExtractedPage:
    title: str
    description: Optional[str]
    section: str
    main_html: Optional[str] = None


def get_title(doc: HtmlDocument) -> Optional[str]:
    title = doc.text("head > title")
    if not title:
        # pages without <head> markup; <title> inside inline SVG does not count
        for el in doc.select_all("title"):
            if el.find_parent("svg") is None:
                title = el.get_text()
                break
    title = title.strip()
    return title or None


def get_description(doc: HtmlDocument) -> Optional[str]:
    for selector in DESCRIPTION_SELECTORS:
        content = doc.attr(selector, "content")
        if content and content.strip():
            return content.strip()
    return None


def get_main_html(doc: HtmlDocument) -> str:
    for selector in MAIN_CONTENT_SELECTORS:
        fragment = doc.inner_html(selector)
        if fragment.strip():
            return fragment
    return doc.raw


def extract_page(
    html: str,
    url: str,
    *,
    rules: Sequence[TitleRewriteRule] = (),
    with_content: bool = False,
) -> Optional[ExtractedPage]:
    """
    Title, description, section and (optionally) main content HTML of a page.
    Returns None when the page has no usable <title>.
    """
    doc = HtmlDocument.load(html)

    raw_title = get_title(doc)
    if raw_title is None:
        return None
    title = rewrite_title(raw_title, rules)

    return ExtractedPage(
        title=title,
        description=get_description(doc),
        section=parse_section(url),
        main_html=get_main_html(doc) if with_content else None,
    )
