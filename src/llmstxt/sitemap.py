from __future__ import annotations

import gzip
import zlib
from dataclasses import dataclass, field
from typing import List, Optional, Set, Union
import xml.etree.ElementTree as ET

import requests

from .logger import get_logger

logger = get_logger(__name__)

# Guards against sitemap indexes that reference each other without end
MAX_INDEX_DEPTH = 5


class SitemapError(RuntimeError):
    """The sitemap could not be fetched or parsed."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url


@dataclass(frozen=True)
class SitemapEntry:
    loc: str
    lastmod: Optional[str] = None


@dataclass
class SitemapResult:
    url: str
    urls: List[SitemapEntry] = field(default_factory=list)

    @property
    def sites(self) -> List[str]:
        return [entry.loc for entry in self.urls]

    def lastmod_by_url(self) -> dict[str, str]:
        return {e.loc: e.lastmod for e in self.urls if e.lastmod}


def _fetch_xml(url: str, session: requests.Session, timeout: float) -> bytes:
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise SitemapError(url, f"Failed to fetch sitemap: {e}") from e

    content = resp.content
    if url.lower().endswith(".gz") or content[:2] == b"\x1f\x8b":
        try:
            content = gzip.decompress(content)
        except (OSError, EOFError, zlib.error) as e:
            raise SitemapError(url, f"Failed to decompress sitemap: {e}") from e
    # bytes go to the XML parser as-is so the declared encoding is honoured
    return content


def _child_text(el: ET.Element, name: str) -> Optional[str]:
    child = el.find(f"{{*}}{name}")
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _parse_sitemap_xml(xml_text: Union[str, bytes], source_url: str = "") -> tuple[str, List[SitemapEntry]]:
    """Parse sitemap XML.

    Args:
        xml_text: The XML content to parse
        source_url: Source URL for error reporting

    Returns:
        ("urlset" | "sitemapindex", entries in document order)

    Raises:
        SitemapError: when the document is not XML or not a sitemap
    """
    try:
        if isinstance(xml_text, str):
            xml_text = xml_text.lstrip("\ufeff")
        root = ET.fromstring(xml_text.strip())
    except (ET.ParseError, ValueError, LookupError) as e:
        # ValueError/LookupError: bad or unknown encoding declaration
        logger.debug(f"XML content preview (first 500 chars): {xml_text[:500]!r}")
        raise SitemapError(source_url, f"Failed to parse sitemap XML: {e}") from e

    tag = root.tag.lower()
    entries: List[SitemapEntry] = []
    if tag.endswith("urlset"):
        kind = "urlset"
        children = root.findall("{*}url")
    elif tag.endswith("sitemapindex"):
        kind = "sitemapindex"
        children = root.findall("{*}sitemap")
    else:
        raise SitemapError(source_url, f"Unexpected sitemap root element <{root.tag}>")

    for child in children:
        loc = _child_text(child, "loc")
        if loc:
            entries.append(SitemapEntry(loc=loc, lastmod=_child_text(child, "lastmod")))
    return kind, entries


def _collect(
    url: str,
    session: requests.Session,
    timeout: float,
    seen: Set[str],
    depth: int,
) -> List[SitemapEntry]:
    if url in seen:
        return []
    seen.add(url)

    xml_text = _fetch_xml(url, session, timeout)
    kind, entries = _parse_sitemap_xml(xml_text, source_url=url)
    if kind == "urlset":
        return entries

    if depth >= MAX_INDEX_DEPTH:
        logger.warning(f"Sitemap index nesting too deep at {url}; ignoring children")
        return []

    collected: List[SitemapEntry] = []
    for entry in entries:
        try:
            collected.extend(_collect(entry.loc, session, timeout, seen, depth + 1))
        except SitemapError as e:
            # one broken child sitemap does not discard its siblings
            logger.warning(str(e))
    return collected


def fetch_sitemap(url: str, session: requests.Session, timeout: float = 15.0) -> SitemapResult:
    """
    Fetch a sitemap (or sitemap index, expanded recursively) and list its pages.

    Raises:
        SitemapError: if the top-level sitemap is unreachable or unparsable
    """
    entries = _collect(url, session, timeout, set(), 0)
    logger.info(f"Collected {len(entries)} URLs from sitemap: {url}")
    return SitemapResult(url=url, urls=entries)
