from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import requests

from .config import GenerateOptions, check_options
from .crawler import CrawlOutcome, PageResult, SkipRecord, crawl
from .fetcher import make_session
from .filters import PathFilter
from .logger import get_logger
from .progress import ProgressChannel
from .rewrite import TitleRewriteRule, parse_rewrite_rules
from .sitemap import SitemapError, SitemapResult, fetch_sitemap
from .url_utils import ROOT_SECTION, capitalize_section, make_anchor

logger = get_logger(__name__)

DEFAULT_TITLE = "Documentation"
DEFAULT_DESCRIPTION = "Generated documentation"
DEFAULT_FULL_TITLE = "Full Documentation"


def group_by_section(pages: Sequence[PageResult]) -> Dict[str, List[PageResult]]:
    """Pages keyed by section; sections keep the order they were first seen in."""
    sections: Dict[str, List[PageResult]] = {}
    for page in pages:
        sections.setdefault(page.section, []).append(page)
    return sections


def render_index(
    pages: Sequence[PageResult],
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> str:
    """
    llms.txt body: a title and description (explicit values win, then the
    first root page, then defaults) followed by one link list per section.
    Root pages never get a section of their own.
    """
    sections = group_by_section(pages)
    root = sections.pop(ROOT_SECTION, [])

    doc_title = title or (root[0].title if root else DEFAULT_TITLE)
    doc_description = description or (
        root[0].description if root and root[0].description else DEFAULT_DESCRIPTION
    )

    parts: List[str] = [f"# {doc_title}\n\n", f"> {doc_description}\n\n"]
    for section, section_pages in sections.items():
        parts.append(f"## {capitalize_section(section)}\n")
        for page in section_pages:
            line = f"- [{page.title}]({page.url})"
            if page.description:
                line += f": {page.description}"
            parts.append("\n" + line)
        parts.append("\n\n")
    return "".join(parts)


def render_full(
    pages: Sequence[PageResult],
    skipped: Sequence[SkipRecord] = (),
    *,
    title: Optional[str] = None,
) -> str:
    """llms-full.txt body: table of contents, every page in crawl order, skip report."""
    parts: List[str] = [f"# {title or DEFAULT_FULL_TITLE}\n\n"]

    toc = ["# Table of Contents\n"]
    for page in pages:
        toc.append(f"- [{page.title}](#{make_anchor(page.title)})\n")
    parts.append("".join(toc) + "\n")

    for page in pages:
        parts.append("\n\n---\n\n")
        parts.append(f"## {page.title}\n\n")
        parts.append(f"[{page.url}]({page.url})\n\n")
        if page.description:
            parts.append(f"> {page.description}\n\n")
        if page.last_modified:
            parts.append(f"*Last modified: {page.last_modified}*\n\n")
        parts.append((page.content or "") + "\n")

    if skipped:
        parts.append("\n\n---\n\n## Skipped Pages\n")
        for record in skipped:
            parts.append(f"- {record.url} ({record.reason})\n")

    return "".join(parts)


def _prepare(options: GenerateOptions) -> Tuple[PathFilter, List[TitleRewriteRule]]:
    """Validate everything that can be checked offline; raises ConfigError."""
    check_options(options)
    rules = parse_rewrite_rules(options.replace_title)
    path_filter = PathFilter.from_patterns(
        exclude=options.exclude_paths, include=options.include_paths
    )
    return path_filter, rules


def _load_sitemap(options: GenerateOptions, session: requests.Session) -> Optional[SitemapResult]:
    try:
        return fetch_sitemap(options.sitemap_url, session, timeout=options.timeout)
    except SitemapError as e:
        logger.error(f"Error processing sitemap: {e}")
        return None


def _run(
    options: GenerateOptions,
    *,
    with_content: bool,
    session: Optional[requests.Session],
    progress: Optional[ProgressChannel],
) -> CrawlOutcome:
    path_filter, rules = _prepare(options)
    session = session or make_session(options.max_redirects)

    logger.info(f"Fetching sitemap {options.sitemap_url}")
    sitemap = _load_sitemap(options, session)
    if sitemap is None or not sitemap.sites:
        logger.warning("No URLs collected from sitemap. Generating an empty document.")
        return CrawlOutcome()

    return crawl(
        sitemap.sites,
        session,
        path_filter=path_filter,
        rules=rules,
        with_content=with_content,
        lastmod=sitemap.lastmod_by_url() if with_content else None,
        concurrency=options.concurrency,
        strategy=options.scheduler,
        timeout=options.timeout,
        progress=progress,
    )


def generate_llms_txt(
    options: GenerateOptions,
    *,
    session: Optional[requests.Session] = None,
    progress: Optional[ProgressChannel] = None,
) -> str:
    """
    End-to-end llms.txt generation:
    - parse title rewrite rules and filters (ConfigError before any request)
    - collect page URLs from the sitemap (a failing sitemap yields no pages)
    - fetch each page and extract title/description
    - render the grouped link list
    """
    outcome = _run(options, with_content=False, session=session, progress=progress)
    return render_index(outcome.pages, title=options.title, description=options.description)


def generate_llms_full_txt(
    options: GenerateOptions,
    *,
    session: Optional[requests.Session] = None,
    progress: Optional[ProgressChannel] = None,
) -> str:
    """Same pipeline as generate_llms_txt, keeping each page's content as markdown."""
    outcome = _run(options, with_content=True, session=session, progress=progress)
    return render_full(outcome.pages, outcome.skipped, title=options.title)
