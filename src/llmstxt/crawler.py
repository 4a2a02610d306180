from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, TypeVar, Union

import requests

from .config import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT
from .converter import to_markdown
from .fetcher import fetch_html
from .filters import PathFilter, SkipReason
from .html_summary import extract_page
from .logger import get_logger
from .progress import ProgressChannel, ProgressEvent
from .rewrite import TitleRewriteRule

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class PageResult:
    url: str
    title: str
    description: Optional[str]
    section: str
    content: Optional[str] = None
    last_modified: Optional[str] = None


@dataclass(frozen=True)
class SkipRecord:
    url: str
    reason: SkipReason


PageOutcome = Union[PageResult, SkipRecord]


def process_in_batches(
    items: Sequence[T],
    processor: Callable[[T, int], R],
    concurrency: int = 10,
    *,
    strategy: str = "chunked",
) -> List[Optional[R]]:
    """
    Run ``processor(item, index)`` for every item with at most ``concurrency``
    calls in flight, and return the results in input order.

    Strategies:
    - "chunked": items are split into consecutive chunks of ``concurrency``;
      a chunk runs in parallel and must finish before the next one starts,
      so one slow item holds back the rest of its chunk.
    - "pool": ``concurrency`` workers pull the next pending item as soon as
      they are free.

    A processor exception is logged and leaves ``None`` in that slot.
    """
    total = len(items)
    results: List[Optional[R]] = [None] * total
    if total == 0:
        return results
    concurrency = max(1, int(concurrency))

    def run(index: int) -> None:
        try:
            results[index] = processor(items[index], index)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Processing item {index + 1}/{total} failed: {e}")
            results[index] = None

    workers = min(concurrency, total)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="llmstxt") as executor:
        if strategy == "pool":
            list(executor.map(run, range(total)))
        elif strategy == "chunked":
            for start in range(0, total, concurrency):
                chunk = range(start, min(start + concurrency, total))
                wait([executor.submit(run, i) for i in chunk])
        else:
            raise ValueError(f"Unknown scheduling strategy: {strategy!r}")

    return results


class PagePipeline:
    """Filter -> fetch -> extract (-> convert) for a single URL."""

    def __init__(
        self,
        session: requests.Session,
        *,
        path_filter: PathFilter,
        rules: Sequence[TitleRewriteRule] = (),
        with_content: bool = False,
        lastmod: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        progress: Optional[ProgressChannel] = None,
        total: int = 0,
        fetch: Callable[..., Optional[str]] = fetch_html,
    ) -> None:
        self.session = session
        self.path_filter = path_filter
        self.rules = tuple(rules)
        self.with_content = with_content
        self.lastmod = lastmod or {}
        self.timeout = timeout
        self.progress = progress
        self.total = total
        self.fetch = fetch

    def __call__(self, url: str, index: int) -> PageOutcome:
        if self.progress is not None:
            self.progress.publish(ProgressEvent(index=index, total=self.total, url=url))
        try:
            return self._process(url)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Unexpected error while processing {url}: {e}")
            return SkipRecord(url=url, reason=SkipReason.FETCH_FAILED)

    def _process(self, url: str) -> PageOutcome:
        reason = self.path_filter.skip_reason(url)
        if reason is not None:
            logger.debug(f"Skipping {url} ({reason})")
            return SkipRecord(url=url, reason=reason)

        html = self.fetch(url, self.session, timeout=self.timeout)
        if not html:
            return SkipRecord(url=url, reason=SkipReason.FETCH_FAILED)

        page = extract_page(html, url, rules=self.rules, with_content=self.with_content)
        if page is None:
            logger.debug(f"Skipping {url} (no title)")
            return SkipRecord(url=url, reason=SkipReason.NO_TITLE)

        content = to_markdown(page.main_html) if self.with_content else None
        return PageResult(
            url=url,
            title=page.title,
            description=page.description,
            section=page.section,
            content=content,
            last_modified=self.lastmod.get(url),
        )


@dataclass
class CrawlOutcome:
    results: List[PageOutcome] = field(default_factory=list)

    @property
    def pages(self) -> List[PageResult]:
        return [r for r in self.results if isinstance(r, PageResult)]

    @property
    def skipped(self) -> List[SkipRecord]:
        return [r for r in self.results if isinstance(r, SkipRecord)]


def crawl(
    urls: Sequence[str],
    session: requests.Session,
    *,
    path_filter: Optional[PathFilter] = None,
    rules: Sequence[TitleRewriteRule] = (),
    with_content: bool = False,
    lastmod: Optional[Dict[str, str]] = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    strategy: str = "chunked",
    timeout: float = DEFAULT_TIMEOUT,
    progress: Optional[ProgressChannel] = None,
    fetch: Callable[..., Optional[str]] = fetch_html,
) -> CrawlOutcome:
    """Process every URL and return one outcome per URL, in input order."""
    pipeline = PagePipeline(
        session,
        path_filter=path_filter or PathFilter(),
        rules=rules,
        with_content=with_content,
        lastmod=lastmod,
        timeout=timeout,
        progress=progress,
        total=len(urls),
        fetch=fetch,
    )
    logger.info(
        f"Processing {len(urls)} URLs (concurrency={concurrency}, scheduler={strategy})"
    )
    raw = process_in_batches(list(urls), pipeline, concurrency, strategy=strategy)

    results: List[PageOutcome] = [
        r if r is not None else SkipRecord(url=u, reason=SkipReason.FETCH_FAILED)
        for u, r in zip(urls, raw)
    ]
    outcome = CrawlOutcome(results=results)
    logger.info(
        f"Processed {len(results)} URLs: {len(outcome.pages)} pages, "
        f"{len(outcome.skipped)} skipped"
    )
    return outcome
