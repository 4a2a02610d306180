from __future__ import annotations

from typing import Optional

import requests

from . import __version__
from .config import DEFAULT_TIMEOUT, MIN_REDIRECTS
from .logger import get_logger

logger = get_logger(__name__)

USER_AGENT = f"llmstxt/{__version__}"


def make_session(max_redirects: int = MIN_REDIRECTS) -> requests.Session:
    """
    Session shared by the sitemap source and the page fetcher.
    No retry adapter is mounted: a failed request is reported once.
    """
    session = requests.Session()
    session.max_redirects = max(max_redirects, MIN_REDIRECTS)
    session.headers.setdefault("User-Agent", USER_AGENT)
    session.headers.setdefault(
        "Accept", "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    )
    return session


def _decode_body(resp: requests.Response) -> str:
    # Try to pick a sensible encoding to avoid mojibake on UTF-8 pages
    encoding = resp.encoding
    if not encoding or encoding.lower() in {"iso-8859-1", "latin-1"}:
        encoding = resp.apparent_encoding or "utf-8"
    return resp.content.decode(encoding)


def fetch_html(
    url: str,
    session: requests.Session,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> Optional[str]:
    """
    GET one page and return its decoded body.

    Returns None on network errors, timeouts, too many redirects and bodies
    that cannot be decoded. Nothing is retried. Error statuses are not
    failures: a 404 or 500 page that carries a title is kept.
    """
    try:
        resp = session.get(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        logger.warning(f"Failed to fetch page {url}: {e}")
        return None

    if resp.status_code >= 400:
        logger.debug(f"HTTP {resp.status_code} for {url}")

    try:
        return _decode_body(resp)
    except (UnicodeDecodeError, LookupError) as e:
        logger.warning(f"Failed to decode page {url}: {e}")
        return None
