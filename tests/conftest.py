"""
Shared fixtures: an in-memory stand-in for requests.Session so no test
touches the network.
"""
from __future__ import annotations

import sys
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
import requests

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


class FakeResponse:
    def __init__(self, url: str, status_code: int = 200, body: Union[str, bytes] = "", encoding: Optional[str] = "utf-8"):
        self.url = url
        self.status_code = status_code
        self.content = body.encode("utf-8") if isinstance(body, str) else body
        self.encoding = encoding
        self.apparent_encoding = "utf-8"

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


class FakeSession:
    """
    Routes map URL -> body (200), (status, body), or an exception to raise.
    Unknown URLs answer 404. Tracks every call and the peak number of
    concurrent requests.
    """

    def __init__(self, routes: Dict[str, object], delay: float = 0.0, delays: Optional[Dict[str, float]] = None):
        self.routes = dict(routes)
        self.delay = delay
        self.delays = delays or {}
        self.headers: Dict[str, str] = {}
        self.max_redirects = 30
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get(self, url, timeout=None, allow_redirects=True, **kwargs):
        with self._lock:
            self.calls.append(url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            pause = self.delays.get(url, self.delay)
            if pause:
                time.sleep(pause)
            route = self.routes.get(url)
            if isinstance(route, BaseException):
                raise route
            if route is None:
                return FakeResponse(url, 404, "not found")
            if isinstance(route, tuple):
                status, body = route
                return FakeResponse(url, status, body)
            return FakeResponse(url, 200, route)
        finally:
            with self._lock:
                self.in_flight -= 1


def page(title: Optional[str], description: Optional[str] = None, body: str = "<p>content</p>") -> str:
    head = ""
    if title is not None:
        head += f"<title>{title}</title>"
    if description is not None:
        head += f'<meta name="description" content="{description}">'
    return f"<html><head>{head}</head><body>{body}</body></html>"


def urlset(*locs, lastmods: Optional[Dict[str, str]] = None) -> str:
    lastmods = lastmods or {}
    entries = []
    for loc in locs:
        lastmod = f"<lastmod>{lastmods[loc]}</lastmod>" if loc in lastmods else ""
        entries.append(f"<url><loc>{loc}</loc>{lastmod}</url>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        + "".join(entries)
        + "</urlset>"
    )


def sitemapindex(*locs) -> str:
    entries = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        + entries
        + "</sitemapindex>"
    )


@pytest.fixture
def fake_session():
    """Factory fixture: fake_session(routes, delay=0.0, delays=None)."""

    def make(routes, delay: float = 0.0, delays=None) -> FakeSession:
        return FakeSession(routes, delay=delay, delays=delays)

    return make


@pytest.fixture
def make_page():
    return page


@pytest.fixture
def make_urlset():
    return urlset


@pytest.fixture
def make_sitemapindex():
    return sitemapindex
