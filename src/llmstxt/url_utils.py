from __future__ import annotations

import re
from urllib.parse import urlparse


ROOT_SECTION = "ROOT"

_ANCHOR_RE = re.compile(r"[^a-z0-9]+")


def url_path(url: str) -> str:
    try:
        return urlparse(url).path or "/"
    except ValueError:
        return "/"


def parse_section(url: str) -> str:
    """
    Section key of a URL: its first non-empty path segment, case preserved.
    e.g. "https://x.test/docs/intro" -> "docs", "https://x.test/" -> "ROOT".
    Unparseable URLs also land in ROOT.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return ROOT_SECTION
    segments = [seg for seg in path.split("/") if seg]
    return segments[0] if segments else ROOT_SECTION


def capitalize_section(name: str) -> str:
    """First character upper-cased, the rest lower-cased ("API-docs" -> "Api-docs")."""
    if not name or not isinstance(name, str):
        return ""
    return name[0].upper() + name[1:].lower()


def make_anchor(title: str) -> str:
    """Lower-case slug with every non-alphanumeric run collapsed to "-"."""
    return _ANCHOR_RE.sub("-", title.lower())
