from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from re import Pattern
from typing import Iterable, List, Optional, Tuple

from .url_utils import url_path


class SkipReason(str, Enum):
    EXCLUDED = "excluded"
    NOT_INCLUDED = "not_included"
    FETCH_FAILED = "fetch_failed"
    NO_TITLE = "no_title"

    def __str__(self) -> str:
        return self.value


_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """
    Expand `{a,b}` alternatives into plain glob patterns.
    e.g. "/{docs,blog}/*" -> ["/docs/*", "/blog/*"]. Nested braces expand
    innermost first.
    """
    m = _BRACE_RE.search(pattern)
    if not m or "," not in m.group(1):
        return [pattern]
    head, tail = pattern[: m.start()], pattern[m.end():]
    expanded: List[str] = []
    for option in m.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def translate_glob(pattern: str) -> str:
    """
    Turn one brace-free glob into a regex source.

    `*` and `?` stay inside one path segment, `**` spans segments, and
    `[...]` is a character class (`[!...]` negates). "/docs/**" also
    matches "/docs" itself and "/a/**/b" matches "/a/b".
    """
    out: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            if j - i == 1:
                out.append("[^/]*")
            elif j < n and pattern[j] == "/":
                out.append("(?:.*/)?")
                j += 1
            elif out and out[-1] == "/" and j == n:
                out[-1] = "(?:/.*)?"
            else:
                out.append(".*")
            i = j
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            start = i + 1
            if pattern[start : start + 1] in ("!", "^"):
                start += 1
            # a leading "]" is a member, not the end of the class
            end = pattern.find("]", start + 1)
            if end == -1:
                out.append(re.escape(c))
                i += 1
                continue
            body = pattern[i + 1 : end]
            if body[:1] in ("!", "^"):
                body = "^" + body[1:].replace("\\", "\\\\")
            else:
                body = body.replace("\\", "\\\\")
            out.append("[" + body + "]")
            i = end + 1
        else:
            out.append(re.escape(c))
            i += 1
    return "".join(out)


def compile_globs(patterns: Iterable[str]) -> Tuple[Pattern[str], ...]:
    compiled: List[Pattern[str]] = []
    for pattern in patterns:
        pattern = (pattern or "").strip()
        if not pattern:
            continue
        for p in expand_braces(pattern):
            compiled.append(re.compile(translate_glob(p), re.DOTALL))
    return tuple(compiled)


def _matches_any(url: str, patterns: Tuple[Pattern[str], ...]) -> bool:
    if not patterns:
        return False
    path = url_path(url)
    return any(p.fullmatch(path) or p.fullmatch(url) for p in patterns)


@dataclass(frozen=True)
class PathFilter:
    """Include/exclude glob rules, compiled once per run."""

    exclude: Tuple[Pattern[str], ...] = ()
    include: Tuple[Pattern[str], ...] = ()

    @classmethod
    def from_patterns(
        cls, exclude: Iterable[str] = (), include: Iterable[str] = ()
    ) -> "PathFilter":
        return cls(exclude=compile_globs(exclude), include=compile_globs(include))

    def skip_reason(self, url: str) -> Optional[SkipReason]:
        if _matches_any(url, self.exclude):
            return SkipReason.EXCLUDED
        if self.include and not _matches_any(url, self.include):
            return SkipReason.NOT_INCLUDED
        return None

    def should_process(self, url: str) -> bool:
        return self.skip_reason(url) is None
