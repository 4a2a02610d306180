"""
Title rewrite rules given as sed-style `s/pattern/replacement/flags` commands.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .config import ConfigError


_COMMAND_RE = re.compile(r"^s/(.*?)/(.*?)/([gimsuy]*)$", re.DOTALL)
# `$1`..`$99`, `$&` and a literal `$$`
_PLACEHOLDER_RE = re.compile(r"\$(\$|&|\d{1,2})")

_FLAG_BITS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


class SubstitutionCommandError(ConfigError):
    def __init__(self, command: str, reason: str = "Invalid substitution command format"):
        super().__init__(f"{reason}: {command!r}")
        self.command = command
        self.reason = reason


@dataclass(frozen=True)
class TitleRewriteRule:
    command: str
    pattern: re.Pattern
    replacement: str
    flags: str = ""

    @property
    def global_replace(self) -> bool:
        return "g" in self.flags

    def _expand(self, match: "re.Match[str]") -> str:
        def sub(m: "re.Match[str]") -> str:
            token = m.group(1)
            if token == "$":
                return "$"
            if token == "&":
                return match.group(0)
            index = int(token)
            if 0 < index <= (self.pattern.groups or 0):
                return match.group(index) or ""
            return m.group(0)

        return _PLACEHOLDER_RE.sub(sub, self.replacement)

    def apply(self, title: str) -> str:
        return self.pattern.sub(self._expand, title, count=0 if self.global_replace else 1)


def parse_substitution_command(command: str) -> TitleRewriteRule:
    """
    Parse one `s/pattern/replacement/flags` command.

    Raises:
        SubstitutionCommandError: on a malformed command or a pattern that
            does not compile.
    """
    if not isinstance(command, str):
        raise SubstitutionCommandError(str(command))
    match = _COMMAND_RE.match(command)
    if not match:
        raise SubstitutionCommandError(command)

    pattern, replacement, flags = match.group(1), match.group(2), match.group(3)
    if len(set(flags)) != len(flags):
        raise SubstitutionCommandError(command, "Duplicate substitution flag")

    bits = 0
    for flag in flags:
        bits |= _FLAG_BITS.get(flag, 0)
    if "y" in flags:
        # sticky: only a match starting at the beginning of the title counts
        pattern = r"\A(?:" + pattern + ")"

    try:
        compiled = re.compile(pattern, bits)
    except re.error as e:
        raise SubstitutionCommandError(command, f"Invalid pattern ({e})") from e

    return TitleRewriteRule(command=command, pattern=compiled, replacement=replacement, flags=flags)


def parse_rewrite_rules(commands: Optional[Iterable[str]]) -> List[TitleRewriteRule]:
    return [parse_substitution_command(c) for c in commands or []]


def clean_title(title: Optional[str]) -> str:
    """Strip one leading "|" (plus whitespace after it), then surrounding whitespace."""
    if not title:
        return ""
    return re.sub(r"^\|\s*", "", title).strip()


def apply_rules(title: str, rules: Sequence[TitleRewriteRule]) -> str:
    for rule in rules:
        title = rule.apply(title)
    return title


def rewrite_title(title: str, rules: Sequence[TitleRewriteRule]) -> str:
    return clean_title(apply_rules(title, rules))
