from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .validators import validate_config_basic


DEFAULT_SITEMAP_URL = "https://vercel.com/sitemap.xml"
DEFAULT_CONCURRENCY = 5
DEFAULT_TIMEOUT = 20.0
# The fetcher never follows fewer redirects than this
MIN_REDIRECTS = 10

SCHEDULERS = ("chunked", "pool")


class ConfigError(ValueError):
    """Invalid run configuration, reported before any network activity."""


@dataclass
class GenerateOptions:
    sitemap_url: str = DEFAULT_SITEMAP_URL
    exclude_paths: List[str] = field(default_factory=list)
    include_paths: List[str] = field(default_factory=list)
    # each entry is a `s/pattern/replacement/flags` command
    replace_title: List[str] = field(default_factory=list)
    title: Optional[str] = None
    description: Optional[str] = None
    concurrency: int = DEFAULT_CONCURRENCY
    scheduler: str = "chunked"
    timeout: float = DEFAULT_TIMEOUT
    max_redirects: int = MIN_REDIRECTS

    def merged(self, **overrides: Any) -> "GenerateOptions":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


def _load_raw_config(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping")
    return data


def _str_list(raw: Dict[str, Any], key: str) -> List[str]:
    value = raw.get(key) or []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def load_config(path: Path, validate: bool = True) -> GenerateOptions:
    """Load run defaults from a YAML file."""
    raw = _load_raw_config(path)

    if validate:
        errors = validate_config_basic(raw)
        if errors:
            raise ConfigError("; ".join(errors))

    options = GenerateOptions(
        exclude_paths=_str_list(raw, "exclude_paths"),
        include_paths=_str_list(raw, "include_paths"),
        replace_title=_str_list(raw, "replace_title"),
    )
    if raw.get("sitemap_url"):
        options.sitemap_url = str(raw["sitemap_url"])
    if raw.get("title") is not None:
        options.title = str(raw["title"])
    if raw.get("description") is not None:
        options.description = str(raw["description"])
    if "scheduler" in raw:
        options.scheduler = str(raw["scheduler"])
    try:
        if "concurrency" in raw:
            options.concurrency = int(raw["concurrency"])
        if "timeout" in raw:
            options.timeout = float(raw["timeout"])
        if "max_redirects" in raw:
            options.max_redirects = max(int(raw["max_redirects"]), MIN_REDIRECTS)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric value in {path}: {e}") from e

    return options


def check_options(options: GenerateOptions) -> None:
    """Raise ConfigError for option values the crawl cannot run with."""
    if options.concurrency < 1:
        raise ConfigError(f"concurrency must be >= 1, got {options.concurrency}")
    if options.scheduler not in SCHEDULERS:
        raise ConfigError(
            f"scheduler must be one of {', '.join(SCHEDULERS)}, got {options.scheduler!r}"
        )
    if options.timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {options.timeout}")
