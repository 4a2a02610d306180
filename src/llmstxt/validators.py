"""
Configuration validation helpers.
"""
from __future__ import annotations

from urllib.parse import urlparse
from typing import List, Tuple


def validate_url(url: str) -> Tuple[bool, str]:
    """
    Check that a URL is an absolute http(s) URL.

    Returns:
        (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL must not be empty"

    url = url.strip()
    if not url:
        return False, "URL must not be empty"

    try:
        parsed = urlparse(url)
        if not parsed.scheme:
            return False, f"URL is missing a scheme: {url}"
        if parsed.scheme not in ("http", "https"):
            return False, f"URL scheme must be http or https: {url}"
        if not parsed.netloc:
            return False, f"URL is missing a host: {url}"
        return True, ""
    except ValueError as e:
        return False, f"Invalid URL: {e}"


def validate_concurrency(value) -> Tuple[bool, str]:
    if isinstance(value, bool):
        return False, f"concurrency must be an integer: {value!r}"
    try:
        number = int(value)
    except (TypeError, ValueError):
        return False, f"concurrency must be an integer: {value!r}"
    if number < 1:
        return False, f"concurrency must be >= 1: {number}"
    return True, ""


def _validate_pattern_list(config_dict: dict, key: str) -> List[str]:
    value = config_dict.get(key)
    if value is None or isinstance(value, str):
        return []
    if not isinstance(value, list):
        return [f"'{key}' must be a list"]
    return [
        f"'{key}[{i}]' must be a string"
        for i, item in enumerate(value)
        if not isinstance(item, str)
    ]


def validate_config_basic(config_dict: dict) -> List[str]:
    """
    Validate the structure of a YAML config mapping.

    Returns:
        List of error messages (empty when the config is valid)
    """
    errors: List[str] = []

    if not isinstance(config_dict, dict):
        errors.append("Config must be a YAML mapping")
        return errors

    sitemap_url = config_dict.get("sitemap_url")
    if sitemap_url is not None:
        is_valid, msg = validate_url(sitemap_url)
        if not is_valid:
            errors.append(f"'sitemap_url' {msg}")

    for key in ("exclude_paths", "include_paths", "replace_title"):
        errors.extend(_validate_pattern_list(config_dict, key))

    if "concurrency" in config_dict:
        is_valid, msg = validate_concurrency(config_dict["concurrency"])
        if not is_valid:
            errors.append(msg)

    scheduler = config_dict.get("scheduler")
    if scheduler is not None and scheduler not in ("chunked", "pool"):
        errors.append(f"'scheduler' must be 'chunked' or 'pool': {scheduler}")

    timeout = config_dict.get("timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            errors.append(f"'timeout' must be a positive number: {timeout}")

    max_redirects = config_dict.get("max_redirects")
    if max_redirects is not None:
        if isinstance(max_redirects, bool) or not isinstance(max_redirects, int) or max_redirects < 0:
            errors.append(f"'max_redirects' must be a non-negative integer: {max_redirects}")

    return errors
