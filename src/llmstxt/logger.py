"""
Centralized logging configuration for llmstxt.

Log records go to stderr so that stdout only carries the generated document.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

# Global logger instance
_logger: Optional[logging.Logger] = None


def get_logger(name: str = "llmstxt") -> logging.Logger:
    """
    Get the package logger, configuring the shared handler on first use.

    Module loggers (``llmstxt.crawler`` etc.) propagate to the package logger,
    so only one handler is ever attached.

    Args:
        name: Logger name, defaults to "llmstxt"

    Returns:
        Logger instance
    """
    global _logger

    if _logger is None:
        _logger = logging.getLogger("llmstxt")
        _logger.setLevel(logging.INFO)

        # Avoid adding handlers multiple times
        if not _logger.handlers:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.INFO)

            # Format: [LEVEL] message
            formatter = logging.Formatter(
                "[%(levelname)s] %(message)s",
                datefmt="%H:%M:%S"
            )
            console_handler.setFormatter(formatter)

            _logger.addHandler(console_handler)

    if name == "llmstxt" or not name:
        return _logger
    if not name.startswith("llmstxt."):
        name = f"llmstxt.{name}"
    return logging.getLogger(name)


def set_log_level(level: int | str) -> None:
    """
    Set the global log level.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
               or integer level
    """
    logger = get_logger()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
