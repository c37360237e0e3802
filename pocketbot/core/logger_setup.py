"""
core/logger_setup.py - Provides a reusable logging configuration setup with robust handling.
This module centralizes logging configuration and exposes a setup_logging() function
that can be used in both production and testing environments.

    LOG_LEVEL   root level (DEBUG, INFO, ...), default INFO
    LOG_FORMAT  ``pretty`` (rich console, default) or ``json`` (stdout, one object per line)
"""

import collections
import copy
import logging
import logging.config
import os
import warnings
from typing import Any


def merge_dicts(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """
    Recursively merge *overrides* into *base*.

    * For nested dicts, values are merged depth-first.
    * If the types at the same key differ, the override value wins and a
      `warnings.warn()` is emitted.

    Returns the modified *base* for convenience so callers can write
    `cfg = merge_dicts(cfg, overrides)`.
    """
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            merge_dicts(base[key], value)
        else:
            if key in base and not isinstance(base[key], type(value)):
                warnings.warn(
                    f"Type mismatch for key '{key}': "
                    f"{type(base[key]).__name__} vs {type(value).__name__}. "
                    "Using override value."
                )
            base[key] = value
    return base


DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        # RichHandler ignores most format string except datefmt,
        # keep formatter minimal and pass only datefmt.
        "rich": {"datefmt": "%Y-%m-%d %H:%M:%S"},
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%S%z",
        },
        "default": {"format": "%(asctime)s [%(levelname)s] %(message)s"},
    },
    "filters": {"dedupe": {"()": "pocketbot.core.logger_setup._DuplicateFilter"}},
    "handlers": {
        "rich": {
            "class": "rich.logging.RichHandler",
            "markup": False,
            "rich_tracebacks": True,
            "show_path": False,
            "formatter": "rich",
            "filters": ["dedupe"],
        },
        "stdout": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "filters": ["dedupe"],
            "stream": "ext://sys.stdout",
        },
    },
    "root": {
        "handlers": ["rich"],
        "level": "INFO",
    },
}


# Suppress duplicate exception log entries in quick succession (same message & traceback)
class _DuplicateFilter(logging.Filter):
    """Filter that drops consecutive duplicate (msg, exc_text) records."""

    def __init__(self, window: int = 20) -> None:
        super().__init__()
        self._recent: collections.deque[tuple[str, str]] = collections.deque(maxlen=window)

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        key = (record.getMessage(), getattr(record, "exc_text", "") or "")
        if key in self._recent:
            return False
        self._recent.append(key)
        return True


# Sentinel to avoid multiple configuration attempts
_CONFIGURED: bool = False


def setup_logging(config_overrides: dict[str, Any] | None = None) -> None:
    """
    setup_logging - Configures logging using a centralized configuration.

    Args:
        config_overrides (dict, optional): A dictionary with logging configuration overrides.
            This can be used to modify the default logging setup for different environments.

    Returns:
        None
    """
    global _CONFIGURED
    if _CONFIGURED:
        return  # already configured – avoid duplicate handlers

    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)

    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        config.setdefault("root", {})["level"] = env_level.upper()
    if os.getenv("LOG_FORMAT", "pretty").lower() == "json":
        config["root"]["handlers"] = ["stdout"]
    # Ensure force is set so *all* previous handlers are removed in one go.
    config["force"] = True
    if config_overrides:
        merge_dicts(config, config_overrides)

    # Check for empty or missing handlers in overall config or in the root logger.
    if (
        not config.get("handlers")
        or not config["handlers"]
        or not config.get("root", {}).get("handlers")
    ):
        warnings.warn("Logging configuration missing handlers; using fallback console handler.")
        config["handlers"] = {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        }
        if "root" in config:
            config["root"]["handlers"] = ["console"]

    logging.config.dictConfig(config)
    _CONFIGURED = True


def reset_logging_state() -> None:
    """Allow the next :func:`setup_logging` call to reconfigure (tests only)."""
    global _CONFIGURED
    _CONFIGURED = False


# End of core/logger_setup.py
