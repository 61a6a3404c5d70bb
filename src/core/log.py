# src/core/log.py
"""
Logging helpers.

Module loggers live under the ``steady`` namespace. When STEADY_DEBUG is truthy,
``get_logger()`` also attaches a rotating file handler (logs/steady.log).
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "steady"
_LOG_PATH = os.path.join("logs", "steady.log")
_CONFIGURED = False


def debug_enabled() -> bool:
    return os.getenv("STEADY_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


def _configure_root() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not debug_enabled():
        return

    root.setLevel(logging.DEBUG)
    # Avoid duplicate handlers if reloaded in REPL/tests
    if any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        return
    try:
        os.makedirs(os.path.dirname(_LOG_PATH), exist_ok=True)
        handler = RotatingFileHandler(_LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    except OSError:
        # no file log, module loggers still propagate
        return
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="(%Y-%m-%d %H:%M:%S)",
        )
    )
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return ``steady.<name>`` (module paths are shortened to their last two parts)."""
    _configure_root()
    short = ".".join(name.split(".")[-2:]) if name.startswith("src.") else name
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{short}")
