"""Centralized logging helpers for the migrator and its CLI.

All loggers hang off the ``nextmig`` root, which owns a single stderr handler.
Plain ``%(message)s`` lines by default; ``--verbose`` adds level and logger name.
"""

from __future__ import annotations

import logging
import os
import sys

ROOT_LOGGER = "nextmig"
PLAIN_FORMAT = "%(message)s"
VERBOSE_FORMAT = "%(levelname)s %(name)s: %(message)s"

_configured = False


def _resolve_level() -> int:
    raw = os.environ.get("NEXTMIG_LOG_LEVEL", "").strip().upper()
    if raw:
        return getattr(logging, raw, logging.INFO)
    return logging.INFO


def _root_handler(root: logging.Logger) -> logging.Handler:
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        root.addHandler(handler)
        root.propagate = False
    return root.handlers[0]


def configure_cli_logging(*, quiet: bool = False, verbose: bool = False) -> None:
    """Set nextmig.* logger levels from CLI flags. --quiet/--verbose override env."""
    global _configured
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = _resolve_level()
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    _root_handler(root).setFormatter(logging.Formatter(VERBOSE_FORMAT if verbose else PLAIN_FORMAT))
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a nextmig.<name> logger."""
    root = logging.getLogger(ROOT_LOGGER)
    _root_handler(root)
    if not _configured:
        root.setLevel(_resolve_level())
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
