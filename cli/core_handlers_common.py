"""Shared helpers for core CLI handlers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, TypeVar

from rich.console import Console

T = TypeVar("T")


def _err(msg: str) -> None:
    """Log unified error message (via logger, respects --quiet)."""
    _clog().error("nextmig: %s", msg)


def _clog() -> Any:
    from nextmig.orchestration.logging import get_logger

    return get_logger("cli")


def _path_from_args(args: Any) -> Path:
    raw = getattr(args, "path", None)
    return Path(raw or ".").resolve()


def _check_path(path: Path, must_be_dir: bool = True) -> int:
    """Return 0 if path is valid, 1 and print error otherwise."""
    if not path.exists():
        _err(f"path does not exist: {path}")
        return 1
    if must_be_dir and (not path.is_dir()):
        _err(f"not a directory: {path}")
        return 1
    return 0


def _confirm(prompt: str, *, default: bool) -> bool:
    """Ask a yes/no question on stdin; empty answer or EOF means `default`."""
    suffix = " [Y/n] " if default else " [y/N] "
    while True:
        try:
            answer = input(prompt + suffix).strip().lower()
        except EOFError:
            return default
        if not answer:
            return default
        if answer in {"y", "yes"}:
            return True
        if answer in {"n", "no"}:
            return False
        _clog().warning("Please answer y or n")


def _choose(prompt: str, count: int, *, default: int = 1) -> int:
    """Read a 1-based menu choice in [1, count]; empty answer or EOF means `default`."""
    while True:
        try:
            raw = input(f"{prompt} [{default}]: ").strip()
        except EOFError:
            return default
        if not raw:
            return default
        if raw.isdigit() and 1 <= int(raw) <= count:
            return int(raw)
        _clog().warning("Use a number between 1 and %s", count)


def _with_status(message: str, fn: Callable[[], T]) -> T:
    """Run fn under a stderr spinner when stderr is a terminal."""
    console = Console(file=sys.stderr)
    if not sys.stderr.isatty():
        _clog().info("nextmig: %s", message)
        return fn()
    with console.status(f"[bold green]{message}", spinner="dots"):
        return fn()
