"""CLI command dispatch wiring."""

from __future__ import annotations

import argparse
from typing import Any, Callable

from cli import handlers


def dispatch_command(parser: argparse.ArgumentParser, args: Any) -> int:
    """Dispatch parsed CLI args to the matching command handler."""
    from nextmig.orchestration.logging import configure_cli_logging

    quiet = getattr(args, "quiet", False)
    verbose = getattr(args, "verbose", False)
    configure_cli_logging(quiet=quiet, verbose=verbose)

    dispatch: dict[str, Callable[[], int]] = {
        "analyze": lambda: handlers.handle_analyze(args),
        "migrate": lambda: handlers.handle_migrate(args),
        "rollback": lambda: handlers.handle_rollback(args),
        "snapshots": lambda: handlers.handle_snapshots(args),
        "cleanup": lambda: handlers.handle_cleanup(args),
        "interactive": lambda: handlers.handle_interactive(args),
    }
    if args.command is None:
        return handlers.handle_interactive(args)
    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    return handler()
