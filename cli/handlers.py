"""CLI handlers facade.

Re-exports concrete handler implementations so dispatch only depends on
`cli.handlers.handle_*`:
- cli.core_handlers_analyze      analyze
- cli.core_handlers_migrate      migrate
- cli.core_handlers_rollback     rollback / snapshots / cleanup
- cli.core_handlers_interactive  interactive wizard
"""
from __future__ import annotations

from .core_handlers_analyze import handle_analyze
from .core_handlers_interactive import handle_interactive
from .core_handlers_migrate import handle_migrate
from .core_handlers_rollback import handle_cleanup, handle_rollback, handle_snapshots

__all__ = [
    "handle_analyze",
    "handle_cleanup",
    "handle_interactive",
    "handle_migrate",
    "handle_rollback",
    "handle_snapshots",
]
