"""Interactive wizard (default command)."""

from __future__ import annotations

import argparse
from typing import Any

from .core_handlers_analyze import handle_analyze
from .core_handlers_common import _choose, _path_from_args
from .core_handlers_migrate import handle_migrate
from .core_handlers_rollback import handle_rollback

_MENU = (
    ("analyze", "Analyze project compatibility"),
    ("migrate", "Start migration"),
    ("rollback", "Rollback previous migration"),
    ("docs", "View documentation"),
    ("exit", "Exit"),
)

_DOCS = """Documentation:
  nextmig analyze --detailed      compatibility report with recommendations
  nextmig migrate --dry-run       preview every change without writing
  nextmig migrate --yes           migrate with a backup, no prompts
  nextmig rollback                restore a backup (newest first)
  nextmig snapshots | cleanup     list / prune backups
Configuration: .nextmig.toml or NEXTMIG_* environment variables."""


def handle_interactive(args: Any) -> int:
    print("Next.js 16 Migration Wizard")
    print()
    for i, (_, label) in enumerate(_MENU, 1):
        print(f"  {i}. {label}")
    action = _MENU[_choose("What would you like to do?", len(_MENU)) - 1][0]

    sub = argparse.Namespace(path=_path_from_args(args))
    if action == "analyze":
        sub.detailed, sub.performance, sub.json = True, False, False
        return handle_analyze(sub)
    if action == "migrate":
        sub.dry_run, sub.yes, sub.no_backup, sub.performance, sub.batch = False, False, False, False, False
        return handle_migrate(sub)
    if action == "rollback":
        sub.yes, sub.snapshot_id = False, None
        return handle_rollback(sub)
    if action == "docs":
        print(_DOCS)
        return 0
    print("Goodbye!")
    return 0
