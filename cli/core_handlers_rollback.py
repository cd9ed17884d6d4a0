"""rollback / snapshots / cleanup handlers."""

from __future__ import annotations

import sys
from typing import Any

from nextmig.errors import MigratorError
from nextmig.reporting.console import format_restore, format_snapshots, should_use_color
from nextmig.storage.restore import RestoreManager
from nextmig.storage.snapshots import SnapshotManager

from .core_handlers_common import _check_path, _choose, _confirm, _err, _path_from_args


def handle_rollback(args: Any) -> int:
    """Restore from --id, the newest backup (--yes), or one picked from the list."""
    path = _path_from_args(args)
    if _check_path(path) != 0:
        return 1
    use_color = should_use_color()
    manager = SnapshotManager(path)
    snapshot_id = getattr(args, "snapshot_id", None)
    assume_yes = getattr(args, "yes", False)

    if not snapshot_id:
        snapshots = manager.list_snapshots()
        if not snapshots:
            _err("no migration backups available to roll back to")
            return 1
        print(format_snapshots(snapshots, use_color=use_color))
        if assume_yes:
            snapshot_id = snapshots[0].id
        else:
            snapshot_id = snapshots[_choose("Which backup would you like to restore?", len(snapshots)) - 1].id

    if not assume_yes and not _confirm(f"Restore from backup {snapshot_id}?", default=False):
        print("Rollback cancelled.")
        return 0

    try:
        outcome = RestoreManager(path, snapshots=manager).restore_snapshot(snapshot_id)
    except MigratorError as exc:
        _err(f"rollback failed: {exc}")
        return 1
    print(format_restore(outcome, use_color=use_color))
    return 0 if outcome.status == "restored" else 1


def handle_snapshots(args: Any) -> int:
    path = _path_from_args(args)
    if _check_path(path) != 0:
        return 1
    print(format_snapshots(SnapshotManager(path).list_snapshots(), use_color=should_use_color()))
    return 0


def handle_cleanup(args: Any) -> int:
    path = _path_from_args(args)
    if _check_path(path) != 0:
        return 1
    try:
        dropped = SnapshotManager(path).cleanup()
    except MigratorError as exc:
        _err(f"cleanup failed: {exc}")
        return 1
    print(f"nextmig: removed {len(dropped)} old backup(s).", file=sys.stderr)
    for snapshot_id in dropped:
        print(f"  {snapshot_id}")
    return 0
