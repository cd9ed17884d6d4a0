"""Restore a project from a catalogued snapshot."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional

from nextmig.errors import RestoreError, SnapshotNotFoundError
from nextmig.models import RestoreOutcome, Snapshot
from nextmig.orchestration.logging import get_logger

from . import git_checkpoint
from .paths import resolve_copy_dir
from .snapshots import SnapshotManager

_LOG = get_logger("storage.restore")


def _overlay_files(project_root: Path, snapshot: Snapshot, errors: List[str]) -> List[str]:
    restored: List[str] = []
    if not snapshot.file_copy_dir:
        return restored
    src_dir = resolve_copy_dir(project_root, snapshot.file_copy_dir)
    if not src_dir.is_dir():
        errors.append(f"Backup files not found: {snapshot.file_copy_dir}")
        return restored
    for src in sorted(src_dir.rglob("*")):
        if not src.is_file():
            continue
        rel = src.relative_to(src_dir)
        try:
            target = project_root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, target)
        except OSError as exc:
            errors.append(f"{rel.as_posix()}: {exc}")
            continue
        restored.append(rel.as_posix())
    return restored


def _remove_created_files(project_root: Path, snapshot: Snapshot, errors: List[str]) -> List[str]:
    removed: List[str] = []
    for rel in snapshot.absent_files:
        target = project_root / rel
        if not target.is_file():
            continue
        try:
            target.unlink()
        except OSError as exc:
            errors.append(f"{rel}: {exc}")
            continue
        removed.append(rel)
    return removed


class RestoreManager:
    def __init__(self, project_root: Path, *, snapshots: Optional[SnapshotManager] = None) -> None:
        self.project_root = Path(project_root).resolve()
        self.snapshots = snapshots or SnapshotManager(self.project_root)

    def restore_snapshot(self, snapshot_id: str) -> RestoreOutcome:
        """
        Hard-reset to the snapshot's git revision, overlay its file copies, then
        delete the migration outputs that did not exist when it was taken.

        Unknown id: SnapshotNotFoundError, tree untouched. One failing layer
        yields a "partial" outcome; if nothing at all could be put back the
        restore raises RestoreError.
        """
        snapshot = self.snapshots.get(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)

        errors: List[str] = []
        vcs_restored: Optional[bool] = None
        if snapshot.vcs_revision:
            try:
                git_checkpoint.hard_reset(self.project_root, snapshot.vcs_revision)
                vcs_restored = True
                _LOG.info("nextmig: git state restored to %s", snapshot.vcs_revision[:12])
            except RestoreError as exc:
                vcs_restored = False
                errors.append(str(exc))
                _LOG.warning("nextmig: git restore failed: %s", exc)

        files = _overlay_files(self.project_root, snapshot, errors)
        if files:
            _LOG.info("nextmig: restored %d file(s) from backup", len(files))
        removed = _remove_created_files(self.project_root, snapshot, errors)
        if removed:
            _LOG.info("nextmig: removed %s (created after the backup)", ", ".join(removed))

        outcome = RestoreOutcome(
            snapshot_id=snapshot_id,
            vcs_restored=vcs_restored,
            files_restored=tuple(files),
            errors=tuple(errors),
            files_removed=tuple(removed),
        )
        if errors and not vcs_restored and not files and not removed:
            raise RestoreError(f"Restore of {snapshot_id} failed: {'; '.join(errors)}")
        return outcome


def restore_snapshot(project_root: Path, snapshot_id: str) -> RestoreOutcome:
    return RestoreManager(project_root).restore_snapshot(snapshot_id)
