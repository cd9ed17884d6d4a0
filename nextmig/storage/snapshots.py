"""
Snapshot manager: two-layer pre-migration backup.

A snapshot is a git checkpoint commit (when the project is a work tree)
plus a copy of the project's critical files. Either layer may fail on its
own; the failure is logged and the snapshot is recorded with whatever
layers succeeded.
"""

from __future__ import annotations

import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from nextmig.config import MigratorConfig, load_config
from nextmig.errors import SnapshotError
from nextmig.models import Snapshot
from nextmig.orchestration.logging import get_logger

from . import git_checkpoint
from .catalog import SnapshotCatalog, load_catalog, save_catalog
from .paths import backups_dir, catalog_path, resolve_copy_dir, snapshot_dir

_LOG = get_logger("storage.snapshots")

CRITICAL_FILES = (
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "next.config.js",
    "next.config.ts",
    "next.config.mjs",
    "tsconfig.json",
    "tailwind.config.js",
    "tailwind.config.ts",
    ".env.local",
    ".env",
    "middleware.ts",
    "middleware.js",
    "proxy.ts",
    "proxy.js",
    "src/middleware.ts",
    "src/middleware.js",
    "src/proxy.ts",
    "src/proxy.js",
)

# Files a migration can create. Those absent at snapshot time are deleted on restore.
MIGRATION_OUTPUTS = ("proxy.ts", "proxy.js", "src/proxy.ts", "src/proxy.js")

DEFAULT_DESCRIPTION = "Pre-migration backup"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotManager:
    """
    Create, list and prune snapshots for one project root.

    The catalog holds at most config.catalog_capacity entries; copy dirs of
    entries evicted from it are removed from disk.
    """

    def __init__(
        self,
        project_root: Path,
        *,
        config: Optional[MigratorConfig] = None,
        clock: Callable[[], datetime] = _utc_now,
        use_git: bool = True,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.config = config or load_config(self.project_root)
        self.clock = clock
        self.use_git = use_git

    @property
    def catalog_file(self) -> Path:
        return catalog_path(self.project_root)

    def load_catalog(self) -> SnapshotCatalog:
        return load_catalog(self.catalog_file, capacity=self.config.catalog_capacity)

    def list_snapshots(self) -> List[Snapshot]:
        """All catalog entries, newest first."""
        return list(self.load_catalog())

    def get(self, snapshot_id: str) -> Optional[Snapshot]:
        return self.load_catalog().find(snapshot_id)

    def _new_id(self, now: datetime, taken: set[str]) -> str:
        ms = int(now.timestamp() * 1000)
        while f"backup-{ms}" in taken or snapshot_dir(self.project_root, f"backup-{ms}").exists():
            ms += 1
        return f"backup-{ms}"

    def _git_checkpoint(self, snapshot_id: str) -> Optional[str]:
        if not self.use_git:
            return None
        if not git_checkpoint.is_work_tree(self.project_root):
            _LOG.info("nextmig: not a git repository, skipping git checkpoint")
            return None
        try:
            revision = git_checkpoint.create_checkpoint(self.project_root, snapshot_id)
        except SnapshotError as exc:
            _LOG.warning("nextmig: git checkpoint failed: %s", exc)
            return None
        _LOG.info("nextmig: git checkpoint %s", revision[:12])
        return revision

    def _absent_files(self) -> tuple[str, ...]:
        return tuple(name for name in MIGRATION_OUTPUTS if not (self.project_root / name).exists())

    def _copy_checkpoint(self, snapshot_id: str) -> Optional[str]:
        dest = snapshot_dir(self.project_root, snapshot_id)
        try:
            dest.mkdir(parents=True, exist_ok=False)
            copied = 0
            for name in CRITICAL_FILES:
                src = self.project_root / name
                if src.is_file():
                    (dest / name).parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(src, dest / name)
                    copied += 1
        except OSError as exc:
            _LOG.warning("nextmig: file backup failed: %s", exc)
            shutil.rmtree(dest, ignore_errors=True)
            return None
        _LOG.debug("nextmig: copied %d critical file(s) to %s", copied, dest)
        return dest.relative_to(self.project_root).as_posix()

    def _remove_copies(self, dropped: List[Snapshot]) -> None:
        base = backups_dir(self.project_root)
        for snap in dropped:
            if not snap.file_copy_dir:
                continue
            path = resolve_copy_dir(self.project_root, snap.file_copy_dir)
            if path.parent != base:
                _LOG.warning("nextmig: not removing %s (outside %s)", path, base)
                continue
            shutil.rmtree(path, ignore_errors=True)

    def create_snapshot(self, description: str = DEFAULT_DESCRIPTION) -> str:
        """
        Take a git and file-copy checkpoint and record it as the newest entry.

        Returns the new snapshot id. Raises SnapshotError only when the
        catalog itself cannot be written.
        """
        catalog = self.load_catalog()
        now = self.clock()
        snapshot_id = self._new_id(now, set(catalog.ids()) | {s.id for s in catalog.overflow})
        snapshot = Snapshot(
            id=snapshot_id,
            timestamp=now.isoformat(),
            description=description,
            vcs_revision=self._git_checkpoint(snapshot_id),
            file_copy_dir=self._copy_checkpoint(snapshot_id),
            absent_files=self._absent_files(),
        )
        evicted = list(catalog.overflow) + catalog.push(snapshot)
        save_catalog(self.catalog_file, catalog)
        self._remove_copies(evicted)
        _LOG.info("nextmig: backup created: %s", snapshot_id)
        return snapshot_id

    def cleanup(self, keep: Optional[int] = None) -> List[str]:
        """Keep only the newest `keep` entries (config.cleanup_keep by default); return dropped ids."""
        keep = self.config.cleanup_keep if keep is None else keep
        catalog = self.load_catalog()
        dropped = list(catalog.overflow) + catalog.trim(keep)
        if dropped:
            save_catalog(self.catalog_file, catalog)
            self._remove_copies(dropped)
            _LOG.info("nextmig: removed %d old backup(s)", len(dropped))
        return [s.id for s in dropped]
