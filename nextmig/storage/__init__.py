"""Snapshot catalog, backup and restore."""

from .catalog import SnapshotCatalog, load_catalog, save_catalog
from .restore import RestoreManager, restore_snapshot
from .snapshots import CRITICAL_FILES, SnapshotManager

__all__ = [
    "CRITICAL_FILES",
    "RestoreManager",
    "SnapshotCatalog",
    "SnapshotManager",
    "load_catalog",
    "restore_snapshot",
    "save_catalog",
]
