"""
Storage paths.

All migrator artifacts live under project_root/.nextmig/:

    .nextmig/backups/metadata.json      snapshot catalog (newest first)
    .nextmig/backups/<snapshot id>/     file-copy checkpoint
"""

from __future__ import annotations

from pathlib import Path

STORAGE_DIR = ".nextmig"
BACKUPS_DIR = "backups"
CATALOG_FILE = "metadata.json"


def backups_dir(root: Path) -> Path:
    return Path(root).resolve() / STORAGE_DIR / BACKUPS_DIR


def catalog_path(root: Path) -> Path:
    return backups_dir(root) / CATALOG_FILE


def snapshot_dir(root: Path, snapshot_id: str) -> Path:
    return backups_dir(root) / snapshot_id


def resolve_copy_dir(root: Path, recorded: str) -> Path:
    """Catalog stores copy dirs relative to the project root; absolute paths are accepted too."""
    p = Path(recorded)
    return p if p.is_absolute() else Path(root).resolve() / p
