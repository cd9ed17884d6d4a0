"""
Git checkpoint helpers.

Thin subprocess wrappers; every call carries a timeout. The migrator's own
storage dir is kept out of checkpoint commits so a hard reset never rewinds
the snapshot catalog.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

from nextmig.errors import RestoreError, SnapshotError

from .paths import STORAGE_DIR

GIT_TIMEOUT = 30

_PATHSPEC: List[str] = ["--", ".", f":(exclude){STORAGE_DIR}"]


def _git(project_root: Path, *args: str, timeout: int = GIT_TIMEOUT) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["git", *args],
        cwd=str(project_root),
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def _output(r: subprocess.CompletedProcess) -> str:
    return (r.stderr or r.stdout or "").strip() or f"exit {r.returncode}"


def _checked(project_root: Path, *args: str, error: type = SnapshotError) -> str:
    """Run git and return stdout; raise `error` on failure, timeout, or missing git."""
    label = " ".join(args[:2])
    try:
        r = _git(project_root, *args)
    except subprocess.TimeoutExpired as exc:
        raise error(f"git {label}: timeout") from exc
    except OSError as exc:
        raise error(f"git {label}: {exc}") from exc
    if r.returncode != 0:
        raise error(f"git {label} failed: {_output(r)}")
    return (r.stdout or "").strip()


def is_work_tree(project_root: Path) -> bool:
    try:
        r = _git(project_root, "rev-parse", "--is-inside-work-tree", timeout=5)
    except (subprocess.TimeoutExpired, OSError):
        return False
    return r.returncode == 0 and (r.stdout or "").strip() == "true"


def has_pending_changes(project_root: Path) -> bool:
    return bool(_checked(project_root, "status", "--porcelain", *_PATHSPEC))


def head_revision(project_root: Path) -> str:
    return _checked(project_root, "rev-parse", "HEAD")


def create_checkpoint(project_root: Path, snapshot_id: str) -> str:
    """
    Commit pending work, then record a dedicated backup commit.

    Returns the HEAD revision after the backup commit. Raises SnapshotError
    when the directory is not a work tree or any git step fails.
    """
    root = Path(project_root)
    if not is_work_tree(root):
        raise SnapshotError(f"{root} is not inside a git work tree")
    if has_pending_changes(root):
        _checked(root, "add", "-A", *_PATHSPEC)
        _checked(root, "commit", "-m", f"Auto-commit before Next.js 16 migration backup {snapshot_id}")
    _checked(root, "commit", "--allow-empty", "-m", f"Next.js 16 migration backup: {snapshot_id}")
    return head_revision(root)


def hard_reset(project_root: Path, revision: str) -> None:
    _checked(Path(project_root), "reset", "--hard", revision, error=RestoreError)
