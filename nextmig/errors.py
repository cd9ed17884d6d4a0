"""Error kinds raised or recorded by the migrator core.

Policy per kind:

- ConfigurationError:  fatal to the compatibility gate; analysis still completes.
- FileAccessError:     recoverable; the file is skipped (scan) or failed (rewrite).
- TransformationError: recoverable per file; remaining tags for that file are skipped.
- SnapshotError:       degrade; migration proceeds without that half of the backup.
- RestoreError:        fatal to rollback; propagated to the caller.
"""

from __future__ import annotations


class MigratorError(Exception):
    """Base class for all migrator errors."""


class ConfigurationError(MigratorError):
    """Missing/invalid manifest or unsupported runtime."""


class FileAccessError(MigratorError):
    """File could not be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class TransformationError(MigratorError):
    """A rewrite rule failed while tokenizing or rewriting a file."""

    def __init__(self, tag: str, message: str) -> None:
        super().__init__(f"Transformation {tag} failed: {message}")
        self.tag = tag


class TokenizeError(MigratorError):
    """Source could not be split into tokens (unterminated comment or template)."""


class SnapshotError(MigratorError):
    """A git or file-copy checkpoint step failed."""


class RestoreError(MigratorError):
    """Restore could not be performed."""


class SnapshotNotFoundError(RestoreError):
    """No snapshot with the requested id exists in the catalog."""

    def __init__(self, snapshot_id: str) -> None:
        super().__init__(f"Backup {snapshot_id} not found")
        self.snapshot_id = snapshot_id
