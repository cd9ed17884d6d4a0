"""Shared data structures passed between scanner, engine, snapshots and reporting."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

FileCategory = Literal["middleware", "config", "api", "component", "other"]
ComplexityTier = Literal["low", "medium", "high"]
ChangeKind = Literal["transformation", "rename"]


@dataclass(frozen=True)
class FileRecord:
    """
    One file that needs rewriting.

    transform_tags are ordered by registry (not detection) order and are a
    pure function of the file's content at analysis time.
    """

    path: str  # POSIX path relative to the project root
    category: FileCategory
    transform_tags: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "category": self.category,
            "transform_tags": list(self.transform_tags),
        }


@dataclass(frozen=True)
class AnalysisReport:
    """Result of one scanner run. Derived, never edited afterwards."""

    is_compatible: bool
    current_version: str
    file_records: Tuple[FileRecord, ...]
    issues: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    complexity_tier: ComplexityTier
    estimated_time: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_compatible": self.is_compatible,
            "current_version": self.current_version,
            "file_records": [r.to_dict() for r in self.file_records],
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
            "complexity_tier": self.complexity_tier,
            "estimated_time": self.estimated_time,
        }


@dataclass(frozen=True)
class Snapshot:
    """
    Catalog entry for one backup.

    Persisted keys follow the catalog file format (gitCommit / filesBackup),
    so catalogs written by earlier releases keep loading.
    """

    id: str
    timestamp: str  # ISO-8601, UTC
    description: str
    vcs_revision: Optional[str] = None
    file_copy_dir: Optional[str] = None
    # allowlisted files missing when the snapshot was taken; restore deletes them
    absent_files: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "description": self.description,
        }
        if self.vcs_revision:
            data["gitCommit"] = self.vcs_revision
        if self.file_copy_dir:
            data["filesBackup"] = self.file_copy_dir
        if self.absent_files:
            data["absentFiles"] = list(self.absent_files)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            id=str(data["id"]),
            timestamp=str(data.get("timestamp") or ""),
            description=str(data.get("description") or ""),
            vcs_revision=data.get("gitCommit") or None,
            file_copy_dir=data.get("filesBackup") or None,
            absent_files=tuple(str(name) for name in data.get("absentFiles") or ()),
        )


@dataclass(frozen=True)
class Change:
    file: str
    description: str
    kind: ChangeKind = "transformation"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FileError:
    file: str
    message: str
    tag: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MigrationResult:
    """
    Accounting for one migrate() run.

    Built by the engine, then handed to reporting which only reads it.
    """

    success_count: int = 0
    failure_count: int = 0
    changes: List[Change] = field(default_factory=list)
    errors: List[FileError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure_count == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "changes": [c.to_dict() for c in self.changes],
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True)
class RestoreOutcome:
    """What restore_snapshot managed to put back."""

    snapshot_id: str
    vcs_restored: Optional[bool]  # None when the snapshot had no git revision
    files_restored: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    files_removed: Tuple[str, ...] = ()

    @property
    def status(self) -> Literal["restored", "partial"]:
        if self.errors or self.vcs_restored is False:
            return "partial"
        return "restored"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snapshot_id": self.snapshot_id,
            "status": self.status,
            "vcs_restored": self.vcs_restored,
            "files_restored": list(self.files_restored),
            "files_removed": list(self.files_removed),
            "errors": list(self.errors),
        }
