"""
Rewrite engine.

Facade: MigrationEngine(project_root).migrate(report) / preview_changes(report).
The pure part, rewrite_source(), runs the ordered rule pipeline over
immutable token streams and never touches the filesystem; the engine adds
reading, the write-if-changed step and the on-disk rename.

Per-file state: pending → transforming(tag…) → transformed | failed.
A failed file is left byte-identical on disk; other files keep going.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from nextmig.errors import FileAccessError, TransformationError
from nextmig.models import AnalysisReport, Change, FileError, FileRecord, MigrationResult
from nextmig.orchestration.logging import get_logger

from .registry import TransformRegistry, default_registry
from .tokens import TokenStream, tokenize

_LOG = get_logger("refactor.engine")


class FileState(str, Enum):
    PENDING = "pending"
    TRANSFORMING = "transforming"
    TRANSFORMED = "transformed"
    FAILED = "failed"


@dataclass(frozen=True)
class RewriteStep:
    """One rule application: the stream before and after."""

    tag: str
    before: TokenStream
    after: TokenStream

    @property
    def changed(self) -> bool:
        return self.before.tokens != self.after.tokens


@dataclass
class FileRewrite:
    original: str
    steps: List[RewriteStep] = field(default_factory=list)
    state: FileState = FileState.PENDING
    current_tag: Optional[str] = None
    error: Optional[TransformationError] = None

    @property
    def final_text(self) -> str:
        return self.steps[-1].after.to_source() if self.steps else self.original

    @property
    def changed(self) -> bool:
        return self.final_text != self.original


def rewrite_source(source: str, tags: Sequence[str], registry: TransformRegistry) -> FileRewrite:
    """
    Apply rules for tags (in the given order) to source.

    Each step re-tokenizes the previous step's output, so a rule always sees
    the text produced by the rules before it. Stops at the first failing rule.
    """
    result = FileRewrite(original=source)
    text = source
    for tag in tags:
        result.state = FileState.TRANSFORMING
        result.current_tag = tag
        rule = registry.get(tag)
        try:
            before = tokenize(text)
            after = rule.rewrite(before)
        except Exception as exc:
            result.state = FileState.FAILED
            result.error = TransformationError(tag, str(exc) or type(exc).__name__)
            return result
        result.steps.append(RewriteStep(tag=tag, before=before, after=after))
        text = after.to_source()
    result.state = FileState.TRANSFORMED
    result.current_tag = None
    return result


class MigrationEngine:
    """Applies an AnalysisReport's rewrites to the working tree, one file at a time."""

    def __init__(self, project_root: Path, registry: Optional[TransformRegistry] = None) -> None:
        self.project_root = Path(project_root).resolve()
        self.registry = registry or default_registry()

    def preview_changes(self, report: AnalysisReport) -> List[Change]:
        """List what migrate() would do. Never reads or writes files."""
        changes: List[Change] = []
        for record in report.file_records:
            for tag in self.registry.ordered(record.transform_tags):
                changes.append(Change(file=record.path, description=self.registry.describe(tag)))
        return changes

    def migrate(self, report: AnalysisReport) -> MigrationResult:
        result = MigrationResult()
        for record in report.file_records:
            changes, error = self._migrate_file(record)
            result.changes.extend(changes)
            if error is None:
                result.success_count += 1
            else:
                result.failure_count += 1
                result.errors.append(error)
                _LOG.warning("nextmig: %s: %s", error.file, error.message)
        return result

    def _migrate_file(self, record: FileRecord) -> tuple[List[Change], Optional[FileError]]:
        path = self.project_root / record.path
        tags = self.registry.ordered(record.transform_tags)
        try:
            original = self._read(record.path, path)
        except FileAccessError as exc:
            return [], FileError(file=record.path, message=str(exc))

        rename = self._planned_rename(record, tags)
        if rename is not None and (self.project_root / rename[1]).exists():
            # refused before any write, so the file is not left half-migrated
            tag, new_rel = rename
            return [], FileError(file=record.path, message=f"Cannot rename to {new_rel}: target already exists", tag=tag)

        rewrite = rewrite_source(original, tags, self.registry)
        if rewrite.state is FileState.FAILED:
            err = rewrite.error
            return [], FileError(file=record.path, message=str(err), tag=err.tag if err else None)

        if rewrite.changed:
            try:
                path.write_text(rewrite.final_text, encoding="utf-8")
            except OSError as exc:
                return [], FileError(file=record.path, message=str(FileAccessError(record.path, str(exc))))
            _LOG.debug("nextmig: rewrote %s (%s)", record.path, ", ".join(tags))

        changes = [
            Change(file=record.path, description=self.registry.describe(step.tag))
            for step in rewrite.steps
        ]
        if rename is None:
            return changes, None
        tag, new_rel = rename
        try:
            path.rename(self.project_root / new_rel)
        except OSError as exc:
            return changes, FileError(file=record.path, message=f"Rename to {new_rel} failed: {exc}", tag=tag)
        _LOG.info("nextmig: renamed %s -> %s", record.path, new_rel)
        changes.append(Change(file=record.path, description=f"Renamed {record.path} to {new_rel}", kind="rename"))
        return changes, None

    def _read(self, rel: str, path: Path) -> str:
        if not path.is_file():
            raise FileAccessError(rel, "file not found")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FileAccessError(rel, str(exc)) from exc

    def _planned_rename(self, record: FileRecord, tags: Sequence[str]) -> Optional[tuple[str, str]]:
        """(tag, new path) of the filename change tied to a structural rule, if any."""
        for tag in tags:
            rule = self.registry.get(tag)
            if rule.rename is None:
                continue
            new_rel = rule.rename(record.path)
            if new_rel and new_rel != record.path:
                return tag, new_rel
        return None
