"""
Migration pipeline: analyze → gate → snapshot → rewrite → post-analysis → report.

The compatibility gate is all-or-nothing. Everything after it degrades:
a failed snapshot or performance measurement is logged and the run continues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from nextmig.analysis.performance import PerformanceAnalyzer, compare
from nextmig.analysis.scanner import ProjectAnalyzer
from nextmig.config import MigratorConfig, load_config
from nextmig.errors import SnapshotError
from nextmig.models import AnalysisReport, Change, MigrationResult
from nextmig.refactor.engine import MigrationEngine
from nextmig.refactor.registry import TransformRegistry, default_registry
from nextmig.reporting.html_report import write_report
from nextmig.storage.snapshots import SnapshotManager

from .logging import get_logger

_LOG = get_logger("orchestration.migrate_flow")


class RunStatus(str, Enum):
    INCOMPATIBLE = "incompatible"
    CANCELLED = "cancelled"
    PREVIEWED = "previewed"
    MIGRATED = "migrated"


@dataclass(slots=True)
class MigrateOptions:
    dry_run: bool = False
    backup: bool = True
    performance: bool = False
    write_html: bool = True


@dataclass
class MigrationRun:
    """Everything one pipeline run produced; handlers only read it."""

    status: RunStatus
    analysis: AnalysisReport
    preview: List[Change] = field(default_factory=list)
    snapshot_id: Optional[str] = None
    result: Optional[MigrationResult] = None
    post_analysis: Optional[AnalysisReport] = None
    comparison: Optional[Dict[str, Any]] = None
    report_path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        if self.status is RunStatus.INCOMPATIBLE:
            return False
        return self.result is None or self.result.ok


def _measure(project_root: Path, config: MigratorConfig, label: str):
    _LOG.info("nextmig: running %s performance analysis", label)
    return PerformanceAnalyzer(project_root, timeout=config.build_timeout).analyze()


def run_migration(
    project_root: Path,
    options: Optional[MigrateOptions] = None,
    *,
    config: Optional[MigratorConfig] = None,
    registry: Optional[TransformRegistry] = None,
    node_lookup: Optional[Callable[[], Optional[str]]] = None,
    confirm: Optional[Callable[[AnalysisReport], bool]] = None,
) -> MigrationRun:
    """
    Run the migration pipeline for one project root.

    confirm, when given, is asked after the gate and before anything is
    written; returning False cancels the run with the tree untouched.
    """
    root = Path(project_root).resolve()
    options = options or MigrateOptions()
    config = config or load_config(root)
    registry = registry or default_registry()
    analyzer = ProjectAnalyzer(root, registry=registry, config=config, node_lookup=node_lookup)

    analysis = analyzer.analyze()
    if not analysis.is_compatible:
        _LOG.error("nextmig: project is not compatible with Next.js 16")
        return MigrationRun(status=RunStatus.INCOMPATIBLE, analysis=analysis)

    engine = MigrationEngine(root, registry)
    if options.dry_run:
        return MigrationRun(status=RunStatus.PREVIEWED, analysis=analysis, preview=engine.preview_changes(analysis))

    if confirm is not None and not confirm(analysis):
        _LOG.info("nextmig: migration cancelled")
        return MigrationRun(status=RunStatus.CANCELLED, analysis=analysis)

    run = MigrationRun(status=RunStatus.MIGRATED, analysis=analysis)
    if options.backup:
        try:
            run.snapshot_id = SnapshotManager(root, config=config).create_snapshot()
        except SnapshotError as exc:
            _LOG.warning("nextmig: backup failed, continuing without it: %s", exc)
    else:
        _LOG.warning("nextmig: skipping backup (--no-backup)")

    baseline = _measure(root, config, "baseline") if options.performance else None

    run.result = engine.migrate(analysis)
    run.post_analysis = analyzer.analyze()

    if baseline is not None:
        run.comparison = compare(baseline, _measure(root, config, "post-migration"))

    if options.write_html:
        try:
            run.report_path = write_report(
                root / config.report_file,
                analysis,
                run.result,
                timestamp=datetime.now(timezone.utc),
                comparison=run.comparison,
                snapshot_id=run.snapshot_id,
            )
        except OSError as exc:
            _LOG.warning("nextmig: could not write report: %s", exc)
    return run
