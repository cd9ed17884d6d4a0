"""migrate handler."""

from __future__ import annotations

from typing import Any

from nextmig.errors import MigratorError
from nextmig.models import AnalysisReport
from nextmig.orchestration.migrate_flow import MigrateOptions, RunStatus, run_migration
from nextmig.reporting.console import format_analysis, format_migration, format_preview, should_use_color

from .core_handlers_common import _check_path, _confirm, _err, _path_from_args


def _ask_proceed(report: AnalysisReport) -> bool:
    return _confirm(f"Ready to migrate {len(report.file_records)} file(s)?", default=True)


def handle_migrate(args: Any) -> int:
    path = _path_from_args(args)
    if _check_path(path) != 0:
        return 1
    options = MigrateOptions(
        dry_run=getattr(args, "dry_run", False),
        backup=not getattr(args, "no_backup", False),
        performance=getattr(args, "performance", False),
    )
    non_interactive = getattr(args, "yes", False) or getattr(args, "batch", False)
    try:
        run = run_migration(path, options, confirm=None if non_interactive else _ask_proceed)
    except MigratorError as exc:
        _err(f"migration failed: {exc}")
        return 1

    use_color = should_use_color()
    if run.status is RunStatus.INCOMPATIBLE:
        print(format_analysis(run.analysis, use_color=use_color))
        return 1
    if run.status is RunStatus.CANCELLED:
        print("Migration cancelled.")
        return 0
    if run.status is RunStatus.PREVIEWED:
        print(format_preview(run.preview, use_color=use_color))
        return 0

    assert run.result is not None
    if run.snapshot_id:
        print(f"Backup created: {run.snapshot_id}")
    print(
        format_migration(
            run.result,
            comparison=run.comparison,
            report_path=str(run.report_path) if run.report_path else None,
            use_color=use_color,
        )
    )
    return 0 if run.ok else 1
