"""
Console formatting for analysis, migration and snapshot output.

Colors are plain ANSI codes, only when stdout is a TTY (or forced).
"""

from __future__ import annotations

import sys
from typing import Any, Dict, Iterable, List, Optional

from nextmig.analysis.performance import PerformanceMetrics
from nextmig.models import AnalysisReport, Change, MigrationResult, RestoreOutcome, Snapshot

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_BLUE = "\033[34m"

_TIER_COLOR = {"low": _GREEN, "medium": _YELLOW, "high": _RED}


def _color(text: str, code: str, use_color: bool) -> str:
    return f"{code}{text}{_RESET}" if use_color else text


def should_use_color(force: Optional[bool] = None) -> bool:
    """Use color only when stdout is TTY, unless force is set."""
    if force is not None:
        return force
    return sys.stdout.isatty()


def _bullets(items: Iterable[str], *, prefix: str = "  - ") -> List[str]:
    return [f"{prefix}{item}" for item in items]


def format_analysis(report: AnalysisReport, *, detailed: bool = False, target_version: str = "16.0.0", use_color: bool = False) -> str:
    c = lambda t, code: _color(t, code, use_color)

    lines = [c("Compatibility Analysis", _BLUE), ""]
    if report.is_compatible:
        lines.append(c("Project is compatible with Next.js 16", _GREEN))
    else:
        lines.append(c("Project has compatibility issues", _RED))
    if report.issues:
        lines.append("")
        lines.append(c("Issues found:", _YELLOW))
        lines.extend(_bullets(report.issues))

    lines.append("")
    lines.append(c("Files to be transformed:", _BOLD))
    if not report.file_records:
        lines.append(c("  (none)", _DIM))
    for record in report.file_records:
        lines.append(f"  - {record.path} ({record.category}): {', '.join(record.transform_tags)}")

    if detailed:
        tier = report.complexity_tier
        lines.append("")
        lines.append(c("Detailed Analysis:", _BOLD))
        lines.append(f"  Next.js version: {report.current_version}")
        lines.append(f"  Target version: {target_version}")
        lines.append(f"  Migration complexity: {c(tier, _TIER_COLOR.get(tier, _DIM))}")
        lines.append(f"  Estimated migration time: {report.estimated_time}")
        if report.recommendations:
            lines.append("")
            lines.append(c("Recommendations:", _YELLOW))
            lines.extend(_bullets(report.recommendations))

    lines.append("")
    if report.is_compatible:
        lines.append(c("Ready to migrate. Run \"nextmig migrate\" to start.", _BLUE))
    else:
        lines.append(c("Fix compatibility issues before migrating.", _YELLOW))
    return "\n".join(lines)


def format_preview(changes: List[Change], *, use_color: bool = False) -> str:
    c = lambda t, code: _color(t, code, use_color)
    lines = [c("Changes that would be made:", _BLUE)]
    if not changes:
        lines.append(c("  (nothing to change)", _DIM))
    for change in changes:
        lines.append(f"  - {change.file}: {change.description}")
    lines.append("")
    lines.append(c("Run without --dry-run to apply these changes.", _YELLOW))
    return "\n".join(lines)


def format_performance(metrics: PerformanceMetrics, *, use_color: bool = False) -> str:
    c = lambda t, code: _color(t, code, use_color)
    return "\n".join(
        [
            c("Performance Metrics:", _BLUE),
            f"  Build time: {metrics.build_time_ms}ms ({metrics.status})",
            f"  Bundle size: {metrics.bundle_size_kb}KB",
        ]
    )


def _percent(value: Optional[float], word: str) -> str:
    return "n/a" if value is None else f"{value:.1f}% {word}"


def format_migration(
    result: MigrationResult,
    *,
    comparison: Optional[Dict[str, Any]] = None,
    report_path: Optional[str] = None,
    use_color: bool = False,
) -> str:
    c = lambda t, code: _color(t, code, use_color)

    lines = [c("Migration Summary:", _BLUE)]
    lines.append(c(f"  {result.success_count} file(s) migrated successfully", _GREEN))
    if result.failure_count:
        lines.append(c(f"  {result.failure_count} file(s) had issues", _YELLOW))
        for err in result.errors:
            lines.append(c(f"    {err.file}: {err.message}", _RED))

    if comparison:
        gain = comparison.get("improvement") or {}
        lines.append("")
        lines.append(c("Performance Improvements:", _BLUE))
        lines.append(f"  Build time: {_percent(gain.get('build_time'), 'faster')}")
        lines.append(f"  Bundle size: {_percent(gain.get('bundle_size'), 'smaller')}")

    if report_path:
        lines.append("")
        lines.append(c(f"Detailed report saved to: {report_path}", _BLUE))
    lines.append(c('Run "nextmig rollback" if you need to undo changes.', _DIM))
    return "\n".join(lines)


def format_snapshots(snapshots: List[Snapshot], *, use_color: bool = False) -> str:
    c = lambda t, code: _color(t, code, use_color)
    if not snapshots:
        return c("No migration backups available.", _YELLOW)
    lines = [c("Available Backups:", _BLUE)]
    for i, snap in enumerate(snapshots, 1):
        layers = []
        if snap.vcs_revision:
            layers.append(f"git {snap.vcs_revision[:12]}")
        if snap.file_copy_dir:
            layers.append("files")
        detail = ", ".join(layers) or "empty"
        lines.append(f"  {i}. {snap.id} - {snap.timestamp} ({snap.description}) [{detail}]")
    return "\n".join(lines)


def format_restore(outcome: RestoreOutcome, *, use_color: bool = False) -> str:
    c = lambda t, code: _color(t, code, use_color)
    if outcome.status == "restored":
        lines = [c("Project restored to previous state", _GREEN)]
    else:
        lines = [c("Project partially restored", _YELLOW)]
    lines.append(f"  Backup: {outcome.snapshot_id}")
    if outcome.vcs_restored is not None:
        lines.append(f"  Git reset: {'ok' if outcome.vcs_restored else 'failed'}")
    lines.append(f"  Files restored: {len(outcome.files_restored)}")
    if outcome.files_removed:
        lines.append(f"  Files removed: {', '.join(outcome.files_removed)}")
    for err in outcome.errors:
        lines.append(c(f"  {err}", _RED))
    return "\n".join(lines)
