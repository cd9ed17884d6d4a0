"""Parser wiring for the nextmig entrypoint."""

from __future__ import annotations

import argparse
from pathlib import Path


def _common_parent() -> argparse.ArgumentParser:
    """path + --quiet/--verbose, shared by every subcommand."""
    p = argparse.ArgumentParser(add_help=False)
    p.add_argument("path", nargs="?", default=".", type=Path, help="Project root (default: .)")
    # SUPPRESS keeps top-level -q/-v from being reset when the flag is not repeated here.
    p.add_argument("--quiet", "-q", action="store_true", default=argparse.SUPPRESS, help="Only warnings and errors")
    p.add_argument("--verbose", "-v", action="store_true", default=argparse.SUPPRESS, help="Debug logging")
    return p


def build_parser(*, version: str) -> argparse.ArgumentParser:
    """Configure top-level CLI parser and subcommands."""
    parser = argparse.ArgumentParser(
        prog="nextmig",
        description="Next.js 14/15 → 16 migration tool: analyze, migrate with backups, roll back",
        epilog="Run without a command to start the interactive wizard.",
    )
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {version}")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only warnings and errors")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")
    common = _common_parent()

    analyze_parser = subparsers.add_parser("analyze", parents=[common], help="Analyze project for Next.js 16 compatibility")
    analyze_parser.add_argument("--performance", action="store_true", help="Include build-time/bundle-size analysis")
    analyze_parser.add_argument("--detailed", action="store_true", help="Show versions, complexity and recommendations")
    analyze_parser.add_argument("--json", action="store_true", help="Print the analysis report as JSON")

    migrate_parser = subparsers.add_parser("migrate", parents=[common], help="Migrate the project to Next.js 16")
    migrate_parser.add_argument("--dry-run", "-d", action="store_true", help="Preview changes without applying them")
    migrate_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompts")
    migrate_parser.add_argument("--no-backup", action="store_true", help="Skip creating a backup (not recommended)")
    migrate_parser.add_argument("--performance", action="store_true", help="Compare build performance before/after")
    migrate_parser.add_argument("--batch", action="store_true", help="Non-interactive mode for CI")

    rollback_parser = subparsers.add_parser("rollback", parents=[common], help="Restore the project from a backup")
    rollback_parser.add_argument("--yes", "-y", action="store_true", help="Restore the newest backup without prompting")
    rollback_parser.add_argument("--id", dest="snapshot_id", default=None, metavar="ID", help="Backup id to restore")

    subparsers.add_parser("snapshots", parents=[common], help="List available backups (newest first)")
    subparsers.add_parser("cleanup", parents=[common], help="Keep only the newest backups")
    subparsers.add_parser("interactive", parents=[common], help="Start the interactive migration wizard")

    return parser
