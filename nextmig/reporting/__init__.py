"""Console and HTML rendering of analysis and migration results."""

from .console import (
    format_analysis,
    format_migration,
    format_performance,
    format_preview,
    format_restore,
    format_snapshots,
    should_use_color,
)
from .html_report import render_html, write_report

__all__ = [
    "format_analysis",
    "format_migration",
    "format_performance",
    "format_preview",
    "format_restore",
    "format_snapshots",
    "render_html",
    "should_use_color",
    "write_report",
]
