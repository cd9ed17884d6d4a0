"""Compatibility scanning and performance probing."""

from .performance import PerformanceAnalyzer, PerformanceMetrics, compare
from .scanner import ProjectAnalyzer, analyze, classify, complexity_for
from .versions import Version, node_version, parse_version

__all__ = [
    "PerformanceAnalyzer",
    "PerformanceMetrics",
    "ProjectAnalyzer",
    "Version",
    "analyze",
    "classify",
    "compare",
    "complexity_for",
    "node_version",
    "parse_version",
]
