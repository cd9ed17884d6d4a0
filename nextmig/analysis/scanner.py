"""
Project scanner: Next.js 16 compatibility analysis.

analyze(project_root) → AnalysisReport. The scan is read-only and always
returns a report; fatal conditions (missing manifest, old Next.js,
unsupported Node.js, removed features) only flip is_compatible and add an
issue so the caller can show why.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

from nextmig.config import MigratorConfig, load_config
from nextmig.errors import ConfigurationError, FileAccessError
from nextmig.models import AnalysisReport, ComplexityTier, FileCategory, FileRecord
from nextmig.orchestration.logging import get_logger
from nextmig.refactor.registry import TransformRegistry, default_registry

from .versions import node_version, parse_version

_LOG = get_logger("analysis.scanner")

MANIFEST = "package.json"

_SOURCE_GLOBS = (
    "middleware.ts",
    "middleware.js",
    "next.config.js",
    "next.config.ts",
    "next.config.mjs",
    "pages/**/*.tsx",
    "pages/**/*.jsx",
    "pages/**/*.ts",
    "pages/**/*.js",
    "app/**/*.tsx",
    "app/**/*.jsx",
    "app/**/*.ts",
    "app/**/*.js",
    "components/**/*.tsx",
    "components/**/*.jsx",
    "lib/**/*.ts",
    "lib/**/*.js",
    "utils/**/*.ts",
    "utils/**/*.js",
)
# next.config lives at the root only; everything else may also sit under src/.
CANDIDATE_PATTERNS: Tuple[str, ...] = _SOURCE_GLOBS + tuple(
    f"src/{p}" for p in _SOURCE_GLOBS if not p.startswith("next.config")
)

SKIP_DIRS = frozenset({"node_modules", ".next", ".git", ".nextmig"})

INCOMPATIBLE_DEPENDENCIES = ("next-amp", "next-pwa", "next-seo")

# (tier, max files, max issues, estimate) checked top-down; anything above a
# row's limits lands in the tier before it.
_COMPLEXITY_TABLE: Tuple[Tuple[ComplexityTier, int, int, str], ...] = (
    ("high", 50, 5, "30-60 minutes"),
    ("medium", 20, 2, "15-30 minutes"),
)
_LOW_ESTIMATE = "5-15 minutes"

_AMP_IMPORT_RE = re.compile(r"""(['"])next/amp\1""")
_PPR_RE = re.compile(r"experimental\.ppr\b|experimental\s*:\s*\{[^}]*\bppr\s*:", re.DOTALL)


def classify(path: str) -> FileCategory:
    """Category from the relative path alone."""
    if "middleware" in path or "proxy" in path:
        return "middleware"
    if "next.config" in path:
        return "config"
    if "pages/api" in path or "app/api" in path:
        return "api"
    if "components" in path or "pages" in path or "app" in path:
        return "component"
    return "other"


def complexity_for(file_count: int, issue_count: int) -> Tuple[ComplexityTier, str]:
    for tier, max_files, max_issues, estimate in _COMPLEXITY_TABLE:
        if file_count > max_files or issue_count > max_issues:
            return tier, estimate
    return "low", _LOW_ESTIMATE


@dataclass
class _Findings:
    current_version: str = "unknown"
    blocking: bool = False
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    records: List[FileRecord] = field(default_factory=list)
    uses_amp: bool = False

    def issue(self, message: str, *, blocking: bool = False, recommendation: Optional[str] = None) -> None:
        self.issues.append(message)
        if recommendation:
            self.recommendations.append(recommendation)
        if blocking:
            self.blocking = True


class ProjectAnalyzer:
    """
    Scan a Next.js project for everything the 16.x migration touches.

    Usage:
        report = ProjectAnalyzer(Path("my-app")).analyze()
        if report.is_compatible:
            ...
    """

    def __init__(
        self,
        project_root: Path,
        *,
        registry: Optional[TransformRegistry] = None,
        config: Optional[MigratorConfig] = None,
        node_lookup: Optional[Callable[[], Optional[str]]] = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.registry = registry or default_registry()
        self.config = config or load_config(self.project_root)
        self.node_lookup = node_lookup or node_version

    def analyze(self) -> AnalysisReport:
        findings = _Findings()
        try:
            self._analyze_manifest(findings)
        except ConfigurationError as exc:
            findings.issue(str(exc), blocking=True)
        self._find_files_to_transform(findings)
        self._check_removed_features(findings)
        self._check_runtime(findings)

        tier, estimate = complexity_for(len(findings.records), len(findings.issues))
        return AnalysisReport(
            is_compatible=not findings.blocking,
            current_version=findings.current_version,
            file_records=tuple(findings.records),
            issues=tuple(findings.issues),
            recommendations=tuple(findings.recommendations),
            complexity_tier=tier,
            estimated_time=estimate,
        )

    # --- manifest --------------------------------------------------------

    def _read_manifest(self) -> dict:
        path = self.project_root / MANIFEST
        if not path.is_file():
            raise ConfigurationError(f"No {MANIFEST} found")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"{MANIFEST} could not be read: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"{MANIFEST} is not a JSON object")
        return data

    def _analyze_manifest(self, findings: _Findings) -> None:
        manifest = self._read_manifest()
        deps = manifest.get("dependencies") or {}
        dev_deps = manifest.get("devDependencies") or {}

        next_version = deps.get("next") or dev_deps.get("next")
        if next_version:
            findings.current_version = str(next_version)
            if not any(ch.isdigit() for ch in str(next_version)):
                findings.recommendations.append(
                    f"Could not determine the Next.js version from \"{next_version}\"; pin it before migrating"
                )
            elif parse_version(str(next_version)).major < self.config.min_next_major:
                findings.issue(
                    f"Next.js version {next_version} is too old. "
                    f"Need version {self.config.min_next_major}+ for migration to 16.",
                    blocking=True,
                )
        else:
            findings.issue("Next.js not found in dependencies", blocking=True)

        for dep in INCOMPATIBLE_DEPENDENCIES:
            if dep in deps or dep in dev_deps:
                findings.issue(
                    f"Dependency {dep} may not be compatible with Next.js 16",
                    recommendation=f"Consider updating or removing {dep}",
                )

    # --- files -----------------------------------------------------------

    def candidate_files(self) -> List[str]:
        """Relative POSIX paths matched by the candidate patterns, in pattern order."""
        seen: set[str] = set()
        out: List[str] = []
        for pattern in CANDIDATE_PATTERNS:
            for path in sorted(self.project_root.glob(pattern)):
                if not path.is_file():
                    continue
                rel = path.relative_to(self.project_root)
                if SKIP_DIRS.intersection(rel.parts[:-1]):
                    continue
                key = rel.as_posix()
                if key not in seen:
                    seen.add(key)
                    out.append(key)
        return out

    def _read(self, rel: str) -> str:
        try:
            return (self.project_root / rel).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FileAccessError(rel, str(exc)) from exc

    def analyze_file(self, rel: str) -> FileRecord:
        """Read one file and evaluate every registered predicate against it."""
        content = self._read(rel)
        return FileRecord(path=rel, category=classify(rel), transform_tags=self.registry.detect(content))

    def _find_files_to_transform(self, findings: _Findings) -> None:
        for rel in self.candidate_files():
            try:
                content = self._read(rel)
            except FileAccessError as exc:
                _LOG.warning("nextmig: skipping unreadable file %s", exc)
                continue
            tags = self.registry.detect(content)
            if tags:
                findings.records.append(FileRecord(path=rel, category=classify(rel), transform_tags=tags))
            if _AMP_IMPORT_RE.search(content):
                findings.uses_amp = True

    # --- removed features / runtime --------------------------------------

    def _walk_files(self) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(self.project_root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for filename in sorted(filenames):
                yield Path(dirpath) / filename

    def _has_amp_files(self) -> bool:
        return any(".amp." in p.name for p in self._walk_files())

    def _check_removed_features(self, findings: _Findings) -> None:
        if findings.uses_amp or self._has_amp_files():
            findings.issue(
                "AMP support has been removed in Next.js 16",
                blocking=True,
                recommendation="Remove AMP files and configurations",
            )

        for config_file in sorted(self.project_root.glob("next.config.*")):
            try:
                content = config_file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                _LOG.warning("nextmig: skipping unreadable file %s: %s", config_file.name, exc)
                continue
            if _PPR_RE.search(content):
                findings.issue(
                    "experimental.ppr flag has been removed in Next.js 16",
                    blocking=True,
                    recommendation="Use cacheComponents configuration instead",
                )
                break

    def _check_runtime(self, findings: _Findings) -> None:
        raw = self.node_lookup()
        required = self.config.min_node_version
        if raw is None:
            _LOG.warning("nextmig: could not determine Node.js version")
            findings.recommendations.append(
                f"Install Node.js {required}+ (required by Next.js 16) before migrating"
            )
            return
        version = parse_version(raw)
        if (version.major, version.minor) < self.config.min_node_tuple():
            findings.issue(
                f"Node.js {raw} is not supported. Next.js 16 requires Node.js {required}+",
                blocking=True,
            )


def analyze(project_root: Path, **kwargs) -> AnalysisReport:
    """Shortcut for ProjectAnalyzer(project_root, **kwargs).analyze()."""
    return ProjectAnalyzer(project_root, **kwargs).analyze()
