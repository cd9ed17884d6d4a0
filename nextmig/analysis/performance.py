"""
Build-time and bundle-size measurement.

Runs `npm run build` under a timeout and sums .next/static. Any failure
(missing npm, build error, timeout) degrades to zero metrics with a warning;
it never aborts the surrounding command.
"""

from __future__ import annotations

import subprocess
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from nextmig.orchestration.logging import get_logger

_LOG = get_logger("analysis.performance")

BUILD_CMD: List[str] = ["npm", "run", "build"]


@dataclass(frozen=True)
class PerformanceMetrics:
    build_time_ms: int = 0
    bundle_size_kb: int = 0
    status: str = "unknown"  # "ok" | "failed" | "timeout" | "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _percent_gain(before: int, after: int) -> Optional[float]:
    if before <= 0:
        return None
    return round((before - after) / before * 100, 1)


def compare(before: PerformanceMetrics, after: PerformanceMetrics) -> Dict[str, Any]:
    """Positive numbers mean faster build / smaller bundle after migration."""
    return {
        "before": before.to_dict(),
        "after": after.to_dict(),
        "improvement": {
            "build_time": _percent_gain(before.build_time_ms, after.build_time_ms),
            "bundle_size": _percent_gain(before.bundle_size_kb, after.bundle_size_kb),
        },
    }


class PerformanceAnalyzer:
    def __init__(self, project_root: Path, *, timeout: int = 300, build_cmd: Optional[List[str]] = None) -> None:
        self.project_root = Path(project_root).resolve()
        self.timeout = timeout
        self.build_cmd = list(build_cmd or BUILD_CMD)

    def analyze(self) -> PerformanceMetrics:
        build_time_ms, status = self.measure_build_time()
        return PerformanceMetrics(
            build_time_ms=build_time_ms,
            bundle_size_kb=self.measure_bundle_size(),
            status=status,
        )

    def measure_build_time(self) -> tuple[int, str]:
        start = time.monotonic()
        try:
            proc = subprocess.run(
                self.build_cmd,
                cwd=self.project_root,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            _LOG.warning("nextmig: build timed out after %ss; reporting zero metrics", self.timeout)
            return 0, "timeout"
        except OSError as exc:
            _LOG.warning("nextmig: build time measurement failed: %s", exc)
            return 0, "failed"
        if proc.returncode != 0:
            tail = (proc.stderr or proc.stdout or "").strip()[-500:]
            _LOG.warning("nextmig: build failed (exit %s): %s", proc.returncode, tail)
            return 0, "failed"
        return int((time.monotonic() - start) * 1000), "ok"

    def measure_bundle_size(self) -> int:
        static_dir = self.project_root / ".next" / "static"
        if not static_dir.is_dir():
            return 0
        total = 0
        try:
            for path in static_dir.rglob("*"):
                if path.is_file():
                    total += path.stat().st_size
        except OSError as exc:
            _LOG.warning("nextmig: bundle size measurement failed: %s", exc)
            return 0
        return round(total / 1024)
