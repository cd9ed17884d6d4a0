"""analyze handler."""

from __future__ import annotations

import json
from typing import Any

from nextmig.analysis.performance import PerformanceAnalyzer
from nextmig.analysis.scanner import ProjectAnalyzer
from nextmig.config import load_config
from nextmig.errors import MigratorError
from nextmig.reporting.console import format_analysis, format_performance, should_use_color

from .core_handlers_common import _check_path, _err, _path_from_args, _with_status


def handle_analyze(args: Any) -> int:
    """Print the compatibility report; exit 1 when the project is not compatible."""
    path = _path_from_args(args)
    if _check_path(path) != 0:
        return 1
    as_json = getattr(args, "json", False)
    try:
        config = load_config(path)
        report = ProjectAnalyzer(path, config=config).analyze()
        metrics = None
        if getattr(args, "performance", False):
            analyzer = PerformanceAnalyzer(path, timeout=config.build_timeout)
            metrics = _with_status("running performance analysis...", analyzer.analyze)
    except MigratorError as exc:
        _err(str(exc))
        return 1

    if as_json:
        data = report.to_dict()
        if metrics is not None:
            data["performance"] = metrics.to_dict()
        print(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        use_color = should_use_color()
        print(
            format_analysis(
                report,
                detailed=getattr(args, "detailed", False),
                target_version=config.target_version,
                use_color=use_color,
            )
        )
        if metrics is not None:
            print()
            print(format_performance(metrics, use_color=use_color))
    return 0 if report.is_compatible else 1
