"""HTML migration report (single self-contained page)."""

from __future__ import annotations

import html
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from nextmig.models import AnalysisReport, MigrationResult

_STYLE = """
body { font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; color: #333;
       max-width: 1100px; margin: 0 auto; padding: 20px; background: #f8f9fa; }
h1 { margin: 0 0 4px 0; }
.card { background: #fff; border-radius: 10px; padding: 20px 28px; margin-bottom: 24px;
        box-shadow: 0 2px 4px rgba(0, 0, 0, 0.08); }
.card h2 { margin-top: 0; border-bottom: 2px solid #e2e8f0; padding-bottom: 8px; }
table { width: 100%; border-collapse: collapse; }
td { padding: 6px 4px; border-bottom: 1px solid #e2e8f0; }
code, .path { font-family: Menlo, Monaco, monospace; font-size: 0.9em; }
.ok { color: #38a169; } .warn { color: #d69e2e; } .err { color: #e53e3e; }
"""


def _e(value: Any) -> str:
    return html.escape(str(value))


def _rows(pairs: List[tuple[str, str]]) -> str:
    return "\n".join(f"<tr><td>{k}</td><td>{v}</td></tr>" for k, v in pairs)


def _card(title: str, body: str) -> str:
    return f'<div class="card">\n<h2>{_e(title)}</h2>\n{body}\n</div>'


def _percent(value: Optional[float], word: str) -> str:
    return "n/a" if value is None else f"{value:.1f}% {word}"


def render_html(
    analysis: AnalysisReport,
    result: MigrationResult,
    *,
    timestamp: Optional[datetime] = None,
    comparison: Optional[Dict[str, Any]] = None,
    snapshot_id: Optional[str] = None,
) -> str:
    ts = (timestamp or datetime.now(timezone.utc)).isoformat(timespec="seconds")
    failed_cls = "err" if result.failure_count else "ok"
    cards = [
        _card(
            "Migration Summary",
            "<table>\n"
            + _rows(
                [
                    ("Files transformed", f'<span class="ok">{result.success_count}</span>'),
                    ("Failed transformations", f'<span class="{failed_cls}">{result.failure_count}</span>'),
                    ("Migration complexity", _e(analysis.complexity_tier)),
                    ("Estimated time", _e(analysis.estimated_time)),
                    ("Next.js version (before)", _e(analysis.current_version)),
                ]
            )
            + "\n</table>",
        ),
        _card(
            "Files Analyzed",
            "<table>\n"
            + _rows([(f'<span class="path">{_e(r.path)}</span>', _e(r.category)) for r in analysis.file_records])
            + "\n</table>",
        ),
    ]

    if comparison:
        gain = comparison.get("improvement") or {}
        cards.append(
            _card(
                "Performance",
                "<table>\n"
                + _rows(
                    [
                        ("Build time", _e(_percent(gain.get("build_time"), "faster"))),
                        ("Bundle size", _e(_percent(gain.get("bundle_size"), "smaller"))),
                    ]
                )
                + "\n</table>",
            )
        )

    cards.append(
        _card(
            "Transformations Applied",
            "<table>\n"
            + _rows([(f'<span class="path">{_e(c.file)}</span>', _e(c.description)) for c in result.changes])
            + "\n</table>",
        )
    )

    if result.errors:
        cards.append(
            _card(
                "Issues Encountered",
                "<table>\n"
                + _rows([(f'<span class="path">{_e(e.file)}</span>', f'<span class="err">{_e(e.message)}</span>') for e in result.errors])
                + "\n</table>",
            )
        )

    if analysis.recommendations:
        items = "\n".join(f"<li>{_e(r)}</li>" for r in analysis.recommendations)
        cards.append(_card("Recommendations", f"<ul>\n{items}\n</ul>"))

    if snapshot_id:
        cards.append(
            _card(
                "Backup",
                f"<p>Backup ID: <code>{_e(snapshot_id)}</code></p>\n"
                f"<p>To roll back this migration run <code>nextmig rollback --id {_e(snapshot_id)}</code></p>",
            )
        )

    body = "\n".join(cards)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Next.js 16 Migration Report</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="card"><h1>Next.js 16 Migration Report</h1><p>Generated {_e(ts)}</p></div>
{body}
</body>
</html>
"""


def write_report(path: Path, analysis: AnalysisReport, result: MigrationResult, **kwargs: Any) -> Path:
    path = Path(path)
    path.write_text(render_html(analysis, result, **kwargs), encoding="utf-8")
    return path
