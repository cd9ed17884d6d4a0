"""Tests for the rewrite engine (migrate / preview_changes / rewrite_source)."""
import os
from pathlib import Path

from nextmig.models import AnalysisReport, FileRecord
from nextmig.refactor.engine import FileState, MigrationEngine, rewrite_source
from nextmig.refactor.registry import TransformRegistry, default_registry
from nextmig.refactor.rules import TransformRule
from nextmig.refactor.tokens import TokenStream, name


def _report(*records: FileRecord) -> AnalysisReport:
    return AnalysisReport(
        is_compatible=True,
        current_version="15.0.3",
        file_records=tuple(records),
        issues=(),
        recommendations=(),
        complexity_tier="low",
        estimated_time="5-15 minutes",
    )


def _upper(stream: TokenStream) -> TokenStream:
    edits = [(i, i + 1, [name(t.text.upper())]) for i, t in enumerate(stream) if t.text == "x"]
    return stream.splice(edits)


def _boom(stream: TokenStream) -> TokenStream:
    raise RuntimeError("kaboom")


TEST_REGISTRY = TransformRegistry(
    [
        TransformRule("upper", "Uppercase x", detect=lambda t: "x" in t, rewrite=_upper),
        TransformRule("boom", "Explode", detect=lambda t: "BOOM" in t, rewrite=_boom),
    ]
)


def test_migrate_rewrites_files(tmp_path: Path) -> None:
    (tmp_path / "app").mkdir()
    page = tmp_path / "app" / "page.tsx"
    page.write_text("const s = searchParams.get('q')\nconst c = cookies().get('a')\n", encoding="utf-8")
    record = FileRecord("app/page.tsx", "component", ("make-cookies-headers-async", "make-search-params-async"))
    result = MigrationEngine(tmp_path).migrate(_report(record))
    assert result.success_count == 1
    assert result.failure_count == 0
    assert page.read_text(encoding="utf-8") == (
        "const s = (await searchParams).get('q')\nconst c = (await cookies()).get('a')\n"
    )
    # changes follow registry order, not record order
    assert [c.description for c in result.changes] == [
        "Make searchParams usage async",
        "Make cookies/headers usage async",
    ]


def test_preview_changes_does_not_touch_files(tmp_path: Path) -> None:
    page = tmp_path / "page.tsx"
    page.write_text("params.id\n", encoding="utf-8")
    report = _report(
        FileRecord("page.tsx", "component", ("make-params-async",)),
        FileRecord("missing.tsx", "component", ("update-next-image",)),
    )
    changes = MigrationEngine(tmp_path).preview_changes(report)
    assert [(c.file, c.description) for c in changes] == [
        ("page.tsx", "Make params usage async"),
        ("missing.tsx", "Update next/image imports and usage"),
    ]
    assert page.read_text(encoding="utf-8") == "params.id\n"
    assert not (tmp_path / "missing.tsx").exists()


def test_failure_is_isolated_per_file(tmp_path: Path) -> None:
    (tmp_path / "a.ts").write_text("x BOOM\n", encoding="utf-8")
    (tmp_path / "b.ts").write_text("x + 1\n", encoding="utf-8")
    report = _report(
        FileRecord("a.ts", "other", ("upper", "boom")),
        FileRecord("b.ts", "other", ("upper",)),
    )
    result = MigrationEngine(tmp_path, TEST_REGISTRY).migrate(report)
    assert result.success_count == 1
    assert result.failure_count == 1
    # the earlier successful rule on a.ts is not written either
    assert (tmp_path / "a.ts").read_text(encoding="utf-8") == "x BOOM\n"
    assert (tmp_path / "b.ts").read_text(encoding="utf-8") == "X + 1\n"
    [error] = result.errors
    assert error.file == "a.ts"
    assert error.tag == "boom"
    assert "Transformation boom failed: kaboom" in error.message
    assert [c.file for c in result.changes] == ["b.ts"]


def test_missing_file_is_recorded_as_failure(tmp_path: Path) -> None:
    result = MigrationEngine(tmp_path).migrate(_report(FileRecord("gone.tsx", "component", ("make-params-async",))))
    assert result.failure_count == 1
    assert "file not found" in result.errors[0].message
    assert not result.ok


def test_unchanged_file_is_not_written(tmp_path: Path) -> None:
    path = tmp_path / "page.tsx"
    # only a string mentions params, so the rewrite is a no-op
    path.write_text("const s = 'params.id'\n", encoding="utf-8")
    os.utime(path, (1_000_000, 1_000_000))
    result = MigrationEngine(tmp_path).migrate(_report(FileRecord("page.tsx", "component", ("make-params-async",))))
    assert result.success_count == 1
    assert path.stat().st_mtime == 1_000_000


def test_middleware_renamed_after_rewrite(tmp_path: Path) -> None:
    (tmp_path / "middleware.ts").write_text("export function middleware(req) {}\n", encoding="utf-8")
    result = MigrationEngine(tmp_path).migrate(_report(FileRecord("middleware.ts", "middleware", ("middleware-to-proxy",))))
    assert result.ok
    assert not (tmp_path / "middleware.ts").exists()
    assert (tmp_path / "proxy.ts").read_text(encoding="utf-8") == "export function proxy(req) {}\n"
    assert [(c.kind, c.description) for c in result.changes] == [
        ("transformation", "Convert middleware.ts to proxy.ts"),
        ("rename", "Renamed middleware.ts to proxy.ts"),
    ]


def test_rename_refuses_existing_target(tmp_path: Path) -> None:
    (tmp_path / "middleware.ts").write_text("export function middleware(req) {}\n", encoding="utf-8")
    (tmp_path / "proxy.ts").write_text("// hand-written\n", encoding="utf-8")
    result = MigrationEngine(tmp_path).migrate(_report(FileRecord("middleware.ts", "middleware", ("middleware-to-proxy",))))
    assert result.failure_count == 1
    assert result.errors[0].tag == "middleware-to-proxy"
    assert "already exists" in result.errors[0].message
    assert (tmp_path / "proxy.ts").read_text(encoding="utf-8") == "// hand-written\n"
    # refused before writing: the old file still exports middleware
    assert (tmp_path / "middleware.ts").read_text(encoding="utf-8") == "export function middleware(req) {}\n"
    assert result.changes == []


def test_rewrite_source_threads_each_step() -> None:
    src = "const a = params.id\nconst b = headers()\n"
    rewrite = rewrite_source(src, ["make-params-async", "make-cookies-headers-async"], default_registry())
    assert rewrite.state is FileState.TRANSFORMED
    first, second = rewrite.steps
    assert second.before.to_source() == first.after.to_source()
    assert rewrite.final_text == "const a = (await params).id\nconst b = await headers()\n"
    assert rewrite.changed


def test_rewrite_source_stops_at_failing_rule() -> None:
    rewrite = rewrite_source("x BOOM", ["upper", "boom"], TEST_REGISTRY)
    assert rewrite.state is FileState.FAILED
    assert rewrite.current_tag == "boom"
    assert rewrite.error is not None and rewrite.error.tag == "boom"
    assert len(rewrite.steps) == 1


def test_tokenize_failure_becomes_transformation_error(tmp_path: Path) -> None:
    (tmp_path / "page.tsx").write_text("params.id /* unterminated", encoding="utf-8")
    result = MigrationEngine(tmp_path).migrate(_report(FileRecord("page.tsx", "component", ("make-params-async",))))
    assert result.failure_count == 1
    assert result.errors[0].tag == "make-params-async"
    assert (tmp_path / "page.tsx").read_text(encoding="utf-8") == "params.id /* unterminated"
