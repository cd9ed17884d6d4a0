"""Tests for the project scanner (compatibility analysis)."""
from pathlib import Path

import pytest

from conftest import write_project
from nextmig.analysis.scanner import ProjectAnalyzer, analyze, classify, complexity_for
from nextmig.analysis.versions import parse_version
from nextmig.config import MigratorConfig
from nextmig.errors import FileAccessError
from nextmig.models import FileRecord

PAGE_WITH_PARAMS = "export default function Page({ params }) {\n  return <p>{params.slug}</p>\n}\n"


def _analyzer(root: Path, node=lambda: "v20.11.1") -> ProjectAnalyzer:
    return ProjectAnalyzer(root, config=MigratorConfig(), node_lookup=node)


def test_compatible_project_lists_files(tmp_path: Path) -> None:
    write_project(tmp_path, files={"app/blog/[slug]/page.tsx": PAGE_WITH_PARAMS, "app/layout.tsx": "export default 1\n"})
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is True
    assert report.current_version == "15.0.3"
    assert report.file_records == (FileRecord("app/blog/[slug]/page.tsx", "component", ("make-params-async",)),)
    assert report.issues == ()
    assert report.complexity_tier == "low"
    assert report.estimated_time == "5-15 minutes"


def test_old_next_version_is_incompatible(tmp_path: Path) -> None:
    write_project(tmp_path, next_version="^13.5.0")
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is False
    assert any("13.5.0" in issue and "too old" in issue for issue in report.issues)


def test_missing_manifest_still_returns_report(tmp_path: Path) -> None:
    (tmp_path / "middleware.ts").write_text("export function middleware() {}\n", encoding="utf-8")
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is False
    assert "No package.json found" in report.issues
    assert [r.path for r in report.file_records] == ["middleware.ts"]


def test_next_missing_from_dependencies(tmp_path: Path) -> None:
    write_project(tmp_path, next_version=None, extra_deps={"react": "18.0.0"})
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is False
    assert "Next.js not found in dependencies" in report.issues


def test_next_in_dev_dependencies(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text('{"devDependencies": {"next": "14.2.0"}}', encoding="utf-8")
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is True
    assert report.current_version == "14.2.0"


def test_unpinned_version_is_a_recommendation(tmp_path: Path) -> None:
    write_project(tmp_path, next_version="latest")
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is True
    assert any("latest" in rec for rec in report.recommendations)


def test_incompatible_dependency_warns_without_blocking(tmp_path: Path) -> None:
    write_project(tmp_path, extra_deps={"next-pwa": "5.6.0"})
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is True
    assert "Dependency next-pwa may not be compatible with Next.js 16" in report.issues
    assert "Consider updating or removing next-pwa" in report.recommendations


def test_amp_file_blocks_migration(tmp_path: Path) -> None:
    write_project(tmp_path, files={"pages/about.amp.tsx": "export default function About() { return null }\n"})
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is False
    assert "AMP support has been removed in Next.js 16" in report.issues


def test_amp_import_blocks_migration(tmp_path: Path) -> None:
    write_project(tmp_path, files={"pages/index.tsx": "import { useAmp } from 'next/amp'\n"})
    assert _analyzer(tmp_path).analyze().is_compatible is False


def test_ppr_flag_blocks_migration(tmp_path: Path) -> None:
    write_project(tmp_path, files={"next.config.js": "module.exports = {\n  experimental: { ppr: true },\n}\n"})
    report = _analyzer(tmp_path).analyze()
    assert report.is_compatible is False
    assert "experimental.ppr flag has been removed in Next.js 16" in report.issues


def test_old_node_is_incompatible(tmp_path: Path) -> None:
    write_project(tmp_path)
    report = _analyzer(tmp_path, node=lambda: "v18.17.0").analyze()
    assert report.is_compatible is False
    assert any(issue.startswith("Node.js v18.17.0 is not supported") for issue in report.issues)


def test_missing_node_is_only_a_recommendation(tmp_path: Path) -> None:
    write_project(tmp_path)
    report = _analyzer(tmp_path, node=lambda: None).analyze()
    assert report.is_compatible is True
    assert any("20.9" in rec for rec in report.recommendations)


def test_unreadable_file_is_skipped(tmp_path: Path) -> None:
    write_project(
        tmp_path,
        files={"app/broken.tsx": b"\xff\xfe\x00params.id", "app/page.tsx": PAGE_WITH_PARAMS},
    )
    report = _analyzer(tmp_path).analyze()
    assert [r.path for r in report.file_records] == ["app/page.tsx"]
    with pytest.raises(FileAccessError):
        _analyzer(tmp_path).analyze_file("app/broken.tsx")


def test_skip_dirs_and_src_layout(tmp_path: Path) -> None:
    write_project(
        tmp_path,
        files={
            "app/node_modules/pkg/index.js": "params.id\n",
            "src/app/page.tsx": PAGE_WITH_PARAMS,
            "src/middleware.ts": "export function middleware() {}\n",
        },
    )
    paths = [r.path for r in _analyzer(tmp_path).analyze().file_records]
    assert paths == ["src/middleware.ts", "src/app/page.tsx"]


def test_revalidate_tag_file_is_tagged(tmp_path: Path) -> None:
    write_project(tmp_path, files={"app/actions.ts": "'use server'\nexport async function save() { revalidateTag('posts') }\n"})
    report = _analyzer(tmp_path).analyze()
    assert report.file_records == (FileRecord("app/actions.ts", "component", ("update-revalidate-tag",)),)


def test_two_scans_are_identical(tmp_path: Path) -> None:
    write_project(
        tmp_path,
        files={
            "middleware.ts": "export function middleware() { return cookies().get('a') }\n",
            "app/page.tsx": PAGE_WITH_PARAMS,
            "components/Hero.tsx": "import Image from 'next/legacy/image'\n",
        },
    )
    analyzer = _analyzer(tmp_path)
    assert analyzer.analyze() == analyzer.analyze()
    assert analyzer.analyze().to_dict() == analyze(tmp_path, config=MigratorConfig(), node_lookup=lambda: "v20.11.1").to_dict()


def test_many_files_is_high_complexity(tmp_path: Path) -> None:
    write_project(tmp_path, files={f"app/p{i}/page.tsx": PAGE_WITH_PARAMS for i in range(51)})
    report = _analyzer(tmp_path).analyze()
    assert len(report.file_records) == 51
    assert report.complexity_tier == "high"
    assert report.estimated_time == "30-60 minutes"


@pytest.mark.parametrize(
    "files,issues,tier",
    [
        (51, 0, "high"),
        (0, 6, "high"),
        (50, 5, "medium"),
        (21, 0, "medium"),
        (0, 3, "medium"),
        (20, 2, "low"),
        (5, 0, "low"),
    ],
)
def test_complexity_tiers(files: int, issues: int, tier: str) -> None:
    assert complexity_for(files, issues)[0] == tier


@pytest.mark.parametrize(
    "path,category",
    [
        ("middleware.ts", "middleware"),
        ("src/proxy.ts", "middleware"),
        ("next.config.js", "config"),
        ("app/api/users/route.ts", "api"),
        ("pages/index.tsx", "component"),
        ("lib/db.ts", "other"),
    ],
)
def test_classify(path: str, category: str) -> None:
    assert classify(path) == category


def test_parse_version() -> None:
    assert parse_version("^15.0.3") == (15, 0, 3)
    assert parse_version("v20.11.1") == (20, 11, 1)
    assert parse_version("~14") == (14, 0, 0)
    assert parse_version("latest") == (0, 0, 0)
