"""Tests for the analyze → gate → snapshot → rewrite → report pipeline."""
from pathlib import Path

import pytest

from conftest import write_project
from nextmig.config import MigratorConfig
from nextmig.orchestration.migrate_flow import MigrateOptions, RunStatus, run_migration
from nextmig.storage.paths import backups_dir
from nextmig.storage.restore import RestoreManager

PAGE = "export default function Page({ params }) {\n  return <p>{params.slug}</p>\n}\n"
MIGRATED_PAGE = "export default async function Page({ params }) {\n  return <p>{(await params).slug}</p>\n}\n"


def _run(root: Path, **opts):
    confirm = opts.pop("confirm", None)
    return run_migration(
        root,
        MigrateOptions(**opts),
        config=MigratorConfig(),
        node_lookup=lambda: "v20.11.1",
        confirm=confirm,
    )


def test_full_migration(tmp_path: Path) -> None:
    write_project(tmp_path, files={"app/page.tsx": PAGE, "middleware.ts": "export function middleware() {}\n"})
    run = _run(tmp_path)
    assert run.status is RunStatus.MIGRATED
    assert run.ok
    assert run.snapshot_id is not None
    assert (backups_dir(tmp_path) / run.snapshot_id / "middleware.ts").is_file()
    assert (tmp_path / "app" / "page.tsx").read_text(encoding="utf-8") == MIGRATED_PAGE
    assert (tmp_path / "proxy.ts").is_file()
    assert run.result.success_count == 2
    # a second scan finds nothing left to do
    assert run.post_analysis.file_records == ()
    assert run.report_path == tmp_path / "migration-report.html"
    assert run.report_path.is_file()


def test_incompatible_project_is_not_touched(tmp_path: Path) -> None:
    write_project(tmp_path, next_version="12.3.0", files={"app/page.tsx": PAGE})
    run = _run(tmp_path)
    assert run.status is RunStatus.INCOMPATIBLE
    assert not run.ok
    assert run.result is None
    assert (tmp_path / "app" / "page.tsx").read_text(encoding="utf-8") == PAGE
    assert not backups_dir(tmp_path).exists()


def test_dry_run_previews_only(tmp_path: Path) -> None:
    write_project(tmp_path, files={"app/page.tsx": PAGE})
    run = _run(tmp_path, dry_run=True)
    assert run.status is RunStatus.PREVIEWED
    assert [(c.file, c.description) for c in run.preview] == [("app/page.tsx", "Make params usage async")]
    assert (tmp_path / "app" / "page.tsx").read_text(encoding="utf-8") == PAGE
    assert not backups_dir(tmp_path).exists()
    assert not (tmp_path / "migration-report.html").exists()


def test_declined_confirmation_cancels(tmp_path: Path) -> None:
    write_project(tmp_path, files={"app/page.tsx": PAGE})
    seen = []

    def confirm(report):
        seen.append(len(report.file_records))
        return False

    run = _run(tmp_path, confirm=confirm)
    assert run.status is RunStatus.CANCELLED
    assert seen == [1]
    assert (tmp_path / "app" / "page.tsx").read_text(encoding="utf-8") == PAGE
    assert not backups_dir(tmp_path).exists()


def test_no_backup_skips_snapshot(tmp_path: Path) -> None:
    write_project(tmp_path, files={"app/page.tsx": PAGE})
    run = _run(tmp_path, backup=False, write_html=False)
    assert run.status is RunStatus.MIGRATED
    assert run.snapshot_id is None
    assert run.report_path is None
    assert not backups_dir(tmp_path).exists()
    assert (tmp_path / "app" / "page.tsx").read_text(encoding="utf-8") == MIGRATED_PAGE


@pytest.mark.parametrize(
    "page",
    [
        "export default async function Page({ params }) {\n  const post = await fetch(`/api/posts/${params.id}`)\n  return <p>{post.title}</p>\n}\n",
        "export default function Page({ params }) {\n  return <p>Don't miss {params.slug}</p>\n}\n",
        "export default function Page({ searchParams }) {\n  return <a href={`/list?page=${searchParams.page}`}>Next</a>\n}\n",
    ],
)
def test_rescan_after_migration_finds_nothing(tmp_path: Path, page: str) -> None:
    write_project(tmp_path, files={"app/page.tsx": page})
    run = _run(tmp_path, write_html=False)
    assert run.status is RunStatus.MIGRATED
    assert run.ok
    assert (tmp_path / "app" / "page.tsx").read_text(encoding="utf-8") != page
    assert run.post_analysis.file_records == ()


def test_migrate_again_after_rollback(tmp_path: Path) -> None:
    middleware = "export function middleware(request) {\n  return null\n}\n"
    write_project(tmp_path, files={"middleware.ts": middleware})
    first = _run(tmp_path, write_html=False)
    assert first.ok
    assert (tmp_path / "proxy.ts").is_file()

    outcome = RestoreManager(tmp_path).restore_snapshot(first.snapshot_id)
    assert outcome.status == "restored"
    assert outcome.files_removed == ("proxy.ts",)
    assert (tmp_path / "middleware.ts").read_text(encoding="utf-8") == middleware
    assert not (tmp_path / "proxy.ts").exists()

    second = _run(tmp_path, write_html=False)
    assert second.ok, second.result.errors
    assert not (tmp_path / "middleware.ts").exists()
    assert (tmp_path / "proxy.ts").read_text(encoding="utf-8") == middleware.replace("middleware", "proxy")
