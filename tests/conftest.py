"""Pytest configuration. Ensures project root is in sys.path for top-level modules (nextmig_cli, cli, nextmig)."""
import json
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def write_project(root: Path, *, next_version: str | None = "15.0.3", files: dict | None = None, extra_deps: dict | None = None) -> Path:
    """Write package.json (unless next_version is None and no deps) plus source files."""
    deps = dict(extra_deps or {})
    if next_version is not None:
        deps["next"] = next_version
    (root / "package.json").write_text(json.dumps({"name": "app", "dependencies": deps}, indent=2), encoding="utf-8")
    for rel, content in (files or {}).items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def modern_node():
    return lambda: "v20.11.1"


def git(cwd: Path, *args: str) -> str:
    r = subprocess.run(["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True)
    return r.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    git(tmp_path, "init")
    git(tmp_path, "config", "user.email", "dev@example.com")
    git(tmp_path, "config", "user.name", "Dev")
    git(tmp_path, "config", "commit.gpgsign", "false")
    return tmp_path
