"""Tests for migrator configuration loading."""
from pathlib import Path

import pytest

from nextmig.config import CONFIG_FILE, MigratorConfig, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "NEXTMIG_MIN_NEXT_MAJOR",
        "NEXTMIG_BUILD_TIMEOUT",
        "NEXTMIG_CATALOG_CAPACITY",
        "NEXTMIG_CLEANUP_KEEP",
        "NEXTMIG_MIN_NODE_VERSION",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_config_file(tmp_path: Path) -> None:
    cfg = load_config(tmp_path)
    assert cfg == MigratorConfig()
    assert cfg.catalog_capacity == 10
    assert cfg.cleanup_keep == 5
    assert cfg.build_timeout == 300
    assert cfg.min_node_tuple() == (20, 9)


def test_toml_table_overrides_defaults(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILE).write_text(
        '[nextmig]\nbuild_timeout = 60\ncleanup_keep = 3\nreport_file = "out.html"\nunknown = 1\n',
        encoding="utf-8",
    )
    cfg = load_config(tmp_path)
    assert cfg.build_timeout == 60
    assert cfg.cleanup_keep == 3
    assert cfg.report_file == "out.html"
    assert cfg.catalog_capacity == 10


def test_top_level_keys_accepted(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILE).write_text("min_next_major = 15\n", encoding="utf-8")
    assert load_config(tmp_path).min_next_major == 15


def test_env_overrides_toml(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / CONFIG_FILE).write_text("[nextmig]\nbuild_timeout = 60\n", encoding="utf-8")
    monkeypatch.setenv("NEXTMIG_BUILD_TIMEOUT", "15")
    monkeypatch.setenv("NEXTMIG_MIN_NODE_VERSION", "22.1")
    cfg = load_config(tmp_path)
    assert cfg.build_timeout == 15
    assert cfg.min_node_tuple() == (22, 1)


def test_invalid_env_and_toml_fall_back(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / CONFIG_FILE).write_text("this is = = not toml", encoding="utf-8")
    monkeypatch.setenv("NEXTMIG_CATALOG_CAPACITY", "lots")
    assert load_config(tmp_path) == MigratorConfig()
