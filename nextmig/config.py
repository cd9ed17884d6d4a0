"""Migrator configuration: defaults, then <root>/.nextmig.toml, then NEXTMIG_* env."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .orchestration.logging import get_logger

_LOG = get_logger("config")

CONFIG_FILE = ".nextmig.toml"


@dataclass(slots=True, frozen=True)
class MigratorConfig:
    min_next_major: int = 14
    min_node_version: str = "20.9"
    target_version: str = "16.0.0"
    build_timeout: int = 300
    catalog_capacity: int = 10
    cleanup_keep: int = 5
    report_file: str = "migration-report.html"

    def min_node_tuple(self) -> tuple[int, int]:
        parts = [int(p) for p in self.min_node_version.split(".")[:2] if p.isdigit()]
        while len(parts) < 2:
            parts.append(0)
        return parts[0], parts[1]


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _from_toml(project_root: Path) -> dict[str, Any]:
    """Read the [nextmig] table (or top-level keys) from .nextmig.toml."""
    path = project_root / CONFIG_FILE
    if not path.is_file():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        _LOG.warning("nextmig: ignoring %s: %s", CONFIG_FILE, exc)
        return {}
    table = data.get("nextmig", data)
    known = {f.name for f in fields(MigratorConfig)}
    return {k: v for k, v in table.items() if k in known}


def load_config(project_root: Path) -> MigratorConfig:
    """Resolve configuration for one project root."""
    cfg = replace(MigratorConfig(), **_from_toml(Path(project_root)))
    return replace(
        cfg,
        min_next_major=_env_int("NEXTMIG_MIN_NEXT_MAJOR", cfg.min_next_major),
        build_timeout=_env_int("NEXTMIG_BUILD_TIMEOUT", cfg.build_timeout),
        catalog_capacity=_env_int("NEXTMIG_CATALOG_CAPACITY", cfg.catalog_capacity),
        cleanup_keep=_env_int("NEXTMIG_CLEANUP_KEEP", cfg.cleanup_keep),
        min_node_version=os.environ.get("NEXTMIG_MIN_NODE_VERSION", "").strip() or cfg.min_node_version,
    )
