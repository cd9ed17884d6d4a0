"""Bounded, newest-first snapshot catalog and its JSON persistence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from nextmig.errors import SnapshotError
from nextmig.models import Snapshot
from nextmig.orchestration.logging import get_logger

_LOG = get_logger("storage.catalog")

DEFAULT_CAPACITY = 10


class SnapshotCatalog:
    """
    Fixed-capacity sequence of snapshots, newest first.

    push() prepends and evicts from the old end; existing entries never
    change relative order. len(catalog) <= capacity always holds. Entries
    beyond capacity at construction (a catalog written under a larger
    capacity) are kept in `overflow` so the owner can delete their copies.
    """

    def __init__(self, entries: Iterable[Snapshot] = (), *, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("catalog capacity must be >= 1")
        self._capacity = capacity
        items = list(entries)
        self._entries: List[Snapshot] = items[:capacity]
        self.overflow: Tuple[Snapshot, ...] = tuple(items[capacity:])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._entries)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def entries(self) -> Tuple[Snapshot, ...]:
        return tuple(self._entries)

    def ids(self) -> List[str]:
        return [s.id for s in self._entries]

    def find(self, snapshot_id: str) -> Optional[Snapshot]:
        return next((s for s in self._entries if s.id == snapshot_id), None)

    def push(self, snapshot: Snapshot) -> List[Snapshot]:
        """Insert as newest; return the entries evicted to stay within capacity."""
        if self.find(snapshot.id) is not None:
            raise ValueError(f"snapshot id already in catalog: {snapshot.id}")
        self._entries.insert(0, snapshot)
        evicted = self._entries[self._capacity:]
        del self._entries[self._capacity:]
        assert len(self._entries) <= self._capacity
        return evicted

    def trim(self, keep: int) -> List[Snapshot]:
        """Keep the `keep` newest entries; return the dropped ones."""
        if keep < 0:
            raise ValueError("keep must be >= 0")
        dropped = self._entries[keep:]
        del self._entries[keep:]
        return dropped

    def to_list(self) -> list[dict]:
        return [s.to_dict() for s in self._entries]


def load_catalog(path: Path, *, capacity: int = DEFAULT_CAPACITY) -> SnapshotCatalog:
    """Load the catalog file; a missing file is an empty catalog, a corrupt one is reset with a warning."""
    if not path.exists():
        return SnapshotCatalog(capacity=capacity)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("catalog is not a JSON array")
        entries = [Snapshot.from_dict(item) for item in data if isinstance(item, dict) and item.get("id")]
    except (OSError, ValueError, KeyError) as exc:
        _LOG.warning("nextmig: snapshot catalog %s unreadable (%s); starting empty", path, exc)
        return SnapshotCatalog(capacity=capacity)
    catalog = SnapshotCatalog(entries, capacity=capacity)
    if catalog.overflow:
        _LOG.warning("nextmig: catalog %s holds %d entries over capacity %d", path, len(catalog.overflow), capacity)
    return catalog


def save_catalog(path: Path, catalog: SnapshotCatalog) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(catalog.to_list(), indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        raise SnapshotError(f"could not write snapshot catalog {path}: {exc}") from exc
