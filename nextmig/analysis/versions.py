"""Version parsing and the host Node.js version lookup."""

from __future__ import annotations

import re
import subprocess
from typing import NamedTuple, Optional

from nextmig.orchestration.logging import get_logger

_LOG = get_logger("analysis.versions")

_VERSION_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


class Version(NamedTuple):
    major: int
    minor: int
    patch: int


def parse_version(raw: str) -> Version:
    """
    Pull the first dotted number out of a semver range or version string.

    "^15.0.3" → (15, 0, 3); "v20.11.1" → (20, 11, 1); "latest" → (0, 0, 0).
    """
    m = _VERSION_RE.search(raw or "")
    if not m:
        return Version(0, 0, 0)
    return Version(*(int(g) if g else 0 for g in m.groups()))


def node_version(timeout: int = 10) -> Optional[str]:
    """Return `node --version` output (e.g. "v20.11.1"), or None if node is unavailable."""
    try:
        r = subprocess.run(
            ["node", "--version"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        _LOG.debug("nextmig: node version lookup failed: %s", exc)
        return None
    if r.returncode != 0:
        return None
    return (r.stdout or "").strip() or None
