"""Lockfile fixups applied before handing the lockfile to npm."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from npmdeps.lockfile.io import (
    check_version,
    decode_lockfile,
    package_map,
    read_lockfile,
    write_lockfile,
)
from npmdeps.observability import StructuredLogger
from npmdeps.urls import is_git_url


def fixup_lockfile(raw: str | bytes) -> dict[str, Any] | None:
    """Drop ``integrity`` from git-sourced entries.

    npm records integrity strings for git tarballs that can never be
    reproduced, and strict validators reject them. Returns the fixed payload,
    or ``None`` when nothing had to change.
    """
    payload = decode_lockfile(raw)
    check_version(payload)

    fixed = False
    for item in package_map(payload).values():
        if not isinstance(item, dict):
            continue
        if item.get("integrity") and is_git_url(item.get("resolved")):
            del item["integrity"]
            fixed = True
    return payload if fixed else None


def fixup_lockfile_file(path: str | Path, *, logger: StructuredLogger | None = None) -> bool:
    """Apply :func:`fixup_lockfile` to *path*, rewriting it only when changed."""
    payload = fixup_lockfile(read_lockfile(path))
    if payload is None:
        if logger is not None:
            logger.info("fixup_lockfile", f"Nothing to fix in {path}")
        return False
    write_lockfile(payload, path)
    if logger is not None:
        logger.info("fixup_lockfile", f"Removed git integrity strings from {path}")
    return True
