"""Lockfile parser, reader and writer."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from npmdeps.errors import FileOpenError, FileWriteError, LockfileError, UnsupportedLockVersion
from npmdeps.lockfile.model import SUPPORTED_LOCK_VERSIONS, Lockfile, LockfileEntry
from npmdeps.urls import url_scheme


def lockfile_digest(raw: str | bytes) -> str:
    data = raw.encode("utf-8") if isinstance(raw, str) else raw
    return hashlib.sha256(data).hexdigest()


def decode_lockfile(raw: str | bytes) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LockfileError("Invalid lockfile JSON.", hint=str(exc)) from exc
    if not isinstance(payload, dict):
        raise LockfileError("Invalid lockfile payload type.")
    return payload


def check_version(payload: dict[str, Any]) -> int:
    version = payload.get("lockfileVersion")
    if isinstance(version, bool) or version not in SUPPORTED_LOCK_VERSIONS:
        raise UnsupportedLockVersion(
            f"lockfileVersion {version} is unsupported",
            hint="Regenerate the lockfile with npm 7 or newer.",
            context={"supported": ", ".join(str(v) for v in SUPPORTED_LOCK_VERSIONS)},
        )
    return int(version)


def package_map(payload: dict[str, Any]) -> dict[str, Any]:
    packages = payload.get("packages", {})
    if not isinstance(packages, dict):
        raise LockfileError("Invalid lockfile `packages` value.")
    return packages


def parse_lockfile(raw: str | bytes) -> Lockfile:
    payload = decode_lockfile(raw)
    version = check_version(payload)
    return Lockfile(
        version=version,
        digest=lockfile_digest(raw),
        entries=tuple(_entries(package_map(payload))),
    )


def read_text(path: str | Path, *, hint: str | None = None) -> str:
    text_path = Path(path)
    try:
        return text_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileOpenError(
            f"Cannot open file {text_path}",
            hint=hint,
            context={"path": str(text_path), "error": exc.strerror or str(exc)},
        ) from exc


def read_lockfile(path: str | Path) -> str:
    return read_text(path, hint="Pass --lockfile or run from the project directory.")


def write_lockfile(payload: dict[str, Any], path: str | Path) -> Path:
    lock_path = Path(path)
    encoded = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    try:
        lock_path.write_text(encoded, encoding="utf-8")
    except OSError as exc:
        raise FileWriteError(
            f"Cannot write to file {lock_path}",
            context={"path": str(lock_path), "error": exc.strerror or str(exc)},
        ) from exc
    return lock_path


def _entries(packages: dict[str, Any]) -> list[LockfileEntry]:
    entries: list[LockfileEntry] = []
    seen: set[str] = set()
    for name, item in packages.items():
        if not name or not isinstance(item, dict):
            continue
        resolved = item.get("resolved")
        if url_scheme(resolved) is None or resolved in seen:
            continue
        seen.add(resolved)
        integrity = item.get("integrity")
        entries.append(
            LockfileEntry(
                name=name,
                resolved=resolved,
                integrity=integrity if isinstance(integrity, str) and integrity else None,
            )
        )
    return entries
