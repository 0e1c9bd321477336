"""Lockfile typed model."""

from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_LOCK_VERSIONS = (2, 3)


@dataclass(frozen=True, slots=True)
class LockfileEntry:
    name: str
    resolved: str
    integrity: str | None = None


@dataclass(frozen=True, slots=True)
class Lockfile:
    version: int
    digest: str
    entries: tuple[LockfileEntry, ...] = ()
