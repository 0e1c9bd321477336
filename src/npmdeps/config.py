"""Run configuration and environment overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

Action = Literal["download", "verify-files", "cacache", "fixup-lockfile"]

ACTIONS: tuple[Action, ...] = ("download", "verify-files", "cacache", "fixup-lockfile")

DEFAULT_LOCKFILE = "package-lock.json"
DEFAULT_DEPS_DIRNAME = "npm-deps"
DEFAULT_CACHE_DIRNAME = "_cacache"
PACK_FILENAME = "npm-deps.tar.gz"

_FALSY = frozenset({"", "0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class Options:
    lockfile: Path = Path(DEFAULT_LOCKFILE)
    deps_dir: Path = Path(DEFAULT_DEPS_DIRNAME)
    cache_dir: Path = Path(DEFAULT_CACHE_DIRNAME)
    pack: bool = False
    pack_file: Path = Path(PACK_FILENAME)
    update: bool = False
    delete: bool = False
    verify: bool = True
    cleanup: bool = True
    verbose: bool = False
    force_git_deps: bool = False
    force_empty_cache: bool = False
    log_file: Path | None = None

    @classmethod
    def for_directory(cls, cwd: str | Path, **overrides: object) -> Options:
        """Build options whose default locations are rooted at *cwd*."""
        root = Path(cwd)
        base = cls(
            lockfile=root / DEFAULT_LOCKFILE,
            deps_dir=root / DEFAULT_DEPS_DIRNAME,
            cache_dir=root / DEFAULT_CACHE_DIRNAME,
            pack_file=root / PACK_FILENAME,
        )
        return replace(base, **overrides)  # type: ignore[arg-type]

    def with_env(self, environ: Mapping[str, str] | None = None) -> Options:
        env = os.environ if environ is None else environ
        return replace(
            self,
            force_git_deps=self.force_git_deps or env_flag(env, "FORCE_GIT_DEPS"),
            force_empty_cache=self.force_empty_cache or env_flag(env, "FORCE_EMPTY_CACHE"),
        )


def env_flag(environ: Mapping[str, str], name: str) -> bool:
    value = environ.get(name)
    if value is None:
        return False
    return value.strip().lower() not in _FALSY


__all__ = [
    "ACTIONS",
    "Action",
    "DEFAULT_CACHE_DIRNAME",
    "DEFAULT_DEPS_DIRNAME",
    "DEFAULT_LOCKFILE",
    "Options",
    "PACK_FILENAME",
    "env_flag",
]
