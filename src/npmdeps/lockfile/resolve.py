"""Lockfile resolution into packages, recursing into git dependencies."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from npmdeps.errors import GitDependencyCycle, GitDepsRequireLockfile, LockfileError, NoDependencies
from npmdeps.fetch import ArtifactFetcher
from npmdeps.lockfile.io import lockfile_digest, parse_lockfile, read_text
from npmdeps.lockfile.model import LockfileEntry
from npmdeps.observability import StructuredLogger
from npmdeps.package import Package
from npmdeps.workdir import WorkdirPool

# Scripts that run during `npm install` and would need the dependency's own
# dependencies present in the cache.
INSTALL_SCRIPTS = frozenset({"postinstall", "build", "preinstall", "install", "prepack", "prepare"})

NESTED_LOCKFILE = "package-lock.json"
MANIFEST = "package.json"


@dataclass(slots=True)
class LockfileResolver:
    fetcher: ArtifactFetcher
    workdirs: WorkdirPool
    force_git_deps: bool = False
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    _packages: dict[str, Package] = field(default_factory=dict, repr=False)
    _expanded: set[str] = field(default_factory=set, repr=False)

    def resolve(self, raw: str | bytes, *, force_empty_cache: bool = False) -> list[Package]:
        """Return the deduplicated packages reachable from the lockfile *raw*."""
        self._expanded.clear()
        return self._resolve(raw, force_empty_cache=force_empty_cache, chain=())

    def _resolve(
        self,
        raw: str | bytes,
        *,
        force_empty_cache: bool,
        chain: tuple[str, ...],
    ) -> list[Package]:
        lockfile = parse_lockfile(raw)
        packages = [self._package(entry) for entry in lockfile.entries]
        if not packages and not force_empty_cache:
            raise NoDependencies(
                "No cacheable dependencies were found. Please check package-lock.json "
                'and verify that it has "resolved" URLs and "integrity" hashes.',
                hint="If generating an empty cache is intentional, set forceEmptyCache "
                "(FORCE_EMPTY_CACHE=1).",
            )

        chain = (*chain, lockfile.digest)
        nested: list[Package] = []
        for package in packages:
            if package.is_git:
                nested.extend(self._expand_git(package, chain=chain))
        return dedupe_by_url([*packages, *nested])

    def _package(self, entry: LockfileEntry) -> Package:
        cached = self._packages.get(entry.resolved)
        if cached is not None:
            return cached
        package = Package.from_lock_entry(entry, fetcher=self.fetcher, workdirs=self.workdirs)
        self._packages[entry.resolved] = package
        self.logger.debug(
            "resolve_package",
            f"Resolved {package.name} to {package.filename}",
            package=package.name,
            extra=package.to_dict(),
        )
        return package

    def _expand_git(self, package: Package, *, chain: tuple[str, ...]) -> list[Package]:
        workdir = package.workdir
        if workdir is None:
            return []
        self.logger.info(
            "resolve_git",
            f'Recursively parsing lockfile for git sourced package "{package.name}"...',
            package=package.name,
        )

        lock_path = workdir / NESTED_LOCKFILE
        nested_raw = read_text(lock_path) if lock_path.exists() else None
        scripts = sorted(INSTALL_SCRIPTS.intersection(_manifest_scripts(workdir / MANIFEST)))
        if scripts and nested_raw is None and not self.force_git_deps:
            raise GitDepsRequireLockfile(
                f"Git dependency {package.name} contains install scripts and no lockfile. "
                "This will probably break.",
                hint="If you want to try to use this dependency, set forceGitDeps "
                "(FORCE_GIT_DEPS=1).",
                context={"package": package.name, "scripts": ", ".join(scripts)},
            )
        if nested_raw is None:
            return []

        digest = lockfile_digest(nested_raw)
        if digest in chain:
            raise GitDependencyCycle(
                f"Git dependency {package.name} leads back to a lockfile already being resolved.",
                context={"package": package.name, "url": package.url, "lockfile_sha256": digest},
            )
        if digest in self._expanded:
            self.logger.debug(
                "resolve_git_skip",
                f"Lockfile of {package.name} was already expanded",
                package=package.name,
            )
            return []
        self._expanded.add(digest)
        return self._resolve(nested_raw, force_empty_cache=True, chain=chain)


def resolve_lockfile(
    raw: str | bytes,
    *,
    fetcher: ArtifactFetcher,
    workdirs: WorkdirPool,
    force_git_deps: bool = False,
    force_empty_cache: bool = False,
    logger: StructuredLogger | None = None,
) -> list[Package]:
    resolver = LockfileResolver(
        fetcher=fetcher,
        workdirs=workdirs,
        force_git_deps=force_git_deps,
        logger=logger if logger is not None else StructuredLogger(),
    )
    return resolver.resolve(raw, force_empty_cache=force_empty_cache)


def dedupe_by_url(packages: Iterable[Package]) -> list[Package]:
    """Keep the first package for every canonical URL, preserving order."""
    seen: set[str] = set()
    unique: list[Package] = []
    for package in packages:
        if package.url in seen:
            continue
        seen.add(package.url)
        unique.append(package)
    return unique


def _manifest_scripts(path: Path) -> list[str]:
    raw = read_text(path)
    try:
        manifest: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LockfileError(
            "Invalid package.json in git dependency.",
            hint=str(exc),
            context={"path": str(path)},
        ) from exc
    scripts = manifest.get("scripts") if isinstance(manifest, dict) else None
    if not isinstance(scripts, dict):
        return []
    return list(scripts)
