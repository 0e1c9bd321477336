"""Resolved package entities and their integrity verification."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from npmdeps.errors import IntegrityMismatch, MissingFilename, MissingIntegrity, MissingUrl
from npmdeps.fetch import ArtifactFetcher, extract_tarball
from npmdeps.integrity import Integrity, hex_digest
from npmdeps.urls import hosted_git_url, registry_filename
from npmdeps.workdir import WorkdirPool

if TYPE_CHECKING:
    from npmdeps.lockfile.model import LockfileEntry


@dataclass(frozen=True, slots=True)
class RegistrySource:
    integrity: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "registry", "integrity": self.integrity}


@dataclass(frozen=True, slots=True)
class GitSource:
    """A GitHub tarball extracted into ``workdir``; trusted by its pinned commit."""

    workdir: Path

    def to_dict(self) -> dict[str, Any]:
        return {"type": "git", "workdir": str(self.workdir)}


PackageSource = RegistrySource | GitSource


@dataclass(frozen=True, slots=True)
class VerifyResult:
    package: str
    ok: bool
    expected: str | None = None
    actual: str | None = None

    def to_error(self) -> IntegrityMismatch:
        return IntegrityMismatch(
            f"Mismatching integrity for package: {self.package}",
            context={"integrity": self.expected or "", "file": self.actual or ""},
        )


@dataclass(frozen=True, slots=True)
class Package:
    name: str
    url: str
    filename: str
    source: PackageSource

    @property
    def is_git(self) -> bool:
        return isinstance(self.source, GitSource)

    @property
    def integrity(self) -> str | None:
        if isinstance(self.source, RegistrySource):
            return self.source.integrity
        return None

    @property
    def workdir(self) -> Path | None:
        if isinstance(self.source, GitSource):
            return self.source.workdir
        return None

    def verify(self, data: bytes) -> VerifyResult:
        """Compare *data* against the lockfile integrity; git packages always pass."""
        if isinstance(self.source, GitSource):
            return VerifyResult(package=self.name, ok=True)
        expected = Integrity.parse(self.source.integrity)
        actual = hex_digest(expected.algorithm, data)
        return VerifyResult(
            package=self.name,
            ok=actual == expected.hexdigest,
            expected=expected.hexdigest,
            actual=actual,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "filename": self.filename,
            "source": self.source.to_dict(),
        }

    @classmethod
    def from_lock_entry(
        cls,
        entry: LockfileEntry,
        *,
        fetcher: ArtifactFetcher,
        workdirs: WorkdirPool,
    ) -> Package:
        """Classify *entry* as a hosted git or registry package.

        Git archives are fetched and unpacked right away so the resolver can
        inspect their ``package.json`` and nested lockfile.
        """
        hosted = hosted_git_url(entry.resolved)
        if hosted is None:
            return cls._registry(entry)

        url, filename = hosted
        data = fetcher.fetch(filename, url, remember=True)
        workdir = workdirs.create()
        extract_tarball(data, workdir, strip_components=1)
        return cls(name=entry.name, url=url, filename=filename, source=GitSource(workdir=workdir))

    @classmethod
    def _registry(cls, entry: LockfileEntry) -> Package:
        context = {"package": entry.name, "resolved": entry.resolved}
        filename = registry_filename(entry.resolved)
        if not entry.integrity:
            raise MissingIntegrity(
                f"Registry package {entry.name} missing integrity string",
                context=context,
            )
        if not filename:
            raise MissingFilename(
                f"Couldn't parse a filename for package {entry.name}",
                context=context,
            )
        if not entry.resolved:
            raise MissingUrl(f"Package {entry.name} missing url", context=context)
        return cls(
            name=entry.name,
            url=entry.resolved,
            filename=filename,
            source=RegistrySource(integrity=entry.integrity),
        )


__all__ = ["GitSource", "Package", "PackageSource", "RegistrySource", "VerifyResult"]
