"""Reconcile a download directory against the resolved package set."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from npmdeps.errors import FileRemoveError, ReconciliationAborted
from npmdeps.fsutil import remove_file
from npmdeps.observability import StructuredLogger
from npmdeps.package import Package
from npmdeps.prompts import ConsolePrompter, Prompter

DELETE_CHOICES = ("yes", "y", "all", "a", "no", "n")


@dataclass(frozen=True, slots=True)
class Reconciliation:
    found: tuple[Package, ...] = ()
    not_found: tuple[Package, ...] = ()
    orphans: tuple[Path, ...] = ()
    deleted: tuple[Path, ...] = ()


class DirectoryReconciler:
    """Split packages into present/missing and clean up files no package claims.

    Orphans are deleted before anything in the directory is verified, so a
    stale file can never pass for a verified artifact.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        delete_all: bool = False,
        prompter: Prompter | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.delete_all = delete_all
        self.prompter: Prompter = prompter if prompter is not None else ConsolePrompter()
        self.logger = logger if logger is not None else StructuredLogger()

    def scan(self, packages: Sequence[Package]) -> Reconciliation:
        by_filename: dict[str, Package] = {}
        for package in packages:
            by_filename.setdefault(package.filename, package)

        files = self._files()
        present = {path.name for path in files}
        found = tuple(pkg for name, pkg in by_filename.items() if name in present)
        not_found = tuple(pkg for name, pkg in by_filename.items() if name not in present)
        orphans = tuple(path for path in files if path.name not in by_filename)
        return Reconciliation(found=found, not_found=not_found, orphans=orphans)

    def reconcile(self, packages: Sequence[Package]) -> Reconciliation:
        scanned = self.scan(packages)
        if not scanned.orphans:
            return scanned

        self.logger.warning(
            "reconcile",
            "Warning: files not referenced in package-lock.json found!",
            extra={"orphans": [str(path) for path in scanned.orphans]},
        )
        if not self.delete_all and not self.prompter.confirm("Do you want to continue"):
            raise ReconciliationAborted(
                "Stopped at user request.",
                context={"directory": str(self.directory)},
            )
        deleted = self._delete(scanned.orphans)
        return Reconciliation(
            found=scanned.found,
            not_found=scanned.not_found,
            orphans=scanned.orphans,
            deleted=deleted,
        )

    def _files(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(path for path in self.directory.rglob("*") if path.is_file())

    def _delete(self, orphans: Sequence[Path]) -> tuple[Path, ...]:
        delete_all = self.delete_all
        deleted: list[Path] = []
        for path in orphans:
            if not delete_all:
                response = self.prompter.choose(
                    f'Delete file "{path}" ([Y]es/[A]ll - yes to all/[N]o)?: ',
                    DELETE_CHOICES,
                )
                if response is None or response in ("no", "n"):
                    continue
                if response in ("all", "a"):
                    delete_all = True

            self.logger.info("reconcile_delete", f"Deleting file {path}")
            remove_file(path)
            if path.exists():
                raise FileRemoveError(
                    f"Cannot remove file {path}",
                    context={"path": str(path), "error": "file still present after removal"},
                )
            deleted.append(path)
        return tuple(deleted)
