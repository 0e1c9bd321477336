"""The download, verify-files, cacache and fixup-lockfile actions."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.request import urlopen

from npmdeps.cache import CacacheStore, request_cache_key
from npmdeps.config import Action, Options
from npmdeps.errors import (
    DirectoryNotEmpty,
    DownloadFileExists,
    DownloadNotAllowed,
    IntegrityMismatch,
)
from npmdeps.fetch import ArtifactFetcher, pack_directory
from npmdeps.fsutil import is_empty_dir, make_dirs, remove_file, write_new_file
from npmdeps.lockfile import fixup_lockfile_file, read_lockfile, resolve_lockfile
from npmdeps.observability import StructuredLogger
from npmdeps.package import Package, VerifyResult
from npmdeps.prompts import ConsolePrompter, Prompter
from npmdeps.reconcile import DirectoryReconciler
from npmdeps.workdir import WorkdirPool


@dataclass(slots=True)
class ActionRunner:
    """Runs one action with explicit configuration and collaborators."""

    options: Options
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    prompter: Prompter = field(default_factory=ConsolePrompter)
    opener: Callable[..., Any] = urlopen
    sleep: Callable[[float], None] = time.sleep
    workdir_root: str | None = None

    def run(self, action: Action) -> int:
        if action == "fixup-lockfile":
            fixup_lockfile_file(self.options.lockfile, logger=self.logger)
            return 0

        with WorkdirPool(retain=not self.options.cleanup, root=self.workdir_root) as workdirs:
            fetcher = self.fetcher(allow_download=action == "download")
            packages = self.resolve(fetcher=fetcher, workdirs=workdirs)
            if action == "download":
                return self.download(packages, fetcher=fetcher)
            if action == "cacache":
                return self.cacache(packages)
            return self.verify_files(packages, fetcher=fetcher)

    def fetcher(self, *, allow_download: bool) -> ArtifactFetcher:
        return ArtifactFetcher(
            deps_dir=self.options.deps_dir,
            allow_download=allow_download,
            logger=self.logger,
            opener=self.opener,
            sleep=self.sleep,
        )

    def resolve(self, *, fetcher: ArtifactFetcher, workdirs: WorkdirPool) -> list[Package]:
        packages = resolve_lockfile(
            read_lockfile(self.options.lockfile),
            fetcher=fetcher,
            workdirs=workdirs,
            force_git_deps=self.options.force_git_deps,
            force_empty_cache=self.options.force_empty_cache,
            logger=self.logger,
        )
        self.logger.debug(
            "resolve",
            f"Resolved {len(packages)} packages from {self.options.lockfile}",
            extra={"count": len(packages)},
        )
        return packages

    def reconciler(self) -> DirectoryReconciler:
        return DirectoryReconciler(
            self.options.deps_dir,
            delete_all=self.options.delete,
            prompter=self.prompter,
            logger=self.logger,
        )

    def download(self, packages: Sequence[Package], *, fetcher: ArtifactFetcher) -> int:
        deps_dir = make_dirs(self.options.deps_dir)
        queue = list(packages)
        failures: list[str] = []

        if not is_empty_dir(deps_dir):
            self.logger.warning("download", f"Warning: {deps_dir} directory exists")
            if not (self.options.update or self.prompter.confirm("Do you want to update it")):
                raise DirectoryNotEmpty(
                    f"{deps_dir} directory is not empty",
                    hint="Pass --update to reuse the existing downloads.",
                    context={"path": str(deps_dir)},
                )
            reconciliation = self.reconciler().reconcile(packages)
            queue = list(reconciliation.not_found)
            if self.options.verify:
                for package in reconciliation.found:
                    result = package.verify(fetcher.fetch(package.filename))
                    if result.ok:
                        continue
                    self._report_mismatch(result)
                    if self.options.delete or self.prompter.confirm(
                        "Do you want to re-download this package"
                    ):
                        queue.append(package)
                        path = deps_dir / package.filename
                        self.logger.debug("download", f"Deleting file {path}", package=package.name)
                        remove_file(path)
                    else:
                        failures.append(package.name)

        for package in queue:
            data = fetcher.fetch(package.filename, package.url)
            if self.options.verify:
                result = package.verify(data)
                if not result.ok:
                    self._report_mismatch(result)
                    failures.append(package.name)

            path = deps_dir / package.filename
            if path.exists():
                exists = DownloadFileExists(f"File {path} already exists. Skipping")
                self._report(exists, package.name)
                continue
            write_new_file(path, data)

        if self.options.pack:
            archive = pack_directory(deps_dir, self.options.pack_file)
            self.logger.info("pack", f"Packed dependencies into {archive}")

        return IntegrityMismatch.exit_code if failures else 0

    def verify_files(self, packages: Sequence[Package], *, fetcher: ArtifactFetcher) -> int:
        reconciliation = self.reconciler().reconcile(packages)

        bad = False
        for package in reconciliation.found:
            result = package.verify(fetcher.fetch(package.filename))
            if not result.ok:
                self._report_mismatch(result)
                bad = True
            else:
                self.logger.debug(
                    "verify", f"Successfully verified {package.url}", package=package.name
                )

        for package in reconciliation.not_found:
            self.logger.error("verify", f"File not found for {package.name}", package=package.name)
            bad = True

        if bad:
            return IntegrityMismatch.exit_code
        self.logger.info("verify", "Successfully verified all files")
        return 0

    def cacache(self, packages: Sequence[Package]) -> int:
        reconciliation = self.reconciler().reconcile(packages)
        if reconciliation.not_found:
            raise DownloadNotAllowed(
                "Cannot download missing files with this action.",
                hint="Run the download action first.",
                context={"missing": ", ".join(pkg.filename for pkg in reconciliation.not_found)},
            )

        store = CacacheStore(self.options.cache_dir, logger=self.logger)
        store.init()
        for package in packages:
            store.put(
                request_cache_key(package.url),
                package.url,
                self.options.deps_dir / package.filename,
                package.integrity,
            )
        self.logger.info("cacache", f"Wrote {len(packages)} cache entries to {store.root}")
        return 0

    def _report_mismatch(self, result: VerifyResult) -> None:
        self._report(result.to_error(), result.package)

    def _report(self, error: IntegrityMismatch | DownloadFileExists, package: str) -> None:
        level = "error" if isinstance(error, IntegrityMismatch) else "warning"
        self.logger.log(
            operation="report",
            message=str(error),
            package=package,
            level=level,
            extra=error.to_dict(),
        )
