"""Scoped temporary directories for extracted git dependencies."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from types import TracebackType

from npmdeps.errors import MakeDirectoryError

WORKDIR_PREFIX = "package"


class WorkdirPool:
    """Owns every workdir created during one run and removes them on exit.

    With ``retain=True`` the directories are left behind for inspection.
    """

    def __init__(self, *, retain: bool = False, root: str | Path | None = None) -> None:
        self.retain = retain
        self.root = Path(root) if root is not None else None
        self._paths: list[Path] = []

    def __enter__(self) -> WorkdirPool:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def create(self) -> Path:
        if self.root is not None:
            self.root.mkdir(parents=True, exist_ok=True)
        try:
            path = Path(tempfile.mkdtemp(prefix=WORKDIR_PREFIX, dir=self.root))
        except OSError as exc:
            raise MakeDirectoryError(
                "Cannot create temporary directory.",
                context={"root": str(self.root or tempfile.gettempdir()), "error": str(exc)},
            ) from exc
        self._paths.append(path)
        return path

    def release(self) -> None:
        if self.retain:
            return
        while self._paths:
            shutil.rmtree(self._paths.pop(), ignore_errors=True)
