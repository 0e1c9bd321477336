"""Filesystem helpers that translate OS errors into typed errors."""

from __future__ import annotations

from pathlib import Path

from npmdeps.errors import (
    DirectoryOpenError,
    FileCreateError,
    FileRemoveError,
    FileWriteError,
    MakeDirectoryError,
)


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


def make_dirs(path: str | Path) -> Path:
    directory = Path(path)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise MakeDirectoryError(
            f"Cannot create directory {directory}",
            context={"path": str(directory), "error": _reason(exc)},
        ) from exc
    return directory


def is_empty_dir(path: str | Path) -> bool:
    directory = Path(path)
    try:
        return next(directory.iterdir(), None) is None
    except OSError as exc:
        raise DirectoryOpenError(
            f"Cannot open directory {directory}",
            context={"path": str(directory), "error": _reason(exc)},
        ) from exc


def write_new_file(path: str | Path, data: bytes) -> Path:
    """Create *path* with *data*; the file must not exist yet."""
    target = Path(path)
    try:
        handle = target.open("xb")
    except OSError as exc:
        raise FileCreateError(
            f"Cannot create file {target}",
            context={"path": str(target), "error": _reason(exc)},
        ) from exc
    with handle:
        try:
            handle.write(data)
        except OSError as exc:
            raise FileWriteError(
                f"Cannot write to file {target}",
                context={"path": str(target), "error": _reason(exc)},
            ) from exc
    return target


def write_text(path: str | Path, text: str) -> Path:
    target = Path(path)
    try:
        target.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FileWriteError(
            f"Cannot write to file {target}",
            context={"path": str(target), "error": _reason(exc)},
        ) from exc
    return target


def remove_file(path: str | Path) -> None:
    target = Path(path)
    try:
        target.unlink()
    except OSError as exc:
        raise FileRemoveError(
            f"Cannot remove file {target}",
            context={"path": str(target), "error": _reason(exc)},
        ) from exc
