"""Tarball extraction and reproducible packing."""

from __future__ import annotations

import gzip
import io
import tarfile
from pathlib import Path

from npmdeps.errors import ArchiveError


def extract_tarball(data: bytes, destination: str | Path, *, strip_components: int = 1) -> Path:
    """Extract gzip'd tar *data* into *destination*, like ``tar --strip-components``."""
    dest = Path(destination)
    dest.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as archive:
            members = []
            for member in archive.getmembers():
                stripped = _strip(member.name, strip_components)
                if stripped is None:
                    continue
                member.name = stripped
                if member.islnk():
                    linkname = _strip(member.linkname, strip_components)
                    if linkname is None:
                        continue
                    member.linkname = linkname
                members.append(member)
            archive.extractall(path=dest, members=members, filter="data")
    except tarfile.TarError as exc:
        raise ArchiveError(
            "Failed to extract archive.",
            context={"destination": str(dest), "error": str(exc)},
        ) from exc
    return dest


def pack_directory(source: str | Path, output: str | Path) -> Path:
    """Write a gzip'd tarball of *source* with normalized ownership and timestamps."""
    source_dir = Path(source)
    output_path = Path(output)
    paths = sorted(source_dir.rglob("*"), key=lambda p: p.relative_to(source_dir).as_posix())
    try:
        with (
            output_path.open("wb") as raw,
            gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as compressed,
            tarfile.open(fileobj=compressed, mode="w", format=tarfile.GNU_FORMAT) as tar,
        ):
            tar.add(source_dir, arcname=".", recursive=False, filter=_normalize)
            for path in paths:
                arcname = "./" + path.relative_to(source_dir).as_posix()
                tar.add(path, arcname=arcname, recursive=False, filter=_normalize)
    except (OSError, tarfile.TarError) as exc:
        raise ArchiveError(
            "Failed to pack directory.",
            context={"source": str(source_dir), "output": str(output_path), "error": str(exc)},
        ) from exc
    return output_path


def _strip(name: str, components: int) -> str | None:
    parts = [part for part in name.split("/") if part and part != "."]
    if len(parts) <= components:
        return None
    return "/".join(parts[components:])


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.mtime = 0
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    return info
