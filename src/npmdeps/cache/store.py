"""Two-tier content-addressed cache store compatible with npm's cacache."""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from npmdeps.cache.keys import CONTENT_DIR, INDEX_DIR, content_path, index_path
from npmdeps.errors import DirectoryNotEmpty, FileOpenError, LockfileError, SymlinkError
from npmdeps.fsutil import is_empty_dir, make_dirs, write_text
from npmdeps.integrity import Integrity, file_integrity
from npmdeps.observability import StructuredLogger


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    integrity: str
    size: int
    url: str
    time: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "integrity": self.integrity,
            "time": self.time,
            "size": self.size,
            "metadata": {
                "url": self.url,
                "options": {"compress": True},
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    def index_line(self) -> str:
        """Return ``<sha1 of json>\\t<json>``, the bucket line cacache expects."""
        encoded = self.to_json()
        checksum = hashlib.sha1(encoded.encode("utf-8")).hexdigest()  # noqa: S324 - cacache format
        return f"{checksum}\t{encoded}"


class CacacheStore:
    """Builds ``content-v2`` and ``index-v5`` trees that reference downloaded tarballs.

    Content entries are symlinks to the original files; nothing is copied.
    """

    def __init__(self, root: str | Path, *, logger: StructuredLogger | None = None) -> None:
        self.root = Path(root)
        self.logger = logger if logger is not None else StructuredLogger()

    @property
    def content_root(self) -> Path:
        return self.root / CONTENT_DIR

    @property
    def index_root(self) -> Path:
        return self.root / INDEX_DIR

    def init(self) -> None:
        make_dirs(self.root)
        if not is_empty_dir(self.root):
            raise DirectoryNotEmpty(
                f"{self.root} directory is not empty",
                hint="Remove the directory or choose another cache location.",
                context={"path": str(self.root)},
            )
        make_dirs(self.content_root)
        make_dirs(self.index_root)

    def content_path(self, algorithm: str, hexdigest: str) -> Path:
        return self.root / content_path(algorithm, hexdigest)

    def index_path(self, key: str) -> Path:
        return self.root / index_path(key)

    def put(
        self,
        key: str,
        url: str,
        file: str | Path,
        integrity: str | None = None,
    ) -> CacheEntry:
        artifact = Path(file).absolute()
        parsed = Integrity.parse(integrity) if integrity else file_integrity(artifact)
        if not parsed.digest:
            raise LockfileError(
                f"Malformed integrity string: {integrity}",
                context={"url": url, "integrity": integrity or ""},
            )
        try:
            size = artifact.stat().st_size
        except OSError as exc:
            raise FileOpenError(
                f"Cannot open file {artifact}",
                context={"path": str(artifact), "error": exc.strerror or str(exc)},
            ) from exc

        target = self.content_path(parsed.algorithm, parsed.hexdigest)
        make_dirs(target.parent)
        _symlink(artifact, target)

        entry = CacheEntry(key=key, integrity=integrity or str(parsed), size=size, url=url)
        index_file = self.index_path(key)
        make_dirs(index_file.parent)
        write_text(index_file, entry.index_line())
        self.logger.debug(
            "cache_put",
            f"Cached {url}",
            extra={"key": key, "content": str(target), "index": str(index_file)},
        )
        return entry


def _symlink(source: Path, target: Path) -> None:
    try:
        if target.is_symlink() or target.exists():
            target.unlink()
        os.symlink(source, target)
    except OSError as exc:
        raise SymlinkError(
            f"Cannot symlink file to {target}",
            context={"path": str(target), "source": str(source), "error": exc.strerror or str(exc)},
        ) from exc
