"""package-lock.json parsing, fixups and resolution."""

from .fixup import fixup_lockfile, fixup_lockfile_file
from .io import parse_lockfile, read_lockfile, write_lockfile
from .model import SUPPORTED_LOCK_VERSIONS, Lockfile, LockfileEntry
from .resolve import LockfileResolver, dedupe_by_url, resolve_lockfile

__all__ = [
    "SUPPORTED_LOCK_VERSIONS",
    "Lockfile",
    "LockfileEntry",
    "LockfileResolver",
    "dedupe_by_url",
    "fixup_lockfile",
    "fixup_lockfile_file",
    "parse_lockfile",
    "read_lockfile",
    "resolve_lockfile",
    "write_lockfile",
]
