"""Public package entrypoint for npm-deps."""

__version__ = "1.13.0"

from .cache import CacacheStore, CacheEntry  # noqa: E402
from .config import Options  # noqa: E402
from .errors import (  # noqa: E402
    ErrorCode,
    IntegrityMismatch,
    LockfileError,
    NpmDepsError,
    ReconciliationAborted,
    UnsupportedLockVersion,
)
from .integrity import Integrity  # noqa: E402
from .lockfile import LockfileResolver, fixup_lockfile, resolve_lockfile  # noqa: E402
from .package import GitSource, Package, RegistrySource  # noqa: E402
from .reconcile import DirectoryReconciler, Reconciliation  # noqa: E402

__all__ = [
    "CacacheStore",
    "CacheEntry",
    "DirectoryReconciler",
    "ErrorCode",
    "GitSource",
    "Integrity",
    "IntegrityMismatch",
    "LockfileError",
    "LockfileResolver",
    "NpmDepsError",
    "Options",
    "Package",
    "Reconciliation",
    "ReconciliationAborted",
    "RegistrySource",
    "UnsupportedLockVersion",
    "__version__",
    "fixup_lockfile",
    "resolve_lockfile",
]
