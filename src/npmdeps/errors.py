"""Typed error model with stable error codes and process exit statuses."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import ClassVar


class ErrorCode(StrEnum):
    """Stable error identifiers used across the CLI and log records."""

    UNKNOWN_OPTION = "E_UNKNOWN_OPTION"
    UNKNOWN_ACTION = "E_UNKNOWN_ACTION"
    NO_ACTION = "E_NO_ACTION"
    MULTIPLE_ACTIONS = "E_MULTIPLE_ACTIONS"
    MISSING_INTEGRITY = "E_MISSING_INTEGRITY"
    MISSING_URL = "E_MISSING_URL"
    MISSING_FILENAME = "E_MISSING_FILENAME"
    GIT_DEPS_LOCKFILE = "E_GIT_DEPS_LOCKFILE"
    NO_DEPENDENCIES = "E_NO_DEPENDENCIES"
    LOCK_VERSION = "E_LOCK_VERSION"
    LOCK_INVALID = "E_LOCK_INVALID"
    GIT_DEPS_CYCLE = "E_GIT_DEPS_CYCLE"
    FILE_OPEN = "E_FILE_OPEN"
    FILE_CREATE = "E_FILE_CREATE"
    FILE_WRITE = "E_FILE_WRITE"
    FILE_REMOVE = "E_FILE_REMOVE"
    MKDIR = "E_MKDIR"
    DIR_OPEN = "E_DIR_OPEN"
    DIR_NOT_EMPTY = "E_DIR_NOT_EMPTY"
    SYMLINK = "E_SYMLINK"
    DOWNLOAD = "E_DOWNLOAD"
    DOWNLOAD_NOT_ALLOWED = "E_DOWNLOAD_NOT_ALLOWED"
    DOWNLOAD_FILE_EXISTS = "E_DOWNLOAD_FILE_EXISTS"
    INTEGRITY_MISMATCH = "E_INTEGRITY_MISMATCH"
    INVALID_ALGORITHM = "E_INVALID_ALGORITHM"
    ARCHIVE = "E_ARCHIVE"
    ABORTED = "E_ABORTED"
    CAUGHT_SIGNAL = "E_CAUGHT_SIGNAL"
    UNHANDLED = "E_UNHANDLED"


class NpmDepsError(Exception):
    """Base error class that carries code, exit status, optional hint, and context."""

    default_code: ClassVar[ErrorCode] = ErrorCode.UNHANDLED
    exit_code: ClassVar[int] = 255
    fatal: ClassVar[bool] = True
    show_help: ClassVar[bool] = False

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = self.default_code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "exit_code": self.exit_code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


# ── Configuration (1-4) ─────────────────────────────────────────────


class ConfigurationError(NpmDepsError):
    default_code = ErrorCode.UNKNOWN_OPTION
    exit_code = 1
    show_help = True


class UnknownOption(ConfigurationError):
    default_code = ErrorCode.UNKNOWN_OPTION
    exit_code = 1


class UnknownAction(ConfigurationError):
    default_code = ErrorCode.UNKNOWN_ACTION
    exit_code = 2


class NoActionSelected(ConfigurationError):
    default_code = ErrorCode.NO_ACTION
    exit_code = 3


class MultipleActionsSelected(ConfigurationError):
    default_code = ErrorCode.MULTIPLE_ACTIONS
    exit_code = 4


# ── Lockfile rules (10-16) ──────────────────────────────────────────


class LockfileError(NpmDepsError):
    default_code = ErrorCode.LOCK_INVALID
    exit_code = 10


class MissingIntegrity(LockfileError):
    default_code = ErrorCode.MISSING_INTEGRITY
    exit_code = 10


class MissingUrl(LockfileError):
    default_code = ErrorCode.MISSING_URL
    exit_code = 11


class MissingFilename(LockfileError):
    default_code = ErrorCode.MISSING_FILENAME
    exit_code = 12


class GitDepsRequireLockfile(LockfileError):
    default_code = ErrorCode.GIT_DEPS_LOCKFILE
    exit_code = 13


class NoDependencies(LockfileError):
    default_code = ErrorCode.NO_DEPENDENCIES
    exit_code = 14


class UnsupportedLockVersion(LockfileError):
    default_code = ErrorCode.LOCK_VERSION
    exit_code = 15


class GitDependencyCycle(LockfileError):
    default_code = ErrorCode.GIT_DEPS_CYCLE
    exit_code = 16


# ── Filesystem (20-27) ──────────────────────────────────────────────


class FilesystemError(NpmDepsError):
    default_code = ErrorCode.FILE_OPEN
    exit_code = 20


class FileOpenError(FilesystemError):
    default_code = ErrorCode.FILE_OPEN
    exit_code = 20


class FileCreateError(FilesystemError):
    default_code = ErrorCode.FILE_CREATE
    exit_code = 21


class FileWriteError(FilesystemError):
    default_code = ErrorCode.FILE_WRITE
    exit_code = 22


class FileRemoveError(FilesystemError):
    default_code = ErrorCode.FILE_REMOVE
    exit_code = 23


class MakeDirectoryError(FilesystemError):
    default_code = ErrorCode.MKDIR
    exit_code = 24


class DirectoryOpenError(FilesystemError):
    default_code = ErrorCode.DIR_OPEN
    exit_code = 25


class DirectoryNotEmpty(FilesystemError):
    default_code = ErrorCode.DIR_NOT_EMPTY
    exit_code = 26


class SymlinkError(FilesystemError):
    default_code = ErrorCode.SYMLINK
    exit_code = 27


# ── Network (30-32) ─────────────────────────────────────────────────


class NetworkError(NpmDepsError):
    default_code = ErrorCode.DOWNLOAD
    exit_code = 30


class DownloadError(NetworkError):
    default_code = ErrorCode.DOWNLOAD
    exit_code = 30


class DownloadNotAllowed(NetworkError):
    default_code = ErrorCode.DOWNLOAD_NOT_ALLOWED
    exit_code = 31


class DownloadFileExists(NetworkError):
    default_code = ErrorCode.DOWNLOAD_FILE_EXISTS
    exit_code = 32
    fatal = False


# ── Verification (40-41) ────────────────────────────────────────────


class VerificationError(NpmDepsError):
    default_code = ErrorCode.INTEGRITY_MISMATCH
    exit_code = 40


class IntegrityMismatch(VerificationError):
    default_code = ErrorCode.INTEGRITY_MISMATCH
    exit_code = 40
    fatal = False


class InvalidAlgorithm(VerificationError):
    default_code = ErrorCode.INVALID_ALGORITHM
    exit_code = 41


# ── Archives (50) ───────────────────────────────────────────────────


class ArchiveError(NpmDepsError):
    default_code = ErrorCode.ARCHIVE
    exit_code = 50


# ── Aborts (0, 60) ──────────────────────────────────────────────────


class AbortError(NpmDepsError):
    default_code = ErrorCode.ABORTED
    exit_code = 0


class ReconciliationAborted(AbortError):
    """The user declined to continue past a warning; exits quietly with status 0."""

    default_code = ErrorCode.ABORTED
    exit_code = 0


class CaughtSignal(AbortError):
    default_code = ErrorCode.CAUGHT_SIGNAL
    exit_code = 60


__all__ = [
    "AbortError",
    "ArchiveError",
    "CaughtSignal",
    "ConfigurationError",
    "DirectoryNotEmpty",
    "DirectoryOpenError",
    "DownloadError",
    "DownloadFileExists",
    "DownloadNotAllowed",
    "ErrorCode",
    "FileCreateError",
    "FileOpenError",
    "FileRemoveError",
    "FileWriteError",
    "FilesystemError",
    "GitDependencyCycle",
    "GitDepsRequireLockfile",
    "IntegrityMismatch",
    "InvalidAlgorithm",
    "LockfileError",
    "MakeDirectoryError",
    "MissingFilename",
    "MissingIntegrity",
    "MissingUrl",
    "MultipleActionsSelected",
    "NetworkError",
    "NoActionSelected",
    "NoDependencies",
    "NpmDepsError",
    "ReconciliationAborted",
    "SymlinkError",
    "UnknownAction",
    "UnknownOption",
    "UnsupportedLockVersion",
    "VerificationError",
]
