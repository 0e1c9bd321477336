import pytest

from npmdeps.errors import (
    ArchiveError,
    CaughtSignal,
    DirectoryNotEmpty,
    DirectoryOpenError,
    DownloadError,
    DownloadFileExists,
    DownloadNotAllowed,
    ErrorCode,
    FileCreateError,
    FileOpenError,
    FileRemoveError,
    FileWriteError,
    GitDependencyCycle,
    GitDepsRequireLockfile,
    IntegrityMismatch,
    InvalidAlgorithm,
    MakeDirectoryError,
    MissingFilename,
    MissingIntegrity,
    MissingUrl,
    MultipleActionsSelected,
    NoActionSelected,
    NoDependencies,
    NpmDepsError,
    ReconciliationAborted,
    SymlinkError,
    UnknownAction,
    UnknownOption,
    UnsupportedLockVersion,
)


@pytest.mark.parametrize(
    ("error_type", "exit_code"),
    [
        (UnknownOption, 1),
        (UnknownAction, 2),
        (NoActionSelected, 3),
        (MultipleActionsSelected, 4),
        (MissingIntegrity, 10),
        (MissingUrl, 11),
        (MissingFilename, 12),
        (GitDepsRequireLockfile, 13),
        (NoDependencies, 14),
        (UnsupportedLockVersion, 15),
        (GitDependencyCycle, 16),
        (FileOpenError, 20),
        (FileCreateError, 21),
        (FileWriteError, 22),
        (FileRemoveError, 23),
        (MakeDirectoryError, 24),
        (DirectoryOpenError, 25),
        (DirectoryNotEmpty, 26),
        (SymlinkError, 27),
        (DownloadError, 30),
        (DownloadNotAllowed, 31),
        (DownloadFileExists, 32),
        (IntegrityMismatch, 40),
        (InvalidAlgorithm, 41),
        (ArchiveError, 50),
        (CaughtSignal, 60),
        (ReconciliationAborted, 0),
    ],
)
def test_exit_codes_are_stable(error_type: type[NpmDepsError], exit_code: int) -> None:
    error = error_type("boom")

    assert error.exit_code == exit_code
    assert error.code == error_type.default_code.value
    assert error.code.startswith("E_")


def test_only_mismatch_and_existing_file_are_non_fatal() -> None:
    assert not IntegrityMismatch("x").fatal
    assert not DownloadFileExists("x").fatal
    assert DownloadError("x").fatal
    assert MissingIntegrity("x").fatal


def test_configuration_errors_point_at_help() -> None:
    assert UnknownAction("x").show_help
    assert not MissingUrl("x").show_help


def test_error_payload_carries_hint_and_context() -> None:
    error = DownloadError(
        "Error downloading file: https://example.invalid/a.tgz",
        hint="Gave up after 3 attempts.",
        context={"url": "https://example.invalid/a.tgz", "status": ""},
    )

    payload = error.to_dict()

    assert payload["code"] == ErrorCode.DOWNLOAD.value
    assert payload["exit_code"] == 30
    assert payload["hint"] == "Gave up after 3 attempts."
    assert payload["context"] == {"url": "https://example.invalid/a.tgz", "status": ""}
    rendered = str(error)
    assert "Hint: Gave up after 3 attempts." in rendered
    assert "url: https://example.invalid/a.tgz" in rendered
    assert "status:" not in rendered
