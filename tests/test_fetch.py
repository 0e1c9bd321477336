import gzip
import http.client
import io
import tarfile
from collections.abc import Callable
from pathlib import Path
from urllib.error import HTTPError, URLError

import pytest
from conftest import FakeOpener, FakeResponse

from npmdeps.errors import ArchiveError, DownloadError, DownloadNotAllowed, FileOpenError
from npmdeps.fetch import ArtifactFetcher, extract_tarball, pack_directory

URL = "https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz"


def make_fetcher(deps_dir: Path, opener: FakeOpener, delays: list[float]) -> ArtifactFetcher:
    return ArtifactFetcher(
        deps_dir=deps_dir,
        allow_download=True,
        opener=opener,
        sleep=delays.append,
    )


def test_local_file_wins_over_url(deps_dir: Path) -> None:
    (deps_dir / "left-pad-1.3.0.tgz").write_bytes(b"local")
    opener = FakeOpener({})

    fetcher = make_fetcher(deps_dir, opener, [])

    assert fetcher.fetch("left-pad-1.3.0.tgz", URL) == b"local"
    assert opener.calls == []


def test_missing_file_without_url_cannot_be_opened(deps_dir: Path) -> None:
    with pytest.raises(FileOpenError) as excinfo:
        ArtifactFetcher(deps_dir=deps_dir).fetch("left-pad-1.3.0.tgz")

    assert excinfo.value.exit_code == 20


def test_download_requires_permission(deps_dir: Path) -> None:
    with pytest.raises(DownloadNotAllowed) as excinfo:
        ArtifactFetcher(deps_dir=deps_dir).fetch("left-pad-1.3.0.tgz", URL)

    assert excinfo.value.exit_code == 31
    assert excinfo.value.context["url"] == URL


def test_download_retries_then_succeeds(deps_dir: Path) -> None:
    opener = FakeOpener({URL: [URLError("reset"), URLError("reset"), b"remote"]})
    delays: list[float] = []

    data = make_fetcher(deps_dir, opener, delays).fetch("left-pad-1.3.0.tgz", URL)

    assert data == b"remote"
    assert opener.calls == [URL, URL, URL]
    assert delays == [2.0, 2.0]
    assert not (deps_dir / "left-pad-1.3.0.tgz").exists()


def test_download_gives_up_after_three_attempts(deps_dir: Path) -> None:
    failure = HTTPError(URL, 503, "Service Unavailable", {}, None)  # type: ignore[arg-type]
    opener = FakeOpener({URL: [failure, failure, failure]})
    delays: list[float] = []

    with pytest.raises(DownloadError) as excinfo:
        make_fetcher(deps_dir, opener, delays).fetch("left-pad-1.3.0.tgz", URL)

    assert excinfo.value.exit_code == 30
    assert excinfo.value.context["status"] == "503 Service Unavailable"
    assert len(opener.calls) == 3
    assert delays == [2.0, 2.0]


class TruncatedResponse(FakeResponse):
    def read(self) -> bytes:
        raise http.client.IncompleteRead(self.body, 100)


def test_truncated_body_is_retried_then_fails(deps_dir: Path) -> None:
    calls: list[str] = []

    def opener(url: str, timeout: float | None = None) -> TruncatedResponse:
        calls.append(url)
        return TruncatedResponse(b"partial")

    delays: list[float] = []
    fetcher = ArtifactFetcher(
        deps_dir=deps_dir,
        allow_download=True,
        opener=opener,
        sleep=delays.append,
    )

    with pytest.raises(DownloadError) as excinfo:
        fetcher.fetch("left-pad-1.3.0.tgz", URL)

    assert calls == [URL, URL, URL]
    assert delays == [2.0, 2.0]
    assert excinfo.value.exit_code == 30
    assert excinfo.value.context["status"]


def test_remembered_downloads_are_not_repeated(deps_dir: Path) -> None:
    opener = FakeOpener({URL: b"remote"})
    fetcher = make_fetcher(deps_dir, opener, [])

    fetcher.fetch("left-pad-1.3.0.tgz", URL, remember=True)
    fetcher.fetch("left-pad-1.3.0.tgz", URL)

    assert opener.calls == [URL]


def test_extract_strips_top_level_directory(
    tmp_path: Path,
    make_tarball: Callable[..., bytes],
) -> None:
    data = make_tarball({"package.json": "{}", "lib/index.js": "module.exports = 1"})

    dest = extract_tarball(data, tmp_path / "out")

    assert (dest / "package.json").read_text(encoding="utf-8") == "{}"
    assert (dest / "lib" / "index.js").exists()
    assert not (dest / "package").exists()


def test_extract_rejects_paths_outside_destination(
    tmp_path: Path,
    make_tarball: Callable[..., bytes],
) -> None:
    data = make_tarball({"../../evil.txt": "boom"})

    with pytest.raises(ArchiveError) as excinfo:
        extract_tarball(data, tmp_path / "out")

    assert excinfo.value.exit_code == 50
    assert not (tmp_path / "evil.txt").exists()


def test_extract_rejects_garbage(tmp_path: Path) -> None:
    with pytest.raises(ArchiveError):
        extract_tarball(b"definitely not a tarball", tmp_path / "out")


def test_pack_directory_is_reproducible(tmp_path: Path) -> None:
    source = tmp_path / "npm-deps"
    source.mkdir()
    (source / "b.tgz").write_bytes(b"b")
    (source / "a.tgz").write_bytes(b"a")

    first = pack_directory(source, tmp_path / "first.tar.gz").read_bytes()
    (source / "a.tgz").touch()
    second = pack_directory(source, tmp_path / "second.tar.gz").read_bytes()

    assert first == second
    with tarfile.open(fileobj=io.BytesIO(gzip.decompress(first))) as archive:
        members = archive.getmembers()
    assert [member.name for member in members] == [".", "./a.tgz", "./b.tgz"]
    assert all(member.mtime == 0 and member.uid == 0 for member in members)
