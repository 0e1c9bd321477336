import hashlib
import json
from pathlib import Path, PurePosixPath

import pytest
from conftest import sri

from npmdeps.cache import CacacheStore, CacheEntry, content_path, index_path, request_cache_key
from npmdeps.errors import DirectoryNotEmpty, LockfileError
from npmdeps.integrity import Integrity

URL = "https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz"


def test_content_path_shards_hex_digest() -> None:
    assert content_path("sha512", "abcdef0123") == PurePosixPath("content-v2/sha512/ab/cd/ef0123")


def test_index_path_uses_sha256_of_key() -> None:
    key = request_cache_key(URL)
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()

    assert key == f"make-fetch-happen:request-cache:{URL}"
    assert index_path(key) == PurePosixPath("index-v5", digest[:2], digest[2:4], digest[4:])


def test_index_line_serialization_is_exact() -> None:
    entry = CacheEntry(key="k", integrity="sha1-x", size=3, url="u")

    assert entry.to_json() == (
        '{"key":"k","integrity":"sha1-x","time":0,"size":3,'
        '"metadata":{"url":"u","options":{"compress":true}}}'
    )
    checksum, _, body = entry.index_line().partition("\t")
    assert checksum == hashlib.sha1(body.encode("utf-8")).hexdigest()


def test_init_requires_empty_directory(tmp_path: Path) -> None:
    root = tmp_path / "_cacache"
    root.mkdir()
    (root / "stale").write_text("x", encoding="utf-8")

    with pytest.raises(DirectoryNotEmpty) as excinfo:
        CacacheStore(root).init()

    assert excinfo.value.exit_code == 26


def test_put_links_content_and_writes_index(tmp_path: Path) -> None:
    data = b"left-pad tarball"
    artifact = tmp_path / "npm-deps" / "left-pad-1.3.0.tgz"
    artifact.parent.mkdir()
    artifact.write_bytes(data)
    store = CacacheStore(tmp_path / "_cacache")
    store.init()
    key = request_cache_key(URL)

    entry = store.put(key, URL, artifact, sri(data, "sha1"))

    link = store.content_path("sha1", hashlib.sha1(data).hexdigest())
    assert link.is_symlink()
    assert link.resolve() == artifact.resolve()
    assert link.read_bytes() == data

    line = store.index_path(key).read_text(encoding="utf-8")
    checksum, _, body = line.partition("\t")
    assert checksum == hashlib.sha1(body.encode("utf-8")).hexdigest()
    assert json.loads(body) == {
        "key": key,
        "integrity": sri(data, "sha1"),
        "time": 0,
        "size": len(data),
        "metadata": {"url": URL, "options": {"compress": True}},
    }
    assert entry.size == len(data)


def test_put_without_integrity_computes_sha512(tmp_path: Path) -> None:
    data = b"codeload tarball"
    artifact = tmp_path / "widget-deadbeef.tar.gz"
    artifact.write_bytes(data)
    store = CacacheStore(tmp_path / "_cacache")
    store.init()

    entry = store.put("key", "https://codeload.github.com/acme/widget/tar.gz/deadbeef", artifact)

    assert entry.integrity == sri(data)
    assert Integrity.parse(entry.integrity).matches(data)
    assert store.content_path("sha512", hashlib.sha512(data).hexdigest()).is_symlink()


def test_put_twice_replaces_entry(tmp_path: Path) -> None:
    data = b"same"
    artifact = tmp_path / "same.tgz"
    artifact.write_bytes(data)
    store = CacacheStore(tmp_path / "_cacache")
    store.init()

    store.put("key", URL, artifact, sri(data))
    store.put("key", URL, artifact, sri(data))

    assert len(store.index_path("key").read_text(encoding="utf-8").splitlines()) == 1
    assert store.content_path("sha512", hashlib.sha512(data).hexdigest()).is_symlink()


def test_put_rejects_malformed_integrity(tmp_path: Path) -> None:
    artifact = tmp_path / "left-pad-1.3.0.tgz"
    artifact.write_bytes(b"data")
    store = CacacheStore(tmp_path / "_cacache")
    store.init()

    with pytest.raises(LockfileError) as excinfo:
        store.put(request_cache_key(URL), URL, artifact, "sha512-!!!!")

    assert excinfo.value.exit_code == 10
    assert "sha512-!!!!" in str(excinfo.value)
    assert not (store.content_root / "sha512").exists()
    assert not any(store.index_root.iterdir())
