"""Shared test fixtures."""

from __future__ import annotations

import base64
import hashlib
import io
import json
import tarfile
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest

from npmdeps.fetch import ArtifactFetcher
from npmdeps.observability import StructuredLogger
from npmdeps.workdir import WorkdirPool


def sri(data: bytes, algorithm: str = "sha512") -> str:
    digest = hashlib.new(algorithm, data).digest()
    return f"{algorithm}-{base64.b64encode(digest).decode('ascii')}"


class FakePrompter:
    """Scripted answers for confirm/choose; records every question asked."""

    def __init__(
        self,
        confirms: Sequence[bool] = (),
        choices: Sequence[str | None] = (),
    ) -> None:
        self.confirms = list(confirms)
        self.choices = list(choices)
        self.questions: list[str] = []

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        if not self.confirms:
            raise AssertionError(f"unexpected confirm: {question}")
        return self.confirms.pop(0)

    def choose(self, question: str, choices: Sequence[str]) -> str | None:
        self.questions.append(question)
        if not self.choices:
            raise AssertionError(f"unexpected choose: {question}")
        return self.choices.pop(0)


class FakeResponse:
    def __init__(self, body: bytes) -> None:
        self.body = body

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def read(self) -> bytes:
        return self.body


class FakeOpener:
    """Serves bodies by URL; an ``Exception`` value is raised instead.

    A list value is consumed one item per request.
    """

    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.calls: list[str] = []

    def __call__(self, url: str, timeout: float | None = None) -> FakeResponse:
        self.calls.append(url)
        outcome = self.routes[url]
        if isinstance(outcome, list):
            outcome = outcome.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return FakeResponse(outcome)


@pytest.fixture
def make_tarball() -> Callable[..., bytes]:
    """Build gzip'd tar bytes with every file under a single top-level directory."""

    def _make(files: dict[str, str | bytes], prefix: str = "package") -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            for name, content in files.items():
                data = content.encode("utf-8") if isinstance(content, str) else content
                info = tarfile.TarInfo(f"{prefix}/{name}")
                info.size = len(data)
                archive.addfile(info, io.BytesIO(data))
        return buffer.getvalue()

    return _make


@pytest.fixture
def lockfile_text() -> Callable[..., str]:
    def _text(packages: dict[str, Any], version: int = 3, **extra: Any) -> str:
        payload = {"name": "app", "lockfileVersion": version, **extra, "packages": packages}
        return json.dumps(payload, indent=2)

    return _text


@pytest.fixture
def deps_dir(tmp_path: Path) -> Path:
    path = tmp_path / "npm-deps"
    path.mkdir()
    return path


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger()


@pytest.fixture
def workdirs(tmp_path: Path) -> Iterator[WorkdirPool]:
    with WorkdirPool(root=tmp_path / "work") as pool:
        yield pool


@pytest.fixture
def fetcher(deps_dir: Path, logger: StructuredLogger) -> ArtifactFetcher:
    return ArtifactFetcher(deps_dir=deps_dir, logger=logger, sleep=lambda _delay: None)
