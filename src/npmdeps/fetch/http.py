"""Local-or-remote artifact fetch with a fixed retry policy."""

from __future__ import annotations

import http.client
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import urlopen

from npmdeps.errors import DownloadError, DownloadNotAllowed, FileOpenError
from npmdeps.observability import StructuredLogger

DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 2.0
DEFAULT_TIMEOUT = 60.0


@dataclass(slots=True)
class ArtifactFetcher:
    """Return artifact bytes from ``deps_dir`` or, when absent, from the network.

    Downloads are only attempted when ``allow_download`` is set; every other
    action works strictly from what is already on disk.
    """

    deps_dir: Path
    allow_download: bool = False
    retries: int = DEFAULT_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    timeout: float = DEFAULT_TIMEOUT
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    opener: Callable[..., Any] = urlopen
    sleep: Callable[[float], None] = time.sleep
    _remembered: dict[str, bytes] = field(default_factory=dict, repr=False)

    def fetch(self, filename: str, url: str | None = None, *, remember: bool = False) -> bytes:
        local_path = self.deps_dir / filename
        if local_path.exists() or not url:
            return read_bytes(local_path)
        if url in self._remembered:
            return self._remembered[url]
        if not self.allow_download:
            raise DownloadNotAllowed(
                "Cannot download missing files with this action.",
                hint="Run the download action first.",
                context={"filename": filename, "url": url},
            )
        payload = self.download(url)
        if remember:
            self._remembered[url] = payload
        return payload

    def download(self, url: str) -> bytes:
        self.logger.debug("download", f"Downloading {url}", extra={"url": url})
        status = ""
        for attempt in range(1, self.retries + 1):
            try:
                with self.opener(url, timeout=self.timeout) as response:  # noqa: S310
                    return bytes(response.read())
            except HTTPError as exc:
                status = f"{exc.code} {exc.reason}"
            except URLError as exc:
                status = str(exc.reason)
            except (OSError, http.client.HTTPException) as exc:
                status = str(exc) or type(exc).__name__
            self.logger.debug(
                "download_retry",
                f"Attempt {attempt} for {url} failed: {status}",
                extra={"url": url, "attempt": attempt},
            )
            if attempt < self.retries:
                self.sleep(self.retry_delay)
        raise DownloadError(
            f"Error downloading file: {url}",
            hint=f"Gave up after {self.retries} attempts.",
            context={"url": url, "status": status},
        )


def read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileOpenError(
            f"Cannot open file {path}",
            context={"path": str(path), "error": exc.strerror or str(exc)},
        ) from exc
