"""URL helpers shared by the lockfile and package layers."""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

GIT_SCHEMES = frozenset({"git", "git+ssh", "git+https", "ssh"})
CODELOAD_HOST = "codeload.github.com"

_SCHEME = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")


def url_scheme(url: object) -> str | None:
    """Return the lowercased scheme of *url*, or ``None`` when it has none."""
    if not isinstance(url, str):
        return None
    match = _SCHEME.match(url)
    if match is None:
        return None
    return match.group(1).lower()


def is_git_url(url: object) -> bool:
    return url_scheme(url) in GIT_SCHEMES


def path_segments(url: str) -> list[str]:
    """Split the URL path on ``/`` keeping the leading empty segment."""
    return [unquote(segment) for segment in urlsplit(url).path.split("/")]


def hosted_git_url(url: str) -> tuple[str, str] | None:
    """Map a GitHub git URL to its codeload tarball URL and artifact filename.

    Accepts ``/user/project``, ``/user/project/tree/<commit>`` and a
    ``#<commit>`` fragment. Anything else is not a hosted git source.
    """
    if not is_git_url(url):
        return None
    parts = urlsplit(url)
    if not parts.netloc.endswith("github.com"):
        return None

    segments = path_segments(url)[1:]
    user = segments[0] if len(segments) > 0 else ""
    project = segments[1] if len(segments) > 1 else ""
    kind = segments[2] if len(segments) > 2 else None
    commit = segments[3] if len(segments) > 3 else None

    if commit is None:
        commit = unquote(parts.fragment)
    elif kind != "tree":
        return None
    if not user or not project or not commit:
        return None

    project = project.removesuffix(".git")
    return (
        f"https://{CODELOAD_HOST}/{user}/{project}/tar.gz/{commit}",
        f"{project}-{commit}.tar.gz",
    )


def registry_filename(url: str) -> str:
    """Derive the on-disk tarball name, prefixing the scope for ``@scope`` paths."""
    segments = path_segments(url)
    last = segments[-1]
    if len(segments) > 1 and segments[1].startswith("@"):
        return f"{segments[1]}_{last}"
    return last


__all__ = [
    "CODELOAD_HOST",
    "GIT_SCHEMES",
    "hosted_git_url",
    "is_git_url",
    "path_segments",
    "registry_filename",
    "url_scheme",
]
