"""Artifact retrieval: local reads, retried downloads and archive handling."""

from .archive import extract_tarball, pack_directory
from .http import ArtifactFetcher, read_bytes

__all__ = ["ArtifactFetcher", "extract_tarball", "pack_directory", "read_bytes"]
