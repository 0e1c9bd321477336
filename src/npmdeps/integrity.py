"""Subresource-integrity parsing, encoding and digest comparison."""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass
from pathlib import Path

from npmdeps.errors import InvalidAlgorithm

# sha256 is deliberately absent: lockfile entries using it are rejected.
SUPPORTED_ALGORITHMS = ("sha1", "sha512")

_CHUNK_SIZE = 1024 * 64


@dataclass(frozen=True, slots=True)
class Integrity:
    """A parsed ``<algorithm>-<base64 digest>`` integrity string."""

    algorithm: str
    digest: bytes

    @classmethod
    def parse(cls, value: str) -> Integrity:
        algorithm, _, encoded = value.partition("-")
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise InvalidAlgorithm(
                f"Invalid hash algorithm: {algorithm}",
                hint=f"Valid algorithms: {', '.join(SUPPORTED_ALGORITHMS)}",
                context={"integrity": value},
            )
        return cls(algorithm=algorithm, digest=_decode_base64(encoded))

    @classmethod
    def from_digest(cls, algorithm: str, digest: bytes) -> Integrity:
        return cls(algorithm=algorithm, digest=digest)

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return f"{self.algorithm}-{encode_base64(self.digest)}"

    def matches(self, data: bytes) -> bool:
        return hex_digest(self.algorithm, data) == self.hexdigest


def integrity_to_hex(value: str) -> tuple[str, str]:
    """Return ``(algorithm, hexdigest)`` for a supported integrity string."""
    parsed = Integrity.parse(value)
    return parsed.algorithm, parsed.hexdigest


def hex_digest(algorithm: str, data: bytes) -> str:
    return hashlib.new(algorithm, data).hexdigest()


def file_integrity(path: str | Path, *, algorithm: str = "sha512") -> Integrity:
    """Stream *path* through *algorithm* and wrap the result."""
    hasher = hashlib.new(algorithm)
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return Integrity.from_digest(algorithm, hasher.digest())


def encode_base64(digest: bytes) -> str:
    encoded = base64.b64encode(digest).decode("ascii")
    while len(encoded) % 4:
        encoded += "="
    return encoded


def _decode_base64(encoded: str) -> bytes:
    # Lockfiles occasionally carry unpadded digests.
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        return base64.b64decode(padded)
    except (binascii.Error, ValueError):
        # A malformed digest can never match any content.
        return b""


__all__ = [
    "Integrity",
    "SUPPORTED_ALGORITHMS",
    "encode_base64",
    "file_integrity",
    "hex_digest",
    "integrity_to_hex",
]
