"""
Content digests in registry form.

Digests are always "sha256:" followed by 64 lowercase hex characters.
"""
from __future__ import annotations

import hashlib
import re
from pathlib import Path
from typing import Union

DIGEST_RE = re.compile(r"^sha256:[a-f0-9]{64}$")

CHUNK_SIZE = 1024 * 1024  # 1 MiB


def format_digest(hexdigest: str) -> str:
    return f"sha256:{hexdigest}"


def bytes_digest(content: bytes) -> str:
    """Digest of an in-memory payload."""
    return format_digest(hashlib.sha256(content).hexdigest())


def file_digest(path: Union[str, Path]) -> str:
    """Digest of a file, read in CHUNK_SIZE pieces."""
    hash_obj = hashlib.sha256()
    with open(path, "rb") as f:
        while True:
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            hash_obj.update(chunk)
    return format_digest(hash_obj.hexdigest())


class StreamDigest:
    """
    Incremental digest fed with the same bytes that go over the wire.
    
    The uploader updates it with every chunk it sends, so the finalize request
    can carry the digest of the complete content without a second read pass.
    """

    def __init__(self) -> None:
        self._hash = hashlib.sha256()
        self.size = 0

    def update(self, chunk: bytes) -> None:
        self._hash.update(chunk)
        self.size += len(chunk)

    @property
    def digest(self) -> str:
        return format_digest(self._hash.hexdigest())


__all__ = ["DIGEST_RE", "bytes_digest", "file_digest", "format_digest", "StreamDigest"]
