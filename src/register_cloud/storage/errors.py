"""
Registry store error classes.

Provides a closed taxonomy of errors that can occur while synchronizing a
repository with a registry. Every error carries an ErrorKind so callers can
branch on the kind without matching on class names or message text.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

BODY_SNIPPET_LIMIT = 512


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""
    INVALID_REPOSITORY = "invalid_repository"
    REGISTRY = "registry"
    NOT_FOUND = "not_found"
    MALFORMED_MANIFEST = "malformed_manifest"
    DIGEST_MISMATCH = "digest_mismatch"
    TRANSPORT = "transport"


class RegistryStoreError(Exception):
    """Base class for all register-cloud errors."""
    kind: ErrorKind


class InvalidRepositoryFormat(RegistryStoreError, ValueError):
    """
    Repository identifier has an unsupported number of segments.
    
    Accepted forms are ``name``, ``namespace/name`` and
    ``server/namespace/name``.
    """
    kind = ErrorKind.INVALID_REPOSITORY

    def __init__(self, repository: str):
        super().__init__(f"Unsupported repository format: {repository!r}")
        self.repository = repository


class RegistryError(RegistryStoreError):
    """
    Registry answered with a status outside the range expected by an operation.
    
    Attributes:
        operation: Engine operation that issued the request (e.g. "list", "chunkUpload")
        status_code: HTTP status returned by the registry
        body: Response body, truncated to BODY_SNIPPET_LIMIT characters
        offset: Byte offset of the failed chunk (chunked uploads only)
        size: Byte length of the failed chunk (chunked uploads only)
    """
    kind = ErrorKind.REGISTRY

    def __init__(self, operation: str, status_code: int, body: str = "",
                 offset: Optional[int] = None, size: Optional[int] = None):
        self.operation = operation
        self.status_code = status_code
        self.body = body[:BODY_SNIPPET_LIMIT]
        self.offset = offset
        self.size = size
        message = f"Registry {operation} failed with status {status_code}"
        if offset is not None:
            message += f" at offset {offset} (size {size})"
        if self.body:
            message += f": {self.body}"
        super().__init__(message)


class NotFoundError(RegistryStoreError):
    """Named file is absent from the session listing."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str):
        super().__init__(f"File item not found: {name}")
        self.name = name


class MalformedManifestError(RegistryStoreError):
    """Manifest or config payload failed schema validation."""
    kind = ErrorKind.MALFORMED_MANIFEST

    def __init__(self, what: str, detail: str):
        super().__init__(f"Malformed {what}: {detail}")
        self.what = what
        self.detail = detail


class DigestMismatchError(RegistryStoreError):
    """Downloaded content does not hash to the requested digest."""
    kind = ErrorKind.DIGEST_MISMATCH

    def __init__(self, expected: str, actual: str):
        super().__init__(f"Digest mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class TransportError(RegistryStoreError):
    """Network failure before any HTTP status was received."""
    kind = ErrorKind.TRANSPORT

    def __init__(self, operation: str, detail: str):
        super().__init__(f"Network error during {operation}: {detail}")
        self.operation = operation
        self.detail = detail


__all__ = [
    "ErrorKind",
    "RegistryStoreError",
    "InvalidRepositoryFormat",
    "RegistryError",
    "NotFoundError",
    "MalformedManifestError",
    "DigestMismatchError",
    "TransportError",
]
