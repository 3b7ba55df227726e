"""Registry-backed file store: a Docker registry used as a blob store for named files."""
__version__ = "0.1.0"

from .models import FileItem, ManifestConfig
from .progress import TransportProgressListener
from .repository import Repository
from .session import Session
from .settings import Settings, create_settings_from_env
from .storage.errors import (
    DigestMismatchError,
    ErrorKind,
    InvalidRepositoryFormat,
    MalformedManifestError,
    NotFoundError,
    RegistryError,
    RegistryStoreError,
    TransportError,
)
from .storage.locator import RepositoryArtifact, resolve_repository

__all__ = [
    "__version__",
    "FileItem",
    "ManifestConfig",
    "TransportProgressListener",
    "Repository",
    "Session",
    "Settings",
    "create_settings_from_env",
    "DigestMismatchError",
    "ErrorKind",
    "InvalidRepositoryFormat",
    "MalformedManifestError",
    "NotFoundError",
    "RegistryError",
    "RegistryStoreError",
    "TransportError",
    "RepositoryArtifact",
    "resolve_repository",
]
