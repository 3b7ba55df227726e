"""
Registry media types and wire constants.

Single source of truth for the Docker distribution media types and headers
used by the engine.
"""
from __future__ import annotations

# Native manifest written and accepted for the "latest" tag
DOCKER_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"

# Config blob carrying the file listing
DOCKER_CONTAINER_CONFIG = "application/vnd.docker.container.image.v1+json"

# Every file is declared as a gzip layer so registries accept the manifest;
# the bytes themselves are stored untouched
DOCKER_LAYER_TAR_GZIP = "application/vnd.docker.image.rootfs.diff.tar.gzip"

OCTET_STREAM = "application/octet-stream"

# Non-standard header read by the auth collaborator to scope credentials
REPOSITORY_HEADER = "repository"

DEFAULT_SERVER = "registry-1.docker.io"
LATEST_TAG = "latest"
SCHEMA_VERSION = 2


__all__ = [
    "DOCKER_MANIFEST_V2",
    "DOCKER_CONTAINER_CONFIG",
    "DOCKER_LAYER_TAR_GZIP",
    "OCTET_STREAM",
    "REPOSITORY_HEADER",
    "DEFAULT_SERVER",
    "LATEST_TAG",
    "SCHEMA_VERSION",
]
