"""
Manifest read/write for the "latest" tag.

The file listing lives in a config blob referenced by a Docker manifest v2;
each file is one layer of that manifest, in listing order.
"""
from __future__ import annotations

import logging
from typing import List

from ..models import FileItem, ImageManifest, ManifestConfig
from ..session import Session
from .locator import RepositoryArtifact
from .media_types import DOCKER_MANIFEST_V2, LATEST_TAG
from .errors import RegistryError
from .registry_http import RegistryHTTP, is_success
from .uploader import BlobUploader

logger = logging.getLogger(__name__)


class ManifestReader:
    """Reads the committed file listing of a repository."""

    def __init__(self, http: RegistryHTTP):
        self.http = http

    async def list(self, artifact: RepositoryArtifact, repository: str) -> List[FileItem]:
        """
        Fetch the committed listing.
        
        Args:
            artifact: Resolved server and name
            repository: Identifier sent in the repository header
            
        Returns:
            Listing in manifest layer order; empty if the tag does not exist
            
        Raises:
            RegistryError: For non-2xx responses other than a manifest 404
            MalformedManifestError: If the manifest or config fails validation
        """
        response = await self.http.request(
            "list", "GET", self.http.url_for(artifact, f"manifests/{LATEST_TAG}"),
            headers=self.http.headers_for(repository, {"Accept": DOCKER_MANIFEST_V2}),
        )
        if response.status_code == 404:
            logger.debug(f"No manifest for {repository}, starting from an empty listing")
            return []
        if not is_success(response):
            raise RegistryError("list", response.status_code, response.text)

        manifest = ImageManifest.from_bytes(response.content)
        config = await self.pull_config(artifact, repository, manifest.config.digest)
        logger.debug(f"Listed {len(config.file_items)} file(s) in {repository}")
        return config.file_items

    async def pull_config(self, artifact: RepositoryArtifact, repository: str, digest: str) -> ManifestConfig:
        """Fetch and decode the config blob."""
        response = await self.http.expect_success(
            "pullConfig", "GET", self.http.url_for(artifact, f"blobs/{digest}"),
            headers=self.http.headers_for(repository),
            follow_redirects=True,
        )
        return ManifestConfig.from_bytes(response.content)


class ManifestWriter:
    """Writes a session's listing back as the "latest" manifest."""

    def __init__(self, http: RegistryHTTP, uploader: BlobUploader):
        self.http = http
        self.uploader = uploader

    async def write(self, session: Session) -> ImageManifest:
        """
        Upload the config blob and PUT a manifest referencing every file.
        
        Returns:
            The manifest that was written
            
        Raises:
            RegistryError: If the config upload or the manifest PUT is not 2xx
        """
        config_content = session.to_config().to_bytes()
        config_digest = await self.uploader.upload_config(session, config_content)
        manifest = ImageManifest.for_listing(session.listing, config_digest, len(config_content))

        await self.http.expect_success(
            "commit", "PUT", self.http.url_for(session.artifact, f"manifests/{LATEST_TAG}"),
            headers=self.http.headers_for(session.repository, {"Content-Type": DOCKER_MANIFEST_V2}),
            content=manifest.to_bytes(),
        )
        logger.info(f"Committed {len(manifest.layers)} file(s) to {session.repository}")
        return manifest


__all__ = ["ManifestReader", "ManifestWriter"]
