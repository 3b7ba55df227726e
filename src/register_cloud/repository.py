"""
Repository synchronization engine.

Entry point for callers: begin() opens a session backed by the cached
listing, upload()/remove() mutate it, commit() writes it back and drops the
cache entry so the next begin() sees the committed state.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

import httpx

from .models import FileItem, ImageManifest
from .progress import TransportProgressListener
from .session import Session
from .settings import Settings
from .storage.cache import ListingCache
from .storage.downloader import BlobDownloader
from .storage.locator import resolve_repository
from .storage.manifest import ManifestReader, ManifestWriter
from .storage.registry_http import RegistryHTTP
from .storage.uploader import BlobUploader

logger = logging.getLogger(__name__)


class Repository:
    """
    Registry-backed file store.
    
    One instance is meant to live for the whole process; its listing cache
    is shared by every session it opens.
    """

    def __init__(self, settings: Settings, auth: Optional[httpx.Auth] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 cache: Optional[ListingCache] = None):
        """
        Initialize the engine.
        
        Args:
            settings: Engine configuration
            auth: Credential injector supplied by the auth collaborator
            transport: HTTP transport override
            cache: Listing cache (a fresh one by default)
        """
        self.settings = settings
        self.http = RegistryHTTP(settings, auth=auth, transport=transport)
        self.cache = cache if cache is not None else ListingCache()
        self.reader = ManifestReader(self.http)
        self.uploader = BlobUploader(self.http, settings.upload_chunk_size)
        self.writer = ManifestWriter(self.http, self.uploader)
        self.downloader = BlobDownloader(self.http, settings.progress_interval_s)

    async def list(self, repository: str) -> List[FileItem]:
        """Fetch the committed listing, bypassing the cache."""
        artifact = resolve_repository(repository, self.settings.default_server)
        return await self.reader.list(artifact, repository)

    async def begin(self, repository: str) -> Session:
        """
        Open a session on a repository.
        
        Raises:
            InvalidRepositoryFormat: If the identifier cannot be resolved
            RegistryError: If the listing has to be fetched and the fetch fails
            MalformedManifestError: If the committed manifest or config is invalid
        """
        artifact = resolve_repository(repository, self.settings.default_server)
        listing = await self.cache.get_or_load(
            repository, lambda: self.reader.list(artifact, repository)
        )
        return Session(server=artifact.server, name=artifact.name,
                       repository=repository, listing=listing)

    async def begin_upload(self, session: Session) -> str:
        return await self.uploader.begin_upload(session)

    async def upload(self, session: Session, name: str, path: Union[str, Path],
                     listener: Optional[TransportProgressListener] = None) -> FileItem:
        """Upload a local file and append it to the session listing."""
        return await self.uploader.upload(session, name, path, listener)

    async def upload_config(self, session: Session, content: bytes) -> str:
        return await self.uploader.upload_config(session, content)

    async def commit(self, session: Session) -> ImageManifest:
        """
        Persist the session listing as the repository's "latest" manifest.
        
        The cache entry is dropped only after the registry accepted the
        manifest; a failed commit leaves the cache as it was.
        """
        manifest = await self.writer.write(session)
        self.cache.invalidate(session.repository)
        return manifest

    async def remove(self, session: Session, name: str) -> FileItem:
        """
        Remove a file from the session listing; takes effect on commit().
        
        Raises:
            NotFoundError: If no file has that name
        """
        return session.remove(name)

    async def pull(self, session: Session, digest: str, path: Union[str, Path],
                   listener: Optional[TransportProgressListener] = None) -> int:
        return await self.downloader.pull(session, digest, path, listener)

    async def link(self, session: Session, digest: str) -> str:
        return await self.downloader.link(session, digest)

    async def pull_with_name(self, session: Session, name: str, path: Union[str, Path],
                             listener: Optional[TransportProgressListener] = None) -> int:
        """
        Download the named file.
        
        Raises:
            NotFoundError: If no file has that name
        """
        item = session.find(name)
        return await self.downloader.pull(session, item.digest, path, listener)

    async def link_with_name(self, session: Session, name: str) -> str:
        """
        External URL of the named file.
        
        Raises:
            NotFoundError: If no file has that name
        """
        item = session.find(name)
        return await self.downloader.link(session, item.digest)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> Repository:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = ["Repository"]
