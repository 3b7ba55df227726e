"""
Chunked blob upload.

Implements the registry's resumable upload flow: POST opens an upload session,
PATCH requests carry bounded chunks at explicit offsets, and a final PUT sends
the remaining bytes together with the digest of the complete content.
"""
from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..models import FileItem
from ..progress import NullProgress, TransportProgressListener
from ..session import Session
from .digest import StreamDigest, bytes_digest
from .errors import RegistryError
from .media_types import OCTET_STREAM
from .registry_http import RegistryHTTP, is_success

logger = logging.getLogger(__name__)


def plan_chunks(length: int, chunk_size: int) -> Tuple[List[Tuple[int, int]], int]:
    """
    Split a blob into PATCH ranges and a finalize remainder.
    
    A chunk is PATCHed only while strictly more than chunk_size bytes remain,
    so the finalize request always carries between 1 and chunk_size bytes
    (0 for an empty blob).
    
    Returns:
        (list of (offset, size) PATCH ranges, offset of the finalize remainder)
        
    Examples:
        >>> ranges, tail = plan_chunks(2_500_000, 1_000_000)
        >>> ranges, tail
        ([(0, 1000000), (1000000, 1000000)], 2000000)
        
        >>> ranges, tail = plan_chunks(2_000_000, 1_000_000)
        >>> ranges, tail
        ([(0, 1000000)], 1000000)
    """
    count = (length - 1) // chunk_size if length > 0 else 0
    ranges = [(i * chunk_size, chunk_size) for i in range(count)]
    return ranges, count * chunk_size


def with_digest(url: str, digest: str) -> str:
    """Append the digest query parameter to an upload URL."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}digest={digest}"


def content_range(offset: int, size: int) -> str:
    return f"{offset}-{offset + size - 1}"


class BlobUploader:
    """Uploads blobs into a session's repository."""

    def __init__(self, http: RegistryHTTP, chunk_size: int):
        self.http = http
        self.chunk_size = chunk_size

    async def begin_upload(self, session: Session) -> str:
        """
        Open an upload session.
        
        Returns:
            Upload URL from the Location header; opaque, and replaced by the
            Location of every subsequent response
            
        Raises:
            RegistryError: If the registry does not answer 2xx
        """
        response = await self.http.expect_success(
            "beginUpload", "POST",
            self.http.url_for(session.artifact, "blobs/uploads/"),
            headers=self.http.headers_for(session.repository),
        )
        return self.http.location(response, "beginUpload")

    async def _send_chunk(self, session: Session, operation: str, method: str,
                          url: str, offset: int, data: bytes) -> str:
        headers = {"Content-Type": OCTET_STREAM}
        if data:
            headers["Content-Range"] = content_range(offset, len(data))
        response = await self.http.request(
            operation, method, url,
            headers=self.http.headers_for(session.repository, headers),
            content=data,
        )
        if not is_success(response):
            raise RegistryError(operation, response.status_code, response.text,
                                offset=offset, size=len(data))
        logger.debug(f"{operation} {offset}+{len(data)} done")
        if method == "PATCH":
            return self.http.location(response, operation)
        return url

    async def upload(self, session: Session, name: str, path: Union[str, Path],
                     listener: Optional[TransportProgressListener] = None) -> FileItem:
        """
        Upload a local file as a new blob and append it to the session listing.
        
        The digest is computed over the same bytes that are sent, one read
        pass, and declared on the finalize request.
        
        Args:
            session: Open session; its listing gains the new FileItem
            name: Logical file name recorded in the listing
            path: Local file to upload
            listener: Progress listener (on_progress per chunk, on_success at end)
            
        Returns:
            The appended FileItem
            
        Raises:
            RegistryError: If any step answers outside 2xx; the listing is untouched
            OSError: If the file cannot be read
        """
        listener = listener or NullProgress()
        hasher = StreamDigest()

        # Open before beginUpload so an unreadable file leaves no server-side session
        with open(path, "rb") as f:
            length = os.fstat(f.fileno()).st_size
            ranges, tail_offset = plan_chunks(length, self.chunk_size)
            url = await self.begin_upload(session)

            for offset, size in ranges:
                data = await asyncio.to_thread(f.read, size)
                hasher.update(data)
                url = await self._send_chunk(session, "chunkUpload", "PATCH", url, offset, data)
                listener.on_progress(offset + size, length)

            tail = await asyncio.to_thread(f.read)
            hasher.update(tail)

        if hasher.size != length:
            raise OSError(f"{path} changed size during upload: expected {length}, read {hasher.size}")

        digest = hasher.digest
        await self._send_chunk(session, "finalizeUpload", "PUT",
                               with_digest(url, digest), tail_offset, tail)
        listener.on_success(length)

        item = FileItem(name=name, size=length, digest=digest)
        session.add(item)
        logger.info(f"Uploaded {name} to {session.repository} ({length} bytes, {digest})")
        return item

    async def upload_config(self, session: Session, content: bytes) -> str:
        """
        Upload an in-memory blob in a single request.
        
        Returns:
            Digest of content (sha256:...)
            
        Raises:
            RegistryError: If the registry does not answer 2xx
        """
        url = await self.begin_upload(session)
        digest = bytes_digest(content)
        await self.http.expect_success(
            "uploadConfig", "PUT", with_digest(url, digest),
            headers=self.http.headers_for(session.repository, {"Content-Type": OCTET_STREAM}),
            content=content,
        )
        logger.debug(f"Uploaded config blob {digest} ({len(content)} bytes)")
        return digest


__all__ = ["BlobUploader", "plan_chunks", "with_digest", "content_range"]
