"""
Blob download and redirect lookup.

Registries commonly answer blob GETs with a redirect to external storage.
pull() follows it and streams the content to disk; link() stops at the
redirect and hands the external URL back to the caller.
"""
from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..progress import NullProgress, TransportProgressListener
from ..session import Session
from .digest import StreamDigest
from .errors import DigestMismatchError, RegistryError
from .registry_http import RegistryHTTP, is_redirect, is_success

logger = logging.getLogger(__name__)


class _Progress:
    """Byte counter shared between the stream loop and the progress ticker."""

    def __init__(self, total: Optional[int]):
        self.total = total
        self.received = 0


async def _tick(listener: TransportProgressListener, progress: _Progress, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        listener.on_progress(progress.received, progress.total)


class BlobDownloader:
    """Fetches blobs from a session's repository."""

    def __init__(self, http: RegistryHTTP, progress_interval_s: float = 0.5):
        self.http = http
        self.progress_interval_s = progress_interval_s

    async def pull(self, session: Session, digest: str, path: Union[str, Path],
                   listener: Optional[TransportProgressListener] = None) -> int:
        """
        Download a blob to a local file.
        
        The file is written to a temporary sibling and renamed into place only
        after the received bytes hash to digest, so a failed pull never leaves
        a partial file at path.
        
        Args:
            session: Session naming the repository
            digest: Blob digest (sha256:...)
            path: Destination file
            listener: Receives on_progress every progress_interval_s and
                on_success once the stream completes
            
        Returns:
            Number of bytes written
            
        Raises:
            RegistryError: If the final response is not 2xx
            DigestMismatchError: If the content does not match digest
        """
        listener = listener or NullProgress()
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        async with self.http.stream(
            "pull", "GET", self.http.url_for(session.artifact, f"blobs/{digest}"),
            headers=self.http.headers_for(session.repository),
            follow_redirects=True,
        ) as response:
            if not is_success(response):
                await response.aread()
                raise RegistryError("pull", response.status_code, response.text)

            length = response.headers.get("Content-Length")
            progress = _Progress(int(length) if length is not None else None)
            hasher = StreamDigest()

            fd, temp_name = tempfile.mkstemp(prefix=".drc.tmp.", dir=target.parent)
            temp_path = Path(temp_name)
            ticker = asyncio.create_task(_tick(listener, progress, self.progress_interval_s))
            try:
                with os.fdopen(fd, "wb") as out:
                    async for chunk in response.aiter_bytes():
                        hasher.update(chunk)
                        await asyncio.to_thread(out.write, chunk)
                        progress.received += len(chunk)

                if hasher.digest != digest:
                    raise DigestMismatchError(digest, hasher.digest)
                os.replace(temp_path, target)
            except BaseException:
                try:
                    temp_path.unlink()
                except FileNotFoundError:
                    pass
                raise
            finally:
                ticker.cancel()

        total = progress.total if progress.total is not None else progress.received
        listener.on_success(total)
        logger.info(f"Pulled {digest} to {target} ({progress.received} bytes)")
        return progress.received

    async def link(self, session: Session, digest: str) -> str:
        """
        Resolve the external location of a blob without downloading it.
        
        Returns:
            Absolute URL from the redirect's Location header
            
        Raises:
            RegistryError: If the registry does not answer with a redirect
        """
        response = await self.http.request(
            "link", "GET", self.http.url_for(session.artifact, f"blobs/{digest}"),
            headers=self.http.headers_for(session.repository),
            follow_redirects=False,
        )
        if not is_redirect(response):
            raise RegistryError("link", response.status_code, response.text)
        return self.http.location(response, "link")


__all__ = ["BlobDownloader"]
