"""
Registry HTTP client for the Docker Registry HTTP API v2.

Wraps a single httpx.AsyncClient. Credentials are attached by an external
auth collaborator (an httpx.Auth), which scopes them with the custom
"repository" header carried on every request.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional
from urllib.parse import urljoin

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .. import __version__
from ..settings import Settings
from .errors import RegistryError, TransportError
from .locator import RepositoryArtifact
from .media_types import REPOSITORY_HEADER

logger = logging.getLogger(__name__)

# Only these are retried, and only for idempotent methods
RETRYABLE_ERRORS = (httpx.ConnectTimeout, httpx.ReadTimeout)
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})


def is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300


def is_redirect(response: httpx.Response) -> bool:
    return 300 <= response.status_code < 400


class RegistryHTTP:
    """
    HTTP client for registry operations.
    
    Redirect following is chosen per request rather than per client, so blob
    downloads can follow a CDN redirect while link lookups read the redirect
    target without fetching it.
    """

    retry_wait = wait_exponential(multiplier=1, min=1, max=10)

    def __init__(self, settings: Settings, auth: Optional[httpx.Auth] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize registry HTTP client.
        
        Args:
            settings: Timeouts, retry count and URL scheme
            auth: Credential injector supplied by the auth collaborator
            transport: Transport override (tests use httpx.MockTransport)
        """
        self.settings = settings
        self.client = httpx.AsyncClient(
            auth=auth,
            transport=transport,
            timeout=httpx.Timeout(settings.http_timeout_s),
            follow_redirects=False,
            headers={"User-Agent": f"register-cloud/{__version__}"},
        )

    def url_for(self, artifact: RepositoryArtifact, path: str) -> str:
        """Absolute URL for a /v2/{name}/... path on the artifact's server."""
        return f"{self.settings.scheme}://{artifact.server}/v2/{artifact.name}/{path}"

    @staticmethod
    def headers_for(repository: str, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {REPOSITORY_HEADER: repository}
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def location(response: httpx.Response, operation: str) -> str:
        """
        Absolute Location of a response.
        
        Registries may answer with a path-only Location; it is resolved against
        the URL of the request that produced it.
        
        Raises:
            RegistryError: If the header is missing
        """
        location = response.headers.get("Location")
        if not location:
            raise RegistryError(operation, response.status_code, "missing Location header")
        return urljoin(str(response.request.url), location)

    async def request(self, operation: str, method: str, url: str, *,
                      headers: Optional[Dict[str, str]] = None,
                      content: Optional[bytes] = None,
                      follow_redirects: bool = False) -> httpx.Response:
        """
        Issue one request and return the response whatever its status.
        
        Timed-out idempotent requests are retried settings.http_retry times
        with exponential backoff.
        
        Raises:
            TransportError: If the request failed without a response
        """
        attempts = self.settings.http_retry + 1 if method in IDEMPOTENT_METHODS else 1
        logger.debug(f"{operation}: {method} {url}")
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=self.retry_wait,
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                reraise=True,
            ):
                with attempt:
                    response = await self.client.request(
                        method, url, headers=headers, content=content,
                        follow_redirects=follow_redirects,
                    )
        except httpx.RequestError as e:
            raise TransportError(operation, str(e)) from e
        logger.debug(f"{operation}: {method} {url} -> {response.status_code}")
        return response

    async def expect_success(self, operation: str, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Issue a request and require a 2xx status.
        
        Raises:
            RegistryError: For any status outside [200, 300)
            TransportError: If the request failed without a response
        """
        response = await self.request(operation, method, url, **kwargs)
        if not is_success(response):
            raise RegistryError(operation, response.status_code, response.text)
        return response

    @asynccontextmanager
    async def stream(self, operation: str, method: str, url: str, *,
                     headers: Optional[Dict[str, str]] = None,
                     follow_redirects: bool = False) -> AsyncIterator[httpx.Response]:
        """
        Open a streamed response; the body is read by the caller.
        
        Raises:
            TransportError: If the request failed without a response
        """
        logger.debug(f"{operation}: {method} {url} (streamed)")
        try:
            async with self.client.stream(method, url, headers=headers,
                                          follow_redirects=follow_redirects) as response:
                yield response
        except httpx.RequestError as e:
            raise TransportError(operation, str(e)) from e

    async def aclose(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> RegistryHTTP:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = ["RegistryHTTP", "is_success", "is_redirect"]
