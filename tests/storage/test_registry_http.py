"""
Tests for the registry HTTP client.
"""
from __future__ import annotations

import asyncio

import httpx
import pytest
from tenacity import wait_none

from register_cloud.settings import Settings
from register_cloud.storage.errors import RegistryError, TransportError
from register_cloud.storage.locator import RepositoryArtifact
from register_cloud.storage.registry_http import RegistryHTTP

ARTIFACT = RepositoryArtifact(name="user/files", server="registry.example")


class FlakyTransport(httpx.AsyncBaseTransport):
    """Times out a fixed number of times before answering 200."""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    async def handle_async_request(self, request):
        self.calls += 1
        if self.calls <= self.failures:
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(200, text="ok")


class TestUrls:

    def test_url_for(self):
        http = RegistryHTTP(Settings())
        assert http.url_for(ARTIFACT, "manifests/latest") == \
            "https://registry.example/v2/user/files/manifests/latest"

    def test_insecure_url(self):
        http = RegistryHTTP(Settings(registry_insecure=True))
        assert http.url_for(ARTIFACT, "blobs/uploads/").startswith("http://registry.example/")

    def test_headers_for(self):
        assert RegistryHTTP.headers_for("user/files", {"Accept": "x"}) == {
            "repository": "user/files", "Accept": "x",
        }

    def test_relative_location_is_resolved(self):
        request = httpx.Request("POST", "https://registry.example/v2/user/files/blobs/uploads/")
        response = httpx.Response(202, headers={"Location": "/v2/user/files/blobs/uploads/abc?_state=1"},
                                  request=request)
        assert RegistryHTTP.location(response, "beginUpload") == \
            "https://registry.example/v2/user/files/blobs/uploads/abc?_state=1"

    def test_missing_location(self):
        request = httpx.Request("POST", "https://registry.example/v2/user/files/blobs/uploads/")
        response = httpx.Response(202, request=request)
        with pytest.raises(RegistryError, match="missing Location"):
            RegistryHTTP.location(response, "beginUpload")


class TestRequests:

    def test_no_retry_by_default(self):
        transport = FlakyTransport(failures=1)
        http = RegistryHTTP(Settings(), transport=transport)

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(http.request("list", "GET", http.url_for(ARTIFACT, "manifests/latest")))

        assert exc_info.value.operation == "list"
        assert transport.calls == 1

    def test_get_retried_when_configured(self):
        transport = FlakyTransport(failures=2)
        http = RegistryHTTP(Settings(http_retry=2), transport=transport)
        http.retry_wait = wait_none()

        response = asyncio.run(http.request("list", "GET", http.url_for(ARTIFACT, "manifests/latest")))

        assert response.status_code == 200
        assert transport.calls == 3

    def test_writes_never_retried(self):
        transport = FlakyTransport(failures=1)
        http = RegistryHTTP(Settings(http_retry=3), transport=transport)

        with pytest.raises(TransportError):
            asyncio.run(http.request("beginUpload", "POST", http.url_for(ARTIFACT, "blobs/uploads/")))

        assert transport.calls == 1

    def test_expect_success_raises_on_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(403, text="denied"))
        http = RegistryHTTP(Settings(), transport=transport)

        with pytest.raises(RegistryError) as exc_info:
            asyncio.run(http.expect_success("list", "GET", http.url_for(ARTIFACT, "manifests/latest")))

        assert exc_info.value.status_code == 403
        assert exc_info.value.body == "denied"

    def test_user_agent(self):
        seen = []

        def handler(request):
            seen.append(request.headers["User-Agent"])
            return httpx.Response(200)

        http = RegistryHTTP(Settings(), transport=httpx.MockTransport(handler))
        asyncio.run(http.request("list", "GET", http.url_for(ARTIFACT, "manifests/latest")))

        assert seen[0].startswith("register-cloud/")
