"""
Tests for chunked blob upload.

Validates chunk boundaries, Content-Range accounting, upload URL handoff
between requests and digest declaration on the finalize request.
"""
from __future__ import annotations

import asyncio
import hashlib

import pytest

from register_cloud.repository import Repository
from register_cloud.session import Session
from register_cloud.settings import Settings
from register_cloud.storage.errors import ErrorKind, RegistryError
from register_cloud.storage.media_types import OCTET_STREAM
from register_cloud.storage.uploader import content_range, plan_chunks, with_digest

from ..fakes.fake_registry import FakeRegistry, sha256_digest


def new_session() -> Session:
    return Session(server="registry-1.docker.io", name="user/files", repository="user/files")


class RecordingListener:
    def __init__(self):
        self.progress = []
        self.success = []

    def on_progress(self, current, total):
        self.progress.append((current, total))

    def on_success(self, total):
        self.success.append(total)


class TestPlanChunks:

    def test_partial_tail(self):
        ranges, tail = plan_chunks(2_500_000, 1_000_000)
        assert ranges == [(0, 1_000_000), (1_000_000, 1_000_000)]
        assert tail == 2_000_000

    def test_exact_multiple_leaves_full_chunk_for_finalize(self):
        ranges, tail = plan_chunks(2_000_000, 1_000_000)
        assert ranges == [(0, 1_000_000)]
        assert tail == 1_000_000

    def test_smaller_than_chunk(self):
        assert plan_chunks(10, 1_000_000) == ([], 0)

    def test_exactly_one_chunk(self):
        assert plan_chunks(1_000_000, 1_000_000) == ([], 0)

    def test_empty(self):
        assert plan_chunks(0, 1_000_000) == ([], 0)


class TestUrlHelpers:

    def test_with_digest_appends_to_existing_query(self):
        assert with_digest("/v2/a/b/blobs/uploads/x?_state=1", "sha256:ab") == \
            "/v2/a/b/blobs/uploads/x?_state=1&digest=sha256:ab"

    def test_with_digest_starts_query(self):
        assert with_digest("https://r/v2/a/b/blobs/uploads/x", "sha256:ab") == \
            "https://r/v2/a/b/blobs/uploads/x?digest=sha256:ab"

    def test_content_range_is_inclusive(self):
        assert content_range(0, 1_000_000) == "0-999999"
        assert content_range(1_000_000, 1_000_000) == "1000000-1999999"


class TestChunkedUpload:

    @pytest.mark.parametrize("length, patches, tail", [
        (2_500_000, ["0-999999", "1000000-1999999"], 500_000),
        (2_000_000, ["0-999999"], 1_000_000),
    ])
    def test_chunk_boundaries(self, registry, write_file, length, patches, tail):
        content = bytes(i % 251 for i in range(length))
        path = write_file("big.bin", content)
        repo = Repository(Settings(upload_chunk_size=1_000_000), transport=registry.transport())
        session = new_session()

        item = asyncio.run(repo.upload(session, "big.bin", path))

        patch_requests = registry.calls("PATCH")
        assert [r.headers["Content-Range"] for r in patch_requests] == patches
        assert all(len(r.content) == 1_000_000 for r in patch_requests)
        assert all(r.headers["Content-Type"] == OCTET_STREAM for r in patch_requests)

        finalize = registry.calls("PUT", "/blobs/uploads/")
        assert len(finalize) == 1
        assert len(finalize[0].content) == tail
        assert finalize[0].url.params["digest"] == item.digest

        assert item.digest == "sha256:" + hashlib.sha256(content).hexdigest()
        assert item.size == length
        assert registry.blobs[item.digest] == content

    def test_each_chunk_uses_previous_location(self, settings, registry, repo, write_file):
        path = write_file("data.bin", b"x" * 3000)

        asyncio.run(repo.upload(new_session(), "data.bin", path))

        states = [r.url.params["_state"] for r in registry.requests
                  if r.method in ("PATCH", "PUT")]
        assert states == ["1", "2", "3"]

    def test_absolute_locations(self, settings, write_file):
        registry = FakeRegistry(absolute_locations=True)
        repo = Repository(settings, transport=registry.transport())
        path = write_file("data.bin", b"y" * 2500)

        item = asyncio.run(repo.upload(new_session(), "data.bin", path))

        assert registry.blobs[item.digest] == b"y" * 2500

    def test_small_file_is_a_single_finalize(self, registry, repo, write_file):
        path = write_file("small.txt", b"hello")

        item = asyncio.run(repo.upload(new_session(), "small.txt", path))

        assert registry.calls("PATCH") == []
        finalize = registry.calls("PUT", "/blobs/uploads/")
        assert finalize[0].content == b"hello"
        assert finalize[0].headers["Content-Range"] == "0-4"
        assert item.digest == sha256_digest(b"hello")

    def test_empty_file_finalizes_with_empty_digest(self, registry, repo, write_file):
        path = write_file("empty", b"")

        item = asyncio.run(repo.upload(new_session(), "empty", path))

        finalize = registry.calls("PUT", "/blobs/uploads/")
        assert finalize[0].content == b""
        assert "Content-Range" not in finalize[0].headers
        assert item.size == 0
        assert item.digest == sha256_digest(b"")

    def test_upload_appends_to_listing(self, repo, write_file):
        session = new_session()
        first = write_file("one.txt", b"1")
        second = write_file("two.txt", b"22")

        async def scenario():
            await repo.upload(session, "one.txt", first)
            await repo.upload(session, "two.txt", second)

        asyncio.run(scenario())
        assert [(i.name, i.size) for i in session.listing] == [("one.txt", 1), ("two.txt", 2)]

    def test_every_request_carries_repository_header(self, registry, repo, write_file):
        path = write_file("data.bin", b"z" * 2048)

        asyncio.run(repo.upload(new_session(), "data.bin", path))

        assert registry.requests
        assert all(r.headers["repository"] == "user/files" for r in registry.requests)

    def test_progress_reported_per_chunk_and_on_success(self, repo, write_file):
        path = write_file("data.bin", b"p" * 2500)
        listener = RecordingListener()

        asyncio.run(repo.upload(new_session(), "data.bin", path, listener))

        assert listener.progress == [(1024, 2500), (2048, 2500)]
        assert listener.success == [2500]

    def test_file_reads_run_off_the_event_loop(self, repo, write_file, monkeypatch):
        path = write_file("data.bin", b"t" * 2500)
        offloaded = []
        to_thread = asyncio.to_thread

        async def recording_to_thread(func, *args, **kwargs):
            offloaded.append(func.__name__)
            return await to_thread(func, *args, **kwargs)

        monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)
        asyncio.run(repo.upload(new_session(), "data.bin", path))

        assert offloaded == ["read", "read", "read"]


class TestUploadFailures:

    def test_missing_file_opens_no_upload(self, registry, repo, tmp_path):
        session = new_session()

        with pytest.raises(FileNotFoundError):
            asyncio.run(repo.upload(session, "data.bin", tmp_path / "absent.bin"))

        assert registry.requests == []
        assert session.listing == []

    def test_begin_upload_failure(self, registry, repo, write_file):
        path = write_file("data.bin", b"abc")
        registry.fail_next("begin_upload", 401, "unauthorized")
        session = new_session()

        with pytest.raises(RegistryError) as exc_info:
            asyncio.run(repo.upload(session, "data.bin", path))

        assert exc_info.value.operation == "beginUpload"
        assert exc_info.value.status_code == 401
        assert exc_info.value.kind is ErrorKind.REGISTRY
        assert session.listing == []

    def test_chunk_failure_reports_offset_and_leaves_listing(self, registry, repo, write_file):
        path = write_file("data.bin", b"q" * 3000)
        registry.fail_next("patch", 500, "disk full")
        session = new_session()
        listener = RecordingListener()

        with pytest.raises(RegistryError) as exc_info:
            asyncio.run(repo.upload(session, "data.bin", path, listener))

        error = exc_info.value
        assert error.operation == "chunkUpload"
        assert error.status_code == 500
        assert error.offset == 0
        assert error.size == 1024
        assert "disk full" in error.body
        assert session.listing == []
        assert listener.success == []

    def test_finalize_failure(self, registry, repo, write_file):
        path = write_file("data.bin", b"r" * 100)
        registry.fail_next("finalize", 400, "DIGEST_INVALID")
        session = new_session()

        with pytest.raises(RegistryError) as exc_info:
            asyncio.run(repo.upload(session, "data.bin", path))

        assert exc_info.value.operation == "finalizeUpload"
        assert session.listing == []


class TestUploadConfig:

    def test_single_put_with_digest(self, registry, repo):
        content = b'{"fileItems":[]}'

        digest = asyncio.run(repo.upload_config(new_session(), content))

        assert digest == sha256_digest(content)
        puts = registry.calls("PUT", "/blobs/uploads/")
        assert len(puts) == 1
        assert puts[0].content == content
        assert puts[0].headers["Content-Type"] == OCTET_STREAM
        assert registry.calls("PATCH") == []
        assert registry.blobs[digest] == content

    def test_failure(self, registry, repo):
        registry.fail_next("finalize", 500)

        with pytest.raises(RegistryError) as exc_info:
            asyncio.run(repo.upload_config(new_session(), b"{}"))

        assert exc_info.value.operation == "uploadConfig"
