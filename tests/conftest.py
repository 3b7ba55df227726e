"""Root pytest configuration for register-cloud tests."""
import pytest

from register_cloud.repository import Repository
from register_cloud.settings import Settings

from .fakes.fake_registry import FakeRegistry


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Keep host configuration out of the tests."""
    for key in ("DRC_DEFAULT_SERVER", "DRC_REPOSITORY", "DRC_REGISTRY_INSECURE",
                "DRC_HTTP_TIMEOUT", "DRC_HTTP_RETRY", "DRC_UPLOAD_CHUNK_SIZE",
                "DRC_PROGRESS_INTERVAL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings():
    """Standard test settings with a small chunk size."""
    return Settings(upload_chunk_size=1024, progress_interval_s=0.01)


@pytest.fixture
def registry():
    """Standard fake registry for testing."""
    return FakeRegistry()


@pytest.fixture
def repo(settings, registry):
    """Repository engine wired to the fake registry."""
    return Repository(settings, transport=registry.transport())


@pytest.fixture
def write_file(tmp_path):
    """Write bytes to a file under tmp_path and return its path."""
    def _write(name: str, content: bytes):
        path = tmp_path / name
        path.write_bytes(content)
        return path
    return _write
