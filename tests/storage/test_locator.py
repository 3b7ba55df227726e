"""
Tests for repository identifier resolution.
"""
from __future__ import annotations

import pytest

from register_cloud.storage.errors import ErrorKind, InvalidRepositoryFormat
from register_cloud.storage.locator import RepositoryArtifact, resolve_repository
from register_cloud.storage.media_types import DEFAULT_SERVER


class TestResolveRepository:
    """Test identifier -> (server, name) mapping."""

    def test_single_segment_goes_to_library(self):
        assert resolve_repository("alpine") == RepositoryArtifact(name="library/alpine", server=DEFAULT_SERVER)

    def test_two_segments_keep_namespace(self):
        assert resolve_repository("user/repo") == RepositoryArtifact(name="user/repo", server=DEFAULT_SERVER)

    def test_three_segments_name_the_server(self):
        artifact = resolve_repository("host.example/user/repo")
        assert artifact.server == "host.example"
        assert artifact.name == "user/repo"

    def test_server_with_port(self):
        artifact = resolve_repository("localhost:5000/user/repo")
        assert artifact.server == "localhost:5000"
        assert artifact.name == "user/repo"

    def test_default_server_override(self):
        artifact = resolve_repository("user/repo", default_server="mirror.local")
        assert artifact.server == "mirror.local"

    def test_explicit_server_wins_over_default(self):
        artifact = resolve_repository("host.example/user/repo", default_server="mirror.local")
        assert artifact.server == "host.example"

    @pytest.mark.parametrize("identifier", ["a/b/c/d", "a/b/c/d/e", "", "user//repo", "/repo", "repo/"])
    def test_invalid_identifiers(self, identifier):
        with pytest.raises(InvalidRepositoryFormat) as exc_info:
            resolve_repository(identifier)
        assert exc_info.value.repository == identifier
        assert exc_info.value.kind is ErrorKind.INVALID_REPOSITORY

    def test_invalid_identifier_is_a_value_error(self):
        with pytest.raises(ValueError, match="Unsupported repository format"):
            resolve_repository("a/b/c/d")
