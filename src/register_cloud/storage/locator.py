"""
Repository identifier resolution.

Centralizes the mapping from a user-facing repository identifier to the
registry server and repository name used in /v2/ paths.
"""
from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidRepositoryFormat
from .media_types import DEFAULT_SERVER


@dataclass(frozen=True)
class RepositoryArtifact:
    """Resolved addressing target for a repository."""
    name: str
    server: str = DEFAULT_SERVER


def resolve_repository(repository: str, default_server: str = DEFAULT_SERVER) -> RepositoryArtifact:
    """
    Resolve a repository identifier into server and name.
    
    Args:
        repository: Identifier with one to three "/"-separated segments
        default_server: Server used when the identifier does not name one
        
    Returns:
        RepositoryArtifact for the identifier
        
    Raises:
        InvalidRepositoryFormat: If the segment count is not 1, 2 or 3,
            or any segment is empty
        
    Examples:
        >>> resolve_repository("alpine")
        RepositoryArtifact(name='library/alpine', server='registry-1.docker.io')
        
        >>> resolve_repository("host.example/user/repo")
        RepositoryArtifact(name='user/repo', server='host.example')
    """
    segments = repository.split("/")
    if not all(segments):
        raise InvalidRepositoryFormat(repository)

    if len(segments) == 1:
        return RepositoryArtifact(name=f"library/{segments[0]}", server=default_server)
    if len(segments) == 2:
        return RepositoryArtifact(name=f"{segments[0]}/{segments[1]}", server=default_server)
    if len(segments) == 3:
        return RepositoryArtifact(name=f"{segments[1]}/{segments[2]}", server=segments[0])

    raise InvalidRepositoryFormat(repository)


__all__ = ["RepositoryArtifact", "resolve_repository"]
