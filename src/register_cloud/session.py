"""
Mutable working state for one repository transaction.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .models import FileItem, ManifestConfig
from .storage.errors import NotFoundError
from .storage.locator import RepositoryArtifact


@dataclass
class Session:
    """
    One open -> mutate -> commit transaction on a repository.
    
    The listing is owned by the session; mutations stay local until
    Repository.commit() writes them back.
    """
    server: str
    name: str
    repository: str
    listing: List[FileItem] = field(default_factory=list)

    @property
    def artifact(self) -> RepositoryArtifact:
        return RepositoryArtifact(name=self.name, server=self.server)

    def find(self, name: str) -> FileItem:
        """
        First listing entry with the given name.
        
        Raises:
            NotFoundError: If no entry has that name
        """
        for item in self.listing:
            if item.name == name:
                return item
        raise NotFoundError(name)

    def remove(self, name: str) -> FileItem:
        """Remove and return the first entry with the given name."""
        target = self.find(name)
        self.listing.remove(target)
        return target

    def add(self, item: FileItem) -> None:
        self.listing.append(item)

    def to_config(self) -> ManifestConfig:
        return ManifestConfig(file_items=list(self.listing))


__all__ = ["Session"]
