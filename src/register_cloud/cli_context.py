"""
CLI Context for managing application dependencies.

Provides a clean way to manage CLI-level dependencies like settings and the
repository engine, avoiding global state and enabling dependency injection.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from .repository import Repository
from .settings import Settings, create_settings_from_env


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.
    
    Holds the settings and, for tests, an HTTP transport override. A new
    Repository is built per command because each command runs its own
    event loop.
    """
    settings: Settings
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_env(cls) -> CLIContext:
        """Create CLI context from environment variables."""
        return cls(settings=create_settings_from_env())

    def repository_for(self, repository: Optional[str]) -> str:
        """
        Repository identifier from the command line or settings.
        
        Raises:
            ValueError: If neither names a repository
        """
        resolved = repository or self.settings.repository
        if not resolved:
            raise ValueError("No repository given; pass --repository or set DRC_REPOSITORY")
        return resolved

    def open_repository(self) -> Repository:
        return Repository(self.settings, transport=self.transport)
