"""
Settings and configuration for register-cloud.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables at engine construction time.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

from .storage.media_types import DEFAULT_SERVER

__all__ = ["Settings", "create_settings_from_env", "DEFAULT_UPLOAD_CHUNK_SIZE"]

DEFAULT_UPLOAD_CHUNK_SIZE = 5 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for the repository engine.
    
    Registry Settings:
        default_server: Server used for one- and two-segment repository identifiers
        repository: Default repository identifier for CLI commands
        registry_insecure: Talk plain HTTP to registries (local/dev use)
        http_timeout_s: HTTP request timeout in seconds
        http_retry: Retries for timed-out idempotent reads (0=no retry)
        
    Transfer Settings:
        upload_chunk_size: Maximum bytes per chunked upload request
        progress_interval_s: Cadence of download progress callbacks
    """
    default_server: str = DEFAULT_SERVER
    repository: Optional[str] = None
    registry_insecure: bool = False
    http_timeout_s: float = 30.0
    http_retry: int = 0

    upload_chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE
    progress_interval_s: float = 0.5

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.default_server:
            raise ValueError("default_server is required")

        # host[:port], no scheme; the scheme follows registry_insecure
        server_pattern = r"^[a-zA-Z0-9.-]+(?::[0-9]+)?$"
        if not re.match(server_pattern, self.default_server):
            raise ValueError(f"Invalid default_server format: {self.default_server}")

        if self.repository is not None and not self.repository:
            raise ValueError("repository cannot be empty")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")

        if self.upload_chunk_size <= 0:
            raise ValueError(f"upload_chunk_size must be positive, got {self.upload_chunk_size}")

        if self.progress_interval_s <= 0:
            raise ValueError(f"progress_interval_s must be positive, got {self.progress_interval_s}")

    @property
    def scheme(self) -> str:
        return "http" if self.registry_insecure else "https"


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.
    
    Environment Variables:
        - DRC_DEFAULT_SERVER (default: registry-1.docker.io)
        - DRC_REPOSITORY (optional)
        - DRC_REGISTRY_INSECURE (default: false)
        - DRC_HTTP_TIMEOUT (default: 30.0)
        - DRC_HTTP_RETRY (default: 0)
        - DRC_UPLOAD_CHUNK_SIZE (default: 5242880)
        - DRC_PROGRESS_INTERVAL (default: 0.5)
    
    Returns:
        Settings object with validated configuration
        
    Raises:
        ValueError: If configuration is invalid
        
    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    return Settings(
        default_server=os.getenv("DRC_DEFAULT_SERVER") or DEFAULT_SERVER,
        repository=os.getenv("DRC_REPOSITORY") or None,
        registry_insecure=str_to_bool(os.getenv("DRC_REGISTRY_INSECURE", "false")),
        http_timeout_s=get_float("DRC_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("DRC_HTTP_RETRY", 0),
        upload_chunk_size=get_int("DRC_UPLOAD_CHUNK_SIZE", DEFAULT_UPLOAD_CHUNK_SIZE),
        progress_interval_s=get_float("DRC_PROGRESS_INTERVAL", 0.5),
    )
