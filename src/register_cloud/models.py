"""
Data models for the registry-backed file store.

These Pydantic models describe the two JSON documents stored in the registry:
the native Docker manifest v2 and the application config blob that carries the
file listing. Validation happens at the deserialization boundary so malformed
payloads never reach the session.
"""
from __future__ import annotations

import json
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .storage.errors import MalformedManifestError
from .storage.media_types import (
    DOCKER_CONTAINER_CONFIG,
    DOCKER_LAYER_TAR_GZIP,
    DOCKER_MANIFEST_V2,
    SCHEMA_VERSION,
)
from .storage.digest import DIGEST_RE


class FileItem(BaseModel):
    """One logical file stored as one registry blob."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Logical file name within the repository")
    size: int = Field(..., ge=0, description="Blob size in bytes")
    digest: str = Field(..., description="Content digest (sha256:...)")

    @field_validator("digest")
    @classmethod
    def validate_digest(cls, v: str) -> str:
        if not DIGEST_RE.match(v):
            raise ValueError(f"digest must be 'sha256:<64 lowercase hex chars>', got '{v}'")
        return v


class ManifestConfig(BaseModel):
    """Config blob payload: {"fileItems": [...]}."""
    model_config = ConfigDict(populate_by_name=True)

    file_items: List[FileItem] = Field(default_factory=list, alias="fileItems")

    def to_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, payload: bytes) -> ManifestConfig:
        """
        Decode a config blob.
        
        Raises:
            MalformedManifestError: If the payload is not valid JSON or does
                not match the config schema
        """
        try:
            return cls.model_validate(json.loads(payload))
        except (ValueError, ValidationError) as e:
            raise MalformedManifestError("config", str(e)) from e


class Descriptor(BaseModel):
    """Content descriptor referencing a blob."""
    model_config = ConfigDict(populate_by_name=True)

    media_type: str = Field(..., alias="mediaType")
    size: int = Field(..., ge=0)
    digest: str

    @field_validator("digest")
    @classmethod
    def validate_digest(cls, v: str) -> str:
        if not DIGEST_RE.match(v):
            raise ValueError(f"invalid descriptor digest '{v}'")
        return v


class ImageManifest(BaseModel):
    """Docker distribution manifest v2 (schema 2)."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: Literal[2] = Field(default=SCHEMA_VERSION, alias="schemaVersion")
    media_type: Optional[str] = Field(default=DOCKER_MANIFEST_V2, alias="mediaType")
    config: Descriptor
    layers: List[Descriptor] = Field(default_factory=list)

    @classmethod
    def for_listing(cls, items: List[FileItem], config_digest: str, config_size: int) -> ImageManifest:
        """Build the manifest for a listing; one layer per item, in listing order."""
        return cls(
            config=Descriptor(media_type=DOCKER_CONTAINER_CONFIG, size=config_size, digest=config_digest),
            layers=[
                Descriptor(media_type=DOCKER_LAYER_TAR_GZIP, size=item.size, digest=item.digest)
                for item in items
            ],
        )

    def to_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, payload: bytes) -> ImageManifest:
        """
        Decode a native manifest.
        
        Raises:
            MalformedManifestError: If the payload is not a schema 2 manifest
                with a config descriptor
        """
        try:
            return cls.model_validate(json.loads(payload))
        except (ValueError, ValidationError) as e:
            raise MalformedManifestError("manifest", str(e)) from e


__all__ = ["FileItem", "ManifestConfig", "Descriptor", "ImageManifest"]
