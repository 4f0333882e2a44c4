from __future__ import annotations

from pydantic import BaseModel

from mimeregistry.models.registry import MimeTypeRecord


class CachePayload(BaseModel):
    """Body of a registry cache file, following the fingerprint header."""

    version: str
    count: int
    types: list[MimeTypeRecord]
