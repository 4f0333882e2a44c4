from __future__ import annotations

from mimeregistry.models.cache import CachePayload
from mimeregistry.models.registry import MimeTypeRecord

__all__ = [
    # registry
    "MimeTypeRecord",
    # cache
    "CachePayload",
]
