"""MIME content type registry with priority-ranked lookups."""

from __future__ import annotations

from mimeregistry._version import __version__
from mimeregistry.cache import Cache
from mimeregistry.default import DefaultRegistry
from mimeregistry.errors import (
    DataSourceError,
    ErrorCode,
    InvalidContentType,
    InvalidEncoding,
    MimeRegistryError,
)
from mimeregistry.loader import load_registry
from mimeregistry.mime_type import MimeType
from mimeregistry.pool import ValuePool
from mimeregistry.priority import priority_compare, sort_by_priority
from mimeregistry.registry import RegistryIndex

# Populated on first query, or eagerly through default_registry.configure().
default_registry = DefaultRegistry()

__all__ = [
    "__version__",
    "Cache",
    "DataSourceError",
    "DefaultRegistry",
    "ErrorCode",
    "InvalidContentType",
    "InvalidEncoding",
    "MimeRegistryError",
    "MimeType",
    "RegistryIndex",
    "ValuePool",
    "default_registry",
    "load_registry",
    "priority_compare",
    "sort_by_priority",
]
