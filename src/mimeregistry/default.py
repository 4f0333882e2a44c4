"""The process-wide default registry.

``DefaultRegistry`` starts unpopulated. ``ensure_populated()`` fills it once:
from the snapshot cache when caching is enabled and the snapshot is valid,
otherwise from the type data file, after which the fresh index is written to
the cache for the next process. Query methods populate on first use.

Population is guarded by a lock, so threads racing on first use build the
index once. Separate processes sharing one cache file may each rebuild and
rewrite it; the last writer wins.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from mimeregistry.cache import Cache
from mimeregistry.config import Settings
from mimeregistry.loader import load_registry

if TYPE_CHECKING:
    from mimeregistry.mime_type import MimeType
    from mimeregistry.registry import RegistryIndex

log = structlog.get_logger()

Loader = Callable[..., "RegistryIndex"]


class DefaultRegistry:
    def __init__(self, settings: Settings | None = None, loader: Loader = load_registry) -> None:
        self._settings = settings
        self._loader = loader
        self._index: RegistryIndex | None = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        state = repr(self._index) if self._index is not None else "unpopulated"
        return f"<DefaultRegistry: {state}>"

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = Settings()
        return self._settings

    @property
    def populated(self) -> bool:
        return self._index is not None

    @property
    def cache(self) -> Cache | None:
        if not self.settings.cache.enabled:
            return None
        return Cache(self.settings.cache.path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def configure(self, settings: Settings) -> None:
        """Replace the settings and drop any index built under the old ones.

        Unless ``settings.lazy_load`` is set the registry is populated
        immediately.
        """
        with self._lock:
            self._settings = settings
            self._clear()
        if not settings.lazy_load:
            self.ensure_populated()

    def ensure_populated(self) -> RegistryIndex:
        """Populate the registry if it is not yet populated. Idempotent."""
        index = self._index
        if index is not None:
            return index
        with self._lock:
            if self._index is None:
                self._index = self._populate()
            return self._index

    def _populate(self) -> RegistryIndex:
        cache = self.cache
        if cache is not None:
            index = cache.load()
            if index is not None:
                log.info("registry_populated", source="cache", count=index.count)
                return index

        data = self.settings.data
        index = self._loader(data.path, data_format=data.format)
        log.info("registry_populated", source="data", count=index.count)
        if cache is not None:
            cache.save(index)
        return index

    def reset(self) -> None:
        """Return to the unpopulated state."""
        with self._lock:
            self._clear()

    def _clear(self) -> None:
        # caller holds self._lock
        if self._index is not None:
            self._index.close()
        self._index = None

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------

    def lookup_by_id(
        self,
        type_id: MimeType | re.Pattern[str] | str,
        *,
        complete: bool = False,
        registered: bool = False,
    ) -> list[MimeType]:
        return self.ensure_populated().lookup_by_id(
            type_id, complete=complete, registered=registered
        )

    def lookup_by_filename(self, names: str | Iterable[str]) -> list[MimeType]:
        return self.ensure_populated().lookup_by_filename(names)

    def add_type(self, mime_type: MimeType, *, quiet: bool = False) -> None:
        self.ensure_populated().add_type(mime_type, quiet=quiet)

    def add(self, *mime_types: MimeType, quiet: bool = False) -> None:
        self.ensure_populated().add(*mime_types, quiet=quiet)

    def merge(self, other: RegistryIndex, *, quiet: bool = False) -> None:
        self.ensure_populated().merge(other, quiet=quiet)

    def add_record(self, mapping: Mapping[str, Any], *, quiet: bool = False) -> MimeType:
        return self.ensure_populated().add_record(mapping, quiet=quiet)

    @property
    def count(self) -> int:
        return self.ensure_populated().count

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[MimeType]:
        return iter(self.ensure_populated())
