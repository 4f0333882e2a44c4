"""Unit tests for mimeregistry.default."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import pytest
from structlog.testing import capture_logs

from mimeregistry.cache import Cache
from mimeregistry.config import Settings
from mimeregistry.default import DefaultRegistry
from mimeregistry.mime_type import MimeType
from mimeregistry.registry import RegistryIndex

if TYPE_CHECKING:
    from pathlib import Path


class CountingLoader:
    """Loader stand-in returning a small fixed index and counting calls."""

    def __init__(self, delay: float = 0.0) -> None:
        self.calls: list[tuple[Any, Any]] = []
        self.delay = delay

    def __call__(self, path: Any, *, data_format: Any = None) -> RegistryIndex:
        self.calls.append((path, data_format))
        if self.delay:
            time.sleep(self.delay)
        index = RegistryIndex()
        index.add(
            MimeType("text/plain", extensions=["txt"], registered=True),
            MimeType("text/xml", extensions=["xml"]),
            MimeType("application/xml", extensions=["xml"], registered=True),
        )
        return index


class ReleaseHookLock:
    """Lock that runs ``on_release`` once, right after it is first released."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.on_release: Callable[[], object] | None = None

    def __enter__(self) -> None:
        self._lock.acquire()

    def __exit__(self, *exc_info: object) -> None:
        self._lock.release()
        hook, self.on_release = self.on_release, None
        if hook is not None:
            hook()


def _failing_loader(path: Any, *, data_format: Any = None) -> RegistryIndex:
    raise AssertionError("loader should not be called")


def _settings(tmp_path: Path, **overrides: Any) -> Settings:
    cache = {"enabled": False, "path": str(tmp_path / "types.cache")}
    cache.update(overrides.pop("cache", {}))
    return Settings(cache=cache, **overrides)


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------


class TestEnsurePopulated:
    def test_starts_unpopulated(self, tmp_path: Path) -> None:
        registry = DefaultRegistry(_settings(tmp_path), loader=_failing_loader)
        assert registry.populated is False
        assert "unpopulated" in repr(registry)

    def test_populates_once(self, tmp_path: Path) -> None:
        loader = CountingLoader()
        registry = DefaultRegistry(_settings(tmp_path), loader=loader)
        first = registry.ensure_populated()
        second = registry.ensure_populated()
        assert first is second
        assert registry.populated is True
        assert len(loader.calls) == 1

    def test_data_settings_passed_to_loader(self, tmp_path: Path) -> None:
        loader = CountingLoader()
        settings = _settings(tmp_path, data={"path": "/data/types.yaml", "format": "yaml"})
        DefaultRegistry(settings, loader=loader).ensure_populated()
        assert loader.calls == [("/data/types.yaml", "yaml")]

    def test_cache_disabled_writes_no_file(self, tmp_path: Path) -> None:
        DefaultRegistry(_settings(tmp_path), loader=CountingLoader()).ensure_populated()
        assert not (tmp_path / "types.cache").exists()

    def test_concurrent_first_use_builds_once(self, tmp_path: Path) -> None:
        loader = CountingLoader(delay=0.05)
        registry = DefaultRegistry(_settings(tmp_path), loader=loader)
        results: list[RegistryIndex] = []

        def worker() -> None:
            results.append(registry.ensure_populated())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(loader.calls) == 1
        assert len({id(index) for index in results}) == 1

    def test_loader_error_propagates(self, tmp_path: Path) -> None:
        from mimeregistry.errors import DataSourceError

        def broken(path: Any, *, data_format: Any = None) -> RegistryIndex:
            raise DataSourceError("no data")

        registry = DefaultRegistry(_settings(tmp_path), loader=broken)
        with pytest.raises(DataSourceError):
            registry.ensure_populated()
        assert registry.populated is False


class TestCachePopulation:
    def test_cold_cache_loads_data_and_saves(self, tmp_path: Path) -> None:
        loader = CountingLoader()
        settings = _settings(tmp_path, cache={"enabled": True})
        DefaultRegistry(settings, loader=loader).ensure_populated()

        assert len(loader.calls) == 1
        restored = Cache(tmp_path / "types.cache").load()
        assert restored is not None
        assert restored.count == 3

    def test_warm_cache_skips_loader(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path, cache={"enabled": True})
        DefaultRegistry(settings, loader=CountingLoader()).ensure_populated()

        registry = DefaultRegistry(settings, loader=_failing_loader)
        with capture_logs() as logs:
            index = registry.ensure_populated()
        assert index.count == 3
        populated = [entry for entry in logs if entry["event"] == "registry_populated"]
        assert populated[0]["source"] == "cache"

    def test_stale_cache_rebuilt_and_rewritten(self, tmp_path: Path) -> None:
        path = tmp_path / "types.cache"
        Cache(path, version="0.0.1").save(CountingLoader()(None))
        loader = CountingLoader()

        settings = _settings(tmp_path, cache={"enabled": True})
        DefaultRegistry(settings, loader=loader).ensure_populated()

        assert len(loader.calls) == 1
        assert Cache(path).load() is not None

    def test_unwritable_cache_still_usable(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        settings = Settings(cache={"enabled": True, "path": str(blocker / "types.cache")})
        registry = DefaultRegistry(settings, loader=CountingLoader())

        assert [t.content_type for t in registry.lookup_by_filename("a.txt")] == ["text/plain"]

    def test_cache_property_follows_settings(self, tmp_path: Path) -> None:
        assert DefaultRegistry(_settings(tmp_path)).cache is None
        cache = DefaultRegistry(_settings(tmp_path, cache={"enabled": True})).cache
        assert cache is not None
        assert cache.path == tmp_path / "types.cache"


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_configure_eager(self, tmp_path: Path) -> None:
        loader = CountingLoader()
        registry = DefaultRegistry(loader=loader)
        registry.configure(_settings(tmp_path, lazy_load=False))
        assert registry.populated is True
        assert len(loader.calls) == 1

    def test_configure_lazy(self, tmp_path: Path) -> None:
        loader = CountingLoader()
        registry = DefaultRegistry(loader=loader)
        registry.configure(_settings(tmp_path, lazy_load=True))
        assert registry.populated is False
        assert registry.count == 3
        assert len(loader.calls) == 1

    def test_configure_replaces_populated_index(self, tmp_path: Path) -> None:
        loader = CountingLoader()
        registry = DefaultRegistry(_settings(tmp_path), loader=loader)
        first = registry.ensure_populated()
        registry.configure(_settings(tmp_path))
        assert registry.ensure_populated() is not first
        assert len(loader.calls) == 2

    def test_reset(self, tmp_path: Path) -> None:
        loader = CountingLoader()
        registry = DefaultRegistry(_settings(tmp_path), loader=loader)
        registry.ensure_populated()
        registry.reset()
        assert registry.populated is False
        registry.ensure_populated()
        assert len(loader.calls) == 2

    def test_configure_swaps_settings_before_releasing_lock(self, tmp_path: Path) -> None:
        """A query landing right after configure drops the lock uses the new settings."""
        loader = CountingLoader()
        old = _settings(tmp_path, data={"path": "/old/types.json"})
        new = _settings(tmp_path, data={"path": "/new/types.json"}, lazy_load=True)
        registry = DefaultRegistry(old, loader=loader)
        registry.ensure_populated()

        lock = ReleaseHookLock()
        registry._lock = lock  # type: ignore[assignment]
        lock.on_release = registry.ensure_populated
        registry.configure(new)

        assert registry.settings is new
        assert registry.populated is True
        assert loader.calls[-1] == ("/new/types.json", None)

    def test_settings_default_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MIMEREGISTRY__LAZY_LOAD", "true")
        assert DefaultRegistry().settings.lazy_load is True


# ---------------------------------------------------------------------------
# Query surface
# ---------------------------------------------------------------------------


class TestQueries:
    @pytest.fixture()
    def registry(self, tmp_path: Path) -> DefaultRegistry:
        return DefaultRegistry(_settings(tmp_path), loader=CountingLoader())

    def test_first_query_populates(self, registry: DefaultRegistry) -> None:
        assert registry.populated is False
        assert [t.content_type for t in registry.lookup_by_id("TEXT/PLAIN")] == ["text/plain"]
        assert registry.populated is True

    def test_lookup_by_filename(self, registry: DefaultRegistry) -> None:
        assert [t.content_type for t in registry.lookup_by_filename("a.xml")] == [
            "application/xml",
            "text/xml",
        ]

    def test_lookup_filters(self, registry: DefaultRegistry) -> None:
        assert registry.lookup_by_id("text/xml", registered=True) == []

    def test_count_len_and_iteration(self, registry: DefaultRegistry) -> None:
        assert registry.count == 3
        assert len(registry) == 3
        assert {t.content_type for t in registry} == {"text/plain", "text/xml", "application/xml"}

    def test_add_and_add_type(self, registry: DefaultRegistry) -> None:
        registry.add_type(MimeType("text/csv", extensions=["csv"]))
        registry.add(MimeType("text/markdown", extensions=["md"]), quiet=True)
        assert registry.count == 5
        assert registry.lookup_by_filename("notes.md")[0].content_type == "text/markdown"

    def test_add_record(self, registry: DefaultRegistry) -> None:
        added = registry.add_record({"content-type": "image/webp", "extensions": ["webp"]})
        assert registry.lookup_by_filename("a.webp") == [added]

    def test_merge(self, registry: DefaultRegistry) -> None:
        other = RegistryIndex()
        other.add_type(MimeType("font/woff2", extensions=["woff2"]))
        registry.merge(other)
        assert registry.lookup_by_id("font/woff2")[0] is other.lookup_by_id("font/woff2")[0]

    def test_shared_descriptor_reindexed_in_both(self, registry: DefaultRegistry) -> None:
        custom = RegistryIndex()
        custom.merge(registry.ensure_populated())
        plain = registry.lookup_by_id("text/plain")[0]

        plain.extensions = ["text"]

        assert registry.lookup_by_filename("a.txt") == []
        assert custom.lookup_by_filename("a.txt") == []
        assert custom.lookup_by_filename("a.text")[0] is plain
