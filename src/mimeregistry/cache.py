"""Snapshot cache for a populated registry index.

A cache file is one header line carrying the fingerprint
(``mimeregistry-cache <version>``) followed by the JSON ``CachePayload``.
The header is checked before the payload is read, and a snapshot is only
trusted when header, payload version and type count all agree.

All cache operations degrade gracefully: read failures return ``None``
(treated as a cache miss by callers), write failures are logged and reported
as ``False`` (the in-memory registry is still usable). Errors are logged with
``exc_info=True`` so they remain observable via stderr.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import structlog
from pydantic import ValidationError

from mimeregistry._version import __version__
from mimeregistry.mime_type import MimeType
from mimeregistry.models.cache import CachePayload
from mimeregistry.registry import RegistryIndex

log = structlog.get_logger()

CACHE_MAGIC = "mimeregistry-cache"


class Cache:
    """File-backed registry snapshot, keyed by library version."""

    def __init__(self, path: str | Path, version: str = __version__) -> None:
        self.path = Path(path).expanduser()
        self.version = version

    @property
    def fingerprint(self) -> str:
        return f"{CACHE_MAGIC} {self.version}"

    def __repr__(self) -> str:
        return f"<Cache: {self.path} ({self.version})>"

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self) -> RegistryIndex | None:
        """Rebuild an index from the snapshot.

        Returns ``None`` when the file is missing, written by another version,
        or unreadable in any way. A partial index is never returned.
        """
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                header = fh.readline().rstrip("\n")
                if header != self.fingerprint:
                    log.info(
                        "cache_version_mismatch",
                        path=str(self.path),
                        expected=self.fingerprint,
                        found=header[:80],
                    )
                    return None
                body = fh.read()
        except FileNotFoundError:
            log.debug("cache_miss", path=str(self.path))
            return None
        except (OSError, UnicodeDecodeError):
            log.warning("cache_read_error", path=str(self.path), exc_info=True)
            return None

        try:
            payload = CachePayload.model_validate_json(body)
            if payload.version != self.version or payload.count != len(payload.types):
                raise ValueError(
                    f"cache payload inconsistent: version={payload.version!r}, "
                    f"count={payload.count}, types={len(payload.types)}"
                )
            index = RegistryIndex()
            for record in payload.types:
                index.add_type(MimeType.from_record(record, pool=index.pool), quiet=True)
        except (ValidationError, ValueError):
            log.warning("cache_read_error", path=str(self.path), exc_info=True)
            return None

        log.debug("cache_loaded", path=str(self.path), count=index.count)
        return index

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, index: RegistryIndex) -> bool:
        """Write ``index`` to the cache file. Non-fatal on failure.

        The snapshot is written to a temporary file beside the target and
        moved into place, so a concurrent reader sees either the old file or
        the new one. When two processes save at once, the last one wins.
        """
        types = [mime_type.to_record() for mime_type in index]
        payload = CachePayload(version=self.version, count=len(types), types=types)
        data = f"{self.fingerprint}\n{payload.model_dump_json(by_alias=True, exclude_none=True)}"

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(data)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError:
            log.warning("cache_write_error", path=str(self.path), exc_info=True)
            return False
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        log.debug("cache_saved", path=str(self.path), count=len(types))
        return True

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear(self) -> bool:
        """Delete the cache file. Returns ``True`` if a file was removed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        log.info("cache_cleared", path=str(self.path))
        return True
