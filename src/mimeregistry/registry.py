"""Registry index: type-variant and extension lookups over MimeType descriptors.

Several indexes may hold the same descriptor (a custom registry built by
merging the default one, for instance). Each index subscribes to the
descriptors it holds, and a descriptor re-files itself in every subscribed
index when its extensions change.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from mimeregistry.mime_type import MimeType, simplified
from mimeregistry.pool import ValuePool
from mimeregistry.priority import sort_by_priority

log = structlog.get_logger()

# Buckets are keyed by id(): distinct descriptors that compare equal by
# content type are kept side by side as variants.
Bucket = dict[int, MimeType]


def extension_key(filename: str) -> str:
    """Lookup key for ``filename``: its lowercased final extension.

    Only the trailing path component is considered. A name without a dot is
    used whole, so ``README`` is looked up as ``readme``.
    """
    name = filename.strip().replace("\\", "/").rsplit("/", 1)[-1]
    return name.lower().rpartition(".")[2]


@dataclass(eq=False, repr=False)
class RegistryIndex:
    """In-memory indexes over a growing set of MimeType descriptors.

    The extension index is derived entirely from the type variants; callers
    never mutate it directly. There is no delete: indexes only grow.
    """

    # simplified content type → variants  e.g. "text/plain" → {id: <text/plain>}
    type_variants: dict[str, Bucket] = field(default_factory=dict)

    # extension (as listed by the descriptor) → descriptors claiming it
    extension_index: dict[str, Bucket] = field(default_factory=dict)

    # interning table shared by every descriptor built through this index
    pool: ValuePool = field(default_factory=ValuePool)

    # descriptor id → extensions it is currently filed under
    _indexed_extensions: dict[int, tuple[str, ...]] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"<RegistryIndex: {self.count} variants, "
            f"{len(self.extension_index)} extensions>"
        )

    # ------------------------------------------------------------------
    # Size and iteration
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        return sum(len(bucket) for bucket in self.type_variants.values())

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[MimeType]:
        for bucket in self.type_variants.values():
            yield from bucket.values()

    def extensions(self) -> list[str]:
        return list(self.extension_index)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup_by_id(
        self,
        type_id: MimeType | re.Pattern[str] | str,
        *,
        complete: bool = False,
        registered: bool = False,
    ) -> list[MimeType]:
        """Return every variant matching ``type_id``, best match first.

        ``type_id`` may be a descriptor (looked up by its simplified form),
        a compiled pattern (searched against every simplified key) or a
        content type string. With ``complete`` only types that have
        extensions are returned; with ``registered`` only IANA-registered
        ones. Unknown types give an empty list.
        """
        if isinstance(type_id, MimeType):
            matches = list(self.type_variants.get(type_id.simplified, {}).values())
        elif isinstance(type_id, re.Pattern):
            matches = [
                mime_type
                for key, bucket in self.type_variants.items()
                if type_id.search(key)
                for mime_type in bucket.values()
            ]
        else:
            key = simplified(str(type_id))
            matches = list(self.type_variants.get(key, {}).values()) if key else []

        if complete:
            matches = [t for t in matches if t.complete]
        if registered:
            matches = [t for t in matches if t.registered]
        return sort_by_priority(matches)

    def lookup_by_filename(self, names: str | Iterable[str]) -> list[MimeType]:
        """Return the types claiming the extension of each name, best first.

        Matches for all names are combined; a descriptor matched by more than
        one name is listed once.
        """
        if isinstance(names, str):
            names = [names]

        found: Bucket = {}
        for name in names:
            bucket = self.extension_index.get(extension_key(name), {})
            for key, mime_type in bucket.items():
                found.setdefault(key, mime_type)
        return sort_by_priority(found.values())

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def add_type(self, mime_type: MimeType, *, quiet: bool = False) -> None:
        """Add one descriptor, warning if an equal variant is already present."""
        bucket = self.type_variants.setdefault(mime_type.simplified, {})
        if not quiet and any(variant == mime_type for variant in bucket.values()):
            log.warning(
                "duplicate_type_variant",
                content_type=mime_type.content_type,
                simplified=mime_type.simplified,
            )
        bucket[id(mime_type)] = mime_type
        mime_type._subscribe(self)
        self._index_extensions(mime_type)

    def add(self, *mime_types: MimeType, quiet: bool = False) -> None:
        for mime_type in mime_types:
            self.add_type(mime_type, quiet=quiet)

    def merge(self, other: RegistryIndex, *, quiet: bool = False) -> None:
        """Add every variant held by ``other``; descriptors are shared, not copied."""
        self.add(*other, quiet=quiet)

    def add_record(self, mapping: Mapping[str, Any], *, quiet: bool = False) -> MimeType:
        """Build a descriptor from its mapping form and add it."""
        mime_type = MimeType.from_dict(mapping, pool=self.pool)
        self.add_type(mime_type, quiet=quiet)
        return mime_type

    def close(self) -> None:
        """Stop receiving extension updates from the descriptors held here."""
        for mime_type in self:
            mime_type._unsubscribe(self)

    # ------------------------------------------------------------------
    # Extension index maintenance
    # ------------------------------------------------------------------

    def _holds(self, mime_type: MimeType) -> bool:
        return id(mime_type) in self.type_variants.get(mime_type.simplified, {})

    def _index_extensions(self, mime_type: MimeType) -> None:
        if not self._holds(mime_type):
            return
        key = id(mime_type)
        current = tuple(mime_type.extensions)
        for ext in self._indexed_extensions.get(key, ()):
            if ext in current:
                continue
            bucket = self.extension_index.get(ext)
            if bucket is None:
                continue
            bucket.pop(key, None)
            if not bucket:
                del self.extension_index[ext]
        for ext in current:
            self.extension_index.setdefault(ext, {})[key] = mime_type
        self._indexed_extensions[key] = current

    _reindex_extensions = _index_extensions
