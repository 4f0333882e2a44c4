"""The definition of one MIME content type.

A ``MimeType`` keeps the content type exactly as given (``content_type``)
alongside its lowercase ``simplified`` form, which is the key every registry
index files it under. Extension assignment notifies each index that holds
the descriptor so their extension lookups stay in step.
"""

from __future__ import annotations

import re
import weakref
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from mimeregistry.errors import InvalidContentType, InvalidEncoding
from mimeregistry.models.registry import MimeTypeRecord

if TYPE_CHECKING:
    from mimeregistry.pool import ValuePool
    from mimeregistry.registry import RegistryIndex

MEDIA_TYPE_RE = re.compile(r"([^\W\d_][-\w.+]*)/([^\W_][-\w.+]*)", re.IGNORECASE)

BINARY_ENCODINGS = ("base64", "8bit")
ASCII_ENCODINGS = ("7bit", "quoted-printable")


def simplified(content_type: str, remove_x_prefix: bool = False) -> str | None:
    """Return the lowercase index key for ``content_type``, or ``None`` if invalid.

    With ``remove_x_prefix`` a leading ``x-`` is also dropped from both the
    media type and the sub type, so ``x-appl/x-zip`` becomes ``appl/zip``.
    """
    match = MEDIA_TYPE_RE.fullmatch(content_type.strip())
    if match is None:
        return None
    if not remove_x_prefix:
        return match.group(0).lower()
    parts = []
    for part in match.groups():
        part = part.lower()
        if part.startswith("x-"):
            part = part[2:]
        parts.append(part)
    return "/".join(parts)


class MimeType:
    def __init__(
        self,
        content_type: str,
        *,
        extensions: Iterable[str] | str = (),
        preferred_extension: str | None = None,
        encoding: str | None = None,
        docs: str | None = None,
        friendly: Mapping[str, str] | None = None,
        obsolete: bool = False,
        use_instead: str | None = None,
        registered: bool = False,
        signature: bool = False,
        xrefs: Mapping[str, Iterable[str]] | None = None,
        pool: ValuePool | None = None,
    ) -> None:
        self._pool = pool
        # Indexes holding this descriptor; weak so a discarded index drops out.
        self._observers: weakref.WeakSet[RegistryIndex] = weakref.WeakSet()
        self._extensions: tuple[str, ...] = ()
        self._preferred_extension: str | None = None

        self._set_content_type(content_type)
        self.encoding = encoding
        self.extensions = extensions
        self.preferred_extension = preferred_extension
        self.docs = docs or None
        self.friendly: dict[str, str] = dict(friendly or {})
        self.obsolete = bool(obsolete)
        self._use_instead = self._pooled(use_instead)
        self.registered = bool(registered)
        self.signature = bool(signature)
        self.xrefs: dict[str, set[str]] = {
            self._pooled(kind): {self._pooled(v) for v in values}
            for kind, values in (xrefs or {}).items()
        }

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def content_type(self) -> str:
        return self._content_type

    def _set_content_type(self, type_string: str) -> None:
        if not isinstance(type_string, str):
            raise InvalidContentType(type_string)
        match = MEDIA_TYPE_RE.fullmatch(type_string.strip())
        if match is None:
            raise InvalidContentType(type_string)

        self._content_type = self._pooled(match.group(0))
        self.raw_media_type, self.raw_sub_type = (self._pooled(p) for p in match.groups())
        self.simplified = self._pooled(self._content_type.lower())
        media_type, sub_type = self.simplified.split("/", 1)
        self.media_type = self._pooled(media_type)
        self.sub_type = self._pooled(sub_type)

    def like(self, other: MimeType | str) -> bool:
        """True when both types match once any ``x-`` prefixes are ignored."""
        if isinstance(other, MimeType):
            other_key = simplified(other.simplified, remove_x_prefix=True)
        else:
            other_key = simplified(str(other), remove_x_prefix=True)
        return other_key is not None and other_key == simplified(
            self.simplified, remove_x_prefix=True
        )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MimeType):
            return type(self) is type(other) and self.content_type == other.content_type
        if isinstance(other, str):
            # Exact match on the simplified key keeps == consistent with __hash__.
            return self.simplified == other
        return NotImplemented

    # Ordering uses the simplified key only: case variants are <= each other.

    def _order_key(self, other: object) -> str | None:
        if isinstance(other, MimeType):
            return other.simplified
        if isinstance(other, str):
            return simplified(other) or other.lower()
        return None

    def __lt__(self, other: object) -> bool:
        key = self._order_key(other)
        return NotImplemented if key is None else self.simplified < key

    def __le__(self, other: object) -> bool:
        key = self._order_key(other)
        return NotImplemented if key is None else self.simplified <= key

    def __gt__(self, other: object) -> bool:
        key = self._order_key(other)
        return NotImplemented if key is None else self.simplified > key

    def __ge__(self, other: object) -> bool:
        key = self._order_key(other)
        return NotImplemented if key is None else self.simplified >= key

    def __hash__(self) -> int:
        return hash(self.simplified)

    def __str__(self) -> str:
        return self.content_type

    def __repr__(self) -> str:
        return f"<MimeType: {self.content_type}>"

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------

    @property
    def extensions(self) -> list[str]:
        return list(self._extensions)

    @extensions.setter
    def extensions(self, value: Iterable[str] | str | None) -> None:
        if value is None:
            value = ()
        elif isinstance(value, str):
            value = (value,)
        self._extensions = tuple(dict.fromkeys(self._pooled(e) for e in value if e))
        if self._preferred_extension not in self._extensions:
            self._preferred_extension = None
        for index in list(self._observers):
            index._reindex_extensions(self)

    def add_extensions(self, *extensions: str) -> list[str]:
        self.extensions = [*self._extensions, *extensions]
        return self.extensions

    @property
    def preferred_extension(self) -> str | None:
        if self._preferred_extension is not None:
            return self._preferred_extension
        return self._extensions[0] if self._extensions else None

    @preferred_extension.setter
    def preferred_extension(self, value: str | None) -> None:
        if value:
            if value not in self._extensions:
                self.add_extensions(value)
            self._preferred_extension = self._pooled(value)
        else:
            self._preferred_extension = None

    @property
    def complete(self) -> bool:
        return bool(self._extensions)

    def _subscribe(self, index: RegistryIndex) -> None:
        self._observers.add(index)

    def _unsubscribe(self, index: RegistryIndex) -> None:
        self._observers.discard(index)

    # ------------------------------------------------------------------
    # Encoding and status
    # ------------------------------------------------------------------

    @property
    def encoding(self) -> str:
        return self._encoding

    @encoding.setter
    def encoding(self, value: str | None) -> None:
        if value is None or value == "default":
            self._encoding = self._pooled(self.default_encoding)
        elif value in BINARY_ENCODINGS or value in ASCII_ENCODINGS:
            self._encoding = self._pooled(value)
        else:
            raise InvalidEncoding(value)

    @property
    def default_encoding(self) -> str:
        return "quoted-printable" if self.media_type == "text" else "base64"

    @property
    def binary(self) -> bool:
        return self.encoding in BINARY_ENCODINGS

    @property
    def ascii(self) -> bool:
        return self.encoding in ASCII_ENCODINGS

    @property
    def use_instead(self) -> str | None:
        """The replacement type; only reported for obsolete types."""
        return self._use_instead if self.obsolete else None

    @use_instead.setter
    def use_instead(self, value: str | None) -> None:
        self._use_instead = self._pooled(value)

    def friendly_name(self, lang: str = "en") -> str | None:
        return self.friendly.get(lang)

    # ------------------------------------------------------------------
    # Mapping form
    # ------------------------------------------------------------------

    def to_record(self) -> MimeTypeRecord:
        return MimeTypeRecord(
            content_type=self.content_type,
            docs=self.docs,
            friendly=dict(self.friendly),
            encoding=self.encoding,
            extensions=list(self._extensions),
            preferred_extension=self._preferred_extension,
            obsolete=self.obsolete,
            use_instead=self.use_instead,
            xrefs={kind: sorted(values) for kind, values in self.xrefs.items()},
            registered=self.registered,
            signature=self.signature,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.to_record().to_mapping()

    @classmethod
    def from_record(cls, record: MimeTypeRecord, pool: ValuePool | None = None) -> MimeType:
        return cls(
            record.content_type,
            extensions=record.extensions,
            preferred_extension=record.preferred_extension,
            encoding=record.encoding,
            docs=record.docs,
            friendly=record.friendly,
            obsolete=record.obsolete,
            use_instead=record.use_instead,
            registered=record.registered,
            signature=record.signature,
            xrefs=record.xrefs,
            pool=pool,
        )

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any], pool: ValuePool | None = None) -> MimeType:
        """Build a descriptor from its mapping form; missing keys take defaults."""
        return cls.from_record(MimeTypeRecord.model_validate(mapping), pool=pool)

    def _pooled(self, value: Any) -> Any:
        if self._pool is None:
            return value
        return self._pool[value]
