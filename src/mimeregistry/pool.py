"""Value interning for descriptor strings.

Thousands of descriptors repeat the same handful of media types, encodings
and extensions. A ``ValuePool`` maps each value to one shared instance so
the repeats cost a reference rather than a copy. Pools are owned by a
``RegistryIndex`` and handed to descriptor construction explicitly.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import TypeVar

T = TypeVar("T", bound=Hashable)


class ValuePool:
    def __init__(self) -> None:
        self._values: dict[Hashable, Hashable] = {}

    def __getitem__(self, value: T) -> T:
        if value is None:
            return value
        return self._values.setdefault(value, value)  # type: ignore[return-value]

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, value: object) -> bool:
        return value in self._values
