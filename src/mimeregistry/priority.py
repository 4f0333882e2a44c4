"""Reliability ranking for lookups that match more than one type.

The most authoritative match comes first: registered over unregistered,
complete over incomplete, current over obsolete, and among obsolete types
those that name a replacement.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mimeregistry.mime_type import MimeType


def _prefer(flag: bool) -> int:
    return -1 if flag else 1


def priority_compare(a: MimeType, b: MimeType) -> int:
    """Three-way compare ``a`` and ``b``; negative when ``a`` ranks first."""
    if a.registered != b.registered:
        return _prefer(a.registered)
    if a.complete != b.complete:
        return _prefer(a.complete)
    if a.obsolete != b.obsolete:
        return _prefer(not a.obsolete)
    if a.obsolete:
        ours, theirs = a.use_instead, b.use_instead
        if ours == theirs:
            return 0
        if ours is None:
            return 1
        if theirs is None:
            return -1
        return -1 if ours < theirs else 1
    return 0


def sort_by_priority(types: Iterable[MimeType]) -> list[MimeType]:
    # sorted() is stable: ties keep their input order.
    return sorted(types, key=cmp_to_key(priority_compare))
