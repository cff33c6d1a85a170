"""libmsb.xref

Index <-> reference conversion used by deindex (load) and reindex (save).

An index space is just an ordered list of entries: a whole table
(msb.parts.entries) or the subsequence of a table with one type tag
(filtered(msb.parts.entries, PartType.HIT)). -1 always means "no reference".
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, TypeVar

from .errors import AuthoringError, MalformedStructureError

T = TypeVar("T")

S16_MAX = 0x7FFF


def filtered(entries: Iterable[T], entry_type) -> List[T]:
    return [e for e in entries if e.type == entry_type]


def find_entry(space: Sequence[T], index: int, what: str) -> Optional[T]:
    if index == -1:
        return None
    if not 0 <= index < len(space):
        raise MalformedStructureError(
            f"{what}: index {index} out of range for {len(space)} entries"
        )
    return space[index]


def find_entries(space: Sequence[T], indices: Sequence[int], what: str) -> List[Optional[T]]:
    return [find_entry(space, index, f"{what}[{n}]") for n, index in enumerate(indices)]


def find_index(space: Sequence[T], entry: Optional[T], what: str) -> int:
    if entry is None:
        return -1
    for i, candidate in enumerate(space):
        if candidate is entry:
            return i
    raise AuthoringError(f"{what}: {entry!r} is not in the index space this field refers to")


def find_index_s16(space: Sequence[T], entry: Optional[T], what: str) -> int:
    index = find_index(space, entry, what)
    if index > S16_MAX:
        raise AuthoringError(f"{what}: index {index} does not fit in a 16-bit field")
    return index


def find_indices(
    space: Sequence[T],
    entries: Sequence[Optional[T]],
    what: str,
    count: Optional[int] = None,
    s16: bool = False,
) -> List[int]:
    """Indices for a list of references; count pins fixed-size on-disk arrays."""
    if count is not None and len(entries) != count:
        raise AuthoringError(f"{what}: expected {count} slots, got {len(entries)}")
    find = find_index_s16 if s16 else find_index
    return [find(space, entry, f"{what}[{n}]") for n, entry in enumerate(entries)]
