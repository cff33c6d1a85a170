"""libmsb.graph

Walking an entry graph without caring about object identity.

Two graphs loaded from the same bytes hold different Python objects, so
entries are compared through a position key (table name, index) instead of
`is`. Raw index scratch fields are skipped; they only matter mid-pipeline.
Floats compare by their stored f32 bits, so NaN matches itself.
"""

from __future__ import annotations

import struct
from dataclasses import fields
from typing import Dict, Iterator, List, Tuple

from .model import Block, Entry
from .msb import MSB

EntryKey = Tuple[str, int]


def entry_keys(msb: MSB) -> Dict[int, EntryKey]:
    """id(entry) -> (table name, index) for every entry in msb."""
    keys: Dict[int, EntryKey] = {}
    for param in msb.params:
        for i, entry in enumerate(param.entries):
            keys[id(entry)] = (param.NAME, i)
    return keys


def _flatten(value, keys: Dict[int, EntryKey]):
    if isinstance(value, Entry):
        return ("ref", keys.get(id(value), ("<detached>", -1)))
    if isinstance(value, Block):
        return (
            type(value).__name__,
            tuple((f.name, _flatten(getattr(value, f.name), keys)) for f in fields(value) if f.compare),
        )
    if isinstance(value, float):
        return struct.pack("<f", value)
    if isinstance(value, (list, tuple)):
        return tuple(_flatten(v, keys) for v in value)
    return value


def flatten_entry(entry: Entry, keys: Dict[int, EntryKey]) -> tuple:
    return tuple((f.name, _flatten(getattr(entry, f.name), keys)) for f in fields(entry) if f.compare)


def diff_graphs(a: MSB, b: MSB) -> List[str]:
    """Human readable differences between two graphs; empty when equal."""
    diffs: List[str] = []
    if a.big_endian != b.big_endian:
        diffs.append(f"big_endian: {a.big_endian} != {b.big_endian}")
    keys_a = entry_keys(a)
    keys_b = entry_keys(b)
    for pa, pb in zip(a.params, b.params):
        if pa.version != pb.version:
            diffs.append(f"{pa.NAME}: version {pa.version} != {pb.version}")
        if len(pa) != len(pb):
            diffs.append(f"{pa.NAME}: {len(pa)} entries != {len(pb)}")
            continue
        for i, (ea, eb) in enumerate(zip(pa.entries, pb.entries)):
            fa = flatten_entry(ea, keys_a)
            fb = flatten_entry(eb, keys_b)
            if type(ea) is not type(eb) or fa != fb:
                diffs.append(f"{pa.NAME}[{i}]: {ea!r} differs from {eb!r}")
    return diffs


def iter_references(value, path: str = "") -> Iterator[Tuple[str, Entry]]:
    """(field path, referenced entry) for every non-null reference under value."""
    for f in fields(value):
        if not f.compare:
            continue
        child = getattr(value, f.name)
        child_path = f"{path}.{f.name}" if path else f.name
        if isinstance(child, Entry):
            yield child_path, child
        elif isinstance(child, Block):
            yield from iter_references(child, child_path)
        elif isinstance(child, list):
            for n, item in enumerate(child):
                item_path = f"{child_path}[{n}]"
                if isinstance(item, Entry):
                    yield item_path, item
                elif isinstance(item, Block):
                    yield from iter_references(item, item_path)
