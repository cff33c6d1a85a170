"""libmsb.model

Building blocks shared by every table kind.

Entry / Block
  Entries are the records stored in a table; blocks are the fixed-shape
  structs hanging off an entry (common block, type payload, padding structs).
  Entries compare by identity, since cross-references point at one exact
  record. Blocks compare field by field.

Param
  A named, versioned list of entries of one kind. Tables are chained: each
  one ends with the absolute offset of the next, and the last one with 0.

Cross-reference fields are stored twice: a public attribute holding the
referenced Entry (or None), and a private raw index (index_field()) that is
only meaningful between parsing and deindex, and between reindex and writing.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import TYPE_CHECKING, ClassVar, Dict, Generic, Iterator, List, Optional, Tuple, Type, TypeVar

from .binary import BinaryReader, BinaryWriter, Vector3
from .errors import AuthoringError, MalformedStructureError, UnsupportedVariantError

if TYPE_CHECKING:
    from .msb import MSB

log = logging.getLogger(__name__)

__all__ = [
    "Block",
    "ConstantBlock",
    "Entry",
    "Param",
    "Vector3",
    "index_field",
    "index_list_field",
    "read_type_data",
    "check_type_data",
    "ParamSummary",
    "MsbSummary",
]

PARAM_VERSIONS = (75, 78)


def index_field(default: int = -1):
    """Raw on-disk index behind a single reference."""
    return field(default=default, init=False, repr=False, compare=False)


def index_list_field():
    """Raw on-disk indices behind a list of references."""
    return field(default_factory=list, init=False, repr=False, compare=False)


def _clone_value(v):
    if isinstance(v, Entry):
        # references stay pointed at the same records
        return v
    if isinstance(v, Block):
        return v.deep_clone()
    if isinstance(v, list):
        return [_clone_value(x) for x in v]
    if isinstance(v, dict):
        return {k: _clone_value(x) for k, x in v.items()}
    return v


class Block:
    """Base for dataclass structs read from / written to a BinaryReader/Writer."""

    def deep_clone(self):
        """Copy this block and every nested block and list.

        Referenced entries are not copied; the clone points at the same
        records as the original.
        """
        clone = copy.copy(self)
        for f in fields(self):
            setattr(clone, f.name, _clone_value(getattr(self, f.name)))
        return clone

    def deindex(self, msb: "MSB") -> None:
        pass

    def reindex(self, msb: "MSB") -> None:
        pass


@dataclass
class ConstantBlock(Block):
    """A block made only of fixed s32 values; nothing to edit."""

    VALUES: ClassVar[Tuple[int, ...]] = ()

    @classmethod
    def read(cls, br: BinaryReader):
        for v in cls.VALUES:
            br.assert_s32(v)
        return cls()

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32s(self.VALUES)


@dataclass(eq=False, repr=False)
class Entry(Block):
    @classmethod
    def read(cls, br: BinaryReader) -> "Entry":
        raise NotImplementedError

    def write(self, bw: BinaryWriter) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        type_name = getattr(getattr(self, "type", None), "name", "?")
        return f"{type(self).__name__} <{type_name}> [{getattr(self, 'type_index', '-')}] {getattr(self, 'name', '')!r}"


T = TypeVar("T", bound=Entry)


def read_type_data(
    br: BinaryReader,
    start: int,
    offset: int,
    entry_type: IntEnum,
    layouts: Dict[IntEnum, Type[Block]],
) -> Optional[Block]:
    """Read the payload selected by entry_type, or None when offset is 0."""
    if offset == 0:
        return None
    layout = layouts.get(entry_type)
    if layout is None:
        raise UnsupportedVariantError(
            f"{type(entry_type).__name__}.{entry_type.name} has type data at "
            f"0x{start + offset:X} but no known layout"
        )
    br.push(start + offset)
    data = layout.read(br)
    br.pop()
    return data


def check_type_data(entry: Entry, layouts: Dict[IntEnum, Type[Block]], required: bool = False) -> None:
    data = getattr(entry, "type_data")
    if data is None:
        if required:
            raise AuthoringError(f"{entry!r} needs type data")
        return
    expected = layouts.get(entry.type)
    if expected is None or type(data) is not expected:
        raise AuthoringError(
            f"{entry!r}: type data {type(data).__name__} does not match type {entry.type.name}"
        )


class Param(Generic[T]):
    """One table of the file."""

    NAME: ClassVar[str] = ""
    ENTRY: ClassVar[Type[Entry]] = Entry
    DEFAULT_VERSION: ClassVar[int] = 78
    # whether entries carry a type tag and per-type ordinal
    TYPED: ClassVar[bool] = True

    def __init__(self, entries: Optional[List[T]] = None, version: Optional[int] = None):
        self.version = self.DEFAULT_VERSION if version is None else version
        self.entries: List[T] = list(entries) if entries else []

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[T]:
        return iter(self.entries)

    def __getitem__(self, i: int) -> T:
        return self.entries[i]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(version={self.version}, name={self.NAME!r}, entries={len(self.entries)})"

    def of_type(self, entry_type) -> List[T]:
        return [e for e in self.entries if e.type == entry_type]

    @classmethod
    def read(cls, br: BinaryReader, last: bool) -> "Param[T]":
        start = br.tell()
        version = br.assert_s32(*PARAM_VERSIONS)
        count = br.s32() - 1
        if count < 0:
            raise MalformedStructureError(f"{cls.NAME}: entry count {count + 1} is below 1", start + 4)
        name_ofs = br.s64()
        offsets = [br.s64() for _ in range(count)]
        next_ofs_pos = br.tell()
        next_ofs = br.s64()

        name = br.get_utf16(name_ofs)
        if name != cls.NAME:
            raise MalformedStructureError(f"Unexpected param name {name!r}, expected {cls.NAME!r}", name_ofs)
        if last and next_ofs != 0:
            raise MalformedStructureError(
                f"{cls.NAME} is the last table but links to 0x{next_ofs:X}", next_ofs_pos
            )
        if not last and next_ofs == 0:
            raise MalformedStructureError(f"{cls.NAME} does not link to a next table", next_ofs_pos)

        param = cls(version=version)
        for ofs in offsets:
            br.seek(ofs)
            param.entries.append(cls.ENTRY.read(br))

        if not last:
            br.seek(next_ofs)

        log.debug("read %s v%d: %d entries", cls.NAME, version, count)
        return param

    def write(self, bw: BinaryWriter, last: bool) -> None:
        if self.version not in PARAM_VERSIONS:
            raise AuthoringError(f"{self.NAME}: unsupported version {self.version}")

        bw.write_s32(self.version)
        bw.write_s32(len(self.entries) + 1)
        bw.reserve_s64("ParamNameOffset")
        for i in range(len(self.entries)):
            bw.reserve_s64(f"EntryOffset[{i}]")
        bw.reserve_s64("NextParamOffset")

        bw.fill("ParamNameOffset", bw.tell())
        bw.write_utf16(self.NAME)

        for i, entry in enumerate(self.entries):
            bw.pad(8)
            bw.fill(f"EntryOffset[{i}]", bw.tell())
            entry.write(bw)

        bw.pad(8)
        bw.fill("NextParamOffset", 0 if last else bw.tell())
        log.debug("wrote %s v%d: %d entries", self.NAME, self.version, len(self.entries))

    # -----------------------------
    # Pipeline passes
    # -----------------------------

    def assign_type_indices(self) -> None:
        """Stable sort by type tag, then number each entry within its tag."""
        if not self.TYPED:
            return
        self.entries.sort(key=lambda e: int(e.type))
        counters: Dict[int, int] = {}
        for entry in self.entries:
            tag = int(entry.type)
            entry.type_index = counters.get(tag, 0)
            counters[tag] = entry.type_index + 1

    def deindex(self, msb: "MSB") -> None:
        for entry in self.entries:
            entry.deindex(msb)

    def reindex(self, msb: "MSB") -> None:
        for entry in self.entries:
            entry.reindex(msb)


# -----------------------------
# High-level DTOs used by summarize_msb
# -----------------------------

@dataclass
class ParamSummary:
    name: str
    version: int
    count: int
    # type name -> entry count
    types: Dict[str, int] = field(default_factory=dict)


@dataclass
class MsbSummary:
    path: str
    file_size: int
    big_endian: bool
    compression: str
    params: List[ParamSummary]
