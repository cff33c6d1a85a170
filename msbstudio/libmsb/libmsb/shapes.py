"""libmsb.shapes

Point forms: the volume a point covers. The form kind is stored in the point
record (form_type); POINT has no form data at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, List, Optional, Type

from .binary import BinaryReader, BinaryWriter
from .errors import AuthoringError, UnsupportedVariantError
from .model import Block, index_field
from .xref import find_entry, find_index

if TYPE_CHECKING:
    from .msb import MSB
    from .points import Point


class PointFormType(IntEnum):
    POINT = 0
    CIRCLE = 1
    SPHERE = 2
    CYLINDER = 3
    SQUARE = 4
    BOX = 5
    COMPOSITE = 6


class PointForm(Block):
    TYPE: PointFormType = PointFormType.POINT


@dataclass
class CircleForm(PointForm):
    TYPE = PointFormType.CIRCLE
    radius: float = 0.0

    @classmethod
    def read(cls, br: BinaryReader) -> "CircleForm":
        return cls(radius=br.f32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.radius)


@dataclass
class SphereForm(PointForm):
    TYPE = PointFormType.SPHERE
    radius: float = 0.0

    @classmethod
    def read(cls, br: BinaryReader) -> "SphereForm":
        return cls(radius=br.f32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.radius)


@dataclass
class CylinderForm(PointForm):
    TYPE = PointFormType.CYLINDER
    radius: float = 0.0
    height: float = 0.0

    @classmethod
    def read(cls, br: BinaryReader) -> "CylinderForm":
        return cls(radius=br.f32(), height=br.f32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.radius)
        bw.write_f32(self.height)


@dataclass
class SquareForm(PointForm):
    TYPE = PointFormType.SQUARE
    width: float = 0.0
    depth: float = 0.0

    @classmethod
    def read(cls, br: BinaryReader) -> "SquareForm":
        return cls(width=br.f32(), depth=br.f32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.width)
        bw.write_f32(self.depth)


@dataclass
class BoxForm(PointForm):
    TYPE = PointFormType.BOX
    width: float = 0.0
    depth: float = 0.0
    height: float = 0.0

    @classmethod
    def read(cls, br: BinaryReader) -> "BoxForm":
        return cls(width=br.f32(), depth=br.f32(), height=br.f32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.width)
        bw.write_f32(self.depth)
        bw.write_f32(self.height)


@dataclass
class CompositeItem(Block):
    point: Optional["Point"] = None
    unk04: int = 0
    _point_index: int = index_field()

    def deindex(self, msb: "MSB") -> None:
        self.point = find_entry(msb.points.entries, self._point_index, "CompositeItem.point")

    def reindex(self, msb: "MSB") -> None:
        self._point_index = find_index(msb.points.entries, self.point, "CompositeItem.point")


COMPOSITE_SLOTS = 8


@dataclass
class CompositeForm(PointForm):
    TYPE = PointFormType.COMPOSITE
    items: List[CompositeItem] = field(default_factory=lambda: [CompositeItem() for _ in range(COMPOSITE_SLOTS)])

    @classmethod
    def read(cls, br: BinaryReader) -> "CompositeForm":
        items = []
        for _ in range(COMPOSITE_SLOTS):
            item = CompositeItem()
            item._point_index = br.s32()
            item.unk04 = br.s32()
            items.append(item)
        return cls(items=items)

    def deindex(self, msb: "MSB") -> None:
        for item in self.items:
            item.deindex(msb)

    def reindex(self, msb: "MSB") -> None:
        for item in self.items:
            item.reindex(msb)

    def write(self, bw: BinaryWriter) -> None:
        if len(self.items) != COMPOSITE_SLOTS:
            raise AuthoringError(f"CompositeForm needs {COMPOSITE_SLOTS} items, got {len(self.items)}")
        for item in self.items:
            bw.write_s32(item._point_index)
            bw.write_s32(item.unk04)


FORMS: Dict[PointFormType, Type[PointForm]] = {
    PointFormType.CIRCLE: CircleForm,
    PointFormType.SPHERE: SphereForm,
    PointFormType.CYLINDER: CylinderForm,
    PointFormType.SQUARE: SquareForm,
    PointFormType.BOX: BoxForm,
    PointFormType.COMPOSITE: CompositeForm,
}


def read_form(br: BinaryReader, start: int, offset: int, form_type: PointFormType) -> Optional[PointForm]:
    if offset == 0:
        return None
    layout = FORMS.get(form_type)
    if layout is None:
        raise UnsupportedVariantError(f"{form_type.name} form has form data at 0x{start + offset:X}")
    br.push(start + offset)
    form = layout.read(br)
    br.pop()
    return form


def check_form(form: Optional[PointForm], form_type: PointFormType, owner: str) -> None:
    if form is not None and form.TYPE != form_type:
        raise AuthoringError(f"{owner}: {type(form).__name__} does not match form type {form_type.name}")
