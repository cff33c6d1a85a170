"""libmsb.binary

Byte cursors used by every MSB reader/writer.

BinaryReader
  - seek/skip/push/pop over an immutable buffer (push/pop nest; blocks that
    live behind an offset are read with push(start + ofs) ... pop())
  - endian switch that applies to every following multi-byte read
  - read_expected()/assert_*() for constants and always-zero padding; a
    mismatch aborts the parse with the offending offset

BinaryWriter
  - the same scalar writers over a growable bytearray
  - reserve(name, kind) writes a placeholder and remembers where it is;
    fill(name, value) patches it later; finalize() refuses to hand out
    bytes while anything is still reserved
"""

from __future__ import annotations

import struct
from enum import IntEnum
from typing import Dict, List, Sequence, Tuple, Type, TypeVar

from .errors import AuthoringError, MalformedStructureError, UnsupportedVariantError

Vector3 = Tuple[float, float, float]

E = TypeVar("E", bound=IntEnum)

# value kind -> struct format char
_KINDS = {
    "u8": "B",
    "s8": "b",
    "u16": "H",
    "s16": "h",
    "u32": "I",
    "s32": "i",
    "u64": "Q",
    "s64": "q",
    "f32": "f",
}


def _fmt(kind: str) -> str:
    try:
        return _KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown value kind: {kind!r}") from None


def _show(v) -> str:
    if isinstance(v, float):
        return repr(v)
    return f"{v} (0x{v & 0xFFFFFFFFFFFFFFFF:X})" if v < 0 else f"{v} (0x{v:X})"


def _text_codec(encoding: str, big_endian: bool) -> Tuple[str, int]:
    """Return (python codec, code unit width) for an encoding name."""
    if encoding.lower().replace("_", "-") in ("utf-16", "utf16"):
        return ("utf-16-be" if big_endian else "utf-16-le"), 2
    return encoding, 1


class BinaryReader:
    def __init__(self, data: bytes, big_endian: bool = False):
        self.data = bytes(data)
        self.ofs = 0
        self.big_endian = big_endian
        self._stack: List[int] = []

    @property
    def big_endian(self) -> bool:
        return self._endian == ">"

    @big_endian.setter
    def big_endian(self, value: bool) -> None:
        self._endian = ">" if value else "<"

    def __len__(self) -> int:
        return len(self.data)

    # -----------------------------
    # Position
    # -----------------------------

    def tell(self) -> int:
        return self.ofs

    def seek(self, ofs: int) -> None:
        if ofs < 0 or ofs > len(self.data):
            raise MalformedStructureError(
                f"Seek outside of buffer (size 0x{len(self.data):X})", ofs
            )
        self.ofs = ofs

    def skip(self, n: int) -> None:
        self.seek(self.ofs + n)

    def push(self, ofs: int) -> None:
        """Remember the current position and jump to ofs."""
        self._stack.append(self.ofs)
        self.seek(ofs)

    def pop(self) -> None:
        if not self._stack:
            raise AuthoringError("pop() without a matching push()")
        self.ofs = self._stack.pop()

    # -----------------------------
    # Raw values
    # -----------------------------

    def read(self, n: int) -> bytes:
        b = self.data[self.ofs : self.ofs + n]
        if len(b) != n:
            raise MalformedStructureError(f"Unexpected EOF, need {n} bytes", self.ofs)
        self.ofs += n
        return b

    def _unpack(self, fmt: str) -> tuple:
        fmt = self._endian + fmt
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))

    def value(self, kind: str):
        return self._unpack(_fmt(kind))[0]

    def u8(self) -> int:
        return self._unpack("B")[0]

    def s8(self) -> int:
        return self._unpack("b")[0]

    def u16(self) -> int:
        return self._unpack("H")[0]

    def s16(self) -> int:
        return self._unpack("h")[0]

    def u32(self) -> int:
        return self._unpack("I")[0]

    def s32(self) -> int:
        return self._unpack("i")[0]

    def u64(self) -> int:
        return self._unpack("Q")[0]

    def s64(self) -> int:
        return self._unpack("q")[0]

    def f32(self) -> float:
        return self._unpack("f")[0]

    def boolean(self) -> bool:
        ofs = self.ofs
        v = self.u8()
        if v not in (0, 1):
            raise MalformedStructureError(f"Boolean byte {_show(v)} is neither 0 nor 1", ofs)
        return v == 1

    def s8s(self, n: int) -> List[int]:
        return list(self._unpack(f"{n}b"))

    def s16s(self, n: int) -> List[int]:
        return list(self._unpack(f"{n}h"))

    def s32s(self, n: int) -> List[int]:
        return list(self._unpack(f"{n}i"))

    def u32s(self, n: int) -> List[int]:
        return list(self._unpack(f"{n}I"))

    def vector3(self) -> Vector3:
        return self._unpack("3f")

    def read_enum32(self, enum_cls: Type[E]) -> E:
        ofs = self.ofs
        raw = self.u32()
        try:
            return enum_cls(raw)
        except ValueError:
            raise UnsupportedVariantError(
                f"Unknown {enum_cls.__name__} value {raw} (0x{raw:X}) at 0x{ofs:X}"
            ) from None

    # -----------------------------
    # Constants / padding
    # -----------------------------

    def read_expected(self, kind: str, *allowed):
        ofs = self.ofs
        v = self.value(kind)
        if v not in allowed:
            expected = " or ".join(_show(a) for a in allowed)
            raise MalformedStructureError(f"Read {kind} {_show(v)}, expected {expected}", ofs)
        return v

    def assert_u8(self, *allowed) -> int:
        return self.read_expected("u8", *allowed)

    def assert_s8(self, *allowed) -> int:
        return self.read_expected("s8", *allowed)

    def assert_s16(self, *allowed) -> int:
        return self.read_expected("s16", *allowed)

    def assert_s32(self, *allowed) -> int:
        return self.read_expected("s32", *allowed)

    def assert_s64(self, *allowed) -> int:
        return self.read_expected("s64", *allowed)

    def assert_f32(self, *allowed) -> float:
        return self.read_expected("f32", *allowed)

    def assert_s32s(self, value: int, count: int) -> None:
        for _ in range(count):
            self.assert_s32(value)

    def ascii(self, n: int) -> str:
        ofs = self.ofs
        return self._decode(self.read(n), "ascii", ofs)

    def assert_ascii(self, magic: str) -> str:
        ofs = self.ofs
        raw = self.read(len(magic))
        if raw != magic.encode("ascii"):
            raise MalformedStructureError(f"Expected {magic!r}, got {raw!r}", ofs)
        return magic

    # -----------------------------
    # Text
    # -----------------------------

    @staticmethod
    def _decode(raw: bytes, codec: str, ofs: int) -> str:
        try:
            return raw.decode(codec)
        except UnicodeDecodeError as e:
            raise MalformedStructureError(f"Undecodable {codec} text: {e.reason}", ofs) from None

    def strz(self, encoding: str = "ascii") -> str:
        """Null-terminated string in the given encoding."""
        codec, width = _text_codec(encoding, self.big_endian)
        terminator = b"\x00" * width
        start = end = self.ofs
        while True:
            if end + width > len(self.data):
                raise MalformedStructureError("Unterminated string", start)
            if self.data[end : end + width] == terminator:
                break
            end += width
        self.ofs = end + width
        return self._decode(self.data[start:end], codec, start)

    def read_text(self, encoding: str = "utf-16", length_prefixed: bool = False) -> str:
        """Null-terminated, or prefixed by an s32 count of code units."""
        if not length_prefixed:
            return self.strz(encoding)
        codec, width = _text_codec(encoding, self.big_endian)
        start = self.ofs
        count = self.s32()
        if count < 0:
            raise MalformedStructureError(f"Negative text length {count}", start)
        return self._decode(self.read(count * width), codec, start)

    def get_utf16(self, ofs: int) -> str:
        """Read a null-terminated UTF-16 string at ofs without moving."""
        self.push(ofs)
        try:
            return self.strz("utf-16")
        finally:
            self.pop()


class BinaryWriter:
    def __init__(self, big_endian: bool = False):
        self.data = bytearray()
        self.ofs = 0
        self.big_endian = big_endian
        self._stack: List[int] = []
        # name -> (position, struct format char)
        self._reservations: Dict[str, Tuple[int, str]] = {}

    @property
    def big_endian(self) -> bool:
        return self._endian == ">"

    @big_endian.setter
    def big_endian(self, value: bool) -> None:
        self._endian = ">" if value else "<"

    def tell(self) -> int:
        return self.ofs

    def seek(self, ofs: int) -> None:
        if ofs < 0 or ofs > len(self.data):
            raise AuthoringError(f"Seek to 0x{ofs:X} outside of written data (0x{len(self.data):X})")
        self.ofs = ofs

    def push(self, ofs: int) -> None:
        self._stack.append(self.ofs)
        self.seek(ofs)

    def pop(self) -> None:
        if not self._stack:
            raise AuthoringError("pop() without a matching push()")
        self.ofs = self._stack.pop()

    # -----------------------------
    # Raw values
    # -----------------------------

    def write(self, b: bytes) -> None:
        # Overwrites in place when positioned before the end, extends otherwise.
        end = self.ofs + len(b)
        if end > len(self.data):
            self.data.extend(b"\x00" * (end - len(self.data)))
        self.data[self.ofs : end] = b
        self.ofs = end

    def _pack(self, fmt: str, *values) -> bytes:
        try:
            return struct.pack(self._endian + fmt, *values)
        except struct.error as e:
            raise AuthoringError(f"Cannot pack {values!r} as {fmt!r}: {e}") from None

    def write_u8(self, v: int) -> None:
        self.write(self._pack("B", v))

    def write_s8(self, v: int) -> None:
        self.write(self._pack("b", v))

    def write_u16(self, v: int) -> None:
        self.write(self._pack("H", v))

    def write_s16(self, v: int) -> None:
        self.write(self._pack("h", v))

    def write_u32(self, v: int) -> None:
        self.write(self._pack("I", v))

    def write_s32(self, v: int) -> None:
        self.write(self._pack("i", v))

    def write_u64(self, v: int) -> None:
        self.write(self._pack("Q", v))

    def write_s64(self, v: int) -> None:
        self.write(self._pack("q", v))

    def write_f32(self, v: float) -> None:
        self.write(self._pack("f", v))

    def write_boolean(self, v: bool) -> None:
        self.write_u8(1 if v else 0)

    def write_s8s(self, values: Sequence[int]) -> None:
        self.write(self._pack(f"{len(values)}b", *values))

    def write_s16s(self, values: Sequence[int]) -> None:
        self.write(self._pack(f"{len(values)}h", *values))

    def write_s32s(self, values: Sequence[int]) -> None:
        self.write(self._pack(f"{len(values)}i", *values))

    def write_u32s(self, values: Sequence[int]) -> None:
        self.write(self._pack(f"{len(values)}I", *values))

    def write_vector3(self, v: Vector3) -> None:
        self.write(self._pack("3f", *v))

    # -----------------------------
    # Text
    # -----------------------------

    def write_strz(self, text: str, encoding: str = "ascii") -> None:
        codec, width = _text_codec(encoding, self.big_endian)
        self.write(text.encode(codec) + b"\x00" * width)

    def write_utf16(self, text: str) -> None:
        self.write_strz(text, "utf-16")

    def write_text(self, text: str, encoding: str = "utf-16", length_prefixed: bool = False) -> None:
        if not length_prefixed:
            self.write_strz(text, encoding)
            return
        codec, width = _text_codec(encoding, self.big_endian)
        raw = text.encode(codec)
        self.write_s32(len(raw) // width)
        self.write(raw)

    # -----------------------------
    # Reservations
    # -----------------------------

    def reserve(self, name: str, kind: str) -> None:
        if name in self._reservations:
            raise AuthoringError(f"Reservation {name!r} is already pending")
        fmt = _fmt(kind)
        self._reservations[name] = (self.ofs, fmt)
        self.write(b"\xFE" * struct.calcsize("<" + fmt))

    def reserve_s64(self, name: str) -> None:
        self.reserve(name, "s64")

    def fill(self, name: str, value) -> None:
        try:
            ofs, fmt = self._reservations.pop(name)
        except KeyError:
            raise AuthoringError(f"Reservation {name!r} is not pending") from None
        raw = self._pack(fmt, value)
        self.data[ofs : ofs + len(raw)] = raw

    def fill_s64(self, name: str, value: int) -> None:
        pending = self._reservations.get(name)
        if pending is not None and pending[1] != "q":
            raise AuthoringError(f"Reservation {name!r} is not an s64")
        self.fill(name, value)

    def pending(self) -> List[str]:
        return list(self._reservations)

    def pad(self, alignment: int) -> None:
        remainder = self.ofs % alignment
        if remainder:
            self.write(b"\x00" * (alignment - remainder))

    def finalize(self) -> bytes:
        if self._reservations:
            names = ", ".join(sorted(self._reservations))
            raise AuthoringError(f"Unfilled reservations: {names}")
        return bytes(self.data)
