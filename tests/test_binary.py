from __future__ import annotations

import struct
from enum import IntEnum

import pytest

from libmsb.binary import BinaryReader, BinaryWriter
from libmsb.errors import AuthoringError, MalformedStructureError, UnsupportedVariantError


class Color(IntEnum):
    RED = 1
    BLUE = 2


def test_endian_switch_applies_to_following_reads():
    br = BinaryReader(struct.pack("<i", 1) + struct.pack(">i", 2) + struct.pack(">f", 1.5))
    assert br.s32() == 1
    br.big_endian = True
    assert br.s32() == 2
    assert br.f32() == 1.5


def test_push_pop_nest():
    br = BinaryReader(bytes(range(16)))
    br.push(4)
    assert br.u8() == 4
    br.push(8)
    assert br.u8() == 8
    br.pop()
    assert br.tell() == 5
    br.pop()
    assert br.tell() == 0


def test_pop_without_push():
    with pytest.raises(AuthoringError):
        BinaryReader(b"").pop()


def test_read_expected_reports_offset():
    br = BinaryReader(struct.pack("<ii", 0, 7))
    br.assert_s32(0)
    with pytest.raises(MalformedStructureError) as ei:
        br.assert_s32(0)
    assert ei.value.offset == 4
    assert "0x4" in str(ei.value)


def test_read_expected_accepts_any_allowed_value():
    br = BinaryReader(struct.pack("<i", 78))
    assert br.assert_s32(75, 78) == 78


def test_unexpected_eof():
    with pytest.raises(MalformedStructureError):
        BinaryReader(b"\x01\x02").s32()


def test_seek_out_of_bounds():
    br = BinaryReader(b"\x00" * 4)
    br.seek(4)
    with pytest.raises(MalformedStructureError):
        br.seek(5)


def test_boolean_only_zero_or_one():
    br = BinaryReader(b"\x00\x01\x02")
    assert br.boolean() is False
    assert br.boolean() is True
    with pytest.raises(MalformedStructureError):
        br.boolean()


def test_read_enum32():
    br = BinaryReader(struct.pack("<II", 2, 9))
    assert br.read_enum32(Color) is Color.BLUE
    with pytest.raises(UnsupportedVariantError):
        br.read_enum32(Color)


def test_arrays_and_vector():
    data = struct.pack("<3h2i3f", 1, -1, 3, 5, -6, 0.5, 1.0, -2.0)
    br = BinaryReader(data)
    assert br.s16s(3) == [1, -1, 3]
    assert br.s32s(2) == [5, -6]
    assert br.vector3() == (0.5, 1.0, -2.0)


def test_reserve_and_fill():
    bw = BinaryWriter()
    bw.reserve_s64("Offset")
    bw.write_u8(7)
    bw.fill("Offset", 0x1122)
    data = bw.finalize()
    assert struct.unpack_from("<q", data, 0)[0] == 0x1122
    assert data[8] == 7
    assert bw.pending() == []


def test_fill_keeps_position():
    bw = BinaryWriter()
    bw.reserve("Count", "s32")
    bw.write_s32s([1, 2])
    bw.fill("Count", 2)
    assert bw.tell() == 12


def test_reserve_twice():
    bw = BinaryWriter()
    bw.reserve_s64("A")
    with pytest.raises(AuthoringError):
        bw.reserve_s64("A")


def test_fill_unknown_name():
    with pytest.raises(AuthoringError):
        BinaryWriter().fill("missing", 1)


def test_fill_twice():
    bw = BinaryWriter()
    bw.reserve_s64("A")
    bw.fill("A", 1)
    with pytest.raises(AuthoringError):
        bw.fill("A", 2)


def test_fill_s64_checks_kind():
    bw = BinaryWriter()
    bw.reserve("Small", "s32")
    with pytest.raises(AuthoringError):
        bw.fill_s64("Small", 1)


def test_finalize_with_pending_reservation():
    bw = BinaryWriter()
    bw.reserve_s64("Dangling")
    with pytest.raises(AuthoringError) as ei:
        bw.finalize()
    assert "Dangling" in str(ei.value)


def test_out_of_range_value_is_authoring_error():
    with pytest.raises(AuthoringError):
        BinaryWriter().write_s16(0x8000)


def test_pad():
    bw = BinaryWriter()
    bw.write_u8(1)
    bw.pad(8)
    assert bw.tell() == 8
    bw.pad(8)
    assert bw.tell() == 8
    bw.write_u16(1)
    bw.pad(4)
    assert bw.finalize() == b"\x01" + b"\x00" * 7 + b"\x01\x00\x00\x00"


def test_utf16_follows_endianness():
    bw = BinaryWriter(big_endian=True)
    bw.write_utf16("AB")
    data = bw.finalize()
    assert data == b"\x00A\x00B\x00\x00"
    assert BinaryReader(data, big_endian=True).strz("utf-16") == "AB"


def test_get_utf16_does_not_move():
    bw = BinaryWriter()
    bw.write_s32(0)
    bw.write_utf16("name")
    br = BinaryReader(bw.finalize())
    assert br.get_utf16(4) == "name"
    assert br.tell() == 0


def test_unterminated_string():
    with pytest.raises(MalformedStructureError):
        BinaryReader(b"A\x00B\x00").strz("utf-16")


def test_length_prefixed_text():
    bw = BinaryWriter()
    bw.write_text("héllo", length_prefixed=True)
    br = BinaryReader(bw.finalize())
    assert br.read_text(length_prefixed=True) == "héllo"


def test_ascii_magic():
    br = BinaryReader(b"MSB XY")
    assert br.assert_ascii("MSB ") == "MSB "
    assert br.ascii(2) == "XY"
    with pytest.raises(MalformedStructureError):
        BinaryReader(b"BND4").assert_ascii("MSB ")
