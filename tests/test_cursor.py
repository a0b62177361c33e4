from __future__ import annotations

import pytest

from hexmark.core.cursor import Cursor
from hexmark.core.errors import DecodeError, OutOfBounds, UnterminatedString
from hexmark.core.marks import Mark
from hexmark.core.session import Session
from hexmark.core.store import ByteStore


def make_cursor(data: bytes, base: int = 0) -> Cursor:
    return Session(ByteStore(data, base)).root_cursor()


def test_subrange_identity() -> None:
    c = make_cursor(bytes(range(16)), base=0x100)
    sub = c.subrange(1, len(c))
    assert (sub.offset, sub.length) == (c.offset, c.length)
    default = c.subrange()
    assert (default.offset, default.length) == (0x100, 16)


def test_subrange_bounds_are_one_based_inclusive() -> None:
    c = make_cursor(bytes(range(16)))
    sub = c.subrange(3, 6)
    assert (sub.offset, sub.length) == (2, 4)
    assert sub.read_bytes(4) == bytes([2, 3, 4, 5])


def test_subrange_negative_indices_count_from_end() -> None:
    c = make_cursor(bytes(range(16)))
    last4 = c.subrange(-4, -1)
    assert (last4.offset, last4.length) == (12, 4)
    tail = c.subrange(-1)
    assert (tail.offset, tail.length) == (15, 1)


def test_subrange_clamps_to_range() -> None:
    c = make_cursor(bytes(range(16)))
    sub = c.subrange(-100, 100)
    assert (sub.offset, sub.length) == (0, 16)
    sub = c.subrange(0, 3)
    assert (sub.offset, sub.length) == (0, 3)


def test_subrange_inverted_keeps_parent_offset() -> None:
    c = make_cursor(bytes(range(16)), base=40).subrange(5, 10)
    assert c.offset == 44
    empty = c.subrange(5, 2)
    assert empty.length == 0
    assert empty.offset == 44
    past_end = c.subrange(20, 30)
    assert past_end.length == 0
    assert past_end.offset == 44


def test_subrange_resets_position_copies_endian_and_leaves_parent() -> None:
    c = make_cursor(bytes(range(16)))
    c.endian = "big"
    c.u16()
    sub = c.subrange(5, 8)
    assert sub.position == 0
    assert sub.endian == "big"
    sub.endian = "little"
    sub.u16()
    assert c.endian == "big"
    assert c.position == 2
    assert (c.offset, c.length) == (0, 16)


def test_read_int_endianness_and_sign() -> None:
    c = make_cursor(bytes([0x01, 0x02, 0xFF, 0xFE, 0x00, 0x00, 0x00, 0x80]))
    assert c.u16() == 0x0201
    assert c.i16() == -257
    c.endian = "be"
    assert c.endian == "big"
    assert c.u32() == 0x80
    c.seek(0)
    assert c.read_int(1) == 1
    assert c.read_int(1, signed=True) == 2
    assert c.position == 2


def test_read_int_rejects_odd_widths() -> None:
    c = make_cursor(bytes(8))
    with pytest.raises(ValueError):
        c.read_int(3)


def test_read_past_end_raises_and_keeps_position() -> None:
    c = make_cursor(bytes(range(16))).subrange(1, 3)
    c.u16()
    with pytest.raises(OutOfBounds):
        c.u16()
    assert c.position == 2
    with pytest.raises(OutOfBounds):
        c.read_bytes(-1)
    assert c.read_bytes(1) == b"\x02"
    assert c.eof


def test_read_cstring() -> None:
    c = make_cursor(b"abc\x00\xe9t\xe9\x00rest")
    assert c.read_cstring() == "abc"
    assert c.position == 4
    assert c.read_cstring() == "été"
    with pytest.raises(UnterminatedString):
        c.read_cstring()
    assert c.position == 8


def test_read_cstring_does_not_look_past_range() -> None:
    c = make_cursor(b"abcdef\x00").subrange(1, 4)
    with pytest.raises(UnterminatedString):
        c.read_cstring()


def test_composed_read_format_mark() -> None:
    s = Session(ByteStore(bytes([0x10, 0x00, 0x07, 0x41, 0x42]), 0x200))
    c = s.root_cursor()
    assert c.u16("version {}") == 16
    assert c.u8("kind {}", lambda v: "seven" if v == 7 else v) == 7
    assert c.read_bytes(2, "tag {}", lambda b: b.decode("ascii")) == b"AB"
    assert list(s.marks) == [
        Mark(0x200, 2, "version 16"),
        Mark(0x202, 1, "kind seven"),
        Mark(0x203, 2, "tag AB"),
    ]


def test_filter_multiple_and_zero_values() -> None:
    s = Session(ByteStore(bytes([0x12, 0x34])))
    c = s.root_cursor()
    c.u8("{}.{}", lambda v: (v >> 4, v & 0xF))
    c.u8("raw {:#x}", lambda v: None)
    assert [m.description for m in s.marks] == ["1.2", "raw 0x34"]


def test_read_without_fmt_marks_nothing() -> None:
    s = Session(ByteStore(bytes(8)))
    c = s.root_cursor()
    c.u64()
    assert len(s.marks) == 0


def test_mark_last_read() -> None:
    s = Session(ByteStore(bytes(8), 10))
    c = s.root_cursor()
    with pytest.raises(DecodeError):
        c.mark_last_read("nothing yet")
    c.skip(2)
    c.u32()
    c.mark_last_read("value")
    c.mark_last_read("first half", 2)
    assert list(s.marks) == [Mark(12, 4, "value"), Mark(12, 2, "first half")]


def test_explicit_mark_is_relative_to_cursor() -> None:
    s = Session(ByteStore(bytes(32)))
    c = s.root_cursor().subrange(9, 24)
    c.mark("whole")
    c.mark("middle", 4, 2)
    c.mark("tail", 12)
    c.mark("empty", 3, 0)
    assert list(s.marks) == [
        Mark(8, 16, "whole"),
        Mark(12, 2, "middle"),
        Mark(20, 4, "tail"),
    ]
    with pytest.raises(OutOfBounds):
        c.mark("too long", 10, 10)
    with pytest.raises(OutOfBounds):
        c.mark("negative", -1, 2)


def test_float_reads() -> None:
    import struct

    c = make_cursor(struct.pack("<f", 1.5) + struct.pack(">d", -2.25))
    assert c.f32() == 1.5
    c.endian = "big"
    assert c.f64() == -2.25


def test_seek_and_skip_bounds() -> None:
    c = make_cursor(bytes(4))
    c.seek(4)
    assert c.eof and c.remaining == 0
    with pytest.raises(OutOfBounds):
        c.seek(5)
    c.seek(0)
    with pytest.raises(OutOfBounds):
        c.skip(-1)


def test_rewound_copy_is_independent() -> None:
    c = make_cursor(bytes(range(8)))
    c.u32()
    r = c.rewound()
    assert r.position == 0 and (r.offset, r.length) == (c.offset, c.length)
    r.u16()
    assert c.position == 4


def test_cursor_outside_store_is_rejected() -> None:
    s = Session(ByteStore(bytes(8), 100))
    with pytest.raises(OutOfBounds):
        Cursor(s, 99, 2)
    with pytest.raises(OutOfBounds):
        Cursor(s, 104, 5)
    assert Cursor(s, 108, 0).length == 0
