"""Cursors: the view decoders use to walk, read and mark the byte store."""

from __future__ import annotations

import copy
from collections.abc import Callable
from functools import partialmethod
from typing import TYPE_CHECKING, Any

from hexmark.core.endian import (
    INT_WIDTHS,
    Endian,
    decode_float32,
    decode_float64,
    decode_int,
    normalize_endian,
)
from hexmark.core.errors import DecodeError, OutOfBounds, UnterminatedString

if TYPE_CHECKING:
    from hexmark.core.session import Session

Filter = Callable[[Any], Any]

TERMINATOR = b"\x00"


class Cursor:
    """A read position and byte order over a sub-range of the byte store.

    `offset` is absolute, `position` is relative to it and lies in
    `[0, length]`. Sub-ranging copies; the parent is never affected, so any
    number of cursors may coexist over the same store.

    Every reader accepts an optional `fmt` template (``str.format`` syntax)
    and an optional `filter` applied to the raw value first. When `fmt` is
    given, the formatted text is marked over the bytes just read. The filter
    result is spread into the template when it is a tuple and passed as a
    single argument otherwise; ``None`` or ``()`` keeps the raw value.
    """

    def __init__(
        self, session: Session, offset: int, length: int, *, endian: Endian = "little"
    ) -> None:
        if length < 0 or not session.store.contains(offset, length):
            raise OutOfBounds(
                f"cursor [{offset:#x}, {offset + length:#x}) outside the byte store"
            )
        self.session = session
        self.offset = offset
        self.length = length
        self._position = 0
        self._endian: Endian = normalize_endian(endian) or "little"
        # (relative start, length) of the most recent read
        self._last_read: tuple[int, int] | None = None

    def __repr__(self) -> str:
        return (
            f"Cursor(offset={self.offset:#x}, length={self.length}, "
            f"position={self._position}, endian={self._endian!r})"
        )

    def __len__(self) -> int:
        return self.length

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def endian(self) -> Endian:
        return self._endian

    @endian.setter
    def endian(self, value: str) -> None:
        self._endian = normalize_endian(value) or "little"

    # ---- Position ----
    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return self.length - self._position

    @property
    def eof(self) -> bool:
        return self._position >= self.length

    def seek(self, position: int) -> None:
        if not 0 <= position <= self.length:
            raise OutOfBounds(f"position {position} outside [0, {self.length}]")
        self._position = position

    def skip(self, n: int) -> None:
        self.seek(self._position + n)

    # ---- Deriving ----
    def subrange(self, start: int = 1, end: int = -1) -> Cursor:
        """Return a cursor over bytes `start`..`end` of this one.

        Indices are 1-based and inclusive, negative ones count from the end,
        exactly like Lua's ``string.sub``. An inverted range yields an empty
        cursor that keeps this cursor's offset.
        """
        n = self.length
        if start < 0:
            start = n + start + 1
        if end < 0:
            end = n + end + 1
        start = max(start, 1)
        end = min(end, n)

        child = copy.copy(self)
        child._position = 0
        child._last_read = None
        if start > end:
            child.length = 0
        else:
            child.offset = self.offset + start - 1
            child.length = end - start + 1
        return child

    def rewound(self) -> Cursor:
        """A copy over the same range with the read position reset."""
        clone = copy.copy(self)
        clone._position = 0
        clone._last_read = None
        return clone

    # ---- Reading ----
    def _take(self, n: int) -> bytes:
        if n < 0:
            raise OutOfBounds(f"negative read length: {n}")
        if self._position + n > self.length:
            raise OutOfBounds(
                f"cannot read {n} bytes at position {self._position} "
                f"of {self.length} (offset {self.offset + self._position:#x})"
            )
        start = self._position
        data = self.session.store.slice(self.offset + start, n)
        self._position += n
        self._last_read = (start, n)
        return data

    def _describe(self, value: Any, fmt: str | None, filter: Filter | None) -> Any:
        if fmt is None:
            return value
        args: tuple[Any, ...] = (value,)
        if filter is not None:
            result = filter(value)
            if isinstance(result, tuple):
                args = result or args
            elif result is not None:
                args = (result,)
        self.mark_last_read(fmt.format(*args))
        return value

    def read_bytes(self, n: int, fmt: str | None = None, filter: Filter | None = None) -> bytes:
        return self._describe(self._take(n), fmt, filter)

    def read_cstring(self, fmt: str | None = None, filter: Filter | None = None) -> str:
        """Read a NUL-terminated string, consuming the terminator too."""
        rest = self.session.store.slice(self.offset + self._position, self.remaining)
        nul = rest.find(TERMINATOR)
        if nul == -1:
            raise UnterminatedString(
                f"no terminator after offset {self.offset + self._position:#x}"
            )
        data = self._take(nul + 1)
        return self._describe(data[:nul].decode("latin-1"), fmt, filter)

    def read_int(
        self,
        width: int,
        signed: bool = False,
        fmt: str | None = None,
        filter: Filter | None = None,
    ) -> int:
        if width not in INT_WIDTHS:
            raise ValueError(f"Unsupported integer width: {width}")
        value = decode_int(self._take(width), self._endian, signed)
        return self._describe(value, fmt, filter)

    def read_float(
        self, width: int, fmt: str | None = None, filter: Filter | None = None
    ) -> float:
        if width == 4:
            value = decode_float32(self._take(4), self._endian)
        elif width == 8:
            value = decode_float64(self._take(8), self._endian)
        else:
            raise ValueError(f"Unsupported float width: {width}")
        return self._describe(value, fmt, filter)

    u8 = partialmethod(read_int, 1, False)
    u16 = partialmethod(read_int, 2, False)
    u32 = partialmethod(read_int, 4, False)
    u64 = partialmethod(read_int, 8, False)
    i8 = partialmethod(read_int, 1, True)
    i16 = partialmethod(read_int, 2, True)
    i32 = partialmethod(read_int, 4, True)
    i64 = partialmethod(read_int, 8, True)
    f32 = partialmethod(read_float, 4)
    f64 = partialmethod(read_float, 8)

    # ---- Marking ----
    def mark_last_read(self, description: str, length: int | None = None) -> None:
        """Mark the bytes of the most recent read (or `length` bytes from its start)."""
        if self._last_read is None:
            raise DecodeError("nothing has been read from this cursor yet")
        start, size = self._last_read
        self.session.marks.add(self.offset + start, size if length is None else length, description)

    def mark(self, description: str, offset: int = 0, length: int | None = None) -> None:
        """Mark a range given relative to this cursor; the default is all of it."""
        if length is None:
            length = self.length - offset
        if offset < 0 or length < 0 or offset + length > self.length:
            raise OutOfBounds(
                f"mark [{offset}, {offset + length}) outside cursor of length {self.length}"
            )
        self.session.marks.add(self.offset + offset, length, description)

    # ---- Dispatch ----
    def identify(self) -> str | None:
        return self.session.registry.identify(self)

    def decode(self, type: str | None = None) -> str | None:
        return self.session.registry.decode(self, type)
