from __future__ import annotations

import io
import logging
import sys
from dataclasses import dataclass
from typing import BinaryIO

from hexmark.core.errors import OutOfBounds

logger = logging.getLogger(__name__)

DEFAULT_SIZE_LIMIT = 1 << 30
_READ_CHUNK = 8192


@dataclass(frozen=True)
class ByteStore:
    """The loaded bytes and the absolute offset of their first byte.

    Immutable after load; cursors borrow read-only slices of it.
    """

    data: bytes
    base: int = 0

    def __post_init__(self) -> None:
        if self.base < 0:
            raise ValueError("base offset must be >= 0")

    def __len__(self) -> int:
        return len(self.data)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def end(self) -> int:
        """Absolute offset one past the last byte."""
        return self.base + len(self.data)

    def contains(self, offset: int, length: int = 1) -> bool:
        return length >= 0 and self.base <= offset and offset + length <= self.end

    def slice(self, offset: int, length: int) -> bytes:
        """Return `length` bytes starting at absolute `offset`.

        Raises `OutOfBounds` when any requested byte lies outside the store.
        """
        if not self.contains(offset, length):
            raise OutOfBounds(
                f"range [{offset:#x}, {offset + length:#x}) outside "
                f"[{self.base:#x}, {self.end:#x})"
            )
        start = offset - self.base
        return self.data[start : start + length]

    def byte_at(self, offset: int) -> int | None:
        """Return the byte value at absolute `offset`, or None outside the store."""
        if not self.contains(offset):
            return None
        return self.data[offset - self.base]


def _skip(stream: BinaryIO, offset: int) -> None:
    # Seek in the file or pipe however we can
    try:
        if stream.seekable():
            stream.seek(offset, io.SEEK_SET)
            return
    except (OSError, ValueError):
        pass
    remaining = offset
    while remaining:
        chunk = stream.read(min(remaining, _READ_CHUNK))
        if not chunk:
            return
        remaining -= len(chunk)


def read_store(stream: BinaryIO, *, offset: int = 0, limit: int = DEFAULT_SIZE_LIMIT) -> ByteStore:
    """Read up to `limit` bytes from `stream`, starting at `offset`."""
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if limit < 0:
        raise ValueError("size limit must be >= 0")
    if offset:
        _skip(stream, offset)

    buf = bytearray()
    while len(buf) < limit:
        chunk = stream.read(min(limit - len(buf), _READ_CHUNK * 16))
        if not chunk:
            break
        buf += chunk
    logger.debug("loaded %d bytes at offset %#x", len(buf), offset)
    return ByteStore(bytes(buf), offset)


def load_store(
    path: str | None, *, offset: int = 0, limit: int = DEFAULT_SIZE_LIMIT
) -> ByteStore:
    """Load a byte store from `path`, or from binary standard input when None."""
    if path is None:
        return read_store(sys.stdin.buffer, offset=offset, limit=limit)
    try:
        fh = open(path, "rb")  # noqa: SIM115
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None
    with fh:
        return read_store(fh, offset=offset, limit=limit)
