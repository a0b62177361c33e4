"""Endianness support for hexmark: types, normalization, and decoding."""

from __future__ import annotations

import struct
from typing import Literal

# Type alias for endianness
Endian = Literal["little", "big"]

INT_WIDTHS = (1, 2, 4, 8)


def normalize_endian(value: str | None) -> Endian | None:
    """Normalize an endian value from configuration or a decoder.

    Accepts "little"/"big" as well as the short forms "le"/"be".

    Raises:
        ValueError: If value is not a known byte order
    """
    if value is None:
        return None

    value_lower = value.lower()
    if value_lower in ("le", "little"):
        return "little"
    if value_lower in ("be", "big"):
        return "big"
    raise ValueError(f"Invalid endian '{value}'. Expected 'little' or 'big'.")


def flip_endian(endian: Endian) -> Endian:
    return "big" if endian == "little" else "little"


def decode_int(data: bytes, endian: Endian, signed: bool) -> int:
    """Decode an integer from bytes with the specified endianness.

    Args:
        data: Bytes to decode (1, 2, 4 or 8 of them)
        endian: Byte order ('little' or 'big')
        signed: Reinterpret as two's complement

    Returns:
        Decoded integer value
    """
    if len(data) not in INT_WIDTHS:
        raise ValueError(f"Unsupported integer width: {len(data)}")
    return int.from_bytes(data, byteorder=endian, signed=signed)


def decode_float32(data: bytes, endian: Endian) -> float:
    format_char = "<f" if endian == "little" else ">f"
    return struct.unpack(format_char, data)[0]


def decode_float64(data: bytes, endian: Endian) -> float:
    format_char = "<d" if endian == "little" else ">d"
    return struct.unpack(format_char, data)[0]
