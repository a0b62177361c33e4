"""PNG images: the signature followed by a walk over the chunk list."""

from __future__ import annotations

from hexmark.core.cursor import Cursor
from hexmark.core.registry import DecoderRegistry

SIGNATURE = b"\x89PNG\r\n\x1a\n"

COLOR_TYPES = {
    0: "grayscale",
    2: "truecolor",
    3: "indexed",
    4: "grayscale with alpha",
    6: "truecolor with alpha",
}


def _ihdr(c: Cursor) -> None:
    c.u32("width: {}")
    c.u32("height: {}")
    c.u8("bit depth: {}")
    c.u8("color type: {} ({})", lambda v: (v, COLOR_TYPES.get(v, "unknown")))
    c.u8("compression method: {}")
    c.u8("filter method: {}")
    c.u8("interlace method: {}", lambda v: "Adam7" if v == 1 else "none")


def _text(c: Cursor) -> None:
    c.read_cstring("keyword: {}")
    c.read_bytes(c.remaining, "text: {}", lambda b: b.decode("latin-1"))


def _time(c: Cursor) -> None:
    c.u16("year: {}")
    c.u8("month: {}")
    c.u8("day: {}")
    c.u8("hour: {}")
    c.u8("minute: {}")
    c.u8("second: {}")


def _phys(c: Cursor) -> None:
    c.u32("pixels per unit, X axis: {}")
    c.u32("pixels per unit, Y axis: {}")
    c.u8("unit: {}", lambda v: "meter" if v == 1 else "unknown")


def _gama(c: Cursor) -> None:
    c.u32("gamma: {}", lambda v: v / 100000)


CHUNK_DETAILS = {
    b"IHDR": _ihdr,
    b"tEXt": _text,
    b"tIME": _time,
    b"pHYs": _phys,
    b"gAMA": _gama,
}


def detect(c: Cursor) -> bool:
    return c.remaining >= len(SIGNATURE) and c.read_bytes(len(SIGNATURE)) == SIGNATURE


def decode(c: Cursor) -> None:
    c.endian = "big"
    c.read_bytes(len(SIGNATURE), "PNG signature")
    while not c.eof:
        start = c.position
        length = c.u32("chunk length: {}")
        kind = c.read_bytes(4, "chunk type: {}", lambda b: b.decode("latin-1"))

        data = c.subrange(c.position + 1, c.position + length)
        c.skip(length)
        detail = CHUNK_DETAILS.get(kind)
        if detail is not None:
            detail(data)
        else:
            data.mark("chunk data")
        c.u32("CRC: {:#010x}")
        c.subrange(start + 1, c.position).mark(f"{kind.decode('latin-1')} chunk")
        if kind == b"IEND":
            break

    if not c.eof:
        c.mark("trailing data", c.position)


def register(registry: DecoderRegistry) -> None:
    registry.register("png", decode, detect)
