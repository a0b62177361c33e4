"""gzip members (RFC 1952)."""

from __future__ import annotations

from datetime import datetime, timezone

from hexmark.core.cursor import Cursor
from hexmark.core.errors import DecodeError
from hexmark.core.registry import DecoderRegistry

MAGIC = b"\x1f\x8b"
TRAILER_SIZE = 8

FTEXT = 0x01
FHCRC = 0x02
FEXTRA = 0x04
FNAME = 0x08
FCOMMENT = 0x10

OPERATING_SYSTEMS = {
    0: "FAT",
    1: "Amiga",
    2: "VMS",
    3: "Unix",
    4: "VM/CMS",
    5: "Atari TOS",
    6: "HPFS",
    7: "Macintosh",
    8: "Z-System",
    9: "CP/M",
    10: "TOPS-20",
    11: "NTFS",
    12: "QDOS",
    13: "Acorn RISCOS",
    255: "unknown",
}


def _mtime(value: int) -> str:
    if value == 0:
        return "none"
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def detect(c: Cursor) -> bool:
    return c.remaining >= len(MAGIC) and c.read_bytes(len(MAGIC)) == MAGIC


def decode(c: Cursor) -> None:
    c.endian = "little"
    c.read_bytes(len(MAGIC), "gzip magic")
    c.u8("compression method: {}", lambda v: "deflate" if v == 8 else v)
    flags = c.u8("flags: {:#04x}")
    c.u32("modification time: {}", _mtime)
    c.u8("extra flags: {}")
    c.u8("operating system: {}", lambda v: OPERATING_SYSTEMS.get(v, v))

    if flags & FEXTRA:
        xlen = c.u16("extra field length: {}")
        c.read_bytes(xlen, "extra field")
    if flags & FNAME:
        c.read_cstring("original file name: {}")
    if flags & FCOMMENT:
        c.read_cstring("comment: {}")
    if flags & FHCRC:
        c.u16("header CRC16: {:#06x}")

    payload = c.remaining - TRAILER_SIZE
    if payload < 0:
        raise DecodeError("truncated gzip member: no room for the trailer")
    c.read_bytes(payload, "deflate stream")
    c.u32("CRC32: {:#010x}")
    c.u32("uncompressed size: {}")


def register(registry: DecoderRegistry) -> None:
    registry.register("gzip", decode, detect)
