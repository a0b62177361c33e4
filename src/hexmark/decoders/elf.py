"""ELF object files: identification, file header and header tables."""

from __future__ import annotations

from hexmark.core.cursor import Cursor
from hexmark.core.errors import DecodeError
from hexmark.core.registry import DecoderRegistry

MAGIC = b"\x7fELF"

CLASSES = {1: "ELF32", 2: "ELF64"}
ENCODINGS = {1: "little endian", 2: "big endian"}

OS_ABIS = {
    0: "System V",
    1: "HP-UX",
    2: "NetBSD",
    3: "Linux",
    6: "Solaris",
    9: "FreeBSD",
    12: "OpenBSD",
}

TYPES = {0: "none", 1: "relocatable", 2: "executable", 3: "shared object", 4: "core"}

MACHINES = {
    0x03: "x86",
    0x08: "MIPS",
    0x14: "PowerPC",
    0x28: "ARM",
    0x2A: "SuperH",
    0x32: "IA-64",
    0x3E: "x86-64",
    0xB7: "AArch64",
    0xF3: "RISC-V",
}

SEGMENT_TYPES = {
    0: "PT_NULL",
    1: "PT_LOAD",
    2: "PT_DYNAMIC",
    3: "PT_INTERP",
    4: "PT_NOTE",
    5: "PT_SHLIB",
    6: "PT_PHDR",
    7: "PT_TLS",
}


def detect(c: Cursor) -> bool:
    return c.remaining >= len(MAGIC) and c.read_bytes(len(MAGIC)) == MAGIC


def _program_headers(c: Cursor, offset: int, size: int, count: int) -> None:
    for i in range(count):
        start = offset + i * size
        c.mark(f"program header {i}", start, size)
        entry = c.subrange(start + 1, start + size)
        entry.u32("segment type: {}", lambda v: SEGMENT_TYPES.get(v, hex(v)))


def _section_headers(c: Cursor, offset: int, size: int, count: int) -> None:
    for i in range(count):
        c.mark(f"section header {i}", offset + i * size, size)


def decode(c: Cursor) -> None:
    ident = c.subrange(1, 16)
    ident.read_bytes(len(MAGIC), "ELF magic")
    elf_class = ident.u8("class: {}", lambda v: CLASSES.get(v, "invalid"))
    encoding = ident.u8("data encoding: {}", lambda v: ENCODINGS.get(v, "invalid"))
    ident.u8("ELF version: {}")
    ident.u8("OS ABI: {}", lambda v: OS_ABIS.get(v, v))
    ident.u8("ABI version: {}")
    ident.mark("padding", ident.position)
    if elf_class not in CLASSES or encoding not in ENCODINGS:
        raise DecodeError(f"unsupported ELF class {elf_class} or encoding {encoding}")

    c.endian = "little" if encoding == 1 else "big"
    word = c.u32 if elf_class == 1 else c.u64
    c.seek(16)
    c.u16("type: {}", lambda v: TYPES.get(v, hex(v)))
    c.u16("machine: {}", lambda v: MACHINES.get(v, hex(v)))
    c.u32("version: {}")
    word("entry point: {:#x}")
    phoff = word("program header table offset: {}")
    shoff = word("section header table offset: {}")
    c.u32("flags: {:#x}")
    c.u16("ELF header size: {}")
    phentsize = c.u16("program header entry size: {}")
    phnum = c.u16("program header count: {}")
    shentsize = c.u16("section header entry size: {}")
    shnum = c.u16("section header count: {}")
    c.u16("section name string table index: {}")
    c.subrange(1, c.position).mark("ELF header")

    if phnum:
        _program_headers(c, phoff, phentsize, phnum)
    if shnum:
        _section_headers(c, shoff, shentsize, shnum)


def register(registry: DecoderRegistry) -> None:
    registry.register("elf", decode, detect)
