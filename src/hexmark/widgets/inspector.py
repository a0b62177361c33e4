from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from hexmark.core.endian import Endian, decode_float32, decode_float64, decode_int
from hexmark.core.spans import SpanIndex
from hexmark.core.store import ByteStore
from hexmark.ui.palette import PALETTE, Palette

INT_ROWS = (
    ("u8", 1, False),
    ("i8", 1, True),
    ("u16", 2, False),
    ("i16", 2, True),
    ("u32", 4, False),
    ("i32", 4, True),
    ("u64", 8, False),
    ("i64", 8, True),
)


def _available(store: ByteStore, offset: int, width: int) -> bytes | None:
    if not store.contains(offset, width):
        return None
    return store.slice(offset, width)


def describe_offset(
    store: ByteStore,
    offset: int,
    index: SpanIndex | None,
    *,
    endian: Endian,
    palette: Palette = PALETTE,
) -> Text:
    """Field path and numeric interpretations of the bytes at `offset`."""
    label = palette.inspector_label
    value = palette.inspector_value
    dim = palette.inspector_dim

    text = Text()
    text.append("offset ", style=label)
    text.append(f"{offset:#x}", style=value)
    text.append(f"  ({endian} endian)\n", style=dim)

    marks = index.marks_at(offset) if index is not None else []
    if marks:
        for m in marks:
            text.append(f"{m.description}", style=value)
            text.append(f"  [{m.offset:#x}+{m.length}]\n", style=dim)
    else:
        text.append("(unmarked)\n", style=dim)

    for name, width, signed in INT_ROWS:
        data = _available(store, offset, width)
        text.append(f"{name:>4} ", style=label)
        if data is None:
            text.append("—\n", style=dim)
        else:
            text.append(f"{decode_int(data, endian, signed)}\n", style=value)
    for name, width in (("f32", 4), ("f64", 8)):
        data = _available(store, offset, width)
        text.append(f"{name:>4} ", style=label)
        if data is None:
            text.append("—\n", style=dim)
        else:
            f = decode_float32(data, endian) if width == 4 else decode_float64(data, endian)
            text.append(f"{f:.6g}\n" if width == 4 else f"{f:.9g}\n", style=value)
    text.rstrip()
    return text


class Inspector(Static):
    """Values at the hex cursor, decoded in the current byte order."""

    def __init__(
        self,
        store: ByteStore,
        index: SpanIndex | None,
        *,
        endian: Endian = "little",
        palette: Palette = PALETTE,
    ) -> None:
        super().__init__(Text("Inspector"))
        self.store = store
        self.index = index
        self.endian: Endian = endian
        self.palette = palette
        self._offset = store.base

    def update_for(self, offset: int) -> None:
        self._offset = offset
        self.update(
            describe_offset(self.store, offset, self.index, endian=self.endian, palette=self.palette)
        )

    def set_endian(self, endian: Endian) -> None:
        self.endian = endian
        self.update_for(self._offset)
