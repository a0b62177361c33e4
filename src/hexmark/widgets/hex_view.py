from __future__ import annotations

from math import ceil

from rich.style import Style
from rich.text import Text
from textual import events
from textual.reactive import reactive
from textual.widget import Widget

from hexmark.core.spans import SpanIndex
from hexmark.core.store import ByteStore
from hexmark.ui.palette import PALETTE, Palette


def row_base(store: ByteStore, bytes_per_row: int) -> int:
    """Absolute offset of the first row; rows are aligned to `bytes_per_row`."""
    return store.base - store.base % bytes_per_row


def render_rows(
    store: ByteStore,
    index: SpanIndex | None,
    *,
    top_row: int,
    rows: int,
    bytes_per_row: int,
    cursor: int | None = None,
    palette: Palette = PALETTE,
) -> Text:
    """Render `rows` rows of offset, hex cells and ASCII starting at `top_row`.

    Bytes are colored by the field color of the span covering them; bytes
    before the store's base on the first row are left blank.
    """
    first = row_base(store, bytes_per_row)
    text = Text()
    for i in range(rows):
        row = top_row + i
        offset = first + row * bytes_per_row
        if offset >= store.end:
            break
        bg = palette.odd_bg if row & 1 else palette.even_bg
        line = Text(f"{offset:08X}  ", style=Style(color=palette.offset_fg, bgcolor=bg))
        ascii_part = Text()
        for col in range(bytes_per_row):
            off = offset + col
            value = store.byte_at(off)
            sep = " " if col < bytes_per_row - 1 else ""
            if value is None:
                line.append("  " + sep, style=Style(bgcolor=bg))
                ascii_part.append(" ", style=Style(bgcolor=bg))
                continue
            if off == cursor:
                style = Style(color=palette.cursor_fg, bgcolor=palette.cursor_bg)
            else:
                span = index.find(off) if index is not None else None
                fg = palette.field_color(span.color if span is not None else None)
                style = Style(color=fg, bgcolor=bg)
            line.append(f"{value:02X}", style=style)
            line.append(sep, style=Style(bgcolor=bg))
            ascii_part.append(chr(value) if 32 <= value <= 126 else ".", style=style)
        line.append("  ", style=Style(bgcolor=bg))
        line.append_text(ascii_part)
        if i:
            text.append("\n")
        text.append_text(line)
    if not text.plain:
        return Text("<empty>")
    return text


OFFSET_COLUMNS = 10


def offset_at(store: ByteStore, x: int, y: int, *, top_row: int, bytes_per_row: int) -> int | None:
    """Map a cell of the rendered rows back to the absolute offset it shows.

    Both the hex cells and the ASCII column resolve; the offset column, the
    gaps between cells and blank positions outside the store give None.
    """
    if x < OFFSET_COLUMNS or y < 0:
        return None
    hex_width = 3 * bytes_per_row - 1
    rel = x - OFFSET_COLUMNS
    if rel < hex_width:
        if rel % 3 == 2:
            return None
        col = rel // 3
    else:
        col = rel - hex_width - 2
        if not 0 <= col < bytes_per_row:
            return None
    offset = row_base(store, bytes_per_row) + (top_row + y) * bytes_per_row + col
    if not store.contains(offset):
        return None
    return offset


class HexView(Widget):
    """Read-only hex viewer over a byte store, colored by flattened spans."""

    DEFAULT_BYTES_PER_ROW = 16
    SCROLL_STEP = 3
    can_focus = True

    BINDINGS = [
        ("left", "cursor_left", "Left"),
        ("right", "cursor_right", "Right"),
        ("h", "cursor_left", "Left"),
        ("l", "cursor_right", "Right"),
        ("up", "cursor_up", "Up"),
        ("down", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
        ("j", "cursor_down", "Down"),
        ("pageup", "page_up", "PgUp"),
        ("pagedown", "page_down", "PgDn"),
        ("g", "go_start", "Start"),
        ("G", "go_end", "End"),
        ("[", "field_prev", "Prev Field"),
        ("]", "field_next", "Next Field"),
    ]

    scroll_rows: int = reactive(0)
    cursor_offset: int = reactive(0)

    def __init__(
        self,
        store: ByteStore,
        index: SpanIndex | None = None,
        *,
        bytes_per_row: int | None = None,
        palette: Palette = PALETTE,
    ) -> None:
        super().__init__()
        self.store = store
        self.index = index
        self.palette = palette
        self.bytes_per_row = bytes_per_row or self.DEFAULT_BYTES_PER_ROW
        self.cursor_offset = store.base

    # ---- Scrolling helpers ----
    def total_rows(self) -> int:
        span = self.store.end - row_base(self.store, self.bytes_per_row)
        return max(1, int(ceil(span / self.bytes_per_row)))

    def visible_rows(self) -> int:
        # Fallback to 16 rows if height is unknown yet.
        h = self.size.height or 0
        return h if h > 0 else 16

    def row_of(self, offset: int) -> int:
        return (offset - row_base(self.store, self.bytes_per_row)) // self.bytes_per_row

    def set_top_row(self, row: int) -> None:
        max_top = max(0, self.total_rows() - self.visible_rows())
        self.scroll_rows = max(0, min(row, max_top))
        self.refresh()

    def render(self) -> Text:
        return render_rows(
            self.store,
            self.index,
            top_row=self.scroll_rows,
            rows=self.visible_rows(),
            bytes_per_row=self.bytes_per_row,
            cursor=self.cursor_offset if self.store.size else None,
            palette=self.palette,
        )

    # ---- Cursor movement ----
    def set_cursor(self, offset: int) -> None:
        if self.store.size == 0:
            self.cursor_offset = self.store.base
        else:
            self.cursor_offset = max(self.store.base, min(offset, self.store.end - 1))
        self.ensure_cursor_visible()
        self.refresh()
        if hasattr(self.app, "on_hex_cursor_moved"):
            self.app.on_hex_cursor_moved(self.cursor_offset)  # type: ignore[attr-defined]

    def move_cursor(self, delta: int) -> None:
        self.set_cursor(self.cursor_offset + delta)

    def ensure_cursor_visible(self) -> None:
        row = self.row_of(self.cursor_offset)
        if row < self.scroll_rows:
            self.set_top_row(row)
        elif row >= self.scroll_rows + self.visible_rows():
            self.set_top_row(row - self.visible_rows() + 1)

    def goto_field(self, direction: str) -> bool:
        if self.index is None:
            return False
        target = self.index.navigate(self.cursor_offset, direction)
        if target is None:
            return False
        self.set_cursor(target)
        return True

    # ---- Mouse ----
    def on_click(self, event: events.Click) -> None:
        offset = offset_at(
            self.store,
            event.x,
            event.y,
            top_row=self.scroll_rows,
            bytes_per_row=self.bytes_per_row,
        )
        if offset is not None:
            self.set_cursor(offset)

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self.set_top_row(self.scroll_rows - self.SCROLL_STEP)
        event.stop()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self.set_top_row(self.scroll_rows + self.SCROLL_STEP)
        event.stop()

    # ---- Actions (bound in BINDINGS) ----
    def action_cursor_left(self) -> None:
        self.move_cursor(-1)

    def action_cursor_right(self) -> None:
        self.move_cursor(1)

    def action_cursor_up(self) -> None:
        self.move_cursor(-self.bytes_per_row)

    def action_cursor_down(self) -> None:
        self.move_cursor(self.bytes_per_row)

    def action_page_up(self) -> None:
        self.move_cursor(-self.visible_rows() * self.bytes_per_row)

    def action_page_down(self) -> None:
        self.move_cursor(self.visible_rows() * self.bytes_per_row)

    def action_go_start(self) -> None:
        self.set_cursor(self.store.base)

    def action_go_end(self) -> None:
        self.set_cursor(self.store.end - 1)

    def action_field_prev(self) -> None:
        if not self.goto_field("prev"):
            self.app.bell()

    def action_field_next(self) -> None:
        if not self.goto_field("next"):
            self.app.bell()
