from __future__ import annotations

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Static

from hexmark.core.endian import flip_endian
from hexmark.core.session import Session
from hexmark.ui.palette import PALETTE, Palette
from hexmark.widgets.hex_view import HexView
from hexmark.widgets.inspector import Inspector


def status_line(session: Session, offset: int, palette: Palette = PALETTE) -> Text:
    """Cursor offset followed by the marks covering it, innermost first."""
    text = Text()
    text.append(f"{offset:08X}", style=palette.bar_fg)
    marks = session.index.marks_at(offset)
    if marks:
        text.append("  ")
        text.append(" < ".join(m.description for m in marks), style=palette.bar_fg)
    if session.decoder is not None:
        text.append(f"  [{session.decoder}]", style=palette.inspector_dim)
    return text


class HexmarkApp(App):
    """Textual application shell for hexmark."""

    DEFAULT_CSS = """
    #main { height: 1fr; }
    HexView { width: 1fr; height: 1fr; }
    Inspector { width: 36; height: 1fr; padding: 0 1; }
    #status { height: 1; }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("escape", "quit", "Quit"),
        ("tab", "toggle_endian", "Endian"),
    ]

    def __init__(
        self,
        session: Session,
        *,
        name: str | None = None,
        bytes_per_row: int = 16,
        palette: Palette = PALETTE,
    ) -> None:
        super().__init__()
        self.session = session
        self.palette = palette
        self.title = f"hexmark - {name or '<stdin>'}"
        self.hex_view = HexView(
            session.store, session.index, bytes_per_row=bytes_per_row, palette=palette
        )
        self.inspector = Inspector(
            session.store, session.index, endian=session.endian, palette=palette
        )
        self.status = Static(id="status")

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main"):
            yield self.hex_view
            yield self.inspector
        yield self.status
        yield Footer()

    def on_mount(self) -> None:
        self.status.styles.background = self.palette.bar_bg
        self.hex_view.focus()
        self.on_hex_cursor_moved(self.hex_view.cursor_offset)

    def on_hex_cursor_moved(self, offset: int) -> None:
        self.status.update(status_line(self.session, offset, self.palette))
        self.inspector.update_for(offset)

    def action_toggle_endian(self) -> None:
        self.inspector.set_endian(flip_endian(self.inspector.endian))
