from __future__ import annotations

from dataclasses import dataclass, fields, replace


@dataclass(frozen=True)
class Palette:
    header_fg: str
    header_bg: str
    bar_fg: str
    bar_bg: str
    offset_fg: str
    even_bg: str
    odd_bg: str
    cursor_fg: str
    cursor_bg: str
    unmapped_fg: str
    # Field colors, cycled by consecutive marked spans
    field_0: str
    field_1: str
    field_2: str
    field_3: str
    inspector_label: str
    inspector_value: str
    inspector_dim: str
    warning: str
    error: str

    @property
    def field_colors(self) -> tuple[str, str, str, str]:
        return (self.field_0, self.field_1, self.field_2, self.field_3)

    def field_color(self, color: int | None) -> str:
        if color is None:
            return self.unmapped_fg
        return self.field_colors[color % len(self.field_colors)]

    def with_overrides(self, colors: dict[str, str]) -> Palette:
        return replace(self, **colors)


def palette_roles() -> set[str]:
    return {f.name for f in fields(Palette)}


DEFAULT = Palette(
    header_fg="#d8dee9",
    header_bg="#1f2430",
    bar_fg="#ffffff",
    bar_bg="#314f76",
    offset_fg="#8892a0",
    even_bg="#0f1117",
    odd_bg="#161a22",
    cursor_fg="#ffffff",
    cursor_bg="#b36b00",
    unmapped_fg="#6b7280",
    field_0="#9cdcfe",
    field_1="#d7ba7d",
    field_2="#b5cea8",
    field_3="#ce9178",
    inspector_label="#8892a0",
    inspector_value="#ffffff",
    inspector_dim="#6b7280",
    warning="#ffaa00",
    error="#ff5555",
)

# Selected palette for now
PALETTE = DEFAULT
