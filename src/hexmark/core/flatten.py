"""Flatten possibly overlapping marks into a colored partition of the store."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from hexmark.core.marks import Mark

# Number of field colors cycled through by consecutive marked spans
COLOR_CYCLE = 4


@dataclass(frozen=True)
class FlatSpan:
    """A maximal run of bytes over which the set of active marks is constant.

    The span extends up to the next span's start (or the end of the store).
    `marks` lists the innermost (most recently opened) mark first.
    """

    start: int
    marks: tuple[Mark, ...] = ()
    color: int | None = None

    @property
    def marked(self) -> bool:
        return bool(self.marks)


def flatten_marks(
    marks: Iterable[Mark], start: int, end: int, *, colors: int = COLOR_CYCLE
) -> list[FlatSpan]:
    """Sweep mark boundaries in ascending order and emit one span per change.

    Marks are clipped to ``[start, end)``. The color index advances only when
    a marked span is emitted, so gaps between fields never consume a color.
    """
    if colors <= 0:
        raise ValueError("colors must be positive")
    if end <= start:
        return []

    # (clipped start, clipped end, mark)
    pending: list[tuple[int, int, Mark]] = []
    for m in marks:
        if m.length <= 0:
            continue
        s = max(m.offset, start)
        e = min(m.end, end)
        if e > s:
            pending.append((s, e, m))
    # Longer fields open first and thus "contain" shorter ones starting there
    pending.sort(key=lambda item: (item[0], item[0] - item[1]))

    spans: list[FlatSpan] = []
    if not pending or pending[0][0] > start:
        spans.append(FlatSpan(start))

    current: list[tuple[int, int, Mark]] = []
    i = 0
    color = 0
    while current or i < len(pending):
        closest = min(e for _, e, _ in current) if current else end
        if i < len(pending):
            closest = min(closest, pending[i][0])

        current = [item for item in current if item[1] != closest]
        while i < len(pending) and pending[i][0] == closest:
            current.append(pending[i])
            i += 1

        if closest >= end:
            continue
        if current:
            active = tuple(m for _, _, m in reversed(current))
            spans.append(FlatSpan(closest, active, color))
            color = (color + 1) % colors
        else:
            spans.append(FlatSpan(closest))
    return spans
