from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterator

from hexmark.core.flatten import FlatSpan
from hexmark.core.marks import Mark

# Returned by `find_span_index` for offsets preceding the first span
BEFORE_FIRST = -1

DIRECTIONS = ("prev", "next")


class SpanIndex:
    """Binary-search index over flattened spans.

    Answers "what is at offset X" and drives field-to-field navigation.
    """

    def __init__(self, spans: list[FlatSpan], end: int) -> None:
        self._spans = list(spans)
        self._starts = [s.start for s in self._spans]
        self._end = end

    def __len__(self) -> int:
        return len(self._spans)

    def __iter__(self) -> Iterator[FlatSpan]:
        return iter(self._spans)

    def __getitem__(self, index: int) -> FlatSpan:
        return self._spans[index]

    @property
    def spans(self) -> list[FlatSpan]:
        return list(self._spans)

    @property
    def end(self) -> int:
        return self._end

    def span_end(self, index: int) -> int:
        """Offset one past the last byte of span `index`."""
        if index + 1 < len(self._starts):
            return self._starts[index + 1]
        return self._end

    def find_span_index(self, offset: int) -> int:
        """Greatest index whose start is <= `offset`, or `BEFORE_FIRST`."""
        return bisect_right(self._starts, offset) - 1

    def find(self, offset: int) -> FlatSpan | None:
        i = self.find_span_index(offset)
        if i == BEFORE_FIRST or offset >= self._end:
            return None
        return self._spans[i]

    def marks_at(self, offset: int) -> list[Mark]:
        span = self.find(offset)
        if span is None:
            return []
        return list(span.marks)

    def navigate(self, offset: int, direction: str) -> int | None:
        """Start of the span before or after the one covering `offset`.

        Every span boundary is a stop, whether or not the span carries marks.
        Returns None when there is nothing further in that direction.
        """
        if direction not in DIRECTIONS:
            raise ValueError(f"direction must be 'prev' or 'next', got {direction!r}")
        i = self.find_span_index(offset)
        i += 1 if direction == "next" else -1
        if i < 0 or i >= len(self._spans):
            return None
        return self._starts[i]
