from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class Mark:
    offset: int  # absolute
    length: int
    description: str

    @property
    def end(self) -> int:
        return self.offset + self.length


class MarkStore:
    """Append-only list of marks emitted during the decode pass."""

    def __init__(self) -> None:
        self._marks: list[Mark] = []

    def add(self, offset: int, length: int, description: str) -> Mark | None:
        # Empty or negative ranges would corrupt the flattening sweep
        if length <= 0:
            return None
        mark = Mark(int(offset), int(length), str(description))
        self._marks.append(mark)
        return mark

    @property
    def marks(self) -> tuple[Mark, ...]:
        return tuple(self._marks)

    def __len__(self) -> int:
        return len(self._marks)

    def __iter__(self) -> Iterator[Mark]:
        return iter(self._marks)
