from __future__ import annotations

import logging

from hexmark.core.cursor import Cursor
from hexmark.core.endian import Endian
from hexmark.core.flatten import COLOR_CYCLE, flatten_marks
from hexmark.core.marks import MarkStore
from hexmark.core.registry import DecoderRegistry
from hexmark.core.spans import SpanIndex
from hexmark.core.store import ByteStore

logger = logging.getLogger(__name__)


class Session:
    """One byte store, its decoder registry and the marks decoded from it.

    The pipeline runs once and strictly in order: decode, flatten, query.
    A failed decode pass leaves the session with no marks and no index.
    """

    def __init__(
        self,
        store: ByteStore,
        registry: DecoderRegistry | None = None,
        *,
        endian: Endian = "little",
        colors: int = COLOR_CYCLE,
    ) -> None:
        self.store = store
        self.registry = registry if registry is not None else DecoderRegistry()
        self.marks = MarkStore()
        self.endian: Endian = endian
        self.colors = colors
        self.decoder: str | None = None
        self._index: SpanIndex | None = None

    def root_cursor(self) -> Cursor:
        return Cursor(self, self.store.base, self.store.size, endian=self.endian)

    @property
    def index(self) -> SpanIndex:
        if self._index is None:
            raise RuntimeError("marks have not been flattened yet")
        return self._index

    @property
    def flattened(self) -> bool:
        return self._index is not None

    def decode(self, type: str | None = None) -> str | None:
        """Run the decode pass over the whole store.

        Any error discards the marks gathered so far and propagates.
        """
        if self._index is not None:
            raise RuntimeError("session has already been decoded")
        try:
            self.decoder = self.registry.decode(self.root_cursor(), type)
        except Exception:
            logger.debug("decode pass failed, discarding %d marks", len(self.marks))
            self.marks = MarkStore()
            raise
        return self.decoder

    def flatten(self) -> SpanIndex:
        spans = flatten_marks(self.marks, self.store.base, self.store.end, colors=self.colors)
        self._index = SpanIndex(spans, self.store.end)
        logger.debug("flattened %d marks into %d spans", len(self.marks), len(spans))
        return self._index

    def run(self, type: str | None = None) -> SpanIndex:
        self.decode(type)
        return self.flatten()
