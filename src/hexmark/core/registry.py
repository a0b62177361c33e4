"""Decoder registry: name-keyed, registration-ordered dispatch of byte ranges."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from hexmark.core.errors import DecodeCallbackError, DuplicateDecoder, UnknownDecoderName

if TYPE_CHECKING:
    from hexmark.core.cursor import Cursor

logger = logging.getLogger(__name__)

DecodeFn = Callable[["Cursor"], None]
DetectFn = Callable[["Cursor"], bool]


@dataclass(frozen=True)
class Decoder:
    """A pluggable component that recognizes and annotates a byte range."""

    type: str
    decode: DecodeFn
    detect: DetectFn | None = None


class DecoderRegistry:
    """Decoders keyed by type name.

    Auto-detection asks decoders in registration order; the first one whose
    predicate accepts the range wins.
    """

    def __init__(self) -> None:
        self._decoders: dict[str, Decoder] = {}

    def add(self, decoder: Decoder) -> Decoder:
        if decoder.type in self._decoders:
            raise DuplicateDecoder(decoder.type)
        self._decoders[decoder.type] = decoder
        logger.debug("registered decoder %s", decoder.type)
        return decoder

    def register(
        self, type: str, decode: DecodeFn, detect: DetectFn | None = None
    ) -> Decoder:
        return self.add(Decoder(type=type, decode=decode, detect=detect))

    def get(self, type: str) -> Decoder:
        try:
            return self._decoders[type]
        except KeyError:
            raise UnknownDecoderName(type) from None

    def names(self) -> list[str]:
        return list(self._decoders)

    def __contains__(self, type: object) -> bool:
        return type in self._decoders

    def __iter__(self) -> Iterator[Decoder]:
        return iter(self._decoders.values())

    def __len__(self) -> int:
        return len(self._decoders)

    def identify(self, cursor: Cursor) -> str | None:
        """Return the type of the first decoder whose `detect` accepts `cursor`.

        Each predicate sees its own rewound copy, so none of them can disturb
        the cursor later handed to `decode`. A failing predicate aborts
        identification instead of falling through to the next decoder.
        """
        for decoder in self._decoders.values():
            if decoder.detect is None:
                continue
            try:
                accepted = decoder.detect(cursor.rewound())
            except DecodeCallbackError:
                raise
            except Exception as e:
                raise DecodeCallbackError(decoder.type, e) from e
            if accepted:
                return decoder.type
        return None

    def decode(self, cursor: Cursor, type: str | None = None) -> str | None:
        """Run one decoder over `cursor`: the forced `type`, or the detected one.

        Returns the type used, or None when nothing recognized the range.
        """
        if type is not None:
            decoder = self.get(type)
        else:
            found = self.identify(cursor)
            if found is None:
                logger.info("no decoder recognized %d bytes at %#x", cursor.length, cursor.offset)
                return None
            decoder = self._decoders[found]

        logger.info("decoding %d bytes at %#x as %s", cursor.length, cursor.offset, decoder.type)
        try:
            decoder.decode(cursor)
        except DecodeCallbackError:
            raise
        except Exception as e:
            raise DecodeCallbackError(decoder.type, e) from e
        return decoder.type
