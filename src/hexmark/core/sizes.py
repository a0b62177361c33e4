"""Size arguments decoded with rules similar to those dd(1) uses."""

from __future__ import annotations

import re

UINT64_MAX = (1 << 64) - 1

# Octal and hexadecimal numbers are accepted; they clash with suffixes, so
# the number is matched greedily first ("0x1b" is 27, not 1 block).
_SIZE_RE = re.compile(r"^(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)(c|w|b|KB|K|MB|M|GB|G)?$")

SUFFIXES = {
    None: 1,
    "c": 1,
    "w": 1 << 1,
    "b": 1 << 9,
    "K": 1 << 10,
    "KB": 1000,
    "M": 1 << 20,
    "MB": 1000**2,
    "G": 1 << 30,
    "GB": 1000**3,
}


def decode_size(text: str) -> int:
    """Decode a size such as ``512``, ``0x200``, ``4K`` or ``1GB``.

    Raises:
        ValueError: On a malformed number, an unknown suffix, or overflow
    """
    m = _SIZE_RE.match(text.strip())
    if m is None:
        raise ValueError(f"invalid size: {text!r}")
    digits, suffix = m.groups()
    if digits[:2].lower() == "0x":
        n = int(digits[2:], 16)
    elif digits.startswith("0"):
        n = int(digits, 8)
    else:
        n = int(digits)
    value = n * SUFFIXES[suffix]
    if value > UINT64_MAX:
        raise ValueError(f"size out of range: {text!r}")
    return value
