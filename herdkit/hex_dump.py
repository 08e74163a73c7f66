"""Formatted hex dumps in the style of xxd."""

from __future__ import annotations

_ROW_BYTES = 16


def _row(offset: int, chunk: bytes) -> str:
    hex_part = []
    for start in range(0, _ROW_BYTES, 2):
        pair = chunk[start:start + 2]
        hex_part.append(" " + pair.hex().ljust(4))
    text = "".join(chr(b) if 32 <= b <= 126 else "." for b in chunk)
    return f"{offset:08x}:" + "".join(hex_part) + "  " + text.ljust(_ROW_BYTES) + "\n"


def hex_dump(data) -> str:
    """Return a hex dump of any bytes-like object, one 16-byte row per line."""
    raw = memoryview(data).tobytes()
    return "".join(
        _row(offset, raw[offset:offset + _ROW_BYTES])
        for offset in range(0, len(raw) + 1, _ROW_BYTES)
    )