"""String encoding of persisted series points.

Each point is stored as ``"<x>;<y>"``. Timestamps are written in ISO-8601 and
therefore always contain a colon, which is what tells them apart from plain
numbers when decoding.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from station_charts.units import InstantX, NumericX, XValue
from station_charts.errors import DataCorruptionError

SEPARATOR = ";"


def encode_x(x: XValue) -> str:
    if isinstance(x, InstantX):
        return x.moment.isoformat()
    return repr(float(x.value))


def decode_x(text: str) -> XValue:
    text = text.strip()
    if ":" in text:
        return InstantX(datetime.fromisoformat(text))
    return NumericX(float(text))


def encode_point(x: XValue, y: float) -> str:
    return f"{encode_x(x)}{SEPARATOR}{float(y)!r}"


def decode_point(raw: str, key: Optional[str] = None) -> tuple[XValue, float]:
    """Parse a stored point string, raising :class:`DataCorruptionError` on bad input."""
    parts = raw.split(SEPARATOR)
    if len(parts) != 2:
        raise DataCorruptionError(
            f"Expected '<x>;<y>' but found {len(parts)} field(s) in {raw!r}", key=key, raw=raw
        )
    x_text, y_text = parts
    try:
        x = decode_x(x_text)
        y = float(y_text.strip())
    except ValueError as exc:
        raise DataCorruptionError(f"Failed to decode point {raw!r}: {exc}", key=key, raw=raw) from exc
    return x, y
