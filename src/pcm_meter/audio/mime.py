"""MIME type header parsing for raw PCM streams.

Only little-endian signed 16-bit streams are recognized, as in
"audio/L16; rate=44100; channels=2".
"""

from __future__ import annotations

from typing import NamedTuple, Optional

SUPPORTED_PREFIX = "audio/L16"


class UnsupportedMimeType(ValueError):
    """Raised for an unknown type or a missing/invalid rate or channels parameter."""


class MimeFormat(NamedTuple):
    sample_rate: int
    channels: int
    word_size: int = 16
    little_endian: bool = True
    signed: bool = True


def _parse_positive(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        raise UnsupportedMimeType(f"invalid {name} {raw!r}")
    return value


def parse_mime_type(mime_type: str) -> MimeFormat:
    """Map a Content-Type style string to PCM stream parameters.

    Parameter names are case insensitive. Unknown parameters and pieces
    that are not exactly one key=value pair are ignored.

    Args:
        mime_type: e.g. "audio/L16; rate=44100; channels=2".

    Returns:
        MimeFormat with sample_rate and channels from the header.

    Raises:
        UnsupportedMimeType: On any other type, or missing/invalid parameters.
    """
    rate: Optional[int] = None
    channels: Optional[int] = None
    for i, part in enumerate(mime_type.split(";")):
        part = part.strip()
        if i == 0:
            if not part.startswith(SUPPORTED_PREFIX):
                raise UnsupportedMimeType(f"unrecognized MIME type {part!r}")
            continue
        kv = part.lower().split("=")
        if len(kv) != 2:
            continue
        key, value = kv[0].strip(), kv[1].strip()
        if key == "rate":
            rate = _parse_positive(key, value)
        elif key == "channels":
            channels = _parse_positive(key, value)
    if rate is None or channels is None:
        raise UnsupportedMimeType(
            f"incomplete header (need rate and channels): {mime_type!r}"
        )
    return MimeFormat(sample_rate=rate, channels=channels)
