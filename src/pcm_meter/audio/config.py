"""Centralized decode and report configuration for the loudness meter.

Stream format:
- Interleaved PCM frames, one word per channel
- Word size: 8..56 bits, byte aligned, either byte order
- Signed (two's complement) or unsigned (offset by half scale)

Metering:
- RMS over a window measured in audio time
- Reports every `observe_every_sec` of audio, never by wall clock
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from pcm_meter.audio.mime import parse_mime_type

if TYPE_CHECKING:
    from pcm_meter.pipeline.streaming_meter import LoudnessMeter

NANOS_PER_SECOND = 1_000_000_000


class BadParameters(ValueError):
    """Raised when a meter configuration cannot be decoded or reported."""


def _to_nanos(seconds: float) -> int:
    return int(round(seconds * NANOS_PER_SECOND))


@dataclass(frozen=True)
class MeterLayout:
    """Run-time constants derived once from a valid MeterConfig."""

    frame_bytes: int
    word_bytes: int
    word_max: int
    window_samples: int
    report_period_samples: int
    sliding: bool


@dataclass(frozen=True)
class MeterConfig:
    """PCM stream format and loudness reporting configuration."""

    # Stream format
    sample_rate: int = 44_100
    word_size: int = 16  # bits per sample
    channels: int = 2
    little_endian: bool = True
    signed: bool = True

    # Metering
    # 0.4 s is momentary loudness, 3.0 s short term loudness
    window_sec: float = 0.4
    observe_every_sec: float = 0.4

    @classmethod
    def from_mime_type(cls, mime_type: str, **overrides) -> "MeterConfig":
        """Build a config from a header such as "audio/L16; rate=44100; channels=2".

        Args:
            mime_type: Content-Type style string.
            **overrides: Any other MeterConfig field (window_sec, ...).

        Raises:
            UnsupportedMimeType: Unknown type or missing/invalid parameters.
        """
        fmt = parse_mime_type(mime_type)
        return cls(
            sample_rate=fmt.sample_rate,
            word_size=fmt.word_size,
            channels=fmt.channels,
            little_endian=fmt.little_endian,
            signed=fmt.signed,
            **overrides,
        )

    @property
    def window_nanos(self) -> int:
        return _to_nanos(self.window_sec)

    @property
    def observe_every_nanos(self) -> int:
        return _to_nanos(self.observe_every_sec)

    @property
    def frame_bytes(self) -> int:
        """Bytes per frame (one word per channel)."""
        return self.channels * self.word_size // 8

    @property
    def word_max(self) -> int:
        """Full-scale amplitude, the 0 dB reference."""
        return 1 << (self.word_size - 1)

    @property
    def window_samples(self) -> int:
        """Squared-sample slots in the window, across all channels."""
        return self.channels * self.sample_rate * self.window_nanos // NANOS_PER_SECOND

    @property
    def report_period_samples(self) -> int:
        """Frames counted down between reports."""
        return self.sample_rate * self.observe_every_nanos // NANOS_PER_SECOND - 1

    @property
    def sliding(self) -> bool:
        """True when the window needs a circular buffer (window != report interval)."""
        return self.window_nanos != self.observe_every_nanos

    def problems(self) -> List[str]:
        """Return every violated constraint, empty when the config is usable."""
        found: List[str] = []
        if self.channels < 1:
            found.append(f"channels must be >= 1 (got {self.channels})")
        if self.word_size <= 0 or self.word_size % 8 != 0 or self.word_size >= 64:
            found.append(
                f"word_size must be a positive multiple of 8 below 64 (got {self.word_size})"
            )
        if self.sample_rate < 1:
            found.append(f"sample_rate must be >= 1 (got {self.sample_rate})")
        elif self.report_period_samples < 0:
            found.append(
                f"observe_every_sec={self.observe_every_sec} is shorter than one sample"
            )
        elif self.sliding and self.channels >= 1 and self.window_samples < 1:
            found.append(f"window_sec={self.window_sec} is shorter than one sample")
        return found

    def validate(self) -> MeterLayout:
        """Check the configuration and derive its run-time constants.

        Raises:
            BadParameters: If any constraint is violated.
        """
        found = self.problems()
        if found:
            raise BadParameters("bad meter parameters: " + "; ".join(found))
        return MeterLayout(
            frame_bytes=self.frame_bytes,
            word_bytes=self.word_size // 8,
            word_max=self.word_max,
            window_samples=self.window_samples,
            report_period_samples=self.report_period_samples,
            sliding=self.sliding,
        )

    def open(self, observer: Optional[object] = None) -> "LoudnessMeter":
        """Validate and return a ready LoudnessMeter for this configuration."""
        from pcm_meter.pipeline.streaming_meter import LoudnessMeter

        return LoudnessMeter(self, observer)
