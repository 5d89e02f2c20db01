"""Streaming loudness meter: bytes -> samples -> window/peak -> report.

Reports are scheduled in audio time: one report per report period of
decoded frames, delivered synchronously from write() to the observer.

Streaming: arbitrary chunk sizes, partial frames carried over, O(1)
amortized work per sample.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from pcm_meter.audio.config import MeterConfig, MeterLayout
from pcm_meter.audio.features import PeakTracker, ResetAccumulator, RollingWindow, decibels
from pcm_meter.decoder import SampleDecoder

logger = logging.getLogger(__name__)

LevelCallback = Callable[[float], None]


@dataclass
class CallbackObserver:
    """Adapts plain callables to the observer interface.

    Any object works as an observer: the meter looks up optional `on_rms`
    and `on_peak` methods, each taking one dBFS float (-inf on digital
    silence). A missing method is simply not called.
    """

    on_rms: Optional[LevelCallback] = None
    on_peak: Optional[LevelCallback] = None


def _capability(observer: Optional[object], name: str) -> Optional[LevelCallback]:
    if observer is None:
        return None
    fn = getattr(observer, name, None)
    return fn if callable(fn) else None


class LoudnessMeter:
    """Decodes PCM chunks and reports RMS and peak levels at a fixed audio-time cadence.

    The configuration is validated once, here; a meter never changes its
    configuration. Open a new meter to meter a different stream format.

    Not thread-safe: serialize write() calls.

    Interface:
      meter = LoudnessMeter(
          MeterConfig.from_mime_type("audio/L16; rate=44100; channels=2"),
          CallbackObserver(on_rms=print),
      )
      meter.write(chunk)   # returns len(chunk); observers fire inline
    """

    def __init__(self, config: MeterConfig, observer: Optional[object] = None):
        self.layout: MeterLayout = config.validate()
        self.config = config
        self._on_rms = _capability(observer, "on_rms")
        self._on_peak = _capability(observer, "on_peak")

        self._decoder = SampleDecoder(config)
        self._window: Union[RollingWindow, ResetAccumulator]
        if self.layout.sliding:
            self._window = RollingWindow(self.layout.window_samples)
        else:
            self._window = ResetAccumulator(self.layout.window_samples)
        self._peak: Optional[PeakTracker] = PeakTracker() if self._on_peak else None

        # A zero-length period still reports once per frame.
        self._period = max(self.layout.report_period_samples, 1)
        self._countdown = self._period
        self.reports = 0

        logger.debug(
            "Opened meter: %d Hz, %d ch, %d-bit %s %s, window=%d samples (%s), report every %d frames",
            config.sample_rate,
            config.channels,
            config.word_size,
            "LE" if config.little_endian else "BE",
            "signed" if config.signed else "unsigned",
            self.layout.window_samples,
            "sliding" if self.layout.sliding else "reset",
            self._period,
        )

    @property
    def pending_bytes(self) -> int:
        """Bytes held back because they do not complete a frame."""
        return len(self._decoder.pending)

    @property
    def frames_until_report(self) -> int:
        return self._countdown

    @property
    def window(self) -> Union[RollingWindow, ResetAccumulator]:
        """Current sum-of-squares state (read-only use)."""
        return self._window

    @property
    def peak(self) -> int:
        """Peak absolute sample since the last report (0 without a peak observer)."""
        return self._peak.peak if self._peak is not None else 0

    def write(self, data: bytes) -> int:
        """Decode and meter one chunk of any length.

        Returns:
            len(data); every byte is either decoded or carried over.
        """
        samples = self._decoder.decode(data)
        channels = self.config.channels
        n_frames = len(samples) // channels
        pos = 0
        while pos < n_frames:
            take = min(self._countdown, n_frames - pos)
            block = samples[pos * channels : (pos + take) * channels]
            self._window.extend([s * s for s in block.tolist()])
            if self._peak is not None:
                self._peak.update(block)
            self._countdown -= take
            pos += take
            if self._countdown == 0:
                self._report()
        return len(data)

    def feed(self, chunks: Iterable[bytes]) -> int:
        """Write every chunk from an iterable; return the total bytes written."""
        total = 0
        for chunk in chunks:
            total += self.write(chunk)
        return total

    def _report(self) -> None:
        word_max = self.layout.word_max
        if self._on_rms is not None:
            rms = math.sqrt(self._window.mean_square())
            self._on_rms(decibels(rms, word_max))
        if self._peak is not None and self._on_peak is not None:
            self._on_peak(decibels(self._peak.peak, word_max))
            self._peak.reset()
        self._window.after_report()
        self._countdown = self._period
        self.reports += 1
        logger.debug("Report %d fired", self.reports)
