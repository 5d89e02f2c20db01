"""Streaming PCM loudness meter - decode, rolling RMS, peak, audio-time reports."""

from pcm_meter.audio.config import BadParameters, MeterConfig
from pcm_meter.audio.mime import UnsupportedMimeType, parse_mime_type
from pcm_meter.pipeline import CallbackObserver, LoudnessMeter

__all__ = [
    "BadParameters",
    "CallbackObserver",
    "LoudnessMeter",
    "MeterConfig",
    "UnsupportedMimeType",
    "parse_mime_type",
]
