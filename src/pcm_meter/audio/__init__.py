"""Stream configuration, header parsing, loudness features and capture."""

from pcm_meter.audio.config import BadParameters, MeterConfig, MeterLayout
from pcm_meter.audio.features import PeakTracker, ResetAccumulator, RollingWindow, decibels
from pcm_meter.audio.mime import MimeFormat, UnsupportedMimeType, parse_mime_type

__all__ = [
    "BadParameters",
    "MeterConfig",
    "MeterLayout",
    "MimeFormat",
    "PeakTracker",
    "ResetAccumulator",
    "RollingWindow",
    "UnsupportedMimeType",
    "decibels",
    "parse_mime_type",
]
