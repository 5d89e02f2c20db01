"""Streaming loudness meter."""

from pcm_meter.pipeline.streaming_meter import CallbackObserver, LoudnessMeter

__all__ = ["CallbackObserver", "LoudnessMeter"]
