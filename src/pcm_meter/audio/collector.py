"""Live capture of raw PCM bytes from an input device."""

import queue
from typing import Iterator, Optional

try:
    import sounddevice as sd
except ImportError:
    sd = None  # type: ignore

from pcm_meter.audio.config import MeterConfig

# sounddevice sample formats by word size; 24-bit is packed little-endian
_DTYPES = {8: "int8", 16: "int16", 24: "int24", 32: "int32"}


class RawAudioCollector:
    """Records interleaved PCM bytes in the format described by a MeterConfig.

    sounddevice delivers native little-endian signed samples, so only
    little-endian signed configs with 8/16/24/32-bit words are accepted.
    """

    def __init__(self, config: Optional[MeterConfig] = None):
        self.config = config or MeterConfig()
        if not (self.config.little_endian and self.config.signed):
            raise ValueError("live capture needs a little-endian signed format")
        if self.config.word_size not in _DTYPES:
            raise ValueError(f"live capture does not support {self.config.word_size}-bit words")

    @property
    def dtype(self) -> str:
        return _DTYPES[self.config.word_size]

    def record_stream(
        self,
        chunk_duration_sec: float = 0.1,
        device: Optional[int] = None,
    ) -> Iterator[bytes]:
        """Stream raw byte chunks continuously.

        Args:
            chunk_duration_sec: Duration of each yielded chunk in seconds.
            device: Input device index (None = default).

        Yields:
            Interleaved PCM bytes, about chunk_duration_sec of audio each.
        """
        if sd is None:
            raise ImportError("sounddevice is required for recording. pip install sounddevice")

        chunk_frames = max(1, int(chunk_duration_sec * self.config.sample_rate))
        q: "queue.Queue[bytes]" = queue.Queue()

        def callback(indata, _frames: int, _time: object, _status: object) -> None:
            q.put(bytes(indata))

        with sd.RawInputStream(
            samplerate=self.config.sample_rate,
            channels=self.config.channels,
            dtype=self.dtype,
            blocksize=chunk_frames,
            device=device,
            callback=callback,
        ):
            while True:
                yield q.get()
