"""Fixed-width PCM word decoding, one word at a time or vectorized over frames.

Words are 1..7 bytes (8..56 bits), so every decoded sample fits in int64.

Minimal dependencies: numpy only.
"""

from __future__ import annotations

import numpy as np

from pcm_meter.audio.config import MeterConfig


def decode_word(word: bytes, word_size: int, little_endian: bool, signed: bool) -> int:
    """Decode one PCM word to a zero-centred integer sample.

    Args:
        word: Exactly word_size // 8 bytes.
        word_size: Bits per sample, multiple of 8.
        little_endian: Least-significant byte first when True.
        signed: Two's complement when True; otherwise offset by 2**(word_size-1).

    Returns:
        Sample in [-2**(word_size-1), 2**(word_size-1) - 1].
    """
    if len(word) * 8 != word_size:
        raise ValueError(f"expected {word_size // 8} bytes, got {len(word)}")
    raw = int.from_bytes(word, "little" if little_endian else "big")
    half = 1 << (word_size - 1)
    if signed:
        return raw - (1 << word_size) if raw & half else raw
    return raw - half


def decode_frames(
    data: bytes,
    word_size: int,
    channels: int,
    little_endian: bool,
    signed: bool,
) -> np.ndarray:
    """Decode every complete frame in `data`; trailing partial frame is ignored.

    Returns:
        int64 array, interleaved, shape (n_frames * channels,).
    """
    word_bytes = word_size // 8
    frame_bytes = word_bytes * channels
    n_frames = len(data) // frame_bytes
    if n_frames == 0:
        return np.zeros(0, dtype=np.int64)
    words = np.frombuffer(data, dtype=np.uint8, count=n_frames * frame_bytes)
    words = words.reshape(-1, word_bytes).astype(np.int64)
    shifts = np.arange(word_bytes, dtype=np.int64) * 8
    if not little_endian:
        shifts = shifts[::-1]
    raw = np.bitwise_or.reduce(words << shifts, axis=1)
    half = np.int64(1) << (word_size - 1)
    if signed:
        return np.where(raw >= half, raw - (half << 1), raw)
    return raw - half


class SampleDecoder:
    """Incremental decoder that carries incomplete frames across calls.

    No sample is decoded from a partial frame and no byte is dropped:
    leftover bytes (always fewer than one frame) are prepended to the
    next chunk.

    Interface:
      decoder = SampleDecoder(config)
      samples = decoder.decode(chunk)   # int64, interleaved
      decoder.pending                   # bytes carried to the next call
    """

    def __init__(self, config: MeterConfig):
        self.word_size = config.word_size
        self.channels = config.channels
        self.little_endian = config.little_endian
        self.signed = config.signed
        self.frame_bytes = config.frame_bytes
        self._pending = b""

    @property
    def pending(self) -> bytes:
        """Undecoded trailing bytes from previous calls."""
        return self._pending

    def decode(self, chunk: bytes) -> np.ndarray:
        """Decode complete frames from pending + chunk and keep the remainder."""
        data = self._pending + bytes(chunk) if self._pending else bytes(chunk)
        usable = len(data) - len(data) % self.frame_bytes
        self._pending = data[usable:]
        return decode_frames(
            data[:usable],
            self.word_size,
            self.channels,
            self.little_endian,
            self.signed,
        )
