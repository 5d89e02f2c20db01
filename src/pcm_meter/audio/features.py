"""Loudness features: rolling sum of squares, reset accumulator, peak tracker."""

from __future__ import annotations

import math
from typing import List, Sequence

import numpy as np


def decibels(amplitude: float, full_scale: float) -> float:
    """Level of `amplitude` relative to `full_scale` as 10*log10(ratio).

    Silence maps to -inf. Note this is 10*log10 of an amplitude ratio,
    not the conventional 20*log10; existing readings depend on it.
    """
    if amplitude <= 0:
        return float("-inf")
    return 10 * math.log10(amplitude / full_scale)


class RollingWindow:
    """Fixed-capacity circular buffer of squared samples with a running sum.

    Slots are pre-allocated. Until the buffer is full the window grows
    (no stale zeros are counted); afterwards each new square overwrites
    the oldest one. Both phases share the same update: sum += new - evicted.
    Values are Python ints, so the sum stays exact for wide words.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._slots: List[int] = [0] * capacity
        self._cursor = 0
        self._count = 0
        self.sum = 0

    def __len__(self) -> int:
        return self._count

    @property
    def full(self) -> bool:
        return self._count == self.capacity

    def push(self, square: int) -> None:
        """Add one squared sample, evicting the oldest once full."""
        self.sum += square - self._slots[self._cursor]
        self._slots[self._cursor] = square
        self._cursor += 1
        if self._cursor == self.capacity:
            self._cursor = 0
        if self._count < self.capacity:
            self._count += 1

    def extend(self, squares: Sequence[int]) -> None:
        """Add squared samples in order; same result as repeated push()."""
        pos = 0
        n = len(squares)
        while pos < n:
            take = min(n - pos, self.capacity - self._cursor)
            start, end = self._cursor, self._cursor + take
            incoming = squares[pos : pos + take]
            # Unfilled slots hold 0, so the growth phase evicts nothing.
            self.sum += sum(incoming) - sum(self._slots[start:end])
            self._slots[start:end] = incoming
            self._cursor = end % self.capacity
            self._count = min(self._count + take, self.capacity)
            pos += take

    def mean_square(self) -> int:
        """Running sum over the valid slots, integer division."""
        if self._count == 0:
            return 0
        return self.sum // self._count

    def values(self) -> List[int]:
        """Valid squares in chronological order."""
        if self._count < self.capacity:
            return self._slots[: self._count]
        return self._slots[self._cursor :] + self._slots[: self._cursor]

    def after_report(self) -> None:
        """The sliding window spans reports; nothing to reset."""


class ResetAccumulator:
    """Sum of squares since the last report, used when window == report interval.

    The mean divides by the nominal window size (window_samples), not by
    the number of samples accumulated.
    """

    def __init__(self, nominal_size: int):
        if nominal_size < 1:
            raise ValueError("nominal_size must be >= 1")
        self.nominal_size = nominal_size
        self.sum = 0
        self.count = 0

    def __len__(self) -> int:
        return self.count

    def push(self, square: int) -> None:
        self.sum += square
        self.count += 1

    def extend(self, squares: Sequence[int]) -> None:
        self.sum += sum(squares)
        self.count += len(squares)

    def mean_square(self) -> int:
        return self.sum // self.nominal_size

    def after_report(self) -> None:
        """Start a fresh interval."""
        self.sum = 0
        self.count = 0


class PeakTracker:
    """Maximum absolute sample value since the last reset."""

    def __init__(self) -> None:
        self.peak = 0

    def update(self, samples: np.ndarray) -> int:
        """Fold a block of samples in; return the current peak."""
        if samples.size:
            block_peak = int(np.abs(samples).max())
            if block_peak > self.peak:
                self.peak = block_peak
        return self.peak

    def reset(self) -> None:
        self.peak = 0
