"""Window features for the touch classifier.

Five statistics are computed from a DC-removed window normalized to the
±1.0 range, in the order the embedded model indexes them:
- rms: root-mean-square
- peak_to_peak: max minus min
- std_dev: population standard deviation (computed on its own, not taken
  from rms, so values match the trained model exactly)
- percentile_90: element floor(0.9 * n) of the sorted absolute values
- mean_abs: mean absolute value
"""
from __future__ import annotations

import math
from typing import Optional

import numpy as np

from shared.models import TouchFeatures
from shared.ring_buffer import SampleRingBuffer

INT16_FULL_SCALE = 32768.0
N_FEATURES = 5
PERCENTILE = 0.9


def percentile_index(n: int) -> int:
    return min(int(PERCENTILE * n), n - 1)


def _fill_features(window: np.ndarray, scratch: np.ndarray, out: np.ndarray) -> np.ndarray:
    # `window` is normalized and is DC-corrected in place; `scratch` matches its length.
    n = window.shape[0]
    window -= np.sum(window) / n

    rms = math.sqrt(float(np.dot(window, window)) / n)
    peak_to_peak = float(window.max() - window.min())

    mean_for_std = float(np.sum(window)) / n
    np.subtract(window, mean_for_std, out=scratch)
    std_dev = math.sqrt(float(np.dot(scratch, scratch)) / n)

    np.abs(window, out=scratch)
    mean_abs = float(np.sum(scratch)) / n
    scratch.sort()
    percentile_90 = float(scratch[percentile_index(n)])

    out[0] = rms
    out[1] = peak_to_peak
    out[2] = std_dev
    out[3] = percentile_90
    out[4] = mean_abs
    return out


def compute_features(window: np.ndarray) -> TouchFeatures:
    """Compute features of an already-normalized window (allocates)."""
    x = np.array(window, dtype=np.float64, copy=True).reshape(-1)
    if x.size == 0:
        raise ValueError("window must not be empty")
    values = _fill_features(x, np.empty_like(x), np.empty(N_FEATURES, dtype=np.float64))
    return TouchFeatures.from_array(values)


class FeatureExtractor:
    """
    Reads the latest window out of a SampleRingBuffer and computes its features.

    Work arrays are sized to the buffer capacity at construction and reused on
    every call, so extraction does not allocate numpy storage.
    """

    def __init__(self, capacity: int) -> None:
        capacity = int(capacity)
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._window = np.empty(capacity, dtype=np.float64)
        self._scratch = np.empty(capacity, dtype=np.float64)
        self._values = np.empty(N_FEATURES, dtype=np.float64)

    @property
    def capacity(self) -> int:
        return self._capacity

    def extract(
        self,
        buffer: SampleRingBuffer,
        window_samples: int,
        out: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Return the raw feature vector of the newest `window_samples` samples.

        The caller guarantees that at least `window_samples` samples are
        buffered and that the window fits the extractor capacity.
        """
        if out is None:
            out = self._values
        window = buffer.latest(window_samples, out=self._window)
        window /= INT16_FULL_SCALE
        return _fill_features(window, self._scratch[:window_samples], out)


__all__ = [
    "FeatureExtractor",
    "INT16_FULL_SCALE",
    "N_FEATURES",
    "compute_features",
    "percentile_index",
]
