"""
Reference implementations for differential testing.

These are deliberately simple, obviously-correct implementations used to
verify the production code. They prioritize clarity over performance: plain
Python lists, explicit loops and recursion.
"""
from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from model import touch_model_data

Node = Tuple[int, float, int, int, float]


class ReferenceRingBuffer:
    """List-based ring buffer that remembers every sample ever pushed.

    Key invariants being tested:
    1. The newest samples are always readable in order
    2. Occupancy saturates at capacity
    3. The write cursor is the total sample count modulo capacity
    """

    def __init__(self, capacity: int):
        self._capacity = capacity
        self._history: List[int] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, samples: Sequence[int]) -> None:
        self._history.extend(int(s) for s in samples)

    @property
    def count(self) -> int:
        return min(len(self._history), self._capacity)

    @property
    def write_pos(self) -> int:
        return len(self._history) % self._capacity

    def latest(self, length: int) -> List[int]:
        assert 0 < length <= self.count
        return self._history[-length:]


def reference_features(samples: Sequence[int]) -> Tuple[float, float, float, float, float]:
    """Features of an int16 window computed straight from their definitions."""
    n = len(samples)
    window = [s / 32768.0 for s in samples]
    mean = sum(window) / n
    window = [v - mean for v in window]

    rms = math.sqrt(sum(v * v for v in window) / n)
    peak_to_peak = max(window) - min(window)
    mean2 = sum(window) / n
    std_dev = math.sqrt(sum((v - mean2) ** 2 for v in window) / n)
    abs_sorted = sorted(abs(v) for v in window)
    percentile_90 = abs_sorted[min(int(0.9 * n), n - 1)]
    mean_abs = sum(abs(v) for v in window) / n
    return rms, peak_to_peak, std_dev, percentile_90, mean_abs


def reference_scale(features: Sequence[float]) -> List[float]:
    return [
        (f - m) / s
        for f, m, s in zip(features, touch_model_data.SCALER_MEAN, touch_model_data.SCALER_SCALE)
    ]


def reference_tree(nodes: Sequence[Node], x: Sequence[float], idx: int = 0) -> float:
    feature, threshold, left, right, prob = nodes[idx]
    if left == -1:
        return prob
    if x[feature] <= threshold:
        return reference_tree(nodes, x, left)
    return reference_tree(nodes, x, right)


def reference_forest(x: Sequence[float], trees: Sequence[Sequence[Node]] = touch_model_data.ALL_TREES) -> float:
    return sum(reference_tree(nodes, x) for nodes in trees) / len(trees)


def reference_probability(samples: Sequence[int]) -> float:
    """End-to-end probability of the embedded model for one int16 window."""
    return reference_forest(reference_scale(reference_features(samples)))
