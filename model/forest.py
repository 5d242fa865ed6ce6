from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from . import touch_model_data

LEAF = -1


def _frozen(values: Iterable, dtype) -> np.ndarray:
    """Return a read-only, C-contiguous 1D copy of `values`."""
    arr = np.array(values, dtype=dtype, copy=True, order="C")
    if arr.ndim != 1:
        raise ValueError(f"array must be 1D, got {arr.ndim}D")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class DecisionTree:
    """
    Binary decision tree stored as parallel node columns.

    Node 0 is the root. A node whose `left` child is -1 is a leaf and its
    `prob` column holds the positive-class fraction. Arrays are read-only so
    a single tree can be shared by any number of detectors.
    """

    feature: np.ndarray
    threshold: np.ndarray
    left: np.ndarray
    right: np.ndarray
    prob: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "feature", _frozen(self.feature, np.int64))
        object.__setattr__(self, "threshold", _frozen(self.threshold, np.float64))
        object.__setattr__(self, "left", _frozen(self.left, np.int64))
        object.__setattr__(self, "right", _frozen(self.right, np.int64))
        object.__setattr__(self, "prob", _frozen(self.prob, np.float64))
        n = self.feature.size
        if n == 0:
            raise ValueError("tree must have at least one node")
        for name in ("threshold", "left", "right", "prob"):
            if getattr(self, name).size != n:
                raise ValueError(f"{name} must have {n} entries")

    @classmethod
    def from_nodes(cls, nodes: Sequence[Tuple[int, float, int, int, float]]) -> "DecisionTree":
        """Build a tree from ``(feature, threshold, left, right, prob)`` rows."""
        if not nodes:
            raise ValueError("tree must have at least one node")
        feature, threshold, left, right, prob = zip(*nodes)
        return cls(feature=feature, threshold=threshold, left=left, right=right, prob=prob)

    @property
    def n_nodes(self) -> int:
        return int(self.feature.size)

    def predict(self, x: np.ndarray) -> float:
        """Walk from the root to a leaf and return its probability."""
        feature = self.feature
        threshold = self.threshold
        left = self.left
        right = self.right
        idx = 0
        while left[idx] != LEAF:
            if x[feature[idx]] <= threshold[idx]:
                idx = left[idx]
            else:
                idx = right[idx]
        return float(self.prob[idx])

    def validate(self, n_features: int) -> None:
        """
        Check structural consistency of the node table.

        Not called during inference; run once when an artifact is built or
        tested.
        """
        n = self.n_nodes
        seen = np.zeros(n, dtype=bool)
        stack = [0]
        while stack:
            idx = stack.pop()
            if seen[idx]:
                raise ValueError(f"node {idx} is reachable twice")
            seen[idx] = True
            if not 0.0 <= self.prob[idx] <= 1.0:
                raise ValueError(f"node {idx} probability out of [0, 1]")
            if self.left[idx] == LEAF:
                continue
            if not 0 <= self.feature[idx] < n_features:
                raise ValueError(f"node {idx} feature index out of range")
            for child in (self.left[idx], self.right[idx]):
                if not 0 < child < n:
                    raise ValueError(f"node {idx} child index {child} out of range")
                stack.append(int(child))
        if not seen.all():
            raise ValueError("tree contains unreachable nodes")


@dataclass(frozen=True)
class RandomForest:
    """Ensemble of decision trees whose leaf probabilities are averaged."""

    trees: Tuple[DecisionTree, ...]

    def __post_init__(self) -> None:
        trees = tuple(self.trees)
        if not trees:
            raise ValueError("forest must contain at least one tree")
        object.__setattr__(self, "trees", trees)

    @classmethod
    def from_tables(cls, tables: Iterable[Sequence[Tuple[int, float, int, int, float]]]) -> "RandomForest":
        return cls(tuple(DecisionTree.from_nodes(nodes) for nodes in tables))

    @property
    def n_trees(self) -> int:
        return len(self.trees)

    def predict_proba(self, x: np.ndarray) -> float:
        total = 0.0
        for tree in self.trees:
            total += tree.predict(x)
        return total / len(self.trees)


@dataclass(frozen=True)
class StandardScaler:
    """Per-feature z-score: ``(x - mean) / scale``."""

    mean: np.ndarray
    scale: np.ndarray

    def __post_init__(self) -> None:
        mean = _frozen(self.mean, np.float64)
        scale = _frozen(self.scale, np.float64)
        if mean.size != scale.size:
            raise ValueError("mean and scale must have the same length")
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "scale", scale)

    @property
    def n_features(self) -> int:
        return int(self.mean.size)

    def transform(self, features: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        out = np.subtract(features, self.mean, out=out)
        np.divide(out, self.scale, out=out)
        return out


@dataclass(frozen=True)
class TouchModel:
    """Scaler, forest and window length that together form one model artifact."""

    scaler: StandardScaler
    forest: RandomForest
    window_seconds: float
    version: str = "unversioned"
    feature_names: Tuple[str, ...] = touch_model_data.FEATURE_NAMES

    def __post_init__(self) -> None:
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if len(self.feature_names) != self.scaler.n_features:
            raise ValueError("feature_names must match the scaler length")

    @property
    def n_features(self) -> int:
        return self.scaler.n_features

    def predict_proba(self, features: np.ndarray, out: Optional[np.ndarray] = None) -> float:
        """Standardize raw `features` (into `out` when given) and run the forest."""
        scaled = self.scaler.transform(features, out=out)
        return self.forest.predict_proba(scaled)

    def validate(self) -> None:
        for idx, tree in enumerate(self.forest.trees):
            try:
                tree.validate(self.n_features)
            except ValueError as exc:
                raise ValueError(f"tree {idx}: {exc}") from exc
        if np.any(self.scaler.scale == 0):
            raise ValueError("scaler scale values must be non-zero")


_embedded_lock = Lock()
_embedded_model: Optional[TouchModel] = None


def load_embedded_model() -> TouchModel:
    """Return the shared model built from `touch_model_data`."""
    global _embedded_model
    with _embedded_lock:
        if _embedded_model is None:
            data = touch_model_data
            _embedded_model = TouchModel(
                scaler=StandardScaler(data.SCALER_MEAN, data.SCALER_SCALE),
                forest=RandomForest.from_tables(data.ALL_TREES),
                window_seconds=float(data.WINDOW_SIZE_SECONDS),
                version=data.MODEL_VERSION,
                feature_names=tuple(data.FEATURE_NAMES),
            )
        return _embedded_model


__all__ = [
    "DecisionTree",
    "LEAF",
    "RandomForest",
    "StandardScaler",
    "TouchModel",
    "load_embedded_model",
]
