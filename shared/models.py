from __future__ import annotations

from dataclasses import astuple, dataclass, field, fields
from typing import Any, Mapping, MutableMapping, Optional, Tuple

import numpy as np


def _freeze_array(array: np.ndarray, *, ndim: int | None = None) -> np.ndarray:
    """Return a read-only, C-contiguous copy of `array`, validating dimensions."""
    arr = np.array(array, copy=True, order="C")
    if ndim is not None and arr.ndim != ndim:
        raise ValueError(f"array must be {ndim}D, got {arr.ndim}D")
    arr.setflags(write=False)
    return arr


def _copy_mapping(mapping: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    if mapping is None:
        return None
    if not isinstance(mapping, Mapping):
        raise TypeError("meta/properties/params must be a mapping type")
    if isinstance(mapping, MutableMapping):
        return dict(mapping)
    return dict(mapping)


# ----------------------------
# Streaming data models
# ----------------------------

@dataclass(frozen=True)
class Chunk:
    """Block of multi-channel samples handed from acquisition to detectors."""

    samples: np.ndarray
    start_time: float
    dt: float
    seq: int
    channel_names: Tuple[str, ...]
    units: str
    meta: Optional[Mapping[str, Any]] = field(default=None)

    def __post_init__(self) -> None:
        if self.dt <= 0:
            raise ValueError("dt must be positive")
        if self.seq < 0:
            raise ValueError("seq must be non-negative")
        if not self.channel_names:
            raise ValueError("channel_names must not be empty")
        if not isinstance(self.units, str) or not self.units:
            raise ValueError("units must be a non-empty string")

        samples = _freeze_array(self.samples, ndim=2)
        if samples.shape[0] != len(self.channel_names):
            raise ValueError("samples shape mismatch: axis 0 must match len(channel_names)")

        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "channel_names", tuple(self.channel_names))
        object.__setattr__(self, "meta", _copy_mapping(self.meta))

    @property
    def n_channels(self) -> int:
        return self.samples.shape[0]

    @property
    def n_samples(self) -> int:
        return self.samples.shape[1]

    @property
    def sample_rate(self) -> float:
        return 1.0 / self.dt

    @property
    def duration(self) -> float:
        return self.n_samples * self.dt


@dataclass(frozen=True)
class Event:
    """Detected feature emitted by a detector.

    Attributes:
        t: Timestamp of the event (seconds since stream start)
        chan: Channel index where the event was detected
        window: Samples that produced the detection
        properties: Computed values (e.g., probability)
        params: Detection parameters in effect (e.g., threshold)
    """

    t: float
    chan: int
    window: np.ndarray
    properties: Mapping[str, Any] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.t < 0:
            raise ValueError("t must be non-negative")
        if self.chan < 0:
            raise ValueError("chan must be non-negative")

        window = _freeze_array(self.window)

        object.__setattr__(self, "window", window)
        object.__setattr__(self, "properties", _copy_mapping(self.properties) or {})
        object.__setattr__(self, "params", _copy_mapping(self.params) or {})


# ----------------------------
# Touch classifier models
# ----------------------------

@dataclass(frozen=True)
class TouchFeatures:
    """Statistical features of one analysis window, in model feature order."""

    rms: float
    peak_to_peak: float
    std_dev: float
    percentile_90: float
    mean_abs: float

    @classmethod
    def from_array(cls, values: np.ndarray) -> "TouchFeatures":
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.size != len(fields(cls)):
            raise ValueError(f"expected {len(fields(cls))} feature values, got {arr.size}")
        return cls(*(float(v) for v in arr))

    def as_array(self) -> np.ndarray:
        return np.array(astuple(self), dtype=np.float64)


__all__ = [
    "Chunk",
    "Event",
    "TouchFeatures",
]
