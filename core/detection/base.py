from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Protocol, Type

from shared.models import Chunk, Event


@dataclass(frozen=True)
class DetectorParameter:
    name: str
    default: float | int | bool
    min: float | None = None
    max: float | None = None
    help: str = ""

    def clamp(self, value: float) -> float:
        """Coerce `value` to float and limit it to [min, max]."""
        value = float(value)
        if self.min is not None and value < self.min:
            return float(self.min)
        if self.max is not None and value > self.max:
            return float(self.max)
        return value


class EventDetector(Protocol):
    name: str
    display_name: str

    @property
    def parameters(self) -> Mapping[str, DetectorParameter]:
        ...

    def configure(self, **params) -> None:
        ...

    def reset(self, sample_rate: float, n_channels: int) -> None:
        """Called when acquisition (re)starts."""
        ...

    def process_chunk(self, chunk: Chunk) -> Iterable[Event]:
        """Return any new events detected in this chunk."""
        ...

    def finalize(self) -> Iterable[Event]:
        """Flush any trailing events at stop (optional)."""
        ...


DETECTOR_REGISTRY: Dict[str, Type[EventDetector]] = {}


def register_detector(cls: Type[EventDetector]) -> Type[EventDetector]:
    if not hasattr(cls, "name"):
        raise ValueError(f"Detector {cls} must have a 'name' attribute")
    DETECTOR_REGISTRY[cls.name] = cls
    return cls


def create_detector(name: str, **params) -> EventDetector:
    """Instantiate a registered detector and apply `params` to it."""
    try:
        cls = DETECTOR_REGISTRY[name]
    except KeyError:
        available = ", ".join(sorted(DETECTOR_REGISTRY))
        raise ValueError(f"Unknown detector {name!r}; available: {available}") from None
    detector = cls()
    if params:
        detector.configure(**params)
    return detector
