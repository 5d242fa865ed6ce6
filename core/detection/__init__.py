from .base import (
    DETECTOR_REGISTRY,
    DetectorParameter,
    EventDetector,
    create_detector,
    register_detector,
)
from .touch import TouchEventDetector

__all__ = [
    "EventDetector",
    "DetectorParameter",
    "DETECTOR_REGISTRY",
    "create_detector",
    "register_detector",
    "TouchEventDetector",
]
