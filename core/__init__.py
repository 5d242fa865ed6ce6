"""Core detection logic."""

from .touch_detector import TouchDetector
from shared.models import Chunk, Event, TouchFeatures

__all__ = [
    "Chunk",
    "Event",
    "TouchDetector",
    "TouchFeatures",
]
