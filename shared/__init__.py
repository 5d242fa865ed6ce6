"""
Shared data structures used by the model, analysis and detection layers.
"""

from .models import Chunk, Event, TouchFeatures
from .ring_buffer import SampleRingBuffer

__all__ = ["Chunk", "Event", "SampleRingBuffer", "TouchFeatures"]
