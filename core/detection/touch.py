import logging
from typing import Dict, Iterable, List, Mapping

import numpy as np

from shared.models import Chunk, Event
from core.touch_detector import DEFAULT_COOLDOWN_SECONDS, DEFAULT_THRESHOLD, TouchDetector
from .base import DetectorParameter, register_detector

logger = logging.getLogger(__name__)

INT16_MAX = 32767
INT16_MIN = -32768


def to_int16(samples: np.ndarray) -> np.ndarray:
    """Convert ±1.0 full-scale float samples to int16 with clipping."""
    scaled = np.asarray(samples, dtype=np.float64) * 32768.0
    np.clip(scaled, INT16_MIN, INT16_MAX, out=scaled)
    return scaled.astype(np.int16)


@register_detector
class TouchEventDetector:
    """
    Streams chunks into one TouchDetector per channel and reports rising edges.

    Each channel keeps its own buffer, counters and detection state; channels
    are never combined. One prediction attempt is made per chunk, after the
    chunk has been pushed.
    """

    name = "touch"
    display_name = "Touch Classifier"

    def __init__(self):
        self._threshold: float = DEFAULT_THRESHOLD
        self._cooldown_s: float = DEFAULT_COOLDOWN_SECONDS
        self._sample_rate: int = 0
        self._detectors: List[TouchDetector] = []
        self._params = {
            "threshold": DetectorParameter(
                name="threshold",
                default=DEFAULT_THRESHOLD,
                min=0.0,
                max=1.0,
                help="Ensemble probability above which a touch is reported",
            ),
            "cooldown_s": DetectorParameter(
                name="cooldown_s",
                default=DEFAULT_COOLDOWN_SECONDS,
                min=0.0,
                max=30.0,
                help="Minimum time between two reported touches (s)",
            ),
        }

    @property
    def parameters(self) -> Mapping[str, DetectorParameter]:
        return dict(self._params)

    @property
    def detectors(self) -> List[TouchDetector]:
        return list(self._detectors)

    def configure(self, **params) -> None:
        if "threshold" in params:
            self._threshold = self._params["threshold"].clamp(params["threshold"])
        if "cooldown_s" in params:
            self._cooldown_s = self._params["cooldown_s"].clamp(params["cooldown_s"])
        for detector in self._detectors:
            detector.set_threshold(self._threshold)
            detector.set_cooldown_seconds(self._cooldown_s)

    def reset(self, sample_rate: float, n_channels: int) -> None:
        self._sample_rate = int(round(sample_rate)) if sample_rate > 0 else 0
        self._detectors = []
        for _ in range(max(0, int(n_channels))):
            detector = TouchDetector()
            detector.set_threshold(self._threshold)
            detector.set_cooldown_seconds(self._cooldown_s)
            detector.set_enabled(True)
            self._detectors.append(detector)
        logger.debug(
            "Touch detector reset: %d channel(s) at %d Hz", len(self._detectors), self._sample_rate
        )

    def process_chunk(self, chunk: Chunk) -> Iterable[Event]:
        if self._sample_rate <= 0 or not self._detectors:
            return []
        samples = chunk.samples
        if samples.shape[1] == 0:
            return []

        chunk_rate = int(round(chunk.sample_rate))
        if chunk_rate != self._sample_rate:
            logger.debug(
                "Chunk rate %d Hz differs from reset rate %d Hz; using chunk rate",
                chunk_rate,
                self._sample_rate,
            )
            self._sample_rate = chunk_rate

        events: List[Event] = []
        chunk_end = chunk.start_time + samples.shape[1] * chunk.dt
        for ch, detector in enumerate(self._detectors[: samples.shape[0]]):
            raw = to_int16(samples[ch])
            detector.push_samples(raw)
            if not detector.update(self._sample_rate):
                continue
            # The detection counter is only zeroed by a rising edge in this update.
            if detector.is_touch_detected() and detector.samples_since_last_detection == 0:
                probability = detector.touch_probability()
                features = detector.latest_features()
                properties: Dict[str, float] = {"probability": float(probability)}
                if features is not None:
                    properties.update(
                        rms=features.rms,
                        peak_to_peak=features.peak_to_peak,
                        percentile_90=features.percentile_90,
                    )
                events.append(
                    Event(
                        t=max(0.0, chunk_end),
                        chan=ch,
                        window=raw,
                        properties=properties,
                        params={"threshold": self._threshold, "cooldown_s": self._cooldown_s},
                    )
                )
        return events

    def finalize(self) -> Iterable[Event]:
        return []
