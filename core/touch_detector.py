from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

import numpy as np

from analysis.features import N_FEATURES, FeatureExtractor
from model.forest import TouchModel, load_embedded_model
from shared.app_settings import TouchSettings
from shared.models import TouchFeatures
from shared.ring_buffer import SampleRingBuffer

logger = logging.getLogger(__name__)

TOUCH_BUFFER_SIZE = 60_000  # 6 s at 10 kHz
DEFAULT_THRESHOLD = 0.7
DEFAULT_COOLDOWN_SECONDS = 2.0
DEFAULT_HOP_SECONDS = 0.5


class TouchDetector:
    """
    Classifies the most recent window of a single signal as touch / no touch.

    The host pushes raw int16 samples as they arrive and calls `update` once
    per tick. `update` predicts at most once per hop (0.5 s by default) over a
    window whose length comes from the model. A positive prediction raises the
    detected flag only when more than `cooldown_seconds` of samples have
    passed since the previous rising edge; a prediction at or below the
    threshold clears the flag immediately.

    All timing is counted in samples. An instance is meant to be driven from
    one thread; separate instances share nothing but the read-only model.
    """

    def __init__(
        self,
        model: Optional[TouchModel] = None,
        *,
        capacity: int = TOUCH_BUFFER_SIZE,
        hop_seconds: float = DEFAULT_HOP_SECONDS,
    ) -> None:
        if hop_seconds <= 0:
            raise ValueError("hop_seconds must be positive")
        self._model = model if model is not None else load_embedded_model()
        if self._model.n_features != N_FEATURES:
            raise ValueError(f"model must use {N_FEATURES} features, got {self._model.n_features}")
        self._buffer = SampleRingBuffer(capacity, dtype=np.int16)
        self._extractor = FeatureExtractor(capacity)
        self._raw = np.zeros(N_FEATURES, dtype=np.float64)
        self._scaled = np.zeros(N_FEATURES, dtype=np.float64)

        self._buffer_filled = False
        self._touch_detected = False
        self._touch_probability = 0.0
        self._threshold = DEFAULT_THRESHOLD
        self._cooldown_seconds = DEFAULT_COOLDOWN_SECONDS
        self._hop_seconds = float(hop_seconds)
        self._enabled = False
        self._latest_features: Optional[TouchFeatures] = None

        self._samples_since_last_prediction = 0
        self._samples_since_last_detection = 0
        self._hop_samples = 0

    # ---- Acquisition side ----

    def push_samples(self, samples: Union[np.ndarray, Sequence[int]], count: Optional[int] = None) -> None:
        """Append raw samples to the rolling buffer and advance the timing counters."""
        pushed = self._buffer.push(samples, count)
        self._samples_since_last_prediction += pushed
        self._samples_since_last_detection += pushed

    def window_samples(self, sample_rate: int) -> int:
        """Analysis window length in samples at `sample_rate`, clamped to the buffer."""
        window = int(self._model.window_seconds * sample_rate)
        return max(1, min(window, self._buffer.capacity))

    def update(self, sample_rate: int) -> bool:
        """
        Run a prediction if a full window is buffered and a hop has elapsed.

        Returns True when a new prediction was computed during this call,
        whether or not the detected flag changed.
        """
        if sample_rate <= 0:
            return False

        window = self.window_samples(sample_rate)
        if self._buffer.count < window:
            self._buffer_filled = False
            return False
        self._buffer_filled = True

        self._hop_samples = int(self._hop_seconds * sample_rate)
        if self._samples_since_last_prediction < self._hop_samples:
            return False
        self._samples_since_last_prediction = 0

        raw = self._extractor.extract(self._buffer, window, out=self._raw)
        self._latest_features = TouchFeatures.from_array(raw)
        probability = self._model.predict_proba(raw, out=self._scaled)
        self._touch_probability = probability
        logger.debug("Touch prediction p=%.4f over %d samples", probability, window)

        cooldown_samples = int(self._cooldown_seconds * sample_rate)
        was_detected = self._touch_detected
        if probability > self._threshold and self._samples_since_last_detection > cooldown_samples:
            self._touch_detected = True
            self._samples_since_last_detection = 0
            logger.debug("Touch rising edge (p=%.4f > %.3f)", probability, self._threshold)
        elif probability <= self._threshold:
            self._touch_detected = False
            if was_detected:
                logger.debug("Touch cleared (p=%.4f <= %.3f)", probability, self._threshold)
        return True

    def reset(self) -> None:
        """Drop buffered samples and detection state; configuration is kept."""
        self._buffer.clear()
        self._buffer_filled = False
        self._touch_detected = False
        self._touch_probability = 0.0
        self._latest_features = None
        self._samples_since_last_prediction = 0
        self._samples_since_last_detection = 0
        self._hop_samples = 0

    # ---- Accessors ----

    def is_touch_detected(self) -> bool:
        return self._touch_detected

    def touch_probability(self) -> float:
        return self._touch_probability

    def is_model_loaded(self) -> bool:
        return self._model is not None

    def has_enough_data(self) -> bool:
        return self._buffer_filled

    def is_enabled(self) -> bool:
        return self._enabled

    def latest_features(self) -> Optional[TouchFeatures]:
        """Features behind the most recent prediction, or None before the first one."""
        return self._latest_features

    @property
    def model(self) -> TouchModel:
        return self._model

    @property
    def buffer(self) -> SampleRingBuffer:
        return self._buffer

    @property
    def hop_samples(self) -> int:
        """Prediction cadence derived from the sample rate of the last update."""
        return self._hop_samples

    @property
    def samples_since_last_prediction(self) -> int:
        return self._samples_since_last_prediction

    @property
    def samples_since_last_detection(self) -> int:
        return self._samples_since_last_detection

    # ---- Configuration ----

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def set_threshold(self, threshold: float) -> None:
        self._threshold = float(threshold)

    def get_threshold(self) -> float:
        return self._threshold

    def set_cooldown_seconds(self, seconds: float) -> None:
        self._cooldown_seconds = float(seconds)

    def get_cooldown_seconds(self) -> float:
        return self._cooldown_seconds

    def apply_settings(self, settings: TouchSettings) -> None:
        """Copy a settings snapshot into this detector (usable as a store subscriber)."""
        settings.validate()
        self.set_enabled(settings.enabled)
        self.set_threshold(settings.threshold)
        self.set_cooldown_seconds(settings.cooldown_seconds)
        self._hop_seconds = float(settings.hop_seconds)


__all__ = [
    "DEFAULT_COOLDOWN_SECONDS",
    "DEFAULT_HOP_SECONDS",
    "DEFAULT_THRESHOLD",
    "TOUCH_BUFFER_SIZE",
    "TouchDetector",
]
