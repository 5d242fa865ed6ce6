from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)


@pytest.fixture
def embedded_model():
    from model.forest import load_embedded_model

    return load_embedded_model()


@pytest.fixture
def step_detector():
    """Detector on a 1 kHz stream: 100-sample window, 500-sample hop, RMS step model."""
    from core.touch_detector import TouchDetector
    from test.fixtures.stub_models import make_rms_step_model

    return TouchDetector(make_rms_step_model(0.05, window_seconds=0.1), capacity=6000)
