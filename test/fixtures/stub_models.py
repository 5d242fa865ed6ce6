"""
Tiny hand-built models for exercising the detector state machine.

The embedded model makes it awkward to steer the probability precisely, so
these stand-ins use an identity scaler and one-split trees.
"""
from __future__ import annotations

from model.forest import RandomForest, StandardScaler, TouchModel

IDENTITY_SCALER = StandardScaler(mean=[0.0] * 5, scale=[1.0] * 5)


def make_constant_model(probability: float, *, window_seconds: float = 0.1) -> TouchModel:
    """Every window scores `probability`."""
    return TouchModel(
        scaler=IDENTITY_SCALER,
        forest=RandomForest.from_tables([((-2, -2.0, -1, -1, probability),)]),
        window_seconds=window_seconds,
        version="stub-constant",
    )


def make_rms_step_model(rms_threshold: float = 0.05, *, window_seconds: float = 0.1) -> TouchModel:
    """Windows with RMS above `rms_threshold` score 1.0, the rest 0.0."""
    tree = (
        (0, rms_threshold, 1, 2, 0.5),
        (-2, -2.0, -1, -1, 0.0),
        (-2, -2.0, -1, -1, 1.0),
    )
    return TouchModel(
        scaler=IDENTITY_SCALER,
        forest=RandomForest.from_tables([tree]),
        window_seconds=window_seconds,
        version="stub-rms-step",
    )
