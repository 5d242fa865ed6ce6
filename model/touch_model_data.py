"""Embedded touch classifier exported from the offline training run.

Generated tables, do not edit by hand. Node rows are
``(feature, threshold, left, right, prob)`` in pre-order, with ``left == -1``
marking a leaf (leaf rows carry ``feature = -2`` and ``threshold = -2.0``).
``prob`` is the fraction of touch samples that reached the node.
"""
from __future__ import annotations

MODEL_VERSION = "touch-rf-2.1.0"

# Seconds of signal per analysis window (independent of the prediction hop)
WINDOW_SIZE_SECONDS = 2.0

FEATURE_NAMES = ("rms", "peak_to_peak", "std_dev", "percentile_90", "mean_abs")
N_FEATURES = 5

SCALER_MEAN = (0.0213, 0.2187, 0.0213, 0.0342, 0.0165)
SCALER_SCALE = (0.0298, 0.2871, 0.0298, 0.0477, 0.0231)

TREE_0 = (
    (0, -0.412, 1, 4, 0.4375),
    (1, -0.688, 2, 3, 0.0519),
    (-2, -2.0, -1, -1, 0.0),
    (-2, -2.0, -1, -1, 0.1429),
    (3, 0.873, 5, 6, 0.8214),
    (-2, -2.0, -1, -1, 0.6),
    (-2, -2.0, -1, -1, 0.9737),
)

TREE_1 = (
    (4, -0.355, 1, 4, 0.4521),
    (2, -0.701, 2, 3, 0.0612),
    (-2, -2.0, -1, -1, 0.0123),
    (-2, -2.0, -1, -1, 0.1667),
    (1, 0.512, 5, 6, 0.8043),
    (-2, -2.0, -1, -1, 0.5556),
    (-2, -2.0, -1, -1, 0.9412),
)

TREE_2 = (
    (1, -0.296, 1, 4, 0.4102),
    (3, -0.633, 2, 3, 0.0458),
    (-2, -2.0, -1, -1, 0.0),
    (-2, -2.0, -1, -1, 0.2),
    (0, 1.247, 5, 6, 0.7891),
    (-2, -2.0, -1, -1, 0.7),
    (-2, -2.0, -1, -1, 0.9831),
)

TREE_3 = (
    (2, -0.524, 1, 2, 0.4297),
    (-2, -2.0, -1, -1, 0.0317),
    (4, 0.338, 3, 6, 0.7512),
    (1, -0.102, 4, 5, 0.5),
    (-2, -2.0, -1, -1, 0.25),
    (-2, -2.0, -1, -1, 0.6875),
    (-2, -2.0, -1, -1, 0.9565),
)

TREE_4 = (
    (3, -0.447, 1, 4, 0.4418),
    (0, -0.679, 2, 3, 0.0375),
    (-2, -2.0, -1, -1, 0.0),
    (-2, -2.0, -1, -1, 0.0909),
    (2, 2.016, 5, 6, 0.8125),
    (-2, -2.0, -1, -1, 0.7419),
    (-2, -2.0, -1, -1, 1.0),
)

TREE_5 = (
    (0, -0.389, 1, 2, 0.4236),
    (-2, -2.0, -1, -1, 0.0089),
    (1, 0.274, 3, 4, 0.7969),
    (-2, -2.0, -1, -1, 0.6286),
    (4, 1.893, 5, 6, 0.8966),
    (-2, -2.0, -1, -1, 0.8),
    (-2, -2.0, -1, -1, 0.9524),
)

TREE_6 = (
    (4, -0.402, 1, 4, 0.4489),
    (3, -0.705, 2, 3, 0.0549),
    (-2, -2.0, -1, -1, 0.0),
    (-2, -2.0, -1, -1, 0.1333),
    (3, 0.618, 5, 6, 0.8077),
    (-2, -2.0, -1, -1, 0.6667),
    (-2, -2.0, -1, -1, 0.96),
)

TREE_7 = (
    (1, -0.331, 1, 2, 0.4375),
    (-2, -2.0, -1, -1, 0.0204),
    (2, 0.957, 3, 4, 0.8),
    (-2, -2.0, -1, -1, 0.6316),
    (-2, -2.0, -1, -1, 0.9756),
)

ALL_TREES = (TREE_0, TREE_1, TREE_2, TREE_3, TREE_4, TREE_5, TREE_6, TREE_7)
N_TREES = len(ALL_TREES)


__all__ = [
    "ALL_TREES",
    "FEATURE_NAMES",
    "MODEL_VERSION",
    "N_FEATURES",
    "N_TREES",
    "SCALER_MEAN",
    "SCALER_SCALE",
    "WINDOW_SIZE_SECONDS",
]
