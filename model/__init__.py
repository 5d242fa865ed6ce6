"""
Embedded touch classifier: model tables plus the inference types that read them.
"""

from .forest import DecisionTree, RandomForest, StandardScaler, TouchModel, load_embedded_model

__all__ = ["DecisionTree", "RandomForest", "StandardScaler", "TouchModel", "load_embedded_model"]
