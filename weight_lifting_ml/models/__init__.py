"""
Models module for the Weight Lifting Exercise report.
"""

from .classifiers import (
    MODEL_NAMES,
    MODEL_LABELS,
    create_model,
    count_nodes,
    feature_importances,
    describe_tree,
    save_models,
    load_models,
)

__all__ = [
    'MODEL_NAMES',
    'MODEL_LABELS',
    'create_model',
    'count_nodes',
    'feature_importances',
    'describe_tree',
    'save_models',
    'load_models',
]
