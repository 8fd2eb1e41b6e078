"""
Classifiers for lifting technique (classe A-E).

Two scikit-learn estimators are compared:
- A single decision tree (interpretable, drawn in the report)
- A random forest (bagged trees with random feature subsets)
"""

import pickle
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Any

from sklearn.base import ClassifierMixin
from sklearn.ensemble import RandomForestClassifier
from sklearn.tree import DecisionTreeClassifier, export_text

from ..config import CONFIG

MODEL_NAMES: List[str] = ['tree', 'forest']

MODEL_LABELS: Dict[str, str] = {
    'tree': 'Decision tree',
    'forest': 'Random forest',
}


def create_model(name: str, config=None) -> ClassifierMixin:
    """
    Factory function to create an unfitted classifier.

    Args:
        name: 'tree' or 'forest'
        config: Configuration object

    Returns:
        scikit-learn estimator
    """
    config = config or CONFIG
    cfg = config.model
    seed = config.data.random_seed

    if name == 'tree':
        return DecisionTreeClassifier(
            criterion=cfg.tree_criterion,
            max_depth=cfg.tree_max_depth,
            min_samples_split=cfg.tree_min_samples_split,
            min_samples_leaf=cfg.tree_min_samples_leaf,
            ccp_alpha=cfg.tree_ccp_alpha,
            random_state=seed
        )
    elif name == 'forest':
        return RandomForestClassifier(
            n_estimators=cfg.forest_n_estimators,
            max_features=cfg.forest_max_features,
            min_samples_leaf=cfg.forest_min_samples_leaf,
            oob_score=cfg.forest_oob_score,
            n_jobs=cfg.forest_n_jobs,
            random_state=seed
        )
    else:
        raise ValueError(f"Unknown model: {name}. Choose from: {', '.join(MODEL_NAMES)}")


def count_nodes(model: ClassifierMixin) -> int:
    """Total number of tree nodes in a fitted tree or forest."""
    if hasattr(model, 'estimators_'):
        return int(sum(est.tree_.node_count for est in model.estimators_))
    return int(model.tree_.node_count)


def feature_importances(model: ClassifierMixin, feature_names: List[str]) -> pd.Series:
    """Impurity-based importances, most important first."""
    importances = pd.Series(
        np.asarray(model.feature_importances_),
        index=list(feature_names),
        name='importance'
    )
    return importances.sort_values(ascending=False)


def describe_tree(model: DecisionTreeClassifier, feature_names: List[str], max_depth: int = 10) -> str:
    """Human-readable if-then rules of a fitted decision tree."""
    return export_text(model, feature_names=list(feature_names), max_depth=max_depth)


def save_models(models: Dict[str, Any], path: Path):
    """Pickle fitted models to disk."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as f:
        pickle.dump(models, f)


def load_models(path: Path) -> Dict[str, Any]:
    """Load pickled models."""
    with open(path, 'rb') as f:
        return pickle.load(f)
