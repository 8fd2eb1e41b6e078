"""
Training Module for the Weight Lifting Exercise report.

Features:
- Stratified k-fold cross-validation per model
- Accuracy and Cohen's kappa per fold
- Final fit on the full training partition
- Fold-level CSV log
"""

import time
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Any

from sklearn.base import ClassifierMixin
from sklearn.metrics import accuracy_score, cohen_kappa_score
from sklearn.model_selection import StratifiedKFold
from tqdm import tqdm

from ..config import CONFIG
from ..models import MODEL_NAMES, MODEL_LABELS, create_model, count_nodes, save_models
from ..utils import get_logger, TrainingLogger


@dataclass
class CVResult:
    """Cross-validation scores of one model."""
    model_name: str
    fold_accuracy: List[float] = field(default_factory=list)
    fold_kappa: List[float] = field(default_factory=list)

    @property
    def n_folds(self) -> int:
        return len(self.fold_accuracy)

    @property
    def mean_accuracy(self) -> float:
        return float(np.mean(self.fold_accuracy)) if self.fold_accuracy else 0.0

    @property
    def std_accuracy(self) -> float:
        return float(np.std(self.fold_accuracy, ddof=1)) if self.n_folds > 1 else 0.0

    @property
    def mean_kappa(self) -> float:
        return float(np.mean(self.fold_kappa)) if self.fold_kappa else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'model': self.model_name,
            'folds': self.n_folds,
            'fold_accuracy': list(self.fold_accuracy),
            'fold_kappa': list(self.fold_kappa),
            'mean_accuracy': self.mean_accuracy,
            'std_accuracy': self.std_accuracy,
            'mean_kappa': self.mean_kappa,
        }


class Trainer:
    """
    Cross-validates and fits the tree and forest classifiers.
    """

    def __init__(self, config=None):
        self.config = config or CONFIG
        self.logger = get_logger('train')
        self.training_logger = TrainingLogger(
            log_file=self.config.output.logs_dir / self.config.output.cv_log_filename
        )

    def cross_validate(self, name: str, X: pd.DataFrame, y: pd.Series) -> CVResult:
        """
        Stratified k-fold cross-validation of one model.

        Args:
            name: Model name ('tree' or 'forest')
            X: Training predictors
            y: Training labels

        Returns:
            CVResult with one score per fold
        """
        cfg = self.config.training
        splitter = StratifiedKFold(
            n_splits=cfg.cv_folds,
            shuffle=cfg.cv_shuffle,
            random_state=self.config.data.random_seed if cfg.cv_shuffle else None
        )

        result = CVResult(model_name=name)
        folds = tqdm(
            splitter.split(X, y),
            total=cfg.cv_folds,
            desc=f"CV {MODEL_LABELS.get(name, name)}",
            leave=False,
            disable=not cfg.show_progress
        )

        for fold, (train_idx, val_idx) in enumerate(folds, start=1):
            model = create_model(name, self.config)
            if hasattr(model, 'oob_score'):
                # Held-out fold already measures generalisation
                model.set_params(oob_score=False)

            model.fit(X.iloc[train_idx], y.iloc[train_idx])
            y_pred = model.predict(X.iloc[val_idx])

            metrics = {
                'accuracy': accuracy_score(y.iloc[val_idx], y_pred),
                'kappa': cohen_kappa_score(y.iloc[val_idx], y_pred),
            }
            result.fold_accuracy.append(float(metrics['accuracy']))
            result.fold_kappa.append(float(metrics['kappa']))

            self.training_logger.log_fold(name, fold, len(train_idx), len(val_idx), metrics)

        self.training_logger.log_model_summary(
            MODEL_LABELS.get(name, name), result.mean_accuracy, result.std_accuracy
        )
        return result

    def fit(self, name: str, X: pd.DataFrame, y: pd.Series) -> ClassifierMixin:
        """Fit one model on the full training partition."""
        model = create_model(name, self.config)

        start = time.time()
        model.fit(X, y)
        elapsed = time.time() - start

        self.logger.info(
            f"  {MODEL_LABELS.get(name, name)} fitted in {elapsed:.1f}s "
            f"({count_nodes(model)} nodes)"
        )
        if getattr(model, 'oob_score_', None) is not None:
            self.logger.info(f"  OOB accuracy: {model.oob_score_ * 100:.2f}%")

        return model

    def train_all(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        model_names: List[str] = None
    ) -> Tuple[Dict[str, ClassifierMixin], Dict[str, CVResult]]:
        """
        Cross-validate and fit every model.

        Returns:
            Tuple of (fitted models, CV results), both keyed by model name
        """
        model_names = model_names or MODEL_NAMES
        models = {}
        cv_results = {}

        for name in model_names:
            self.logger.info(f"\n{MODEL_LABELS.get(name, name)}")
            cv_results[name] = self.cross_validate(name, X, y)
            models[name] = self.fit(name, X, y)

        return models, cv_results


def train_models(dataset, config=None) -> Tuple[Dict[str, ClassifierMixin], Dict[str, CVResult]]:
    """
    Convenience function to train both models on a dataset.

    Args:
        dataset: WeightLiftingDataset
        config: Configuration object

    Returns:
        Tuple of (fitted models, CV results)
    """
    config = config or CONFIG

    trainer = Trainer(config)
    models, cv_results = trainer.train_all(dataset.X_train, dataset.y_train)

    models_path = config.output.models_dir / config.output.models_filename
    save_models(models, models_path)
    trainer.logger.info(f"Models saved to: {models_path}")

    return models, cv_results
