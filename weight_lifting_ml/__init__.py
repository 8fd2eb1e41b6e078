"""
Weight Lifting Exercise report

Predicts how well a dumbbell biceps curl was performed (classe A-E) from
on-body accelerometer, gyroscope and magnetometer readings.

Steps:
- Load and clean the labeled and unlabeled measurement files
- Fit a decision tree and a random forest
- Compare them with cross-validation and a held-out split
- Predict the unlabeled cases with the better model and render a report

Usage:
    weight-lifting-ml                # Run the full report
    weight-lifting-ml --validate     # Validate input files only
"""

__version__ = "1.0.0"

from .config import CONFIG, get_config, set_cv_folds, set_data_dir
from .data import create_dataset, DataValidator
from .models import create_model
from .training import Trainer, train_models
from .evaluation import ModelEvaluator, evaluate_models, render_report

__all__ = [
    'CONFIG',
    'get_config',
    'set_cv_folds',
    'set_data_dir',
    'create_dataset',
    'DataValidator',
    'create_model',
    'Trainer',
    'train_models',
    'ModelEvaluator',
    'evaluate_models',
    'render_report',
]
