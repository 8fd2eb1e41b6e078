"""
Configuration module for the Weight Lifting Exercise report.
"""

from .settings import (
    CONFIG,
    Config,
    DataConfig,
    ModelConfig,
    TrainingConfig,
    EvaluationConfig,
    OutputConfig,
    get_config,
    set_cv_folds,
    set_data_dir,
)

__all__ = [
    'CONFIG',
    'Config',
    'DataConfig',
    'ModelConfig',
    'TrainingConfig',
    'EvaluationConfig',
    'OutputConfig',
    'get_config',
    'set_cv_folds',
    'set_data_dir',
]
