"""
Data module for the Weight Lifting Exercise report.
"""

from .validate_data import (
    DataValidator,
    validate_dataset,
    ValidationResult,
    FileValidation,
)

from .preprocessing import (
    DataPreprocessor,
    load_measurements,
    coerce_column_types,
    filter_window_rows,
    drop_metadata_columns,
    sparse_columns,
    near_zero_variance_columns,
    clean_measurements,
)

from .dataset import (
    WeightLiftingDataset,
    split_train_validation,
    create_dataset,
)

__all__ = [
    # Validation
    'DataValidator',
    'validate_dataset',
    'ValidationResult',
    'FileValidation',

    # Preprocessing
    'DataPreprocessor',
    'load_measurements',
    'coerce_column_types',
    'filter_window_rows',
    'drop_metadata_columns',
    'sparse_columns',
    'near_zero_variance_columns',
    'clean_measurements',

    # Dataset
    'WeightLiftingDataset',
    'split_train_validation',
    'create_dataset',
]
