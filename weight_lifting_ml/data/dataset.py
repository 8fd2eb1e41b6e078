"""
Dataset assembly for the Weight Lifting Exercise report.

Runs load -> coerce -> filter -> split -> select predictors and aligns the
unlabeled testing file to the training predictors.
"""

import pandas as pd
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Any

from sklearn.model_selection import train_test_split

from ..config import CONFIG
from ..utils import get_logger
from .preprocessing import DataPreprocessor, load_measurements, clean_measurements


@dataclass
class WeightLiftingDataset:
    """Model-ready partitions of the measurements."""
    X_train: pd.DataFrame
    y_train: pd.Series
    X_val: pd.DataFrame
    y_val: pd.Series
    X_test: pd.DataFrame
    test_ids: pd.Series
    feature_names: List[str]
    class_names: List[str]
    summary: Dict[str, Any] = field(default_factory=dict)

    def class_distribution(self) -> pd.DataFrame:
        """Rows per class in the training and validation partitions."""
        distribution = pd.DataFrame({
            'train': self.y_train.value_counts(),
            'validation': self.y_val.value_counts(),
        }).reindex(self.class_names).fillna(0).astype(int)
        distribution.index.name = 'classe'
        return distribution


def split_train_validation(
    X: pd.DataFrame,
    y: pd.Series,
    validation_fraction: float = 0.3,
    random_seed: int = 42
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """
    Stratified train/validation partition.

    Returns:
        Tuple of (X_train, X_val, y_train, y_val)
    """
    return train_test_split(
        X, y,
        test_size=validation_fraction,
        random_state=random_seed,
        stratify=y
    )


def create_dataset(
    data_dir: Path = None,
    config=None,
    frames: Optional[Dict[str, pd.DataFrame]] = None
) -> WeightLiftingDataset:
    """
    Build the training, validation and testing partitions.

    Args:
        data_dir: Directory with the training and testing CSV files
        config: Configuration object
        frames: Raw frames keyed by role ('training', 'testing'), as loaded by
            DataValidator; missing roles are read from data_dir

    Returns:
        WeightLiftingDataset
    """
    config = config or CONFIG
    data_cfg = config.data
    data_dir = Path(data_dir or data_cfg.data_dir)
    logger = get_logger('data')

    frames = frames or {}
    train_raw = frames.get('training')
    if train_raw is None:
        train_raw = load_measurements(data_dir / data_cfg.training_file, config)
    test_raw = frames.get('testing')
    if test_raw is None:
        test_raw = load_measurements(data_dir / data_cfg.testing_file, config)

    if data_cfg.label_column not in train_raw.columns:
        raise ValueError(f"Label column '{data_cfg.label_column}' not found in training file")

    summary = {
        'raw_rows': len(train_raw),
        'raw_columns': train_raw.shape[1],
        'test_rows': len(test_raw),
    }

    labeled = clean_measurements(train_raw, config, filter_rows=True)
    summary['boundary_rows_dropped'] = len(train_raw) - len(labeled)

    labeled = labeled.dropna(subset=[data_cfg.label_column])
    if labeled.empty:
        raise ValueError("No labeled non-boundary rows left after filtering")
    summary['rows_kept'] = len(labeled)

    logger.info(
        f"Kept {len(labeled)} of {len(train_raw)} rows "
        f"({summary['boundary_rows_dropped']} window boundary rows removed)"
    )

    y = labeled[data_cfg.label_column].astype(str)
    X_raw = labeled.drop(columns=[data_cfg.label_column])

    X_train_raw, X_val_raw, y_train, y_val = split_train_validation(
        X_raw, y,
        validation_fraction=data_cfg.validation_fraction,
        random_seed=data_cfg.random_seed
    )

    preprocessor = DataPreprocessor(config).fit(X_train_raw)
    X_train = preprocessor.transform(X_train_raw)
    X_val = preprocessor.transform(X_val_raw)

    # Testing rows are all predicted, boundary or not
    test_clean = clean_measurements(test_raw, config, filter_rows=False)
    X_test = preprocessor.transform(test_clean)

    if data_cfg.problem_id_column in test_clean.columns:
        test_ids = test_clean[data_cfg.problem_id_column].reset_index(drop=True)
    else:
        logger.warning(
            f"'{data_cfg.problem_id_column}' not found in testing file, numbering rows instead"
        )
        test_ids = pd.Series(range(1, len(test_clean) + 1), name=data_cfg.problem_id_column)

    summary.update(preprocessor.summary)
    summary['train_rows'] = len(X_train)
    summary['validation_rows'] = len(X_val)

    present = set(y)
    class_names = [c for c in data_cfg.class_labels if c in present]

    logger.info(
        f"Train: {len(X_train)} rows | Validation: {len(X_val)} rows | "
        f"Test: {len(X_test)} rows | Predictors: {len(preprocessor.feature_names)}"
    )

    return WeightLiftingDataset(
        X_train=X_train,
        y_train=y_train,
        X_val=X_val,
        y_val=y_val,
        X_test=X_test.reset_index(drop=True),
        test_ids=test_ids,
        feature_names=list(preprocessor.feature_names),
        class_names=class_names,
        summary=summary
    )
