"""
Cleaning pipeline for the Weight Lifting Exercise measurements.

Handles:
- CSV loading with the dataset's missing value tokens
- Column type coercion (sensor readings, categorical metadata, timestamps)
- Removal of window boundary rows
- Predictor selection (metadata, sparse and near-zero-variance columns removed)

The column selection is learned on the training partition and replayed on the
validation partition and the unlabeled testing file.
"""

import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional, Any

from ..config import CONFIG
from ..utils import get_logger


def load_measurements(path: Path, config=None) -> pd.DataFrame:
    """
    Load a measurement CSV file.

    Args:
        path: Path to pml-training.csv or pml-testing.csv
        config: Configuration object

    Returns:
        Raw DataFrame, all columns as read
    """
    config = config or CONFIG
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Measurement file not found: {path}")

    df = pd.read_csv(
        path,
        na_values=config.data.na_values,
        index_col=0,
        low_memory=False
    )
    get_logger('data').info(f"Loaded {path.name}: {df.shape[0]} rows, {df.shape[1]} columns")
    return df


def coerce_column_types(df: pd.DataFrame, config=None) -> pd.DataFrame:
    """
    Coerce columns to their analysis types.

    Sensor and summary columns become numeric (unparseable values become NaN),
    subject, window flag and label become categorical and the converted
    timestamp becomes a datetime.
    """
    config = config or CONFIG
    data_cfg = config.data
    df = df.copy()

    categorical_columns = ['user_name', data_cfg.window_column]
    non_numeric = set(categorical_columns) | {data_cfg.timestamp_column, data_cfg.label_column}

    for column in df.columns:
        if column in non_numeric:
            continue
        df[column] = pd.to_numeric(df[column], errors='coerce')

    for column in categorical_columns:
        if column in df.columns:
            df[column] = df[column].astype(str).str.strip().str.lower().astype('category')

    if data_cfg.timestamp_column in df.columns:
        df[data_cfg.timestamp_column] = pd.to_datetime(
            df[data_cfg.timestamp_column],
            format=data_cfg.timestamp_format,
            errors='coerce'
        )

    label = data_cfg.label_column
    if label in df.columns:
        labels = df[label].dropna().astype(str).str.strip()
        unknown = sorted(set(labels) - set(data_cfg.class_labels))
        if unknown:
            raise ValueError(
                f"Unknown class labels in '{label}': {', '.join(unknown)}. "
                f"Expected: {', '.join(data_cfg.class_labels)}"
            )
        df[label] = pd.Categorical(
            df[label].astype('string').str.strip(),
            categories=data_cfg.class_labels
        )

    return df


def filter_window_rows(df: pd.DataFrame, config=None) -> pd.DataFrame:
    """Keep only rows that are not window boundaries."""
    config = config or CONFIG
    column = config.data.window_column

    if column not in df.columns:
        get_logger('data').warning(f"Window column '{column}' not found, no rows filtered")
        return df

    flags = df[column].astype(str).str.strip().str.lower()
    return df.loc[flags == config.data.window_keep_value.lower()]


def drop_metadata_columns(df: pd.DataFrame, config=None) -> pd.DataFrame:
    """Remove housekeeping columns (subject, timestamps, window markers)."""
    config = config or CONFIG
    present = [c for c in config.data.metadata_columns if c in df.columns]
    return df.drop(columns=present)


def sparse_columns(df: pd.DataFrame, max_missing_fraction: float) -> List[str]:
    """Columns whose fraction of missing values exceeds the threshold."""
    missing = df.isna().mean()
    return list(missing[missing > max_missing_fraction].index)


def near_zero_variance_columns(
    df: pd.DataFrame,
    freq_cut: float = 95 / 5,
    unique_cut: float = 10.0
) -> List[str]:
    """
    Detect near-zero-variance columns.

    A column is flagged when it has a single distinct value, or when the ratio
    between the most and second most frequent values exceeds ``freq_cut`` while
    the percentage of distinct values is at most ``unique_cut``.

    Args:
        df: Predictor frame
        freq_cut: Frequency ratio cut-off
        unique_cut: Percent-unique cut-off

    Returns:
        List of flagged column names
    """
    flagged = []
    n_rows = len(df)

    for column in df.columns:
        counts = df[column].value_counts(dropna=True)

        if len(counts) <= 1:
            flagged.append(column)
            continue

        freq_ratio = counts.iloc[0] / counts.iloc[1]
        percent_unique = 100.0 * len(counts) / n_rows

        if freq_ratio > freq_cut and percent_unique <= unique_cut:
            flagged.append(column)

    return flagged


class DataPreprocessor:
    """
    Learns the predictor columns on training rows and applies them to any frame.
    """

    def __init__(self, config=None):
        self.config = config or CONFIG
        self.logger = get_logger('data')

        self.feature_names: List[str] = []
        self.fill_values: Optional[pd.Series] = None
        self.dropped: Dict[str, List[str]] = {}
        self.summary: Dict[str, Any] = {}

    @property
    def is_fitted(self) -> bool:
        return bool(self.feature_names)

    def fit(self, df: pd.DataFrame) -> 'DataPreprocessor':
        """
        Select predictor columns from cleaned training rows.

        Args:
            df: Coerced and filtered training rows (label column optional)

        Returns:
            self
        """
        data_cfg = self.config.data

        predictors = df.drop(columns=[data_cfg.label_column], errors='ignore')

        before = set(predictors.columns)
        predictors = drop_metadata_columns(predictors, self.config)
        self.dropped['metadata'] = sorted(before - set(predictors.columns))

        non_numeric = [
            c for c in predictors.columns
            if not pd.api.types.is_numeric_dtype(predictors[c])
        ]
        predictors = predictors.drop(columns=non_numeric)
        self.dropped['non_numeric'] = non_numeric

        sparse = sparse_columns(predictors, data_cfg.max_missing_fraction)
        predictors = predictors.drop(columns=sparse)
        self.dropped['sparse'] = sparse

        nzv = []
        if data_cfg.remove_near_zero_variance:
            nzv = near_zero_variance_columns(
                predictors,
                freq_cut=data_cfg.nzv_freq_cut,
                unique_cut=data_cfg.nzv_unique_cut
            )
            predictors = predictors.drop(columns=nzv)
        self.dropped['near_zero_variance'] = nzv

        if predictors.shape[1] == 0:
            raise ValueError("No predictor columns left after cleaning")

        self.feature_names = list(predictors.columns)
        self.fill_values = predictors.median()

        self.summary = {
            'training_rows': len(df),
            'metadata_columns_dropped': len(self.dropped['metadata']),
            'non_numeric_columns_dropped': len(non_numeric),
            'sparse_columns_dropped': len(sparse),
            'nzv_columns_dropped': len(nzv),
            'predictor_columns': len(self.feature_names),
        }

        self.logger.info(
            f"Selected {len(self.feature_names)} predictors "
            f"({len(sparse)} sparse, {len(nzv)} near-zero-variance columns removed)"
        )
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Select and impute the learned predictor columns.

        Args:
            df: Coerced frame (training, validation or testing rows)

        Returns:
            Numeric predictor frame with the training column order
        """
        if not self.is_fitted:
            raise ValueError("DataPreprocessor must be fitted before transform")

        missing = [c for c in self.feature_names if c not in df.columns]
        if missing:
            raise ValueError(
                f"{len(missing)} predictor columns missing from input: {', '.join(missing[:5])}"
            )

        X = df[self.feature_names].apply(pd.to_numeric, errors='coerce').astype(float)

        n_missing = int(X.isna().sum().sum())
        if n_missing > 0:
            self.logger.debug(f"Imputing {n_missing} missing values with training medians")
            X = X.fillna(self.fill_values)

        return X

    def fit_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        return self.fit(df).transform(df)


def clean_measurements(df: pd.DataFrame, config=None, filter_rows: bool = True) -> pd.DataFrame:
    """Coerce column types and optionally drop window boundary rows."""
    config = config or CONFIG
    cleaned = coerce_column_types(df, config)
    if filter_rows:
        cleaned = filter_window_rows(cleaned, config)
    return cleaned
