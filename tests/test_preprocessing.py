"""Test the functions of preprocessing.py."""

import pathlib

import numpy as np
import pandas as pd
import pytest

from weight_lifting_ml.config import Config
from weight_lifting_ml.data import preprocessing


def test_load_measurements_na_tokens(tmp_path: pathlib.Path, test_config: Config) -> None:
    """NA, #DIV/0! and empty cells are all read as missing."""
    path = tmp_path / 'sample.csv'
    path.write_text(
        ",user_name,kurtosis_roll_belt,roll_belt,classe\n"
        "1,pedro,#DIV/0!,1.5,A\n"
        "2,pedro,,2.5,B\n"
        "3,pedro,NA,3.5,C\n"
    )

    df = preprocessing.load_measurements(path, test_config)

    assert list(df.columns) == ['user_name', 'kurtosis_roll_belt', 'roll_belt', 'classe']
    assert df['kurtosis_roll_belt'].isna().all()
    assert df['roll_belt'].tolist() == [1.5, 2.5, 3.5]


def test_load_measurements_missing_file(tmp_path: pathlib.Path, test_config: Config) -> None:
    """A missing file raises instead of returning an empty frame."""
    with pytest.raises(FileNotFoundError, match="Measurement file not found"):
        preprocessing.load_measurements(tmp_path / 'nope.csv', test_config)


def test_coerce_column_types(test_config: Config) -> None:
    """Sensor columns become numeric, flags categorical, timestamps datetime."""
    df = pd.DataFrame({
        'user_name': ['Pedro', 'carlitos'],
        'new_window': ['no', 'YES'],
        'cvtd_timestamp': ['28/11/2011 14:15', 'not a date'],
        'roll_belt': ['1.5', 'oops'],
        'classe': ['A', 'E'],
    })

    result = preprocessing.coerce_column_types(df, test_config)

    assert result['roll_belt'].iloc[0] == 1.5
    assert np.isnan(result['roll_belt'].iloc[1])
    assert result['new_window'].tolist() == ['no', 'yes']
    assert isinstance(result['user_name'].dtype, pd.CategoricalDtype)
    assert result['cvtd_timestamp'].iloc[0] == pd.Timestamp(2011, 11, 28, 14, 15)
    assert pd.isna(result['cvtd_timestamp'].iloc[1])
    assert list(result['classe'].cat.categories) == ['A', 'B', 'C', 'D', 'E']


def test_coerce_unknown_label(test_config: Config) -> None:
    """Labels outside A-E are rejected."""
    df = pd.DataFrame({'roll_belt': [1.0, 2.0], 'classe': ['A', 'F']})

    with pytest.raises(ValueError, match="Unknown class labels in 'classe': F"):
        preprocessing.coerce_column_types(df, test_config)


def test_filter_window_rows(training_frame: pd.DataFrame, test_config: Config) -> None:
    """Window boundary rows are removed."""
    result = preprocessing.filter_window_rows(training_frame, test_config)

    assert len(result) == 480
    assert (result['new_window'] == 'no').all()


def test_filter_window_rows_no_column(test_config: Config) -> None:
    """Without a window column the frame passes through unchanged."""
    df = pd.DataFrame({'roll_belt': [1.0, 2.0]})

    result = preprocessing.filter_window_rows(df, test_config)

    pd.testing.assert_frame_equal(result, df)


def test_drop_metadata_columns(training_frame: pd.DataFrame, test_config: Config) -> None:
    """Subject, timestamp and window columns are removed."""
    result = preprocessing.drop_metadata_columns(training_frame, test_config)

    for column in test_config.data.metadata_columns:
        assert column not in result.columns
    assert 'roll_belt' in result.columns
    assert 'classe' in result.columns


def test_sparse_columns() -> None:
    """Only columns above the missing threshold are flagged."""
    df = pd.DataFrame({
        'full': [1.0, 2.0, 3.0, 4.0],
        'half': [1.0, 2.0, np.nan, np.nan],
        'mostly_missing': [1.0, np.nan, np.nan, np.nan],
    })

    assert preprocessing.sparse_columns(df, 0.5) == ['mostly_missing']


def test_near_zero_variance_columns() -> None:
    """Constant and dominated columns are flagged, informative ones kept."""
    n = 200
    df = pd.DataFrame({
        'constant': np.ones(n),
        'dominated': np.r_[np.zeros(n - 2), [1.0, 2.0]],
        'informative': np.arange(n, dtype=float),
        'binary': np.tile([0.0, 1.0], n // 2),
    })

    flagged = preprocessing.near_zero_variance_columns(df, freq_cut=95 / 5, unique_cut=10)

    assert flagged == ['constant', 'dominated']


def test_preprocessor_fit(training_frame: pd.DataFrame, test_config: Config) -> None:
    """Metadata and sparse summary columns are excluded from predictors."""
    cleaned = preprocessing.clean_measurements(training_frame, test_config)

    preprocessor = preprocessing.DataPreprocessor(test_config).fit(cleaned)

    assert preprocessor.is_fitted
    assert len(preprocessor.feature_names) == 52
    assert 'classe' not in preprocessor.feature_names
    assert 'num_window' not in preprocessor.feature_names
    assert not any(name.startswith('kurtosis_') for name in preprocessor.feature_names)
    assert preprocessor.summary['sparse_columns_dropped'] == 12
    assert preprocessor.summary['metadata_columns_dropped'] == 6


def test_preprocessor_transform_imputes(
    training_frame: pd.DataFrame, test_config: Config
) -> None:
    """Missing predictor values are filled with training medians."""
    cleaned = preprocessing.clean_measurements(training_frame, test_config)
    preprocessor = preprocessing.DataPreprocessor(test_config).fit(cleaned)
    unseen = cleaned.head(3).copy()
    unseen.loc[unseen.index[0], 'roll_belt'] = np.nan

    result = preprocessor.transform(unseen)

    assert list(result.columns) == preprocessor.feature_names
    assert not result.isna().any().any()
    assert result['roll_belt'].iloc[0] == pytest.approx(cleaned['roll_belt'].median())


def test_preprocessor_not_fitted(test_config: Config) -> None:
    """Transforming before fitting is an error."""
    with pytest.raises(ValueError, match="must be fitted"):
        preprocessing.DataPreprocessor(test_config).transform(pd.DataFrame({'a': [1.0]}))


def test_preprocessor_missing_columns(
    training_frame: pd.DataFrame, test_config: Config
) -> None:
    """Frames lacking learned predictors are rejected."""
    cleaned = preprocessing.clean_measurements(training_frame, test_config)
    preprocessor = preprocessing.DataPreprocessor(test_config).fit(cleaned)

    with pytest.raises(ValueError, match="predictor columns missing"):
        preprocessor.transform(cleaned.drop(columns=['roll_belt']))


def test_preprocessor_nothing_left(test_config: Config) -> None:
    """A frame with only metadata and empty columns has no predictors."""
    df = pd.DataFrame({
        'user_name': ['pedro', 'carlitos'],
        'max_roll_belt': [np.nan, np.nan],
        'classe': ['A', 'B'],
    })

    with pytest.raises(ValueError, match="No predictor columns left"):
        preprocessing.DataPreprocessor(test_config).fit(df)


def test_clean_measurements_written_file(measurements_file, test_config: Config) -> None:
    """Loading a written file and cleaning it keeps only window rows."""
    path = measurements_file('train.csv', 100, seed=3)

    df = preprocessing.clean_measurements(
        preprocessing.load_measurements(path, test_config), test_config
    )

    assert len(df) == 96
    assert df['classe'].notna().all()
