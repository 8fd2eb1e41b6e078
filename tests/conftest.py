"""Fixtures used by pytest."""

import logging
import pathlib

import numpy as np
import pandas as pd
import pytest

from weight_lifting_ml.config import Config
from weight_lifting_ml.data import create_dataset

LOCATIONS = ['belt', 'arm', 'dumbbell', 'forearm']
CLASSES = ['A', 'B', 'C', 'D', 'E']
USERS = ['adelmo', 'carlitos', 'charles', 'eurico', 'jeremy', 'pedro']
BOUNDARY_EVERY = 25


def make_measurements(n_rows: int, seed: int = 0, labeled: bool = True) -> pd.DataFrame:
    """Build a frame shaped like the Weight Lifting Exercise CSV files.

    Every BOUNDARY_EVERY-th row of a labeled frame is a window boundary row that
    carries the summary statistic columns; all other rows leave them empty.
    """
    rng = np.random.default_rng(seed)
    class_idx = np.arange(n_rows) % len(CLASSES)
    if labeled:
        boundary = (np.arange(n_rows) % BOUNDARY_EVERY) == BOUNDARY_EVERY - 1
    else:
        boundary = np.zeros(n_rows, dtype=bool)

    data = {
        'user_name': rng.choice(USERS, size=n_rows),
        'raw_timestamp_part_1': 1322489729 + np.arange(n_rows),
        'raw_timestamp_part_2': rng.integers(0, 999999, size=n_rows),
        'cvtd_timestamp': ['28/11/2011 14:15'] * n_rows,
        'new_window': np.where(boundary, 'yes', 'no'),
        'num_window': np.arange(n_rows) // BOUNDARY_EVERY + 1,
    }

    for location in LOCATIONS:
        data[f'roll_{location}'] = class_idx * 10.0 + rng.normal(0, 1, n_rows)
        data[f'pitch_{location}'] = class_idx * -5.0 + rng.normal(0, 1, n_rows)
        data[f'yaw_{location}'] = rng.normal(0, 50, n_rows)
        data[f'total_accel_{location}'] = rng.integers(0, 30, n_rows)

        summary_value = rng.normal(0, 1, n_rows).round(3).astype(object)
        summary_value[::2] = '#DIV/0!'
        data[f'kurtosis_roll_{location}'] = np.where(boundary, summary_value, '')
        data[f'max_roll_{location}'] = np.where(boundary, rng.normal(0, 1, n_rows), np.nan)
        data[f'var_total_accel_{location}'] = np.where(boundary, rng.normal(0, 1, n_rows), np.nan)

        for sensor in ['gyros', 'accel', 'magnet']:
            for axis in ['x', 'y', 'z']:
                data[f'{sensor}_{location}_{axis}'] = rng.normal(0, 100, n_rows).round(2)

    frame = pd.DataFrame(data)
    frame.index = pd.RangeIndex(1, n_rows + 1)

    if labeled:
        frame['classe'] = np.array(CLASSES)[class_idx]
    else:
        frame['problem_id'] = np.arange(1, n_rows + 1)

    return frame


def write_measurements(frame: pd.DataFrame, path: pathlib.Path) -> pathlib.Path:
    """Write a frame with the unnamed leading row index used by the real files."""
    frame.to_csv(path, index=True, index_label='', na_rep='NA')
    return path


@pytest.fixture(autouse=True)
def reset_loggers():
    """Drop handlers attached to the package loggers during a test."""
    yield
    for name in ['main', 'train', 'eval', 'data', 'validation']:
        logger = logging.getLogger(f'weight_lifting_ml.{name}')
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def training_frame() -> pd.DataFrame:
    """Labeled measurements, 500 rows with 20 window boundary rows."""
    return make_measurements(500, seed=1, labeled=True)


@pytest.fixture
def testing_frame() -> pd.DataFrame:
    """Unlabeled measurements with problem ids 1-20."""
    return make_measurements(20, seed=2, labeled=False)


@pytest.fixture
def test_config(tmp_path: pathlib.Path) -> Config:
    """Small, fast configuration writing below tmp_path."""
    config = Config()
    config.data.data_dir = tmp_path / 'data'
    config.model.forest_n_estimators = 20
    config.training.cv_folds = 3
    config.training.show_progress = False
    config.evaluation.tree_plot_max_depth = 2

    output_dir = tmp_path / 'output'
    config.output.output_dir = output_dir
    config.output.logs_dir = output_dir / 'logs'
    config.output.results_dir = output_dir / 'results'
    config.output.plots_dir = output_dir / 'plots'
    config.output.models_dir = output_dir / 'models'
    config.ensure_directories()
    return config


@pytest.fixture
def data_dir(
    test_config: Config, training_frame: pd.DataFrame, testing_frame: pd.DataFrame
) -> pathlib.Path:
    """Data directory holding both CSV files."""
    directory = pathlib.Path(test_config.data.data_dir)
    directory.mkdir(parents=True, exist_ok=True)
    write_measurements(training_frame, directory / test_config.data.training_file)
    write_measurements(testing_frame, directory / test_config.data.testing_file)
    return directory


@pytest.fixture
def dataset(data_dir: pathlib.Path, test_config: Config):
    """Model-ready partitions built from the sample files."""
    return create_dataset(data_dir, test_config)


@pytest.fixture
def measurements_file(tmp_path: pathlib.Path):
    """Factory writing synthetic measurements to a CSV file below tmp_path."""
    def _write(name: str, n_rows: int, seed: int = 0, labeled: bool = True) -> pathlib.Path:
        return write_measurements(
            make_measurements(n_rows, seed=seed, labeled=labeled), tmp_path / name
        )
    return _write
