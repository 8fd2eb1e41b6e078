"""Test the dataset assembly."""

import pathlib

import pandas as pd
import pytest

from weight_lifting_ml.config import Config
from weight_lifting_ml.data import create_dataset, split_train_validation
from weight_lifting_ml.data.dataset import WeightLiftingDataset


def test_boundary_rows_removed(dataset: WeightLiftingDataset) -> None:
    """The 20 window boundary rows do not reach the partitions."""
    assert dataset.summary['raw_rows'] == 500
    assert dataset.summary['boundary_rows_dropped'] == 20
    assert dataset.summary['rows_kept'] == 480


def test_partitions(dataset: WeightLiftingDataset) -> None:
    """Training and validation rows are disjoint and split 70/30."""
    assert len(dataset.X_train) + len(dataset.X_val) == 480
    assert len(dataset.X_val) == 144
    assert set(dataset.X_train.index).isdisjoint(dataset.X_val.index)
    assert list(dataset.y_train.index) == list(dataset.X_train.index)


def test_columns_aligned(dataset: WeightLiftingDataset) -> None:
    """All three frames carry the same predictors in the same order."""
    assert list(dataset.X_train.columns) == dataset.feature_names
    assert list(dataset.X_val.columns) == dataset.feature_names
    assert list(dataset.X_test.columns) == dataset.feature_names


def test_no_missing_values(dataset: WeightLiftingDataset) -> None:
    """Model inputs are fully imputed."""
    for frame in [dataset.X_train, dataset.X_val, dataset.X_test]:
        assert not frame.isna().any().any()


def test_testing_rows(dataset: WeightLiftingDataset) -> None:
    """Every unlabeled case is kept with its problem id."""
    assert len(dataset.X_test) == 20
    assert dataset.test_ids.tolist() == list(range(1, 21))
    assert dataset.class_names == ['A', 'B', 'C', 'D', 'E']


def test_class_distribution(dataset: WeightLiftingDataset) -> None:
    """Counts per class add up to the partition sizes."""
    distribution = dataset.class_distribution()

    assert list(distribution.index) == ['A', 'B', 'C', 'D', 'E']
    assert list(distribution.columns) == ['train', 'validation']
    assert distribution['train'].sum() == len(dataset.y_train)
    assert distribution['validation'].sum() == len(dataset.y_val)
    assert distribution.loc['E'].sum() == 80


def test_split_is_stratified() -> None:
    """Each class keeps its share in both partitions."""
    X = pd.DataFrame({'x': range(100)})
    y = pd.Series(['A'] * 50 + ['B'] * 50)

    X_train, X_val, y_train, y_val = split_train_validation(X, y, 0.3, random_seed=0)

    assert len(X_val) == 30
    assert (y_val == 'A').sum() == 15
    assert (y_train == 'B').sum() == 35


def test_missing_problem_id(
    data_dir: pathlib.Path, test_config: Config, testing_frame: pd.DataFrame
) -> None:
    """Without problem ids the testing rows are numbered from 1."""
    testing_frame.drop(columns=['problem_id']).to_csv(
        data_dir / test_config.data.testing_file, index_label='', na_rep='NA'
    )

    dataset = create_dataset(data_dir, test_config)

    assert dataset.test_ids.tolist() == list(range(1, 21))


def test_missing_label_column(
    data_dir: pathlib.Path, test_config: Config, training_frame: pd.DataFrame
) -> None:
    """A training file without classe cannot be used."""
    training_frame.drop(columns=['classe']).to_csv(
        data_dir / test_config.data.training_file, index_label='', na_rep='NA'
    )

    with pytest.raises(ValueError, match="Label column 'classe' not found"):
        create_dataset(data_dir, test_config)


def test_create_dataset_from_frames(
    tmp_path: pathlib.Path,
    test_config: Config,
    training_frame: pd.DataFrame,
    testing_frame: pd.DataFrame,
) -> None:
    """Frames already loaded are used without reading the data directory."""
    frames = {'training': training_frame, 'testing': testing_frame}

    dataset = create_dataset(tmp_path / 'no_files_here', test_config, frames=frames)

    assert dataset.summary['rows_kept'] == 480
    assert len(dataset.X_test) == 20
    assert 'new_window' in training_frame.columns
