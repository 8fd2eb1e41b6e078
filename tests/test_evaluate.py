"""Test held-out evaluation, predictions and plots."""

import json
import pathlib

import numpy as np
import pandas as pd
import pytest

from weight_lifting_ml.config import Config
from weight_lifting_ml.data.dataset import WeightLiftingDataset
from weight_lifting_ml.evaluation import (
    ModelEvaluator,
    evaluate_models,
    markdown_table,
    write_answer_files,
)
from weight_lifting_ml.training import train_models


@pytest.fixture
def trained(dataset: WeightLiftingDataset, test_config: Config):
    """Fitted models and their cross-validation results."""
    return train_models(dataset, test_config)


def test_evaluate_metrics(trained, dataset: WeightLiftingDataset, test_config: Config) -> None:
    """Out-of-sample error complements accuracy; only the forest has OOB accuracy."""
    models, _ = trained
    evaluator = ModelEvaluator(test_config)

    tree = evaluator.evaluate(
        'tree', models['tree'], dataset.X_val, dataset.y_val, dataset.class_names
    )
    forest = evaluator.evaluate(
        'forest', models['forest'], dataset.X_val, dataset.y_val, dataset.class_names
    )

    assert tree['accuracy'] + tree['oos_error'] == pytest.approx(1.0)
    assert tree['n_samples'] == len(dataset.y_val)
    assert tree['confusion_matrix'].shape == (5, 5)
    assert tree['confusion_matrix'].sum() == len(dataset.y_val)
    assert 'oob_accuracy' not in tree
    assert 0.0 <= forest['oob_accuracy'] <= 1.0


def test_select_best(test_config: Config) -> None:
    """Highest accuracy wins and ties go to the earlier model."""
    evaluator = ModelEvaluator(test_config)

    assert evaluator.select_best({'tree': {'accuracy': 0.7}, 'forest': {'accuracy': 0.9}}) == 'forest'
    assert evaluator.select_best({'tree': {'accuracy': 0.9}, 'forest': {'accuracy': 0.9}}) == 'tree'


def test_select_best_empty(test_config: Config) -> None:
    """Nothing to choose from is an error."""
    with pytest.raises(ValueError, match="No evaluated models"):
        ModelEvaluator(test_config).select_best({})


def test_write_answer_files(tmp_path: pathlib.Path) -> None:
    """One file per problem id holding only the predicted class."""
    predictions = pd.DataFrame({'problem_id': [1, 2, 3], 'prediction': ['A', 'E', 'B']})

    paths = write_answer_files(predictions, tmp_path / 'answers')

    assert [p.name for p in paths] == ['problem_id_1.txt', 'problem_id_2.txt', 'problem_id_3.txt']
    assert (tmp_path / 'answers' / 'problem_id_2.txt').read_text() == 'E'


def test_evaluate_models(trained, dataset: WeightLiftingDataset, test_config: Config) -> None:
    """Metrics, predictions, answers and plots are written."""
    models, cv_results = trained

    summary = evaluate_models(models, cv_results, dataset, test_config)

    results_dir = test_config.output.results_dir
    assert summary.best_model in ('tree', 'forest')
    assert len(summary.predictions) == 20
    assert set(summary.predictions['prediction']) <= set(dataset.class_names)
    assert summary.predictions['problem_id'].tolist() == list(range(1, 21))
    assert len(list((results_dir / 'answers').glob('problem_id_*.txt'))) == 20
    assert (results_dir / test_config.output.predictions_filename).exists()
    for key in ['decision_tree', 'feature_importance', 'confusion_matrix_tree',
                'confusion_matrix_forest']:
        assert summary.plot_paths[key].exists()

    with open(results_dir / test_config.output.metrics_filename) as f:
        metrics = json.load(f)
    assert metrics['best_model'] == summary.best_model
    assert set(metrics['cross_validation']) == {'tree', 'forest'}
    assert 'classification_report' not in metrics['holdout']['tree']


def test_markdown_table() -> None:
    """Floats are formatted and the index can be included."""
    df = pd.DataFrame({'x': [1.23456, np.float64(2.0)], 'name': ['a', 'b']},
                      index=pd.Index(['r1', 'r2'], name='row'))

    table = markdown_table(df, index=True)

    assert table.splitlines() == [
        '| row | x | name |',
        '| --- | --- | --- |',
        '| r1 | 1.2346 | a |',
        '| r2 | 2.0000 | b |',
    ]
