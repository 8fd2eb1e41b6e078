"""
Evaluation Module for the Weight Lifting Exercise report.

Generates:
- Held-out accuracy, Cohen's kappa and expected out-of-sample error per model
- F1 scores and confusion matrices
- Selection of the better model and predictions for the testing file
- Decision tree and feature importance plots
"""

import json
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.base import ClassifierMixin
from sklearn.metrics import (
    accuracy_score,
    cohen_kappa_score,
    f1_score,
    confusion_matrix,
    classification_report
)
from sklearn.tree import plot_tree
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from ..config import CONFIG
from ..models import MODEL_LABELS, describe_tree, feature_importances
from ..utils import get_logger


@dataclass
class EvaluationSummary:
    """Everything the report needs about the fitted models."""
    cv_results: Dict[str, Any]
    holdout: Dict[str, Dict[str, Any]]
    best_model: str
    predictions: pd.DataFrame
    importances: pd.Series
    plot_paths: Dict[str, Path] = field(default_factory=dict)
    tree_rules: str = ''


def convert_numpy(obj):
    """Convert numpy types to Python types for JSON."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, dict):
        return {k: convert_numpy(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy(v) for v in obj]
    return obj


class ModelEvaluator:
    """
    Scores fitted classifiers on the validation partition.
    """

    def __init__(self, config=None):
        self.config = config or CONFIG
        self.logger = get_logger('eval')

    def evaluate(
        self,
        name: str,
        model: ClassifierMixin,
        X_val: pd.DataFrame,
        y_val: pd.Series,
        class_names: List[str]
    ) -> Dict[str, Any]:
        """
        Score one model on held-out rows.

        Args:
            name: Model name
            model: Fitted classifier
            X_val: Validation predictors
            y_val: Validation labels
            class_names: Labels in display order

        Returns:
            Dictionary of metrics
        """
        y_pred = model.predict(X_val)
        labels = list(class_names)

        accuracy = accuracy_score(y_val, y_pred)
        f1_per_class = f1_score(y_val, y_pred, average=None, labels=labels, zero_division=0)

        results = {
            'model': name,
            'accuracy': float(accuracy),
            'kappa': float(cohen_kappa_score(y_val, y_pred)),
            'oos_error': float(1.0 - accuracy),
            'f1_macro': float(f1_score(y_val, y_pred, average='macro', labels=labels, zero_division=0)),
            'f1_weighted': float(f1_score(y_val, y_pred, average='weighted', labels=labels, zero_division=0)),
            'f1_per_class': dict(zip(labels, f1_per_class)),
            'confusion_matrix': confusion_matrix(y_val, y_pred, labels=labels),
            'classification_report': classification_report(
                y_val, y_pred,
                labels=labels,
                target_names=labels,
                output_dict=True,
                zero_division=0
            ),
            'n_samples': len(y_val),
        }

        oob = getattr(model, 'oob_score_', None)
        if oob is not None:
            results['oob_accuracy'] = float(oob)

        return results

    def select_best(self, holdout: Dict[str, Dict[str, Any]]) -> str:
        """Model with the highest held-out accuracy; earlier models win ties."""
        if not holdout:
            raise ValueError("No evaluated models to choose from")

        best = None
        for name, metrics in holdout.items():
            if best is None or metrics['accuracy'] > holdout[best]['accuracy']:
                best = name
        return best

    def predict_test(
        self,
        model: ClassifierMixin,
        X_test: pd.DataFrame,
        test_ids: pd.Series
    ) -> pd.DataFrame:
        """Predicted classe for every testing row."""
        return pd.DataFrame({
            'problem_id': np.asarray(test_ids),
            'prediction': model.predict(X_test),
        })

    def print_results(
        self,
        holdout: Dict[str, Dict[str, Any]],
        cv_results: Dict[str, Any],
        best_model: str,
        predictions: pd.DataFrame
    ):
        """Print evaluation results to console."""
        print("\n" + "="*70)
        print("EVALUATION RESULTS")
        print("="*70)

        for name, metrics in holdout.items():
            print("\n" + "-"*70)
            print(MODEL_LABELS.get(name, name).upper())
            print("-"*70)
            if name in cv_results:
                cv = cv_results[name]
                print(f"  CV accuracy:       {cv.mean_accuracy * 100:.2f}% "
                      f"(+/- {cv.std_accuracy * 100:.2f}%, {cv.n_folds} folds)")
            print(f"  Held-out accuracy: {metrics['accuracy'] * 100:.2f}%")
            print(f"  Kappa:             {metrics['kappa']:.4f}")
            print(f"  Out-of-sample err: {metrics['oos_error'] * 100:.2f}%")
            if 'oob_accuracy' in metrics:
                print(f"  OOB accuracy:      {metrics['oob_accuracy'] * 100:.2f}%")
            print(f"  F1 Score (macro):  {metrics['f1_macro']:.4f}")

        print("\n" + "-"*70)
        print(f"SELECTED MODEL: {MODEL_LABELS.get(best_model, best_model)}")
        print("-"*70)
        print("  " + " ".join(
            f"{pid}:{pred}" for pid, pred in zip(predictions['problem_id'], predictions['prediction'])
        ))
        print("\n" + "="*70)

    def save_results(self, summary: EvaluationSummary, output_dir: Path):
        """Save metrics JSON, predictions CSV and per-problem answer files."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        out_cfg = self.config.output

        metrics = {
            'best_model': summary.best_model,
            'cross_validation': {
                name: cv.to_dict() for name, cv in summary.cv_results.items()
            },
            'holdout': {
                name: {k: v for k, v in m.items() if k != 'classification_report'}
                for name, m in summary.holdout.items()
            },
            'top_features': summary.importances.head(
                self.config.evaluation.importance_top_n
            ).to_dict(),
        }

        with open(output_dir / out_cfg.metrics_filename, 'w') as f:
            json.dump(convert_numpy(metrics), f, indent=2)

        summary.predictions.to_csv(output_dir / out_cfg.predictions_filename, index=False)

        if out_cfg.write_answer_files:
            write_answer_files(summary.predictions, output_dir / out_cfg.answers_dirname)

        self.logger.info(f"Results saved to {output_dir}")


def write_answer_files(predictions: pd.DataFrame, answers_dir: Path) -> List[Path]:
    """Write one problem_id_N.txt file holding the predicted classe per test case."""
    answers_dir = Path(answers_dir)
    answers_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for problem_id, prediction in zip(predictions['problem_id'], predictions['prediction']):
        path = answers_dir / f"problem_id_{problem_id}.txt"
        with open(path, 'w') as f:
            f.write(str(prediction))
        paths.append(path)
    return paths


class PlotGenerator:
    """
    Generate evaluation plots.
    """

    def __init__(self, config=None):
        self.config = config or CONFIG
        self.dpi = self.config.evaluation.plot_dpi

    def plot_decision_tree(
        self,
        model: ClassifierMixin,
        feature_names: List[str],
        output_path: Path
    ):
        """Draw the upper levels of the fitted decision tree."""
        fig, ax = plt.subplots(figsize=(20, 10))

        plot_tree(
            model,
            max_depth=self.config.evaluation.tree_plot_max_depth,
            feature_names=list(feature_names),
            class_names=[str(c) for c in model.classes_],
            filled=True,
            rounded=True,
            impurity=False,
            proportion=True,
            fontsize=8,
            ax=ax
        )
        ax.set_title('Decision Tree (upper levels)')

        fig.tight_layout()
        plt.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)

    def plot_feature_importance(
        self,
        importances: pd.Series,
        output_path: Path,
        title: str = 'Random Forest Feature Importance'
    ):
        """Horizontal bar chart of the most important predictors."""
        top = importances.head(self.config.evaluation.importance_top_n)

        fig, ax = plt.subplots(figsize=(10, max(4, 0.35 * len(top))))
        sns.barplot(x=top.values, y=top.index.astype(str), color='steelblue', ax=ax)
        ax.set_xlabel('Mean decrease in impurity')
        ax.set_ylabel('')
        ax.set_title(title)
        ax.grid(True, axis='x', alpha=0.3)

        fig.tight_layout()
        plt.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)

    def plot_confusion_matrix(
        self,
        cm: np.ndarray,
        class_names: List[str],
        title: str,
        output_path: Path
    ):
        """Plot and save confusion matrix."""
        fig, ax = plt.subplots(figsize=(8, 6))
        sns.heatmap(cm, annot=True, fmt='d', cmap='Blues',
                    xticklabels=class_names, yticklabels=class_names,
                    cbar_kws={'label': 'Rows'}, ax=ax)
        ax.set_xlabel('Predicted classe')
        ax.set_ylabel('True classe')
        ax.set_title(title)

        fig.tight_layout()
        plt.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)

    def generate_all_plots(
        self,
        models: Dict[str, ClassifierMixin],
        holdout: Dict[str, Dict[str, Any]],
        importances: pd.Series,
        feature_names: List[str],
        class_names: List[str],
        output_dir: Path
    ) -> Dict[str, Path]:
        """Generate the configured plots; returns their paths keyed by plot name."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        plot_types = self.config.evaluation.plot_types
        paths = {}

        if 'decision_tree' in plot_types and 'tree' in models:
            paths['decision_tree'] = output_dir / 'decision_tree.png'
            self.plot_decision_tree(models['tree'], feature_names, paths['decision_tree'])

        if 'feature_importance' in plot_types:
            paths['feature_importance'] = output_dir / 'feature_importance.png'
            self.plot_feature_importance(importances, paths['feature_importance'])

        if 'confusion_matrix' in plot_types:
            for name, metrics in holdout.items():
                key = f'confusion_matrix_{name}'
                paths[key] = output_dir / f'{key}.png'
                self.plot_confusion_matrix(
                    metrics['confusion_matrix'],
                    class_names,
                    f'{MODEL_LABELS.get(name, name)} Confusion Matrix',
                    paths[key]
                )

        get_logger('eval').info(f"Plots saved to {output_dir}")
        return paths


def evaluate_models(
    models: Dict[str, ClassifierMixin],
    cv_results: Dict[str, Any],
    dataset,
    config=None,
    output_dir: Optional[Path] = None
) -> EvaluationSummary:
    """
    Evaluate fitted models, predict the testing file and render plots.

    Args:
        models: Fitted classifiers keyed by name
        cv_results: CVResult per model name
        dataset: WeightLiftingDataset
        config: Configuration object
        output_dir: Directory for metrics and predictions

    Returns:
        EvaluationSummary
    """
    config = config or CONFIG
    output_dir = output_dir or config.output.results_dir

    evaluator = ModelEvaluator(config)

    holdout = {
        name: evaluator.evaluate(name, model, dataset.X_val, dataset.y_val, dataset.class_names)
        for name, model in models.items()
    }
    best_model = evaluator.select_best(holdout)

    predictions = evaluator.predict_test(models[best_model], dataset.X_test, dataset.test_ids)

    importance_source = 'forest' if 'forest' in models else best_model
    importances = feature_importances(models[importance_source], dataset.feature_names)

    tree_rules = ''
    if 'tree' in models:
        tree_rules = describe_tree(
            models['tree'], dataset.feature_names,
            max_depth=config.evaluation.tree_plot_max_depth
        )

    plot_paths = PlotGenerator(config).generate_all_plots(
        models, holdout, importances,
        dataset.feature_names, dataset.class_names,
        config.output.plots_dir
    )

    summary = EvaluationSummary(
        cv_results=cv_results,
        holdout=holdout,
        best_model=best_model,
        predictions=predictions,
        importances=importances,
        plot_paths=plot_paths,
        tree_rules=tree_rules
    )

    evaluator.print_results(holdout, cv_results, best_model, predictions)
    evaluator.save_results(summary, output_dir)

    return summary
