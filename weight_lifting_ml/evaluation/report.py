"""
Markdown report for the Weight Lifting Exercise analysis.

The document embeds the data preparation, cross-validation and held-out
accuracy tables, the decision tree and feature importance plots, and the
predictions for the testing file.
"""

import os
import numpy as np
import pandas as pd
from pathlib import Path

from ..config import CONFIG
from ..models import MODEL_LABELS
from ..utils import get_logger


def markdown_table(df: pd.DataFrame, index: bool = False, float_format: str = '{:.4f}') -> str:
    """Format a DataFrame as a Markdown table."""
    if index:
        df = df.reset_index()

    header = '| ' + ' | '.join(str(c) for c in df.columns) + ' |'
    separator = '| ' + ' | '.join('---' for _ in df.columns) + ' |'

    rows = []
    for row in df.itertuples(index=False):
        cells = [
            float_format.format(value) if isinstance(value, (float, np.floating)) else str(value)
            for value in row
        ]
        rows.append('| ' + ' | '.join(cells) + ' |')

    return '\n'.join([header, separator] + rows)


def _percent(value: float) -> str:
    return f"{value * 100:.2f}%"


def _describe_na_tokens(na_values) -> str:
    """Readable list of missing-value tokens, e.g. "`NA`, `#DIV/0!` and empty cells"."""
    tokens = [f"`{token}`" if token else "empty cells" for token in na_values]
    if not tokens:
        return "no tokens"
    if len(tokens) == 1:
        return tokens[0]
    return ", ".join(tokens[:-1]) + " and " + tokens[-1]


class ReportRenderer:
    """
    Renders the analysis as a single Markdown document.
    """

    def __init__(self, config=None):
        self.config = config or CONFIG
        self.logger = get_logger('eval')

    def render(self, dataset, summary, output_path: Path = None) -> Path:
        """
        Write the report.

        Args:
            dataset: WeightLiftingDataset
            summary: EvaluationSummary
            output_path: Target file (default results_dir / report_filename)

        Returns:
            Path of the written report
        """
        output_path = Path(
            output_path or self.config.output.results_dir / self.config.output.report_filename
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)

        sections = [
            "# Predicting weight lifting technique from wearable sensors",
            self._data_section(dataset),
            self._cross_validation_section(summary),
            self._holdout_section(dataset, summary),
            self._plots_section(summary, output_path.parent),
            self._predictions_section(summary),
        ]

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write('\n\n'.join(sections) + '\n')

        self.logger.info(f"Report written to {output_path}")
        return output_path

    def _data_section(self, dataset) -> str:
        s = dataset.summary
        data_cfg = self.config.data

        steps = pd.DataFrame([
            ('Rows in training file', s.get('raw_rows', '')),
            ('Columns in training file', s.get('raw_columns', '')),
            (f"Window boundary rows removed ({data_cfg.window_column} != "
             f"'{data_cfg.window_keep_value}')", s.get('boundary_rows_dropped', '')),
            ('Rows kept', s.get('rows_kept', '')),
            ('Metadata columns removed', s.get('metadata_columns_dropped', '')),
            (f"Columns with more than {data_cfg.max_missing_fraction:.0%} missing removed",
             s.get('sparse_columns_dropped', '')),
            ('Near-zero-variance columns removed', s.get('nzv_columns_dropped', '')),
            ('Predictor columns', s.get('predictor_columns', len(dataset.feature_names))),
            ('Training rows', s.get('train_rows', len(dataset.X_train))),
            ('Validation rows', s.get('validation_rows', len(dataset.X_val))),
            ('Testing rows', s.get('test_rows', len(dataset.X_test))),
        ], columns=['Step', 'Count'])

        return '\n\n'.join([
            "## Data preparation",
            f"Measurements were read with {_describe_na_tokens(data_cfg.na_values)} treated "
            "as missing. "
            "Only rows inside a window were kept, since window boundary rows carry summary "
            "statistics the other rows lack. The labeled rows were split into training and "
            f"validation partitions ({1 - data_cfg.validation_fraction:.0%} / "
            f"{data_cfg.validation_fraction:.0%}), stratified by classe.",
            markdown_table(steps),
            "### Class distribution",
            markdown_table(dataset.class_distribution(), index=True),
        ])

    def _cross_validation_section(self, summary) -> str:
        rows = []
        for name, cv in summary.cv_results.items():
            rows.append({
                'Model': MODEL_LABELS.get(name, name),
                'Folds': cv.n_folds,
                'Mean accuracy': _percent(cv.mean_accuracy),
                'Std accuracy': _percent(cv.std_accuracy),
                'Mean kappa': cv.mean_kappa,
            })

        return '\n\n'.join([
            "## Cross-validation",
            f"Stratified {self.config.training.cv_folds}-fold cross-validation on the "
            "training partition.",
            markdown_table(pd.DataFrame(rows)),
        ])

    def _holdout_section(self, dataset, summary) -> str:
        rows = []
        for name, metrics in summary.holdout.items():
            rows.append({
                'Model': MODEL_LABELS.get(name, name),
                'Accuracy': _percent(metrics['accuracy']),
                'Kappa': metrics['kappa'],
                'Out-of-sample error': _percent(metrics['oos_error']),
                'F1 (macro)': metrics['f1_macro'],
            })

        best = summary.best_model
        best_metrics = summary.holdout[best]
        cm = pd.DataFrame(
            best_metrics['confusion_matrix'],
            index=pd.Index(dataset.class_names, name='True \\ Predicted'),
            columns=dataset.class_names
        )

        lines = [
            "## Held-out validation",
            markdown_table(pd.DataFrame(rows)),
            f"The selected model is the **{MODEL_LABELS.get(best, best).lower()}**, with an "
            f"expected out-of-sample error of {_percent(best_metrics['oos_error'])}.",
        ]
        if 'oob_accuracy' in best_metrics:
            lines.append(f"Its out-of-bag accuracy is {_percent(best_metrics['oob_accuracy'])}.")
        lines.extend([
            "### Confusion matrix of the selected model",
            markdown_table(cm, index=True),
        ])
        return '\n\n'.join(lines)

    def _plots_section(self, summary, report_dir: Path) -> str:
        captions = {
            'decision_tree': 'Decision tree',
            'feature_importance': 'Random forest feature importance',
        }
        lines = ["## Plots"]
        for key, caption in captions.items():
            path = summary.plot_paths.get(key)
            if path is None:
                continue
            relative = Path(os.path.relpath(path, report_dir)).as_posix()
            lines.append(f"### {caption}\n\n![{caption}]({relative})")
            if key == 'decision_tree' and summary.tree_rules:
                lines.append(
                    "<details>\n<summary>Decision tree rules</summary>\n\n"
                    f"```\n{summary.tree_rules.rstrip()}\n```\n\n</details>"
                )
        return '\n\n'.join(lines)

    def _predictions_section(self, summary) -> str:
        predictions = summary.predictions.rename(columns={'prediction': 'predicted classe'})
        return '\n\n'.join([
            "## Predictions for the testing file",
            f"Predicted with the {MODEL_LABELS.get(summary.best_model, summary.best_model).lower()}.",
            markdown_table(predictions),
        ])


def render_report(dataset, summary, config=None, output_path: Path = None) -> Path:
    """Convenience wrapper around ReportRenderer."""
    return ReportRenderer(config).render(dataset, summary, output_path)
