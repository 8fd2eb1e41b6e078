"""
Evaluation module for the Weight Lifting Exercise report.
"""

from .evaluate import (
    EvaluationSummary,
    ModelEvaluator,
    PlotGenerator,
    evaluate_models,
    write_answer_files,
)

from .report import (
    ReportRenderer,
    markdown_table,
    render_report,
)

__all__ = [
    'EvaluationSummary',
    'ModelEvaluator',
    'PlotGenerator',
    'evaluate_models',
    'write_answer_files',
    'ReportRenderer',
    'markdown_table',
    'render_report',
]
