"""
Training module for the Weight Lifting Exercise report.
"""

from .trainer import (
    CVResult,
    Trainer,
    train_models,
)

__all__ = [
    'CVResult',
    'Trainer',
    'train_models',
]
