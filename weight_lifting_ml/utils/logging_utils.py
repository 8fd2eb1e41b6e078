"""
Logging utilities for the Weight Lifting Exercise report.

Provides structured logging with separate handlers for:
- Console output (minimal, essential information only)
- File output (detailed logging for debugging)
- Cross-validation fold logs
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Optional

LOGGER_PREFIX = 'weight_lifting_ml'

LOGGER_FILES = {
    'main': 'main.log',
    'train': 'training.log',
    'eval': 'evaluation.log',
    'data': 'data.log',
    'validation': 'validation.log'
}


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        levelname = record.levelname
        if levelname not in self.COLORS:
            return super().format(record)

        # Other handlers see the same record
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


class MinimalConsoleFormatter(logging.Formatter):
    """Minimal formatter for essential console output."""

    def format(self, record):
        if record.levelno == logging.INFO:
            return record.getMessage()
        elif record.levelno == logging.WARNING:
            return f"[WARNING] {record.getMessage()}"
        elif record.levelno >= logging.ERROR:
            return f"[ERROR] {record.getMessage()}"
        return record.getMessage()


def setup_logging(
    log_dir: Optional[Path] = None,
    log_level: str = 'INFO',
    verbose_console: bool = False
) -> Dict[str, logging.Logger]:
    """
    Setup logging system with multiple loggers.

    Args:
        log_dir: Directory for log files
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        verbose_console: If True, show detailed output in console

    Returns:
        Dictionary of loggers for different purposes
    """
    from ..config.settings import LOGS_DIR

    log_dir = Path(log_dir or LOGS_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    loggers = {}
    for logger_name, log_filename in LOGGER_FILES.items():
        logger = logging.getLogger(f'{LOGGER_PREFIX}.{logger_name}')
        logger.setLevel(getattr(logging, log_level.upper()))
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []

        # File handler - detailed output
        file_handler = logging.FileHandler(
            log_dir / f"{timestamp}_{log_filename}",
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

        # Console handler - minimal output for main, train, eval
        if logger_name in ['main', 'train', 'eval']:
            console_handler = logging.StreamHandler(sys.stdout)
            if verbose_console:
                console_handler.setLevel(logging.DEBUG)
                console_handler.setFormatter(ColorFormatter('%(levelname)s | %(message)s'))
            else:
                console_handler.setLevel(logging.INFO)
                console_handler.setFormatter(MinimalConsoleFormatter())
            logger.addHandler(console_handler)

        loggers[logger_name] = logger

    return loggers


def get_logger(name: str = 'main') -> logging.Logger:
    """
    Get a logger by name.

    Args:
        name: Logger name (main, train, eval, data, validation)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(f'{LOGGER_PREFIX}.{name}')
    if not logger.handlers:
        # Logger not set up yet, create a basic one
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(MinimalConsoleFormatter())
        logger.addHandler(handler)
    return logger


class ProgressLogger:
    """Simple progress logger for pipeline steps."""

    def __init__(self, total: int, desc: str = "Progress", logger_name: str = 'main'):
        self.total = total
        self.current = 0
        self.desc = desc
        self.logger = get_logger(logger_name)

    def update(self, message: str = None):
        """Advance one step with an optional message."""
        self.current += 1
        if message:
            self.logger.info(f"{self.desc} [{self.current}/{self.total}] | {message}")
        else:
            self.logger.info(f"{self.desc} [{self.current}/{self.total}]")

    def finish(self, message: str = None):
        """Mark progress as complete."""
        if message:
            self.logger.info(f"{self.desc} Complete | {message}")
        else:
            self.logger.info(f"{self.desc} Complete")


class TrainingLogger:
    """Logger for per-fold cross-validation metrics."""

    def __init__(self, log_file: Path = None):
        self.logger = get_logger('train')
        self.log_file = log_file
        self.history: Dict[str, Dict[str, List[float]]] = {}

        # Write CSV header if log file specified
        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(log_file, 'w') as f:
                f.write("Model,Fold,Train Rows,Validation Rows,Accuracy,Kappa\n")

    def log_fold(
        self,
        model_name: str,
        fold: int,
        n_train: int,
        n_val: int,
        metrics: Dict[str, float]
    ):
        """Log metrics for one fold."""
        model_history = self.history.setdefault(model_name, {'accuracy': [], 'kappa': []})
        model_history['accuracy'].append(metrics.get('accuracy', 0.0))
        model_history['kappa'].append(metrics.get('kappa', 0.0))

        self.logger.debug(
            f"  {model_name} fold {fold} | rows {n_train}/{n_val} | "
            f"Acc: {metrics.get('accuracy', 0):.4f} | "
            f"Kappa: {metrics.get('kappa', 0):.4f}"
        )

        if self.log_file:
            with open(self.log_file, 'a') as f:
                f.write(
                    f"{model_name},{fold},{n_train},{n_val},"
                    f"{metrics.get('accuracy', 0):.4f},"
                    f"{metrics.get('kappa', 0):.4f}\n"
                )

    def log_model_summary(self, model_name: str, mean_accuracy: float, std_accuracy: float):
        """Log the cross-validated accuracy of a model."""
        self.logger.info(
            f"  {model_name} | CV accuracy: {mean_accuracy * 100:.2f}% "
            f"(+/- {std_accuracy * 100:.2f}%)"
        )

    def get_history(self) -> Dict[str, Dict[str, List[float]]]:
        """Get per-fold history."""
        return self.history
