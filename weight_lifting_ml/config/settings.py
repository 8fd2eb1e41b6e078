"""
Centralized Configuration Module for the Weight Lifting Exercise report.

All paths, column groups, model parameters and output settings are defined here.
Only the number of cross-validation folds and the data directory can be
overridden via command line.
"""

from pathlib import Path
from typing import Dict, List, Any, Optional, Tuple
from dataclasses import dataclass, field, asdict
import json


# =============================================================================
# BASE PATHS
# =============================================================================

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent.absolute()

# Directory holding pml-training.csv and pml-testing.csv
DATA_DIR = PROJECT_ROOT / "data"

# Output directories
OUTPUT_DIR = PROJECT_ROOT / "output"
LOGS_DIR = OUTPUT_DIR / "logs"
RESULTS_DIR = OUTPUT_DIR / "results"
PLOTS_DIR = OUTPUT_DIR / "plots"
MODELS_DIR = OUTPUT_DIR / "models"


# =============================================================================
# COLUMN GROUPS
# =============================================================================

# Housekeeping columns, never used as predictors
METADATA_COLUMNS: List[str] = [
    'user_name',
    'raw_timestamp_part_1',
    'raw_timestamp_part_2',
    'cvtd_timestamp',
    'new_window',
    'num_window',
]

# Sensor placements on the lifter and on the dumbbell
SENSOR_LOCATIONS: List[str] = ['belt', 'arm', 'dumbbell', 'forearm']

# Column prefixes populated only on window boundary rows
SUMMARY_PREFIXES: List[str] = [
    'kurtosis_', 'skewness_', 'max_', 'min_', 'amplitude_',
    'avg_', 'stddev_', 'var_',
]

# Correct execution (A) and four common mistakes (B-E)
CLASS_LABELS: List[str] = ['A', 'B', 'C', 'D', 'E']


# =============================================================================
# DATA CONFIGURATION
# =============================================================================

@dataclass
class DataConfig:
    """Data loading and cleaning configuration."""

    # Input files
    data_dir: Path = DATA_DIR
    training_file: str = 'pml-training.csv'
    testing_file: str = 'pml-testing.csv'
    na_values: List[str] = field(default_factory=lambda: ['NA', '#DIV/0!', ''])

    # Special columns
    label_column: str = 'classe'
    problem_id_column: str = 'problem_id'
    window_column: str = 'new_window'
    window_keep_value: str = 'no'
    timestamp_column: str = 'cvtd_timestamp'
    timestamp_format: str = '%d/%m/%Y %H:%M'

    metadata_columns: List[str] = field(default_factory=lambda: list(METADATA_COLUMNS))
    sensor_locations: List[str] = field(default_factory=lambda: list(SENSOR_LOCATIONS))
    class_labels: List[str] = field(default_factory=lambda: list(CLASS_LABELS))

    # Train/validation split
    validation_fraction: float = 0.3
    random_seed: int = 42

    # Column filtering
    max_missing_fraction: float = 0.5
    remove_near_zero_variance: bool = True
    nzv_freq_cut: float = 95 / 5
    nzv_unique_cut: float = 10.0

    @property
    def training_path(self) -> Path:
        return Path(self.data_dir) / self.training_file

    @property
    def testing_path(self) -> Path:
        return Path(self.data_dir) / self.testing_file


# =============================================================================
# MODEL CONFIGURATION
# =============================================================================

@dataclass
class ModelConfig:
    """Classifier hyperparameters."""

    # Decision tree
    tree_criterion: str = 'gini'
    tree_max_depth: Optional[int] = None
    tree_min_samples_split: int = 20
    tree_min_samples_leaf: int = 7
    tree_ccp_alpha: float = 0.0

    # Random forest
    forest_n_estimators: int = 500
    forest_max_features: str = 'sqrt'
    forest_min_samples_leaf: int = 1
    forest_oob_score: bool = True
    forest_n_jobs: int = 1


# =============================================================================
# TRAINING CONFIGURATION
# =============================================================================

@dataclass
class TrainingConfig:
    """Cross-validation settings."""

    cv_folds: int = 5  # This can be overridden via CLI
    cv_shuffle: bool = True
    show_progress: bool = True


# =============================================================================
# EVALUATION CONFIGURATION
# =============================================================================

@dataclass
class EvaluationConfig:
    """Evaluation and plotting configuration."""

    # Plot types to generate
    plot_types: List[str] = field(default_factory=lambda: [
        'decision_tree',
        'feature_importance',
        'confusion_matrix',
    ])

    importance_top_n: int = 20
    tree_plot_max_depth: int = 4
    plot_dpi: int = 150


# =============================================================================
# OUTPUT CONFIGURATION
# =============================================================================

@dataclass
class OutputConfig:
    """Output paths and logging configuration."""

    # Directories
    output_dir: Path = OUTPUT_DIR
    logs_dir: Path = LOGS_DIR
    results_dir: Path = RESULTS_DIR
    plots_dir: Path = PLOTS_DIR
    models_dir: Path = MODELS_DIR

    # File names
    models_filename: str = 'models.pkl'
    config_filename: str = 'config.json'
    metrics_filename: str = 'evaluation_metrics.json'
    predictions_filename: str = 'predictions.csv'
    report_filename: str = 'report.md'
    cv_log_filename: str = 'cross_validation.csv'
    answers_dirname: str = 'answers'

    # One problem_id_N.txt file per test case
    write_answer_files: bool = True

    # Logging
    log_level: str = 'INFO'
    verbose_console: bool = False

    def ensure_directories(self):
        """Create output directories if they don't exist."""
        for dir_path in [self.output_dir, self.logs_dir, self.results_dir,
                         self.plots_dir, self.models_dir]:
            Path(dir_path).mkdir(parents=True, exist_ok=True)


# =============================================================================
# MASTER CONFIGURATION CLASS
# =============================================================================

@dataclass
class Config:
    """Master configuration container."""

    data: DataConfig = field(default_factory=DataConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def ensure_directories(self):
        self.output.ensure_directories()

    def validate(self) -> Tuple[List[str], List[str]]:
        """Validate configuration settings."""
        errors = []
        warnings = []

        # Check input files exist
        if not Path(self.data.data_dir).exists():
            errors.append(f"Data directory does not exist: {self.data.data_dir}")
        else:
            for path in [self.data.training_path, self.data.testing_path]:
                if not path.exists():
                    errors.append(f"Input file does not exist: {path}")

        if not 0.0 < self.data.validation_fraction < 1.0:
            errors.append("validation_fraction must be between 0 and 1")

        if not 0.0 <= self.data.max_missing_fraction <= 1.0:
            errors.append("max_missing_fraction must be between 0 and 1")

        if self.training.cv_folds < 2:
            errors.append("cv_folds must be at least 2")

        if self.model.forest_n_estimators < 1:
            errors.append("forest_n_estimators must be positive")

        if self.data.label_column in self.data.metadata_columns:
            errors.append(f"Label column '{self.data.label_column}' is listed as metadata")

        # Warnings
        if self.data.validation_fraction > 0.5:
            warnings.append("More than half of the labeled data is held out")

        if self.training.cv_folds > 10:
            warnings.append("Many CV folds will make the forest slow to evaluate")

        if self.model.forest_n_estimators < 50:
            warnings.append("Few trees in the forest may give unstable accuracy")

        return errors, warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        result = {}
        for field_name in ['data', 'model', 'training', 'evaluation', 'output']:
            section = asdict(getattr(self, field_name))
            result[field_name] = {
                key: str(value) if isinstance(value, Path) else value
                for key, value in section.items()
            }
        return result

    def save(self, filepath: Path):
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load(cls, filepath: Path) -> 'Config':
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)

        config = cls()

        for section_name in ['data', 'model', 'training', 'evaluation', 'output']:
            section = getattr(config, section_name)
            for key, value in data.get(section_name, {}).items():
                if not hasattr(section, key):
                    continue
                if isinstance(getattr(section, key), Path):
                    value = Path(value)
                setattr(section, key, value)

        return config

    def print_summary(self):
        """Print a summary of the current configuration."""
        print("\n" + "="*70)
        print("CONFIGURATION SUMMARY")
        print("="*70)

        print(f"\nTraining file: {self.data.training_path}")
        print(f"Testing file:  {self.data.testing_path}")
        print(f"Classes: {', '.join(self.data.class_labels)}")
        print(f"Sensor locations: {', '.join(self.data.sensor_locations)}")

        print(f"\nRows kept: {self.data.window_column} == '{self.data.window_keep_value}'")
        print(f"Validation fraction: {self.data.validation_fraction * 100:.0f}%")
        print(f"Max missing fraction per column: {self.data.max_missing_fraction}")
        print(f"Near-zero-variance filter: {self.data.remove_near_zero_variance}")

        print(f"\nDecision tree:")
        print(f"  Criterion: {self.model.tree_criterion}")
        print(f"  Max depth: {self.model.tree_max_depth}")
        print(f"  Min samples split/leaf: {self.model.tree_min_samples_split}/"
              f"{self.model.tree_min_samples_leaf}")

        print(f"\nRandom forest:")
        print(f"  Trees: {self.model.forest_n_estimators}")
        print(f"  Max features: {self.model.forest_max_features}")
        print(f"  OOB score: {self.model.forest_oob_score}")

        print(f"\nCross-validation folds: {self.training.cv_folds}")
        print(f"Random seed: {self.data.random_seed}")
        print(f"Output: {self.output.output_dir}")

        print("="*70)


# =============================================================================
# DEFAULT CONFIGURATION INSTANCE
# =============================================================================

CONFIG = Config()


def get_config() -> Config:
    """Get the default configuration instance."""
    return CONFIG


def set_cv_folds(n_folds: int):
    """Set number of cross-validation folds (CLI override)."""
    CONFIG.training.cv_folds = n_folds


def set_data_dir(data_dir: Path):
    """Set the input data directory (CLI override)."""
    CONFIG.data.data_dir = Path(data_dir)
