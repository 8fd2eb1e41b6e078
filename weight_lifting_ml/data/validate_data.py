"""
Data Validation for the Weight Lifting Exercise report.

Validates:
- Both input files are present and readable
- Required columns (label, window flag, problem id)
- Label values are known classes
- Training and testing files share the same predictor columns
- Data quality (missing values, unknown window flags)

Any error stops the report before models are fitted.
"""

import pandas as pd
from pathlib import Path
from typing import Dict, List, Tuple, Optional
from dataclasses import dataclass, field

from ..config import CONFIG
from ..utils import get_logger
from .preprocessing import load_measurements


@dataclass
class ValidationResult:
    """Result of a validation check."""
    passed: bool
    message: str
    severity: str = 'error'  # 'error', 'warning', 'info'
    details: Optional[Dict] = None


@dataclass
class FileValidation:
    """Validation results for a single input file."""
    role: str  # 'training' or 'testing'
    path: Path
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(r.severity == 'error' and not r.passed for r in self.results)

    @property
    def has_warnings(self) -> bool:
        return any(r.severity == 'warning' and not r.passed for r in self.results)


class DataValidator:
    """
    Validates input file structure and consistency.
    """

    def __init__(self, data_dir: Path = None, config=None):
        """
        Initialize the data validator.

        Args:
            data_dir: Directory with the training and testing CSV files
            config: Configuration object
        """
        self.config = config or CONFIG
        self.data_dir = Path(data_dir or self.config.data.data_dir)
        self.logger = get_logger('validation')

        self.files: List[FileValidation] = [
            FileValidation('training', self.data_dir / self.config.data.training_file),
            FileValidation('testing', self.data_dir / self.config.data.testing_file),
        ]
        self.frames: Dict[str, pd.DataFrame] = {}
        self.global_errors: List[str] = []
        self.global_warnings: List[str] = []

    def validate_all(self) -> bool:
        """
        Run all validation checks.

        Returns:
            True if both files can be used
        """
        print("\n" + "="*70)
        print("DATA VALIDATION")
        print("="*70)

        if not self.data_dir.exists():
            self.global_errors.append(f"Data directory does not exist: {self.data_dir}")
            self._print_summary()
            return False

        print(f"\nScanning data directory: {self.data_dir}")

        for file_validation in self.files:
            df = self._load_file(file_validation)
            if df is not None:
                self.frames[file_validation.role] = df

        if 'training' in self.frames:
            self._validate_training(self.files[0], self.frames['training'])
        if 'testing' in self.frames:
            self._validate_testing(self.files[1], self.frames['testing'])
        if len(self.frames) == 2:
            self._validate_schema(self.frames['training'], self.frames['testing'])

        self._print_summary()

        return not self.global_errors and not any(f.has_errors for f in self.files)

    def _load_file(self, file_validation: FileValidation) -> Optional[pd.DataFrame]:
        """Check the file exists and parses as CSV."""
        path = file_validation.path

        if not path.exists():
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Missing {file_validation.role} file: {path.name}",
                severity='error'
            ))
            return None

        try:
            df = load_measurements(path, self.config)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Error reading {path.name}: {e}",
                severity='error'
            ))
            return None

        if df.empty:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"{path.name} contains no rows",
                severity='error'
            ))
            return None

        file_validation.results.append(ValidationResult(
            passed=True,
            message=f"{path.name}: {df.shape[0]} rows, {df.shape[1]} columns",
            severity='info',
            details={'rows': df.shape[0], 'columns': df.shape[1]}
        ))
        print(f"  {file_validation.role}: {df.shape[0]} rows, {df.shape[1]} columns")
        return df

    def _validate_training(self, file_validation: FileValidation, df: pd.DataFrame):
        """Check label and window columns of the labeled file."""
        data_cfg = self.config.data
        label = data_cfg.label_column
        window = data_cfg.window_column

        if label not in df.columns:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Label column '{label}' not found",
                severity='error'
            ))
        else:
            labels = df[label].dropna().astype(str).str.strip()
            unknown = sorted(set(labels) - set(data_cfg.class_labels))
            if unknown:
                file_validation.results.append(ValidationResult(
                    passed=False,
                    message=f"Unknown class labels: {', '.join(unknown)}",
                    severity='error'
                ))

            n_missing = int(df[label].isna().sum())
            if n_missing > 0:
                file_validation.results.append(ValidationResult(
                    passed=False,
                    message=f"{n_missing} rows without a label will be ignored",
                    severity='warning'
                ))

            absent = [c for c in data_cfg.class_labels if c not in set(labels)]
            if absent:
                file_validation.results.append(ValidationResult(
                    passed=False,
                    message=f"Classes without any rows: {', '.join(absent)}",
                    severity='warning'
                ))

            file_validation.results.append(ValidationResult(
                passed=True,
                message="Class counts",
                severity='info',
                details=labels.value_counts().to_dict()
            ))

        if window not in df.columns:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Window column '{window}' not found",
                severity='error'
            ))
            return

        flags = df[window].astype(str).str.strip().str.lower()
        unexpected = sorted(set(flags) - {'yes', 'no'})
        if unexpected:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Unexpected window flag values: {', '.join(unexpected)}",
                severity='warning'
            ))

        n_kept = int((flags == data_cfg.window_keep_value.lower()).sum())
        if n_kept == 0:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"No rows with {window} == '{data_cfg.window_keep_value}'",
                severity='error'
            ))
        else:
            file_validation.results.append(ValidationResult(
                passed=True,
                message=f"{n_kept} non-boundary rows, {len(df) - n_kept} boundary rows",
                severity='info'
            ))

        sparse = df.columns[(df.isna().mean() > data_cfg.max_missing_fraction).values]
        if len(sparse) > 0:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"{len(sparse)} columns are mostly missing and will be dropped",
                severity='warning',
                details={'columns': list(sparse)}
            ))

    def _validate_testing(self, file_validation: FileValidation, df: pd.DataFrame):
        """Check the problem id column of the unlabeled file."""
        problem_id = self.config.data.problem_id_column

        if problem_id not in df.columns:
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Problem id column '{problem_id}' not found, rows will be numbered",
                severity='warning'
            ))
        elif df[problem_id].duplicated().any():
            file_validation.results.append(ValidationResult(
                passed=False,
                message=f"Duplicated values in '{problem_id}'",
                severity='warning'
            ))

    def _validate_schema(self, train_df: pd.DataFrame, test_df: pd.DataFrame):
        """Both files must carry the same non-label columns."""
        data_cfg = self.config.data
        train_columns = set(train_df.columns) - {data_cfg.label_column}
        test_columns = set(test_df.columns) - {data_cfg.problem_id_column}

        missing = sorted(train_columns - test_columns)
        if missing:
            self.global_errors.append(
                f"{len(missing)} training columns missing from testing file: "
                f"{', '.join(missing[:5])}"
            )

        extra = sorted(test_columns - train_columns)
        if extra:
            self.global_warnings.append(
                f"{len(extra)} testing columns not in training file will be ignored"
            )

    def _print_summary(self):
        """Print validation summary."""
        print("\n" + "="*70)
        print("VALIDATION SUMMARY")
        print("="*70)

        if self.global_errors:
            print("\nGLOBAL ERRORS:")
            for error in self.global_errors:
                print(f"  [ERROR] {error}")
                self.logger.error(error)

        if self.global_warnings:
            print("\nGLOBAL WARNINGS:")
            for warning in self.global_warnings:
                print(f"  [WARNING] {warning}")
                self.logger.warning(warning)

        for file_validation in self.files:
            status = 'ERRORS' if file_validation.has_errors else (
                'WARNINGS' if file_validation.has_warnings else 'OK')
            print(f"\n  {file_validation.role} ({file_validation.path.name}): {status}")
            for result in file_validation.results:
                if result.passed:
                    self.logger.debug(f"{file_validation.role}: {result.message}")
                    continue
                print(f"      [{result.severity.upper()}] {result.message}")
                if result.severity == 'error':
                    self.logger.error(f"{file_validation.role}: {result.message}")
                else:
                    self.logger.warning(f"{file_validation.role}: {result.message}")

        print("\n" + "="*70)
        if not self.global_errors and not any(f.has_errors for f in self.files):
            print("VALIDATION COMPLETE: input files are usable")
        else:
            print("VALIDATION FAILED: fix the errors above before running the report")
        print("="*70)

    def get_valid_files(self) -> List[Tuple[str, Path]]:
        """
        Get files that passed validation.

        Returns:
            List of (role, path) tuples
        """
        return [(f.role, f.path) for f in self.files if not f.has_errors]


def validate_dataset(data_dir: Path = None, stop_on_error: bool = True, config=None) -> bool:
    """
    Validate the input files and optionally stop if errors found.

    Args:
        data_dir: Data directory (default from config)
        stop_on_error: If True, raise exception on validation failure
        config: Configuration object

    Returns:
        True if validation passed
    """
    validator = DataValidator(data_dir, config)
    passed = validator.validate_all()

    if not passed and stop_on_error:
        raise ValueError("Data validation failed. Please fix errors before running the report.")

    return passed
