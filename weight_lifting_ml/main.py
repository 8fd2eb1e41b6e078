#!/usr/bin/env python3
"""
Main Entry Point for the Weight Lifting Exercise report.

Usage:
    weight-lifting-ml                    # Run the full report
    weight-lifting-ml --folds 10         # Cross-validate with 10 folds
    weight-lifting-ml --validate         # Only validate input files
    weight-lifting-ml --summary          # Print configuration and exit

From command line, only the fold count and data directory can be specified.
All other parameters are in config/settings.py
"""

import argparse
import sys
import traceback
from typing import List, Optional


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='weight-lifting-ml',
        description='Weight Lifting Exercise report - decision tree vs random forest',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    weight-lifting-ml                       Run the full report
    weight-lifting-ml --folds 10            Cross-validate with 10 folds
    weight-lifting-ml --data-dir ./data     Read the CSV files from ./data
    weight-lifting-ml --validate            Validate input files only
        """
    )

    parser.add_argument(
        '--folds',
        type=int,
        default=None,
        help='Number of cross-validation folds'
    )

    parser.add_argument(
        '--data-dir',
        type=str,
        default=None,
        help='Directory containing pml-training.csv and pml-testing.csv'
    )

    parser.add_argument(
        '--validate',
        action='store_true',
        help='Only validate input files (no model fitting)'
    )

    parser.add_argument(
        '--summary',
        action='store_true',
        help='Print configuration summary and exit'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Import after parsing to avoid slow imports for --help
    from .config import CONFIG, set_cv_folds, set_data_dir
    from .utils import setup_logging, get_logger

    CONFIG.ensure_directories()
    setup_logging(
        log_dir=CONFIG.output.logs_dir,
        log_level=CONFIG.output.log_level,
        verbose_console=CONFIG.output.verbose_console
    )
    logger = get_logger('main')

    print("\n" + "="*70)
    print("WEIGHT LIFTING EXERCISE REPORT")
    print("Decision tree vs random forest on wearable sensor data")
    print("="*70)

    if args.folds is not None:
        set_cv_folds(args.folds)
        logger.info(f"CV folds set to: {args.folds}")

    if args.data_dir is not None:
        set_data_dir(args.data_dir)
        logger.info(f"Data directory set to: {args.data_dir}")

    if args.summary:
        CONFIG.print_summary()
        return 0

    errors, warnings = CONFIG.validate()
    if errors:
        logger.error("Configuration validation failed!")
        for error in errors:
            logger.error(f"  - {error}")
        return 1

    for warning in warnings:
        logger.warning(f"  - {warning}")

    if args.validate:
        return run_validation()

    return run_report()


def run_validation() -> int:
    """Run data validation only."""
    from .config import CONFIG
    from .data import validate_dataset

    print("\nRunning data validation...")

    try:
        passed = validate_dataset(CONFIG.data.data_dir, stop_on_error=False, config=CONFIG)
    except (OSError, ValueError) as e:
        print(f"Validation error: {e}")
        return 1

    return 0 if passed else 1


def run_report() -> int:
    """Run the full analysis and render the report."""
    from .config import CONFIG
    from .data import DataValidator, create_dataset
    from .training import train_models
    from .evaluation import evaluate_models, render_report
    from .utils import get_logger, ProgressLogger

    logger = get_logger('main')
    progress = ProgressLogger(total=5, desc="Report")

    # Step 1: Validate data
    print("\n" + "="*70)
    print("STEP 1: DATA VALIDATION")
    print("="*70)

    validator = DataValidator(CONFIG.data.data_dir, CONFIG)
    if not validator.validate_all():
        logger.error("Data validation failed")
        return 1
    progress.update("input files validated")

    # Step 2: Load and clean data
    print("\n" + "="*70)
    print("STEP 2: DATA PREPARATION")
    print("="*70)

    try:
        dataset = create_dataset(CONFIG.data.data_dir, CONFIG, frames=validator.frames)
    except (OSError, ValueError) as e:
        logger.error(f"Data preparation failed: {e}")
        traceback.print_exc()
        return 1
    progress.update(f"{len(dataset.feature_names)} predictors selected")

    # Step 3: Cross-validate and fit models
    print("\n" + "="*70)
    print("STEP 3: TRAINING")
    print("="*70)

    try:
        models, cv_results = train_models(dataset, CONFIG)
    except (OSError, ValueError) as e:
        logger.error(f"Training failed: {e}")
        traceback.print_exc()
        return 1
    progress.update("models fitted")

    # Step 4: Evaluate on held-out rows and predict the testing file
    print("\n" + "="*70)
    print("STEP 4: EVALUATION")
    print("="*70)

    try:
        summary = evaluate_models(models, cv_results, dataset, CONFIG)
    except (OSError, ValueError) as e:
        logger.error(f"Evaluation failed: {e}")
        traceback.print_exc()
        return 1
    progress.update(f"selected model: {summary.best_model}")

    # Step 5: Render report
    print("\n" + "="*70)
    print("STEP 5: REPORT")
    print("="*70)

    try:
        report_path = render_report(dataset, summary, CONFIG)
        progress.update("report rendered")

        config_path = CONFIG.output.models_dir / CONFIG.output.config_filename
        CONFIG.save(config_path)
        logger.info(f"Config saved to: {config_path}")
    except OSError as e:
        logger.error(f"Saving report failed: {e}")
        traceback.print_exc()
        return 1
    progress.finish(str(report_path))

    print("\n" + "="*70)
    print("REPORT COMPLETE")
    print("="*70)
    print(f"Report:  {report_path}")
    print(f"Plots:   {CONFIG.output.plots_dir}")
    print(f"Models:  {CONFIG.output.models_dir}")
    print(f"Logs:    {CONFIG.output.logs_dir}")
    print("="*70)

    return 0


if __name__ == "__main__":
    sys.exit(main())
