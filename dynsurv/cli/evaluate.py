"""CLI for computing censoring-weighted metrics from CSV files."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from ..data.observations import SurvivalSample
from ..exceptions import DynsurvError, InputDomainError
from ..experiments.config import EvaluationConfig
from ..experiments.logging import EvaluationLogger
from ..metrics.evaluator import DynamicMetricEvaluator, EvaluationData


def load_predictions(path: Path, id_column: Optional[str] = None, ids=None):
    """Load a predictions table whose column headers are evaluation times.

    Args:
        path: CSV with one row per test observation and one column of
            predicted survival probabilities per evaluation time.
        id_column: Optional identifier column. When given together with
            ``ids``, rows are reordered to follow ``ids``.
        ids: Identifiers of the evaluated observations, in sample order.

    Returns:
        Tuple of (predictions array, evaluation times).

    Raises:
        InputDomainError: If identifiers are missing, duplicated or do not
            match ``ids``.
    """
    frame = pd.read_csv(path)
    if id_column is not None:
        if id_column not in frame.columns:
            raise InputDomainError(f"predictions are missing the id column {id_column!r}")
        frame = frame.set_index(id_column)
        if ids is not None:
            frame = _align_rows(frame, ids)

    try:
        eval_times = np.array([float(c) for c in frame.columns])
    except ValueError:
        raise ValueError(
            f"prediction columns must be evaluation times, got {list(frame.columns)}"
        ) from None

    return frame.to_numpy(dtype=float), eval_times


def _align_rows(frame: pd.DataFrame, ids) -> pd.DataFrame:
    """Reorder prediction rows to follow the sample identifiers."""
    ids = pd.Index(ids)
    if frame.index.has_duplicates or ids.has_duplicates:
        raise InputDomainError("observation ids must be unique")

    missing = ids.difference(frame.index)
    if len(missing):
        raise InputDomainError(f"no predictions for ids {list(missing[:5])}")
    extra = frame.index.difference(ids)
    if len(extra):
        raise InputDomainError(f"predictions for unknown ids {list(extra[:5])}")

    return frame.loc[ids]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for evaluate CLI.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="python -m dynsurv.cli.evaluate",
        description="Compute censoring-weighted dynamic metrics for survival predictions.",
    )

    parser.add_argument(
        "--train",
        type=Path,
        required=True,
        help="CSV of training observations (fits the censoring distribution)",
    )

    parser.add_argument(
        "--test",
        type=Path,
        required=True,
        help="CSV of observations to evaluate",
    )

    parser.add_argument(
        "--predictions",
        type=Path,
        required=True,
        help="CSV of predicted survival probabilities, one column per evaluation time",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to evaluation JSON config",
    )

    parser.add_argument(
        "--metrics",
        nargs="+",
        help="Metrics to compute (overrides config): brier, roc_auc, confusion, "
        "sensitivity, specificity",
    )

    parser.add_argument(
        "--threshold",
        type=float,
        help="Event probability threshold for confusion metrics (overrides config)",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("outputs/evaluation"),
        help="Output directory (default: outputs/evaluation/)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    for path in (args.train, args.test, args.predictions, args.config):
        if path is not None and not path.exists():
            print(f"ERROR: File not found: {path}", file=sys.stderr)
            return 1

    try:
        config = EvaluationConfig.from_json(args.config) if args.config else EvaluationConfig()
        if args.metrics:
            config.metrics = args.metrics
        if args.threshold is not None:
            config.threshold = args.threshold
        config.validate()

        columns = dict(
            time_column=config.time_column,
            status_column=config.status_column,
            id_column=config.id_column,
        )
        train = SurvivalSample.from_csv(args.train, **columns)
        test = SurvivalSample.from_csv(args.test, **columns)
        predictions, eval_times = load_predictions(
            args.predictions, config.id_column, ids=test.ids if config.id_column else None
        )

        evaluator = DynamicMetricEvaluator.from_config(
            EvaluationData(train.T, train.E), config
        )
        results = evaluator.evaluate(
            predictions, EvaluationData(test.T, test.E), eval_times=eval_times
        )
    except (DynsurvError, ValueError, KeyError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    logger = EvaluationLogger(args.output_dir, verbose=args.verbose)
    try:
        logger.log(f"Training sample: {train}")
        logger.log(f"Test sample: {test}")
        logger.log_estimator(evaluator.estimator)
        for result in results.values():
            logger.log_result(result)
        logger.log_run_info(
            {
                "config": config.to_dict(),
                "n_train": len(train),
                "n_test": len(test),
                "eval_times": eval_times.tolist(),
                "censoring": {
                    "n_censored": evaluator.estimator.n_censored,
                    "degenerate": evaluator.estimator.is_degenerate,
                    "truncation_floor": evaluator.estimator.truncation_floor,
                },
                "integrated": {
                    name: result.integrated
                    for name, result in results.items()
                    if result.integrated is not None
                },
            }
        )
    finally:
        logger.close()

    print(f"Results saved to: {args.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
