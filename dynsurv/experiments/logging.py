"""Evaluation output writers for CSV and JSON."""

import csv
import json
import sys
from pathlib import Path
from typing import Any, Dict, Union

from ..metrics.censoring import CensoringEstimator
from ..metrics.results import DynamicMetricResult


class CSVMetricsWriter:
    """CSV writer for dynamic metric results.

    Writes one row per (metric, evaluation time).

    Args:
        output_path: Path to CSV file.
        append: If True, append to existing file.
    """

    FIELDNAMES = [
        "metric",
        "eval_time",
        "estimate",
        "n_usable",
        "integrated",
        "timestamp",
    ]

    def __init__(self, output_path: Union[str, Path], append: bool = False):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        mode = "a" if append and self.output_path.exists() else "w"
        self.file = open(self.output_path, mode, newline="")
        self.writer = csv.DictWriter(self.file, fieldnames=self.FIELDNAMES)

        # Write header if new file
        if mode == "w":
            self.writer.writeheader()

    def write(self, result: DynamicMetricResult) -> None:
        """Write all rows of a metric result.

        Args:
            result: DynamicMetricResult to write.
        """
        for row in result.to_csv_rows():
            self.writer.writerow(row)
        self.file.flush()

    def close(self) -> None:
        """Close the CSV file."""
        self.file.close()

    def __enter__(self) -> "CSVMetricsWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class EvaluationLogger:
    """Writes the outputs of one evaluation run to a directory.

    Layout::

        <output_dir>/metrics.csv          one row per metric and time
        <output_dir>/confusion.csv        weighted confusion tables, if any
        <output_dir>/censoring_curve.csv  fitted censoring step function
        <output_dir>/run_info.json        configuration and summary

    Args:
        output_dir: Directory for evaluation outputs.
        verbose: Whether to print progress messages to stderr.
    """

    def __init__(self, output_dir: Union[str, Path], verbose: bool = False):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.verbose = verbose

        self.csv_writer = CSVMetricsWriter(self.output_dir / "metrics.csv")

    def log_result(self, result: DynamicMetricResult) -> None:
        """Log one metric result.

        Args:
            result: DynamicMetricResult to log.
        """
        self.csv_writer.write(result)

        if result.confusion is not None:
            result.to_frame().to_csv(self.output_dir / "confusion.csv", index=False)

        message = f"{result.metric}: {len(result)} evaluation times"
        if result.integrated is not None:
            message += f", integrated={result.integrated:.4f}"
        self.log(message)

    def log_estimator(self, estimator: CensoringEstimator) -> None:
        """Write the fitted censoring curve.

        Args:
            estimator: Fitted censoring estimator.
        """
        estimator.to_frame().to_csv(self.output_dir / "censoring_curve.csv", index=False)
        if estimator.is_degenerate:
            self.log("No censored training observations: all censoring weights are 1")

    def log_run_info(self, info: Dict[str, Any]) -> None:
        """Log run information to JSON file.

        Args:
            info: Dictionary of run information.
        """
        info_path = self.output_dir / "run_info.json"
        with open(info_path, "w") as f:
            json.dump(info, f, indent=2, default=str)

    def log(self, message: str) -> None:
        """Print a message if verbose mode is enabled."""
        if self.verbose:
            print(message, file=sys.stderr)

    def close(self) -> None:
        """Close all writers."""
        self.csv_writer.close()
