"""Evaluation configuration and output logging."""

from .config import EvaluationConfig
from .logging import CSVMetricsWriter, EvaluationLogger

__all__ = [
    "EvaluationConfig",
    "CSVMetricsWriter",
    "EvaluationLogger",
]
