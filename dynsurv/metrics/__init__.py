"""Censoring-weighted dynamic survival metrics."""

from .censoring import (
    CensoringEstimator,
    fit_censoring_estimator,
    censoring_weight,
    censoring_weights,
)
from .weighted import build_weighted_outcomes, usable_rows
from .confusion import WeightedConfusionMatrix, weighted_confusion_matrix
from .brier import brier_score_at, integrated_brier_score
from .roc import weighted_roc_auc, weighted_roc_curve
from .aggregation import MetricKind, aggregate_metric, aggregate_outcomes
from .evaluator import DynamicMetricEvaluator, EvaluationData, default_eval_times
from .results import DynamicMetricResult

__all__ = [
    # Censoring weights
    "CensoringEstimator",
    "fit_censoring_estimator",
    "censoring_weight",
    "censoring_weights",
    # Weighted outcomes
    "build_weighted_outcomes",
    "usable_rows",
    # Per-time metrics
    "WeightedConfusionMatrix",
    "weighted_confusion_matrix",
    "brier_score_at",
    "integrated_brier_score",
    "weighted_roc_auc",
    "weighted_roc_curve",
    # Aggregation
    "MetricKind",
    "aggregate_metric",
    "aggregate_outcomes",
    # Evaluator
    "DynamicMetricEvaluator",
    "EvaluationData",
    "default_eval_times",
    # Results
    "DynamicMetricResult",
]
