"""Dispatch of censoring-weighted metrics over evaluation times."""

from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..data.observations import Observation, SurvivalSample, validate_eval_times
from ..data.types import BrierNormalization, CategoryLabel
from ..exceptions import InputDomainError
from .brier import brier_score_at, integrated_brier_score
from .censoring import CensoringEstimator
from .confusion import WeightedConfusionMatrix, weighted_confusion_matrix
from .results import DynamicMetricResult
from .roc import weighted_roc_auc
from .weighted import build_weighted_outcomes, usable_rows


class MetricKind(Enum):
    """Dynamic metrics that can be aggregated."""

    BRIER = "brier"
    ROC_AUC = "roc_auc"
    CONFUSION = "confusion"
    SENSITIVITY = "sensitivity"
    SPECIFICITY = "specificity"

    @classmethod
    def parse(cls, value: Union[str, "MetricKind"]) -> "MetricKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise InputDomainError(f"metric must be one of ({valid}), got {value!r}") from None


# Per-time aggregation: (usable rows, total n, threshold, normalization)
#   -> (estimate, confusion matrix or None)
TimeAggregator = Callable[
    [pd.DataFrame, int, float, BrierNormalization],
    Tuple[float, Optional[WeightedConfusionMatrix]],
]


def _columns(rows: pd.DataFrame):
    event = rows["category"].to_numpy() == CategoryLabel.EVENT.value
    return event, rows["pred_survival"].to_numpy(), rows["weight"].to_numpy()


def _brier(rows, n_total, threshold, normalization):
    event, pred, weights = _columns(rows)
    return brier_score_at(event, pred, weights, n_total, normalization), None


def _roc_auc(rows, n_total, threshold, normalization):
    event, pred, weights = _columns(rows)
    return weighted_roc_auc(event, pred, weights), None


def _confusion(rows, n_total, threshold, normalization):
    event, pred, weights = _columns(rows)
    matrix = weighted_confusion_matrix(event, pred, weights, threshold)
    return matrix.accuracy, matrix


def _sensitivity(rows, n_total, threshold, normalization):
    event, pred, weights = _columns(rows)
    return weighted_confusion_matrix(event, pred, weights, threshold).sensitivity, None


def _specificity(rows, n_total, threshold, normalization):
    event, pred, weights = _columns(rows)
    return weighted_confusion_matrix(event, pred, weights, threshold).specificity, None


_AGGREGATORS: Dict[MetricKind, TimeAggregator] = {
    MetricKind.BRIER: _brier,
    MetricKind.ROC_AUC: _roc_auc,
    MetricKind.CONFUSION: _confusion,
    MetricKind.SENSITIVITY: _sensitivity,
    MetricKind.SPECIFICITY: _specificity,
}

_missing = set(MetricKind) - set(_AGGREGATORS)
if _missing:
    raise RuntimeError(f"no aggregator registered for {sorted(k.name for k in _missing)}")


def _aggregate_time(
    kind: MetricKind,
    rows: pd.DataFrame,
    n_total: int,
    threshold: float,
    normalization: BrierNormalization,
) -> Tuple[float, int, Optional[WeightedConfusionMatrix]]:
    rows = usable_rows(rows)
    estimate, matrix = _AGGREGATORS[kind](rows, n_total, threshold, normalization)
    return estimate, len(rows), matrix


def aggregate_outcomes(
    metric_kind: Union[str, MetricKind],
    outcomes: pd.DataFrame,
    n_total: int,
    threshold: float = 0.5,
    normalization: BrierNormalization = BrierNormalization.TOTAL,
    n_jobs: Optional[int] = None,
    eval_times=None,
) -> DynamicMetricResult:
    """Aggregate a prebuilt weighted-outcome table into one metric.

    Args:
        metric_kind: Metric to compute.
        outcomes: Table from ``build_weighted_outcomes``.
        n_total: Number of observations in the evaluated sample.
        threshold: Event probability threshold for confusion metrics.
        normalization: Brier score denominator.
        n_jobs: Number of parallel jobs over evaluation times.
        eval_times: Times to report, in order. Defaults to the times
            present in ``outcomes``, in order of appearance.

    Returns:
        DynamicMetricResult with one estimate per evaluation time.
    """
    kind = MetricKind.parse(metric_kind)
    if eval_times is None:
        eval_times = pd.unique(outcomes["eval_time"])
    eval_times = np.atleast_1d(np.asarray(eval_times, dtype=float))

    with Parallel(n_jobs=n_jobs, prefer="threads") as parallel:
        per_time = parallel(
            delayed(_aggregate_time)(
                kind,
                outcomes[outcomes["eval_time"] == t],
                n_total,
                threshold,
                normalization,
            )
            for t in eval_times
        )

    estimates = [estimate for estimate, _, _ in per_time]
    n_usable = [n for _, n, _ in per_time]

    integrated = None
    if kind is MetricKind.BRIER and len(eval_times) > 1:
        integrated = integrated_brier_score(eval_times, estimates)

    confusion = None
    if kind is MetricKind.CONFUSION:
        confusion = [matrix for _, _, matrix in per_time]

    return DynamicMetricResult(
        metric=kind.value,
        eval_times=eval_times,
        estimates=estimates,
        n_usable=n_usable,
        integrated=integrated,
        confusion=confusion,
    )


def aggregate_metric(
    metric_kind: Union[str, MetricKind],
    observations: Union[SurvivalSample, Iterable[Observation]],
    predictions,
    t_or_times,
    estimator: CensoringEstimator,
    threshold: float = 0.5,
    normalization: BrierNormalization = BrierNormalization.TOTAL,
    n_jobs: Optional[int] = None,
) -> DynamicMetricResult:
    """Compute a censoring-weighted metric at one or more evaluation times.

    Args:
        metric_kind: Metric to compute ("brier", "roc_auc", "confusion",
            "sensitivity", "specificity").
        observations: Observations to evaluate.
        predictions: Predicted survival probabilities, shape
            (n_samples, n_times); 1-D for a single time.
        t_or_times: One evaluation time or a sequence of them.
        estimator: Censoring estimator fitted on training data.
        threshold: Event probability threshold for confusion metrics.
        normalization: Brier score denominator.
        n_jobs: Number of parallel jobs over evaluation times.

    Returns:
        DynamicMetricResult. For "brier" with two or more times,
        ``integrated`` holds the integrated Brier score; for "confusion"
        the estimates are weighted accuracies and ``confusion`` holds the
        tables.

    Raises:
        InputDomainError: On malformed observations, times or predictions.
    """
    kind = MetricKind.parse(metric_kind)
    sample = SurvivalSample.coerce(observations)
    eval_times = np.atleast_1d(np.asarray(t_or_times, dtype=float))
    validate_eval_times(eval_times)

    outcomes = build_weighted_outcomes(estimator, sample, predictions, eval_times)
    return aggregate_outcomes(
        kind,
        outcomes,
        n_total=len(sample),
        threshold=threshold,
        normalization=normalization,
        n_jobs=n_jobs,
        eval_times=eval_times,
    )
