"""Unified evaluator for dynamic survival metrics."""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import numpy as np

from ..data.observations import SurvivalSample
from ..exceptions import InputDomainError
from ..data.types import BrierNormalization, SaturationPolicy
from .aggregation import MetricKind, aggregate_outcomes
from .censoring import CensoringEstimator, fit_censoring_estimator
from .results import DynamicMetricResult
from .weighted import build_weighted_outcomes


@dataclass
class EvaluationData:
    """Container for data needed for evaluation.

    Attributes:
        T: Observed times.
        E: Event indicators.
    """

    T: np.ndarray
    E: np.ndarray

    def __post_init__(self):
        self.T = np.asarray(self.T, dtype=float).ravel()
        self.E = np.asarray(self.E).ravel()

    def __len__(self) -> int:
        return len(self.T)

    def to_sample(self) -> SurvivalSample:
        return SurvivalSample(self.T, self.E)


def default_eval_times(data: EvaluationData, n_times: int = 5) -> np.ndarray:
    """Evaluation times at quantiles of the observed event times.

    Uses the 10th to 90th percentiles of event times, or of all observed
    times when there are no events. Pick times with this before computing
    predictions, then pass the same times to ``evaluate``.
    """
    E = np.asarray(data.E).astype(bool)
    event_times = data.T[E]
    if len(event_times) == 0:
        event_times = data.T
    if len(event_times) == 0:
        raise ValueError("cannot derive evaluation times from an empty sample")

    times = np.percentile(event_times, np.linspace(10, 90, n_times))
    return np.unique(times)


class DynamicMetricEvaluator:
    """Evaluator computing censoring-weighted metrics for survival predictions.

    The censoring estimator is fitted once on the training data and then
    shared, read-only, by every evaluation.

    Args:
        train_data: Training data used to fit the censoring distribution.
        metrics: Metrics computed by default.
        eval_times: Default evaluation times, matching the prediction
            columns. If None, every call to ``evaluate`` must pass them.
        threshold: Event probability threshold for confusion metrics.
        normalization: Brier score denominator.
        saturation_policy: How zero censoring probabilities become weights.
        truncation: Probability floor for the truncation policy.
        n_jobs: Number of parallel jobs over evaluation times.
    """

    def __init__(
        self,
        train_data: EvaluationData,
        metrics: Iterable[str] = ("brier", "roc_auc"),
        eval_times: Optional[Iterable[float]] = None,
        threshold: float = 0.5,
        normalization: BrierNormalization = BrierNormalization.TOTAL,
        saturation_policy: SaturationPolicy = SaturationPolicy.TRUNCATE,
        truncation: float = 0.01,
        n_jobs: Optional[int] = None,
    ):
        self.train_data = train_data
        self.metrics = [MetricKind.parse(m) for m in metrics]
        self.eval_times = None if eval_times is None else np.asarray(list(eval_times), dtype=float)
        self.threshold = threshold
        self.normalization = normalization
        self.n_jobs = n_jobs

        self.estimator: CensoringEstimator = fit_censoring_estimator(
            train_data.to_sample(),
            saturation_policy=saturation_policy,
            truncation=truncation,
        )

    @classmethod
    def from_config(cls, train_data: EvaluationData, config) -> "DynamicMetricEvaluator":
        """Create from an ``EvaluationConfig``."""
        return cls(
            train_data,
            metrics=config.metrics,
            eval_times=config.eval_times,
            threshold=config.threshold,
            normalization=config.normalization,
            saturation_policy=config.saturation_policy,
            truncation=config.truncation,
            n_jobs=config.n_jobs,
        )

    def evaluate(
        self,
        predictions: np.ndarray,
        eval_data: EvaluationData,
        eval_times: Optional[Iterable[float]] = None,
        metrics: Optional[Iterable[str]] = None,
    ) -> Dict[str, DynamicMetricResult]:
        """Compute metrics for predicted survival probabilities.

        Args:
            predictions: Predicted survival probabilities,
                shape (n_samples, n_times).
            eval_data: Evaluation data (T, E).
            eval_times: Evaluation times matching the prediction columns.
                Defaults to the evaluator's times.
            metrics: Metrics to compute. Defaults to the evaluator's.

        Returns:
            Dictionary mapping metric name to DynamicMetricResult.

        Raises:
            InputDomainError: If no evaluation times are known for the
                prediction columns.
        """
        if eval_times is not None:
            times = np.asarray(list(eval_times), dtype=float)
        elif self.eval_times is not None:
            times = self.eval_times
        else:
            raise InputDomainError(
                "eval_times must be given with predictions: the prediction columns "
                "are only meaningful at the times they were computed for"
            )

        kinds = self.metrics if metrics is None else [MetricKind.parse(m) for m in metrics]

        sample = eval_data.to_sample()
        outcomes = build_weighted_outcomes(self.estimator, sample, predictions, times)

        return {
            kind.value: aggregate_outcomes(
                kind,
                outcomes,
                n_total=len(sample),
                threshold=self.threshold,
                normalization=self.normalization,
                n_jobs=self.n_jobs,
                eval_times=times,
            )
            for kind in kinds
        }
