"""Censoring-aware dynamic evaluation of survival predictions.

Survival models are judged at chosen evaluation times as if they were
binary classifiers, with inverse probability of censoring weights
(Graf et al., 1999) correcting for observations censored before then.
"""

from .exceptions import (
    DynsurvError,
    InputDomainError,
    SaturatedCensoringError,
    UnusableObservationError,
)
from .data import (
    BrierNormalization,
    CategoryLabel,
    EventStatus,
    Observation,
    SaturationPolicy,
    SurvivalSample,
    encode_category,
)
from .metrics import (
    CensoringEstimator,
    DynamicMetricEvaluator,
    DynamicMetricResult,
    EvaluationData,
    MetricKind,
    aggregate_metric,
    censoring_weight,
    fit_censoring_estimator,
)

__version__ = "0.1.0"

__all__ = [
    "DynsurvError",
    "InputDomainError",
    "SaturatedCensoringError",
    "UnusableObservationError",
    "BrierNormalization",
    "CategoryLabel",
    "EventStatus",
    "Observation",
    "SaturationPolicy",
    "SurvivalSample",
    "encode_category",
    "CensoringEstimator",
    "DynamicMetricEvaluator",
    "DynamicMetricResult",
    "EvaluationData",
    "MetricKind",
    "aggregate_metric",
    "censoring_weight",
    "fit_censoring_estimator",
]
