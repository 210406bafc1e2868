"""Censoring distribution estimation and inverse probability of censoring weights.

The censoring distribution is estimated with a reverse Kaplan-Meier curve:
censoring is treated as the event of interest and observed events as
censoring. The fitted curve G(u) is the probability of *not* having been
censored at or before time u.

Weights follow Graf et al. (1999): an observation that is a non-event at
evaluation time t is weighted by 1 / G(t-), one that had its event at
y <= t by 1 / G(y-). Evaluating the curve strictly before the weight time
avoids using censoring that happens exactly at that time.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from ..data.encoding import encode_categories, encode_category
from ..data.observations import Observation, SurvivalSample
from ..data.types import CategoryLabel, SaturationPolicy
from ..exceptions import (
    InputDomainError,
    SaturatedCensoringError,
    UnusableObservationError,
)


def _readonly(values) -> np.ndarray:
    values = np.array(values, dtype=float)
    values.setflags(write=False)
    return values


@dataclass(frozen=True, eq=False)
class CensoringEstimator:
    """Fitted reverse Kaplan-Meier curve of the censoring distribution.

    The curve is a right-continuous step function starting at G(0) = 1 and
    dropping only at observed censoring times. Instances are immutable and
    can be shared between workers without synchronization.

    Attributes:
        jump_times: Sorted censoring times at which the curve drops.
        survival: Value of G just after each jump.
        n_fitted: Number of training observations.
        n_censored: Number of censored training observations.
        saturation_policy: How zero probabilities are turned into weights.
        truncation: Requested probability floor for ``TRUNCATE``.
    """

    jump_times: np.ndarray
    survival: np.ndarray
    n_fitted: int
    n_censored: int
    saturation_policy: SaturationPolicy = SaturationPolicy.TRUNCATE
    truncation: float = 0.01

    def __post_init__(self):
        object.__setattr__(self, "jump_times", _readonly(self.jump_times))
        object.__setattr__(self, "survival", _readonly(self.survival))

        if len(self.jump_times) != len(self.survival):
            raise ValueError(
                f"jump_times ({len(self.jump_times)}) and survival "
                f"({len(self.survival)}) must have the same length"
            )
        if not 0.0 < self.truncation < 1.0:
            raise ValueError(f"truncation must be in (0.0, 1.0), got {self.truncation}")

    @property
    def is_degenerate(self) -> bool:
        """True when the training data carried no censoring information.

        The curve is then the constant G(u) = 1 and every weight is 1.
        """
        return len(self.jump_times) == 0

    def probability(self, q: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """G(q): probability of not being censored at or before ``q``."""
        return self._lookup(q, side="right")

    def probability_before(self, q: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """G(q-): probability of not being censored strictly before ``q``."""
        return self._lookup(q, side="left")

    def censored_probability(self, q: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """1 - G(q): probability of having been censored at or before ``q``."""
        return 1.0 - self.probability(q)

    def _lookup(self, q, side: str):
        q_arr = np.asarray(q, dtype=float)
        if np.any(q_arr < 0):
            raise InputDomainError("query times must be >= 0")

        values = np.concatenate(([1.0], self.survival))
        idx = np.searchsorted(self.jump_times, q_arr, side=side)
        result = values[idx]

        if q_arr.ndim == 0:
            return float(result)
        return result

    @property
    def min_positive_probability(self) -> Optional[float]:
        """Smallest strictly positive value of the curve (None if degenerate)."""
        positive = self.survival[self.survival > 0]
        if len(positive) == 0:
            return None
        return float(positive.min())

    @property
    def truncation_floor(self) -> float:
        """Probability floor used by the ``TRUNCATE`` policy.

        This is ``truncation``, or half the smallest positive value of the
        curve when that is smaller, so only zero probabilities are lifted.
        """
        min_prob = self.min_positive_probability
        if min_prob is not None and min_prob < self.truncation:
            return min_prob / 2
        return self.truncation

    def weights_from_probabilities(self, probs: np.ndarray) -> np.ndarray:
        """Turn censoring probabilities into weights, applying the policy.

        Under ``EXCLUDE`` a zero probability yields ``NaN``.
        """
        probs = np.asarray(probs, dtype=float)
        if self.saturation_policy is SaturationPolicy.TRUNCATE:
            probs = np.maximum(probs, self.truncation_floor)
            return 1.0 / probs

        weights = np.full(probs.shape, np.nan)
        positive = probs > 0
        weights[positive] = 1.0 / probs[positive]
        return weights

    def to_frame(self) -> pd.DataFrame:
        """Step table of the curve, including the initial (0, 1.0) point."""
        return pd.DataFrame(
            {
                "time": np.concatenate(([0.0], self.jump_times)),
                "censoring_survival": np.concatenate(([1.0], self.survival)),
            }
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "jump_times": self.jump_times.tolist(),
            "survival": self.survival.tolist(),
            "n_fitted": self.n_fitted,
            "n_censored": self.n_censored,
            "saturation_policy": self.saturation_policy.name,
            "truncation": self.truncation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CensoringEstimator":
        """Create from dictionary.

        Args:
            data: Dictionary produced by ``to_dict``.

        Returns:
            CensoringEstimator instance.
        """
        return cls(
            jump_times=data["jump_times"],
            survival=data["survival"],
            n_fitted=data.get("n_fitted", 0),
            n_censored=data.get("n_censored", 0),
            saturation_policy=SaturationPolicy[data.get("saturation_policy", "TRUNCATE")],
            truncation=data.get("truncation", 0.01),
        )


def fit_censoring_estimator(
    training: Union[SurvivalSample, Iterable[Observation]],
    saturation_policy: SaturationPolicy = SaturationPolicy.TRUNCATE,
    truncation: float = 0.01,
) -> CensoringEstimator:
    """Fit the reverse Kaplan-Meier curve of the censoring distribution.

    At each distinct observed time u with n_u subjects at risk
    (time >= u) and d_u censorings, the curve is multiplied by
    (n_u - d_u) / n_u. Events at u count as at risk of censoring at u.

    An empty sample, or one without censored observations, gives the
    constant curve G(u) = 1.

    Args:
        training: Training sample (no covariates are used).
        saturation_policy: How zero probabilities become weights.
        truncation: Probability floor for ``TRUNCATE``.

    Returns:
        Fitted CensoringEstimator.
    """
    sample = SurvivalSample.coerce(training)
    n = len(sample)

    censored = ~sample.E
    if n == 0 or not censored.any():
        return CensoringEstimator(
            jump_times=[],
            survival=[],
            n_fitted=n,
            n_censored=0,
            saturation_policy=saturation_policy,
            truncation=truncation,
        )

    unique_times, inverse, counts = np.unique(
        sample.T, return_inverse=True, return_counts=True
    )
    n_censored_at = np.bincount(inverse, weights=censored.astype(float),
                                minlength=len(unique_times))

    # Subjects still observed at each distinct time
    at_risk = n - np.concatenate(([0], np.cumsum(counts)[:-1]))

    factors = (at_risk - n_censored_at) / at_risk
    survival = np.cumprod(factors)

    jumps = n_censored_at > 0
    return CensoringEstimator(
        jump_times=unique_times[jumps],
        survival=survival[jumps],
        n_fitted=n,
        n_censored=int(censored.sum()),
        saturation_policy=saturation_policy,
        truncation=truncation,
    )


def censoring_weight(
    estimator: CensoringEstimator,
    observation: Observation,
    t: float,
) -> float:
    """Inverse probability of censoring weight of one observation at ``t``.

    The weight time is ``t`` for a non-event and the observed time for an
    event; the curve is evaluated just before it.

    Args:
        estimator: Fitted censoring estimator.
        observation: Observation to weight.
        t: Evaluation time.

    Returns:
        Weight, always >= 1.

    Raises:
        UnusableObservationError: If the observation is unusable at ``t``.
        SaturatedCensoringError: If the curve is zero at the weight time
            and the policy is ``EXCLUDE``.
    """
    category = encode_category(observation, t)
    if category is CategoryLabel.UNUSABLE:
        raise UnusableObservationError(
            f"observation censored at {observation.time} is unusable at t={t}"
        )

    weight_time = float(t) if category is CategoryLabel.NON_EVENT else observation.time
    prob = estimator.probability_before(weight_time)

    if prob <= 0 and estimator.saturation_policy is SaturationPolicy.EXCLUDE:
        raise SaturatedCensoringError(
            f"censoring probability is zero before {weight_time}"
        )

    return float(estimator.weights_from_probabilities(prob))


def censoring_weights(
    estimator: CensoringEstimator,
    T: np.ndarray,
    E: np.ndarray,
    t: float,
) -> np.ndarray:
    """Vectorized ``censoring_weight``.

    Args:
        estimator: Fitted censoring estimator.
        T: Observed times, shape (n_samples,).
        E: Event indicators, shape (n_samples,).
        t: Evaluation time.

    Returns:
        Weights of shape (n_samples,). Unusable observations, and those
        excluded by the saturation policy, are ``NaN``.
    """
    T = np.asarray(T, dtype=float)
    codes = encode_categories(T, E, t)

    weight_times = np.where(codes == CategoryLabel.EVENT.value, T, float(t))
    weights = estimator.weights_from_probabilities(
        estimator.probability_before(weight_times)
    )
    weights = np.atleast_1d(weights)
    weights[codes == CategoryLabel.UNUSABLE.value] = np.nan
    return weights
