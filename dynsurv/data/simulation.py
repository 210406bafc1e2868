"""Synthetic right-censored samples with known survival curves.

Event times follow a Weibull distribution,
S(t) = exp(-(lambda * t)^nu), and censoring times are exponential with a
scale calibrated to a target censoring rate. Because the true survival
curve is known, it can stand in for a perfectly calibrated model when
exercising the metrics.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy.optimize import brentq

from .observations import SurvivalSample


@dataclass
class SimulatedSample:
    """A simulated sample together with its data-generating parameters.

    Attributes:
        sample: Observed times and event indicators.
        T_true: Event times before censoring.
        weibull_scale: Weibull rate parameter (lambda).
        weibull_shape: Weibull shape parameter (nu).
        censoring_scale: Exponential censoring scale (inf = no censoring).
    """

    sample: SurvivalSample
    T_true: np.ndarray
    weibull_scale: float
    weibull_shape: float
    censoring_scale: float

    def true_survival(self, times: np.ndarray) -> np.ndarray:
        """True survival probabilities, shape (n_samples, n_times).

        Every subject shares the same curve, so each row is identical.
        """
        times = np.atleast_1d(np.asarray(times, dtype=float))
        curve = np.exp(-((self.weibull_scale * times) ** self.weibull_shape))
        return np.tile(curve, (len(self.sample), 1))


def simulate_sample(
    n_samples: int = 200,
    censoring_rate: float = 0.3,
    weibull_scale: float = 0.1,
    weibull_shape: float = 1.5,
    seed: int = 42,
) -> SimulatedSample:
    """Simulate a right-censored sample.

    Args:
        n_samples: Number of observations.
        censoring_rate: Target proportion of censored observations.
        weibull_scale: Weibull rate parameter (lambda).
        weibull_shape: Weibull shape parameter (nu).
        seed: Random seed.

    Returns:
        SimulatedSample instance.
    """
    if n_samples < 1:
        raise ValueError(f"n_samples must be >= 1, got {n_samples}")
    if not 0.0 <= censoring_rate < 1.0:
        raise ValueError(f"censoring_rate must be in [0.0, 1.0), got {censoring_rate}")

    rng = np.random.default_rng(seed)

    # Inverse transform: T = (1/lambda) * (-log(U))^(1/nu)
    U = rng.uniform(0, 1, size=n_samples)
    T_true = (1.0 / weibull_scale) * (-np.log(U + 1e-10)) ** (1.0 / weibull_shape)
    T_true = np.maximum(T_true, 1e-10)

    T, E, scale = _apply_censoring(T_true, censoring_rate, rng)

    return SimulatedSample(
        sample=SurvivalSample(T, E),
        T_true=T_true,
        weibull_scale=weibull_scale,
        weibull_shape=weibull_shape,
        censoring_scale=scale,
    )


def _apply_censoring(
    T_true: np.ndarray,
    target_rate: float,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, np.ndarray, float]:
    """Censor ``T_true`` with exponential censoring times.

    Returns:
        Tuple of (observed times, event indicators, censoring scale).
    """
    n = len(T_true)
    if target_rate <= 0:
        return T_true.copy(), np.ones(n, dtype=bool), np.inf

    scale = calibrate_censoring_scale(T_true, target_rate)
    C = rng.exponential(scale=scale, size=n)

    T = np.minimum(T_true, C)
    E = T_true <= C
    return T, E, scale


def censored_fraction(event_times: np.ndarray, scale: float) -> float:
    """Expected fraction censored by exponential censoring with ``scale``.

    For a fixed event time T, P(C < T) = 1 - exp(-T / scale).
    """
    event_times = np.asarray(event_times, dtype=float)
    return float(np.mean(-np.expm1(-event_times / scale)))


def calibrate_censoring_scale(event_times: np.ndarray, target_rate: float) -> float:
    """Exponential censoring scale whose expected censored fraction is ``target_rate``.

    The censored fraction decreases monotonically with the scale, so the
    root is bracketed from the median event time and refined with Brent's
    method.

    Args:
        event_times: True event times (positive).
        target_rate: Target proportion censored, in (0, 1).

    Returns:
        Scale parameter for the exponential censoring distribution.
    """
    event_times = np.asarray(event_times, dtype=float)
    if not 0.0 < target_rate < 1.0:
        raise ValueError(f"target_rate must be in (0.0, 1.0), got {target_rate}")
    if len(event_times) == 0 or np.any(event_times <= 0):
        raise ValueError("event_times must be non-empty and positive")

    def gap(scale):
        return censored_fraction(event_times, scale) - target_rate

    low = high = float(np.median(event_times))
    while gap(low) < 0:
        low /= 10
    while gap(high) > 0:
        high *= 10
    if low == high:
        return low

    return float(brentq(gap, low, high))
