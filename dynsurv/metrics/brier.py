"""Time-dependent and integrated Brier score with censoring weights."""

from typing import Sequence

import numpy as np
from scipy.integrate import trapezoid

from ..data.types import BrierNormalization


def brier_score_at(
    event: np.ndarray,
    pred_survival: np.ndarray,
    weights: np.ndarray,
    n_total: int,
    normalization: BrierNormalization = BrierNormalization.TOTAL,
) -> float:
    """Censoring-weighted Brier score at a single evaluation time.

    An observation whose event happened by t contributes w * S(t)^2; one
    still event-free contributes w * (1 - S(t))^2.

    Args:
        event: True class of each usable observation (True = event).
        pred_survival: Predicted survival probability S(t).
        weights: Censoring weights of the usable observations.
        n_total: Number of observations in the sample, usable or not.
        normalization: ``TOTAL`` divides by ``n_total`` (unusable
            observations contribute zero, as in Graf et al.); ``USABLE``
            divides by the number of usable observations.

    Returns:
        Brier score (lower is better), or ``NaN`` when no observation is
        usable.
    """
    event = np.asarray(event, dtype=bool)
    pred_survival = np.asarray(pred_survival, dtype=float)
    weights = np.asarray(weights, dtype=float)

    if len(event) == 0:
        return np.nan

    if not (len(event) == len(pred_survival) == len(weights)):
        raise ValueError(
            f"Input arrays must have the same length. Got: event={len(event)}, "
            f"pred_survival={len(pred_survival)}, weights={len(weights)}"
        )

    residual = np.where(event, pred_survival, 1.0 - pred_survival)
    total = np.sum(weights * residual ** 2)

    if normalization is BrierNormalization.USABLE:
        return float(total / len(event))

    if n_total < len(event):
        raise ValueError(
            f"n_total ({n_total}) cannot be smaller than the usable count ({len(event)})"
        )
    return float(total / n_total)


def integrated_brier_score(
    eval_times: Sequence[float],
    scores: Sequence[float],
) -> float:
    """Integrate a Brier score curve over evaluation time.

    Times are sorted before integrating, so the order they are given in
    does not matter. Times with a ``NaN`` score are dropped. The
    trapezoidal area is divided by the largest evaluation time.

    Args:
        eval_times: Evaluation times.
        scores: Brier score at each evaluation time.

    Returns:
        Integrated Brier score, or ``NaN`` with fewer than two usable
        times.
    """
    eval_times = np.asarray(eval_times, dtype=float).ravel()
    scores = np.asarray(scores, dtype=float).ravel()

    if len(eval_times) != len(scores):
        raise ValueError(
            f"eval_times ({len(eval_times)}) and scores ({len(scores)}) "
            f"must have the same length"
        )

    keep = np.isfinite(scores)
    eval_times, scores = eval_times[keep], scores[keep]
    if len(eval_times) < 2:
        return np.nan

    order = np.argsort(eval_times, kind="stable")
    eval_times, scores = eval_times[order], scores[order]

    max_time = eval_times[-1]
    if max_time <= 0:
        return np.nan

    return float(trapezoid(scores, eval_times) / max_time)
