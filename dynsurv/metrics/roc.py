"""Time-dependent ROC analysis with censoring weights."""

from typing import Tuple

import numpy as np


def _split(event, pred_survival, weights):
    event = np.asarray(event, dtype=bool)
    pred_survival = np.asarray(pred_survival, dtype=float)
    weights = np.asarray(weights, dtype=float)

    if not (len(event) == len(pred_survival) == len(weights)):
        raise ValueError(
            f"Input arrays must have the same length. Got: event={len(event)}, "
            f"pred_survival={len(pred_survival)}, weights={len(weights)}"
        )
    return event, pred_survival, weights


def weighted_roc_auc(
    event: np.ndarray,
    pred_survival: np.ndarray,
    weights: np.ndarray,
) -> float:
    """Censoring-weighted area under the ROC curve at one evaluation time.

    Weighted Mann-Whitney statistic: the weighted share of
    (event, non-event) pairs in which the event has the lower predicted
    survival, each pair weighted by w_i * w_j. Ties count one half.

    Args:
        event: True class of each usable observation (True = event).
        pred_survival: Predicted survival probability S(t).
        weights: Censoring weights.

    Returns:
        AUC in [0, 1]; 0.5 when only one class is present, ``NaN`` when
        there are no observations.
    """
    event, pred_survival, weights = _split(event, pred_survival, weights)

    if len(event) == 0:
        return np.nan
    if event.all() or not event.any():
        return 0.5

    event_scores, event_weights = pred_survival[event], weights[event]
    other_scores, other_weights = pred_survival[~event], weights[~event]

    order = np.argsort(other_scores, kind="stable")
    other_scores = other_scores[order]
    cum_weights = np.concatenate(([0.0], np.cumsum(other_weights[order])))
    total_other = cum_weights[-1]

    # Non-event weight strictly above / equal to each event's score
    lo = np.searchsorted(other_scores, event_scores, side="left")
    hi = np.searchsorted(other_scores, event_scores, side="right")
    above = total_other - cum_weights[hi]
    tied = cum_weights[hi] - cum_weights[lo]

    concordant = np.sum(event_weights * (above + 0.5 * tied))
    return float(concordant / (event_weights.sum() * total_other))


def weighted_roc_curve(
    event: np.ndarray,
    pred_survival: np.ndarray,
    weights: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Censoring-weighted ROC curve at one evaluation time.

    An observation is called an event when its predicted survival is at
    or below the threshold.

    Args:
        event: True class of each usable observation (True = event).
        pred_survival: Predicted survival probability S(t).
        weights: Censoring weights.

    Returns:
        Tuple of (fpr, tpr, thresholds). The first point is
        (0, 0) at threshold -inf. Rates are ``NaN`` for a class that is
        absent.
    """
    event, pred_survival, weights = _split(event, pred_survival, weights)

    thresholds = np.unique(pred_survival)
    order = np.argsort(pred_survival, kind="stable")
    sorted_scores = pred_survival[order]

    event_cum = np.concatenate(([0.0], np.cumsum(np.where(event[order], weights[order], 0.0))))
    other_cum = np.concatenate(([0.0], np.cumsum(np.where(event[order], 0.0, weights[order]))))

    idx = np.searchsorted(sorted_scores, thresholds, side="right")
    tp = np.concatenate(([0.0], event_cum[idx]))
    fp = np.concatenate(([0.0], other_cum[idx]))

    total_event, total_other = event_cum[-1], other_cum[-1]
    with np.errstate(invalid="ignore", divide="ignore"):
        tpr = tp / total_event if total_event > 0 else np.full(len(tp), np.nan)
        fpr = fp / total_other if total_other > 0 else np.full(len(fp), np.nan)

    return fpr, tpr, np.concatenate(([-np.inf], thresholds))
