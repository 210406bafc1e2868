"""Censoring-weighted confusion matrix at an evaluation time."""

from dataclasses import dataclass

import numpy as np


def _rate(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return np.nan
    return numerator / denominator


@dataclass(frozen=True)
class WeightedConfusionMatrix:
    """2x2 table of summed censoring weights (predicted x actual).

    The positive class is the event. Each usable observation adds its
    weight to exactly one cell.

    Attributes:
        tp: Predicted event, actual event.
        fp: Predicted event, actual non-event.
        fn: Predicted non-event, actual event.
        tn: Predicted non-event, actual non-event.
        n_usable: Number of usable observations behind the table.
    """

    tp: float = 0.0
    fp: float = 0.0
    fn: float = 0.0
    tn: float = 0.0
    n_usable: int = 0

    @property
    def total(self) -> float:
        return self.tp + self.fp + self.fn + self.tn

    @property
    def sensitivity(self) -> float:
        return _rate(self.tp, self.tp + self.fn)

    @property
    def specificity(self) -> float:
        return _rate(self.tn, self.tn + self.fp)

    @property
    def miss_rate(self) -> float:
        return _rate(self.fn, self.tp + self.fn)

    @property
    def fall_out(self) -> float:
        return _rate(self.fp, self.tn + self.fp)

    @property
    def precision(self) -> float:
        return _rate(self.tp, self.tp + self.fp)

    @property
    def negative_predictive_value(self) -> float:
        return _rate(self.tn, self.tn + self.fn)

    @property
    def accuracy(self) -> float:
        return _rate(self.tp + self.tn, self.total)

    @property
    def balanced_accuracy(self) -> float:
        return (self.sensitivity + self.specificity) / 2

    @property
    def f1(self) -> float:
        return _rate(2 * self.tp, 2 * self.tp + self.fp + self.fn)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "tp": self.tp,
            "fp": self.fp,
            "fn": self.fn,
            "tn": self.tn,
            "n_usable": self.n_usable,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WeightedConfusionMatrix":
        return cls(
            tp=data["tp"],
            fp=data["fp"],
            fn=data["fn"],
            tn=data["tn"],
            n_usable=data.get("n_usable", 0),
        )


def weighted_confusion_matrix(
    event: np.ndarray,
    pred_survival: np.ndarray,
    weights: np.ndarray,
    threshold: float = 0.5,
) -> WeightedConfusionMatrix:
    """Accumulate a weighted confusion matrix over usable observations.

    An observation is predicted to have the event when its predicted event
    probability, 1 - S(t), is at least ``threshold``.

    Args:
        event: True class of each usable observation (True = event).
        pred_survival: Predicted survival probability S(t).
        weights: Censoring weights.
        threshold: Event probability threshold.

    Returns:
        WeightedConfusionMatrix. With no usable observations every cell
        is zero and every rate is ``NaN``.
    """
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be in [0.0, 1.0], got {threshold}")

    event = np.asarray(event, dtype=bool)
    weights = np.asarray(weights, dtype=float)
    predicted_event = (1.0 - np.asarray(pred_survival, dtype=float)) >= threshold

    return WeightedConfusionMatrix(
        tp=float(weights[predicted_event & event].sum()),
        fp=float(weights[predicted_event & ~event].sum()),
        fn=float(weights[~predicted_event & event].sum()),
        tn=float(weights[~predicted_event & ~event].sum()),
        n_usable=int(len(event)),
    )
