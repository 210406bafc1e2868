"""Binary outcome encoding of censored observations at an evaluation time.

Following Graf et al. (1999), an observation at evaluation time ``t`` is:

- an *event* if its event was observed at or before ``t``;
- a *non-event* if its observed time is after ``t`` (nothing has happened
  yet, whatever its status);
- *unusable* if it was censored at or before ``t``: we cannot know what
  happened between censoring and ``t``.

At the boundary ``time == t`` an event counts as an event while a
censored observation is unusable.
"""

from typing import Dict

import numpy as np

from ..exceptions import InputDomainError
from .observations import Observation
from .types import CategoryLabel


def _check_eval_time(t: float) -> float:
    t = float(t)
    if not np.isfinite(t) or t < 0:
        raise InputDomainError(f"evaluation time must be finite and >= 0, got {t}")
    return t


def encode_category(observation: Observation, t: float) -> CategoryLabel:
    """Classify one observation at evaluation time ``t``.

    Args:
        observation: Observed time and status.
        t: Evaluation time.

    Returns:
        The observation's ``CategoryLabel`` at ``t``.

    Raises:
        InputDomainError: If ``t`` is negative or non-finite.
    """
    t = _check_eval_time(t)
    if observation.is_event and observation.time <= t:
        return CategoryLabel.EVENT
    if observation.time > t:
        return CategoryLabel.NON_EVENT
    return CategoryLabel.UNUSABLE


def encode_categories(T: np.ndarray, E: np.ndarray, t: float) -> np.ndarray:
    """Vectorized ``encode_category``.

    Args:
        T: Observed times, shape (n_samples,).
        E: Event indicators, shape (n_samples,).
        t: Evaluation time.

    Returns:
        int8 array of ``CategoryLabel`` values (1 event, 0 non-event,
        -1 unusable).
    """
    t = _check_eval_time(t)
    T = np.asarray(T, dtype=float)
    E = np.asarray(E, dtype=bool)

    codes = np.full(len(T), CategoryLabel.UNUSABLE.value, dtype=np.int8)
    codes[T > t] = CategoryLabel.NON_EVENT.value
    codes[E & (T <= t)] = CategoryLabel.EVENT.value
    return codes


def category_counts(T: np.ndarray, E: np.ndarray, t: float) -> Dict[CategoryLabel, int]:
    """Count observations in each category at ``t``."""
    codes = encode_categories(T, E, t)
    return {label: int(np.sum(codes == label.value)) for label in CategoryLabel}
