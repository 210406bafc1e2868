"""Long-format table of encoded, weighted outcomes.

Every aggregation consumes the same table, built once per evaluation:
one row per (observation, evaluation time) with its category, censoring
weight and predicted survival probability.
"""

import numpy as np
import pandas as pd

from ..data.encoding import encode_categories
from ..data.observations import SurvivalSample, validate_eval_times
from ..data.types import CategoryLabel
from ..exceptions import InputDomainError
from .censoring import CensoringEstimator, censoring_weights

COLUMNS = ["obs_id", "eval_time", "time", "event", "category", "weight", "pred_survival"]


def check_predictions(predictions, n_samples: int, n_times: int) -> np.ndarray:
    """Validate predicted survival probabilities.

    Args:
        predictions: Array of shape (n_samples, n_times). A 1-D array of
            length n_samples is accepted when n_times == 1.
        n_samples: Expected number of rows.
        n_times: Expected number of evaluation times.

    Returns:
        2-D float array of shape (n_samples, n_times).

    Raises:
        InputDomainError: On shape mismatch or values outside [0, 1].
    """
    predictions = np.asarray(predictions, dtype=float)
    if predictions.ndim == 1 and n_times == 1:
        predictions = predictions.reshape(-1, 1)
    if predictions.ndim != 2:
        raise InputDomainError(
            f"predictions must be 2-D (n_samples, n_times), got {predictions.ndim}-D"
        )

    if predictions.shape[0] != n_samples:
        raise InputDomainError(
            f"predictions rows ({predictions.shape[0]}) must match "
            f"observations ({n_samples})"
        )
    if predictions.shape[1] != n_times:
        raise InputDomainError(
            f"predictions columns ({predictions.shape[1]}) must match "
            f"evaluation times ({n_times})"
        )

    if np.any(np.isnan(predictions)):
        raise InputDomainError("predictions must not contain NaN")
    if np.any((predictions < 0) | (predictions > 1)):
        raise InputDomainError("predicted survival probabilities must be in [0, 1]")

    return predictions


def build_weighted_outcomes(
    estimator: CensoringEstimator,
    sample: SurvivalSample,
    predictions,
    eval_times,
) -> pd.DataFrame:
    """Encode and weight every observation at every evaluation time.

    Rows that are unusable at a time (censored before it, or excluded by
    the saturation policy) are kept with ``category`` UNUSABLE and a
    ``NaN`` weight; aggregators drop them.

    Args:
        estimator: Fitted censoring estimator (shared, read-only).
        sample: Observations to evaluate.
        predictions: Predicted survival probabilities,
            shape (n_samples, n_times).
        eval_times: Evaluation times, matching the prediction columns.

    Returns:
        DataFrame with columns ``obs_id, eval_time, time, event, category,
        weight, pred_survival``.
    """
    sample = SurvivalSample.coerce(sample)
    eval_times = np.atleast_1d(np.asarray(eval_times, dtype=float))
    if len(validate_eval_times(eval_times)) != len(eval_times):
        raise InputDomainError("evaluation times must be distinct")

    predictions = check_predictions(predictions, len(sample), len(eval_times))

    frames = []
    for j, t in enumerate(eval_times):
        codes = encode_categories(sample.T, sample.E, t)
        weights = censoring_weights(estimator, sample.T, sample.E, t)
        codes = np.where(np.isnan(weights), CategoryLabel.UNUSABLE.value, codes)

        frames.append(
            pd.DataFrame(
                {
                    "obs_id": sample.ids,
                    "eval_time": t,
                    "time": sample.T,
                    "event": sample.E,
                    "category": codes.astype(np.int8),
                    "weight": weights,
                    "pred_survival": predictions[:, j],
                }
            )
        )

    if not frames:
        return pd.DataFrame(columns=COLUMNS)
    return pd.concat(frames, ignore_index=True)[COLUMNS]


def usable_rows(outcomes: pd.DataFrame) -> pd.DataFrame:
    """Rows whose category is EVENT or NON_EVENT."""
    return outcomes[outcomes["category"] != CategoryLabel.UNUSABLE.value]
