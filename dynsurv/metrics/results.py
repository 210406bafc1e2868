"""Result containers for dynamic metric evaluation."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .confusion import WeightedConfusionMatrix


@dataclass(frozen=True)
class DynamicMetricResult:
    """A metric evaluated at each of a set of evaluation times.

    Attributes:
        metric: Metric name (``MetricKind`` value, e.g. "brier").
        eval_times: Evaluation times, in the order they were requested.
        estimates: Metric value at each evaluation time (``NaN`` when
            undefined at that time).
        n_usable: Number of usable observations at each time.
        integrated: Integrated value over time (Brier score only).
        confusion: Weighted confusion matrices (confusion metric only).
        timestamp: When the result was computed.
    """

    metric: str
    eval_times: Tuple[float, ...]
    estimates: Tuple[float, ...]
    n_usable: Tuple[int, ...]
    integrated: Optional[float] = None
    confusion: Optional[Tuple[WeightedConfusionMatrix, ...]] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "eval_times", tuple(float(t) for t in self.eval_times))
        object.__setattr__(self, "estimates", tuple(float(v) for v in self.estimates))
        object.__setattr__(self, "n_usable", tuple(int(n) for n in self.n_usable))
        if self.confusion is not None:
            object.__setattr__(self, "confusion", tuple(self.confusion))
        if self.timestamp is None:
            object.__setattr__(self, "timestamp", datetime.now())

        if not (len(self.eval_times) == len(self.estimates) == len(self.n_usable)):
            raise ValueError(
                f"eval_times ({len(self.eval_times)}), estimates "
                f"({len(self.estimates)}) and n_usable ({len(self.n_usable)}) "
                f"must have the same length"
            )

    def __len__(self) -> int:
        return len(self.eval_times)

    def estimate_at(self, t: float) -> float:
        """Metric value at evaluation time ``t``.

        Raises:
            KeyError: If ``t`` was not evaluated.
        """
        for time, value in zip(self.eval_times, self.estimates):
            if time == t:
                return value
        raise KeyError(f"evaluation time {t} not in result")

    def validate(self) -> bool:
        """Validate metric values.

        Returns:
            True if all defined values are in range, False otherwise.
        """
        values = np.asarray(self.estimates, dtype=float)
        defined = values[~np.isnan(values)]

        if self.metric == "brier" and np.any(defined < 0):
            return False

        if self.metric in ("roc_auc", "confusion", "sensitivity", "specificity"):
            if np.any((defined < 0) | (defined > 1)):
                return False

        if self.integrated is not None and not math.isfinite(self.integrated):
            return False

        return True

    def to_frame(self) -> pd.DataFrame:
        """One row per evaluation time."""
        frame = pd.DataFrame(
            {
                "metric": self.metric,
                "eval_time": list(self.eval_times),
                "estimate": list(self.estimates),
                "n_usable": list(self.n_usable),
            }
        )
        if self.confusion is not None:
            cells = pd.DataFrame([m.to_dict() for m in self.confusion])
            frame = pd.concat([frame, cells[["tp", "fp", "fn", "tn"]]], axis=1)
        return frame

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "metric": self.metric,
            "eval_times": list(self.eval_times),
            "estimates": list(self.estimates),
            "n_usable": list(self.n_usable),
            "integrated": self.integrated,
            "confusion": (
                [m.to_dict() for m in self.confusion] if self.confusion is not None else None
            ),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def to_csv_rows(self) -> List[dict]:
        """Convert to CSV rows, one per evaluation time."""
        timestamp = self.timestamp.isoformat() if self.timestamp else ""
        return [
            {
                "metric": self.metric,
                "eval_time": t,
                "estimate": value,
                "n_usable": n,
                "integrated": self.integrated if self.integrated is not None else "",
                "timestamp": timestamp,
            }
            for t, value, n in zip(self.eval_times, self.estimates, self.n_usable)
        ]

    @classmethod
    def from_dict(cls, data: dict) -> "DynamicMetricResult":
        """Create from dictionary.

        Args:
            data: Dictionary with result data.

        Returns:
            DynamicMetricResult instance.
        """
        timestamp = data.get("timestamp")
        if timestamp and isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        confusion = data.get("confusion")
        if confusion is not None:
            confusion = tuple(WeightedConfusionMatrix.from_dict(m) for m in confusion)

        return cls(
            metric=data["metric"],
            eval_times=data["eval_times"],
            estimates=[np.nan if v is None else v for v in data["estimates"]],
            n_usable=data["n_usable"],
            integrated=data.get("integrated"),
            confusion=confusion,
            timestamp=timestamp,
        )
