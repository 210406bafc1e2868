"""Evaluation configuration."""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from ..data.types import BrierNormalization, SaturationPolicy
from ..metrics.aggregation import MetricKind


@dataclass
class EvaluationConfig:
    """Configuration of a dynamic metric evaluation.

    Attributes:
        name: Human-readable evaluation name.
        eval_times: Evaluation times. If None, the caller passes the times
            its predictions were computed at.
        metrics: Metric names to compute.
        threshold: Event probability threshold for confusion metrics.
        normalization: Brier score denominator.
        saturation_policy: How zero censoring probabilities become weights.
        truncation: Probability floor for the truncation policy.
        n_jobs: Number of parallel jobs over evaluation times.
        time_column: Column of observed times in input tables.
        status_column: Column of event status in input tables.
        id_column: Optional column of observation identifiers.
        created_at: Creation timestamp.
    """

    name: str = "evaluation"
    eval_times: Optional[List[float]] = None
    metrics: List[str] = field(default_factory=lambda: ["brier", "roc_auc"])

    # Metric options
    threshold: float = 0.5
    normalization: BrierNormalization = BrierNormalization.TOTAL

    # Censoring weights
    saturation_policy: SaturationPolicy = SaturationPolicy.TRUNCATE
    truncation: float = 0.01

    # Execution
    n_jobs: Optional[int] = None

    # Input columns
    time_column: str = "time"
    status_column: str = "status"
    id_column: Optional[str] = None

    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate the evaluation configuration.

        Raises:
            ValueError: If configuration is invalid.
        """
        if self.eval_times is not None:
            if not self.eval_times:
                raise ValueError("eval_times cannot be empty")
            if not all(math.isfinite(t) for t in self.eval_times):
                raise ValueError(f"eval_times must be finite, got {self.eval_times}")
            if any(t < 0 for t in self.eval_times):
                raise ValueError(f"eval_times must be >= 0, got {self.eval_times}")
            if len(set(self.eval_times)) != len(self.eval_times):
                raise ValueError(f"eval_times must be distinct, got {self.eval_times}")

        if not self.metrics:
            raise ValueError("metrics cannot be empty")

        for metric in self.metrics:
            # Raises InputDomainError (a ValueError) for unknown names
            MetricKind.parse(metric)

        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be in [0.0, 1.0], got {self.threshold}")

        if not 0.0 < self.truncation < 1.0:
            raise ValueError(f"truncation must be in (0.0, 1.0), got {self.truncation}")

        if self.n_jobs == 0:
            raise ValueError("n_jobs cannot be 0")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "eval_times": self.eval_times,
            "metrics": list(self.metrics),
            "threshold": self.threshold,
            "normalization": self.normalization.name.lower(),
            "censoring": {
                "saturation_policy": self.saturation_policy.name.lower(),
                "truncation": self.truncation,
            },
            "n_jobs": self.n_jobs,
            "columns": {
                "time": self.time_column,
                "status": self.status_column,
                "id": self.id_column,
            },
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EvaluationConfig":
        """Create from dictionary.

        Args:
            data: Dictionary with evaluation configuration.

        Returns:
            EvaluationConfig instance.
        """
        censoring = data.get("censoring", {})
        columns = data.get("columns", {})

        normalization = BrierNormalization[data.get("normalization", "total").upper()]
        saturation_policy = SaturationPolicy[
            censoring.get("saturation_policy", "truncate").upper()
        ]

        created_at = data.get("created_at")
        if created_at and isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        else:
            created_at = datetime.now()

        eval_times = data.get("eval_times")
        if eval_times is not None:
            eval_times = [float(t) for t in eval_times]

        return cls(
            name=data.get("name", "evaluation"),
            eval_times=eval_times,
            metrics=data.get("metrics", ["brier", "roc_auc"]),
            threshold=data.get("threshold", 0.5),
            normalization=normalization,
            saturation_policy=saturation_policy,
            truncation=censoring.get("truncation", 0.01),
            n_jobs=data.get("n_jobs"),
            time_column=columns.get("time", "time"),
            status_column=columns.get("status", "status"),
            id_column=columns.get("id"),
            created_at=created_at,
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "EvaluationConfig":
        """Load configuration from JSON file.

        Args:
            path: Path to JSON file.

        Returns:
            EvaluationConfig instance.
        """
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file.

        Args:
            path: Path to save JSON file.
        """
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
