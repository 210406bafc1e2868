"""Observation containers for right-censored time-to-event data."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..exceptions import InputDomainError
from .types import EventStatus


def _check_time(value: float, name: str) -> float:
    value = float(value)
    if not np.isfinite(value):
        raise InputDomainError(f"{name} must be finite, got {value}")
    if value < 0:
        raise InputDomainError(f"{name} must be >= 0, got {value}")
    return value


@dataclass(frozen=True)
class Observation:
    """One subject: an observed time and whether it ended in an event.

    Attributes:
        time: Observed time (event or censoring), non-negative.
        status: ``EventStatus.EVENT`` or ``EventStatus.CENSORED``.
            Strings, booleans and 0/1 integers are coerced.
        covariates: Optional covariates, carried along but unused by
            the censoring weights (non-informative censoring).
    """

    time: float
    status: EventStatus
    covariates: Optional[Tuple[float, ...]] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "time", _check_time(self.time, "observed time"))
        object.__setattr__(self, "status", EventStatus.parse(self.status))
        if self.covariates is not None:
            object.__setattr__(self, "covariates", tuple(self.covariates))

    @property
    def is_event(self) -> bool:
        return self.status is EventStatus.EVENT


class SurvivalSample:
    """Column-oriented sample of observed times and event indicators.

    Args:
        T: Observed times, shape (n_samples,).
        E: Event indicators (1/True = event, 0/False = censored),
            shape (n_samples,).
        ids: Optional observation identifiers. Defaults to 0..n-1.

    Raises:
        InputDomainError: If lengths differ, a time is negative or
            non-finite, or an indicator is not binary.
    """

    def __init__(
        self,
        T: Iterable[float],
        E: Iterable,
        ids: Optional[Iterable] = None,
    ):
        T = np.asarray(T, dtype=float).ravel()
        E = np.asarray(E).ravel()

        if len(T) != len(E):
            raise InputDomainError(
                f"T and E must have the same length. Got: T={len(T)}, E={len(E)}"
            )
        if not np.all(np.isfinite(T)):
            raise InputDomainError("observed times must be finite")
        if np.any(T < 0):
            raise InputDomainError(
                f"observed times must be >= 0, got min {T.min()}"
            )

        if E.dtype.kind in "US" or E.dtype == object:
            E = np.array([EventStatus.parse(e) is EventStatus.EVENT for e in E], dtype=bool)
        else:
            if not np.all(np.isin(E, (0, 1))):
                raise InputDomainError("event indicators must be 0/1 or boolean")
            E = E.astype(bool)

        if ids is None:
            ids = np.arange(len(T))
        else:
            ids = np.asarray(ids).ravel()
            if len(ids) != len(T):
                raise InputDomainError(
                    f"ids must match the number of observations ({len(T)}), got {len(ids)}"
                )

        self.T = T
        self.E = E
        self.ids = ids

    def __len__(self) -> int:
        return len(self.T)

    def __iter__(self) -> Iterator[Observation]:
        for t, e in zip(self.T, self.E):
            yield Observation(t, EventStatus.EVENT if e else EventStatus.CENSORED)

    def __repr__(self) -> str:
        return (
            f"SurvivalSample(n={len(self)}, events={self.n_events}, "
            f"censored={self.n_censored})"
        )

    @property
    def n_events(self) -> int:
        return int(self.E.sum())

    @property
    def n_censored(self) -> int:
        return int(len(self.E) - self.E.sum())

    @classmethod
    def from_observations(cls, observations: Iterable[Observation]) -> "SurvivalSample":
        """Build a sample from ``Observation`` objects (or (time, status) pairs)."""
        T, E = [], []
        for obs in observations:
            if not isinstance(obs, Observation):
                obs = Observation(*obs)
            T.append(obs.time)
            E.append(obs.is_event)
        return cls(np.asarray(T, dtype=float), np.asarray(E, dtype=bool))

    @classmethod
    def coerce(cls, data) -> "SurvivalSample":
        """Return ``data`` as a sample, converting iterables of observations."""
        if isinstance(data, cls):
            return data
        return cls.from_observations(data)

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        time_column: str = "time",
        status_column: str = "status",
        id_column: Optional[str] = None,
    ) -> "SurvivalSample":
        """Build a sample from a DataFrame.

        Args:
            frame: Table with one row per observation.
            time_column: Column holding observed times.
            status_column: Column holding status ("event"/"censored",
                booleans or 0/1).
            id_column: Optional column of observation identifiers.

        Returns:
            SurvivalSample instance.
        """
        for column in (time_column, status_column):
            if column not in frame.columns:
                raise InputDomainError(f"missing column {column!r}")
        ids = None
        if id_column is not None:
            if id_column not in frame.columns:
                raise InputDomainError(f"missing column {id_column!r}")
            ids = frame[id_column].to_numpy()
        return cls(
            frame[time_column].to_numpy(dtype=float),
            frame[status_column].to_numpy(),
            ids=ids,
        )

    @classmethod
    def from_csv(cls, path: Union[str, Path], **kwargs) -> "SurvivalSample":
        """Load a sample from a CSV file. Keyword arguments go to ``from_frame``."""
        return cls.from_frame(pd.read_csv(path), **kwargs)

    def to_frame(self) -> pd.DataFrame:
        """Convert to a DataFrame with ``id``, ``time`` and ``event`` columns."""
        return pd.DataFrame({"id": self.ids, "time": self.T, "event": self.E})

    def subset(self, index) -> "SurvivalSample":
        """Return the observations selected by ``index``."""
        return SurvivalSample(self.T[index], self.E[index], ids=self.ids[index])


def validate_eval_times(times) -> np.ndarray:
    """Validate evaluation times.

    Duplicates are dropped, keeping the first occurrence; order is
    otherwise preserved.

    Args:
        times: Scalar or sequence of evaluation times.

    Returns:
        1-D float array of evaluation times.

    Raises:
        InputDomainError: If empty, negative or non-finite.
    """
    times = np.atleast_1d(np.asarray(times, dtype=float)).ravel()
    if len(times) == 0:
        raise InputDomainError("at least one evaluation time is required")
    if not np.all(np.isfinite(times)):
        raise InputDomainError("evaluation times must be finite")
    if np.any(times < 0):
        raise InputDomainError(f"evaluation times must be >= 0, got min {times.min()}")
    _, first = np.unique(times, return_index=True)
    return times[np.sort(first)]
