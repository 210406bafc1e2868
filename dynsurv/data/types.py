"""Core enumerations for dynamic survival metric evaluation."""

from enum import Enum, auto

import numpy as np

from ..exceptions import InputDomainError


class EventStatus(Enum):
    """Status of an observed time."""

    EVENT = auto()
    CENSORED = auto()

    @classmethod
    def parse(cls, value) -> "EventStatus":
        """Coerce a status value.

        Accepts an ``EventStatus``, the strings ``"event"``/``"censored"``
        (case-insensitive), booleans, or the integers 1 (event) and 0
        (censored).

        Raises:
            InputDomainError: If the value is not a recognized status.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InputDomainError(
                    f"status must be 'event' or 'censored', got {value!r}"
                ) from None
        if isinstance(value, (bool, np.bool_)):
            return cls.EVENT if value else cls.CENSORED
        if isinstance(value, (int, float, np.integer, np.floating)) and value in (0, 1):
            return cls.EVENT if value == 1 else cls.CENSORED
        raise InputDomainError(f"status must be 'event' or 'censored', got {value!r}")


class CategoryLabel(Enum):
    """Binary outcome of one observation at one evaluation time.

    The integer values are the codes used by the vectorized encoder.
    """

    EVENT = 1
    NON_EVENT = 0
    UNUSABLE = -1


class SaturationPolicy(Enum):
    """What to do when the censoring curve is zero at a weight time."""

    TRUNCATE = auto()  # Floor the probability, capping the weight
    EXCLUDE = auto()  # Treat the observation as unusable at that time


class BrierNormalization(Enum):
    """Denominator of the time-dependent Brier score."""

    TOTAL = auto()  # All observations (Graf); unusable rows contribute zero
    USABLE = auto()  # Only observations usable at the evaluation time
