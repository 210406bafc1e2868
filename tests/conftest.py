"""Shared pytest fixtures for dynsurv tests."""

import numpy as np
import pytest

from dynsurv.data.observations import Observation, SurvivalSample
from dynsurv.data.simulation import simulate_sample


@pytest.fixture
def random_seed():
    """Fixed random seed for reproducibility."""
    return 42


@pytest.fixture
def four_row_observations():
    """Small training sample with one censored observation."""
    return [
        Observation(4.83, "event"),
        Observation(6.11, "event"),
        Observation(6.60, "censored"),
        Observation(2.72, "event"),
    ]


@pytest.fixture
def tied_sample():
    """Sample with an event and a censoring tied at time 2.

    Reverse Kaplan-Meier by hand:
        time  at risk  censored  G
        1     5        0         1.0
        2     4        1         0.75
        3     2        1         0.375
        4     1        1         0.0
    """
    return SurvivalSample(
        T=np.array([1.0, 2.0, 2.0, 3.0, 4.0]),
        E=np.array([1, 0, 1, 0, 0]),
    )


@pytest.fixture
def simulated(random_seed):
    """Simulated Weibull sample with about 30% censoring."""
    return simulate_sample(n_samples=300, censoring_rate=0.3, seed=random_seed)


@pytest.fixture
def simulated_test(random_seed):
    """Independent simulated sample from the same distribution."""
    return simulate_sample(n_samples=200, censoring_rate=0.3, seed=random_seed + 1)
