"""Observations, outcome encoding and synthetic samples."""

from .types import EventStatus, CategoryLabel, SaturationPolicy, BrierNormalization
from .observations import Observation, SurvivalSample, validate_eval_times
from .encoding import encode_category, encode_categories, category_counts
from .simulation import (
    SimulatedSample,
    simulate_sample,
    calibrate_censoring_scale,
    censored_fraction,
)

__all__ = [
    # Types
    "EventStatus",
    "CategoryLabel",
    "SaturationPolicy",
    "BrierNormalization",
    # Observations
    "Observation",
    "SurvivalSample",
    "validate_eval_times",
    # Encoding
    "encode_category",
    "encode_categories",
    "category_counts",
    # Simulation
    "SimulatedSample",
    "simulate_sample",
    "calibrate_censoring_scale",
    "censored_fraction",
]
