"""Unit tests for observations and binary outcome encoding."""

import numpy as np
import pytest

from dynsurv.data.encoding import category_counts, encode_categories, encode_category
from dynsurv.data.observations import Observation, SurvivalSample, validate_eval_times
from dynsurv.data.types import CategoryLabel, EventStatus
from dynsurv.exceptions import InputDomainError


class TestEventStatus:
    """Tests for status coercion."""

    @pytest.mark.parametrize("value", ["event", "EVENT", " Event ", True, 1, 1.0])
    def test_event_values(self, value):
        assert EventStatus.parse(value) is EventStatus.EVENT

    @pytest.mark.parametrize("value", ["censored", False, 0, np.bool_(False)])
    def test_censored_values(self, value):
        assert EventStatus.parse(value) is EventStatus.CENSORED

    @pytest.mark.parametrize("value", ["dead", 2, -1, None, 0.5])
    def test_unknown_status_raises(self, value):
        with pytest.raises(InputDomainError):
            EventStatus.parse(value)


class TestObservation:
    """Tests for the Observation value type."""

    def test_coerces_status(self):
        obs = Observation(3.0, "censored")
        assert obs.status is EventStatus.CENSORED
        assert not obs.is_event

    def test_negative_time_raises(self):
        with pytest.raises(InputDomainError, match=">= 0"):
            Observation(-1.0, "event")

    def test_non_finite_time_raises(self):
        with pytest.raises(InputDomainError, match="finite"):
            Observation(np.inf, "event")

    def test_covariates_do_not_affect_equality(self):
        assert Observation(1.0, "event", covariates=[1, 2]) == Observation(1.0, "event")


class TestSurvivalSample:
    """Tests for the column-oriented sample container."""

    def test_from_observations(self, four_row_observations):
        sample = SurvivalSample.from_observations(four_row_observations)

        assert len(sample) == 4
        assert sample.n_events == 3
        assert sample.n_censored == 1
        np.testing.assert_array_equal(sample.ids, [0, 1, 2, 3])

    def test_accepts_status_strings(self):
        sample = SurvivalSample([1.0, 2.0], ["event", "censored"])
        np.testing.assert_array_equal(sample.E, [True, False])

    def test_mismatched_lengths_raise(self):
        with pytest.raises(InputDomainError, match="same length"):
            SurvivalSample([1.0, 2.0], [1])

    def test_negative_time_raises(self):
        with pytest.raises(InputDomainError):
            SurvivalSample([1.0, -2.0], [1, 0])

    def test_non_binary_indicator_raises(self):
        with pytest.raises(InputDomainError, match="0/1"):
            SurvivalSample([1.0, 2.0], [1, 2])

    def test_iterates_observations(self):
        sample = SurvivalSample([1.0, 2.0], [1, 0])
        observations = list(sample)
        assert observations == [Observation(1.0, "event"), Observation(2.0, "censored")]

    def test_frame_round_trip(self):
        import pandas as pd

        frame = pd.DataFrame({"time": [1.0, 2.0, 3.0], "status": [1, 0, 1], "id": ["a", "b", "c"]})
        sample = SurvivalSample.from_frame(frame, id_column="id")

        out = sample.to_frame()
        assert list(out["id"]) == ["a", "b", "c"]
        assert list(out["event"]) == [True, False, True]

    def test_missing_column_raises(self):
        import pandas as pd

        with pytest.raises(InputDomainError, match="missing column"):
            SurvivalSample.from_frame(pd.DataFrame({"time": [1.0]}))


class TestValidateEvalTimes:
    """Tests for evaluation time validation."""

    def test_scalar(self):
        np.testing.assert_array_equal(validate_eval_times(2.5), [2.5])

    def test_drops_duplicates_keeping_order(self):
        np.testing.assert_array_equal(validate_eval_times([3.0, 1.0, 3.0, 2.0]), [3.0, 1.0, 2.0])

    def test_negative_raises(self):
        with pytest.raises(InputDomainError):
            validate_eval_times([1.0, -1.0])

    def test_empty_raises(self):
        with pytest.raises(InputDomainError, match="at least one"):
            validate_eval_times([])


class TestEncodeCategory:
    """Tests for the three-way outcome encoding."""

    def test_two_row_sample_over_time(self):
        """Categories only flow towards unusable as t grows."""
        event_row = Observation(5.0, "event")
        censored_row = Observation(3.0, "censored")

        assert [encode_category(o, 1) for o in (event_row, censored_row)] == [
            CategoryLabel.NON_EVENT,
            CategoryLabel.NON_EVENT,
        ]
        assert [encode_category(o, 4) for o in (event_row, censored_row)] == [
            CategoryLabel.NON_EVENT,
            CategoryLabel.UNUSABLE,
        ]
        assert [encode_category(o, 10) for o in (event_row, censored_row)] == [
            CategoryLabel.EVENT,
            CategoryLabel.UNUSABLE,
        ]

    def test_event_at_boundary_is_event(self):
        assert encode_category(Observation(2.0, "event"), 2.0) is CategoryLabel.EVENT

    def test_censored_at_boundary_is_unusable(self):
        assert encode_category(Observation(2.0, "censored"), 2.0) is CategoryLabel.UNUSABLE

    def test_later_time_is_non_event_regardless_of_status(self):
        assert encode_category(Observation(2.0, "event"), 1.0) is CategoryLabel.NON_EVENT
        assert encode_category(Observation(2.0, "censored"), 1.0) is CategoryLabel.NON_EVENT

    def test_four_row_partition(self, four_row_observations):
        categories = [encode_category(o, 5.0) for o in four_row_observations]

        assert categories == [
            CategoryLabel.EVENT,
            CategoryLabel.NON_EVENT,
            CategoryLabel.NON_EVENT,
            CategoryLabel.EVENT,
        ]

    def test_negative_eval_time_raises(self):
        with pytest.raises(InputDomainError):
            encode_category(Observation(1.0, "event"), -0.5)


class TestEncodeCategories:
    """Tests for the vectorized encoder."""

    def test_matches_scalar_encoder(self, simulated):
        sample = simulated.sample
        for t in np.percentile(sample.T, [5, 25, 50, 75, 95]):
            codes = encode_categories(sample.T, sample.E, t)
            expected = [encode_category(o, t).value for o in sample]
            np.testing.assert_array_equal(codes, expected)

    def test_partition_counts(self, simulated):
        sample = simulated.sample
        counts = category_counts(sample.T, sample.E, float(np.median(sample.T)))

        assert set(counts) == set(CategoryLabel)
        assert sum(counts.values()) == len(sample)

    def test_unusable_count_non_decreasing(self, simulated):
        sample = simulated.sample
        grid = np.linspace(0, sample.T.max() * 1.1, 50)
        unusable = [
            category_counts(sample.T, sample.E, t)[CategoryLabel.UNUSABLE] for t in grid
        ]

        assert np.all(np.diff(unusable) >= 0)
        assert unusable[-1] == sample.n_censored
