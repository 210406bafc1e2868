"""Unit tests for per-time metric calculations."""

import numpy as np
import pytest
from scipy.integrate import trapezoid

from dynsurv.data.types import BrierNormalization
from dynsurv.metrics.brier import brier_score_at, integrated_brier_score
from dynsurv.metrics.confusion import WeightedConfusionMatrix, weighted_confusion_matrix
from dynsurv.metrics.roc import weighted_roc_auc, weighted_roc_curve


class TestBrierScoreAt:
    """Tests for the time-dependent Brier score."""

    def test_perfect_predictions(self):
        event = np.array([True, False, True, False])
        pred_survival = np.array([0.0, 1.0, 0.0, 1.0])
        weights = np.array([1.0, 1.5, 2.0, 1.2])

        assert brier_score_at(event, pred_survival, weights, n_total=4) == 0.0

    def test_uninformative_model(self):
        event = np.array([True, False, True, False, False])
        pred_survival = np.full(5, 0.5)

        score = brier_score_at(event, pred_survival, np.ones(5), n_total=5)
        assert score == pytest.approx(0.25)

    def test_hand_computed_weighted_score(self):
        # Events contribute w * S^2, non-events w * (1 - S)^2
        event = np.array([True, True, False])
        pred_survival = np.array([0.2, 0.4, 0.9])
        weights = np.array([1.0, 4 / 3, 8 / 3])

        score = brier_score_at(event, pred_survival, weights, n_total=3)
        assert score == pytest.approx((0.04 + 4 / 3 * 0.16 + 8 / 3 * 0.01) / 3)

    def test_total_normalization_counts_unusable_rows(self):
        event = np.array([True, False])
        pred_survival = np.array([0.5, 0.5])

        total = brier_score_at(event, pred_survival, np.ones(2), n_total=4)
        usable = brier_score_at(
            event, pred_survival, np.ones(2), n_total=4,
            normalization=BrierNormalization.USABLE,
        )

        assert total == pytest.approx(0.125)
        assert usable == pytest.approx(0.25)

    def test_empty_usable_set_is_nan(self):
        assert np.isnan(brier_score_at(np.array([]), np.array([]), np.array([]), n_total=3))

    def test_n_total_smaller_than_usable_raises(self):
        with pytest.raises(ValueError, match="n_total"):
            brier_score_at(np.array([True, False]), np.array([0.5, 0.5]), np.ones(2), n_total=1)

    def test_mismatched_lengths_raise(self):
        with pytest.raises(ValueError, match="same length"):
            brier_score_at(np.array([True]), np.array([0.5, 0.5]), np.ones(2), n_total=2)


class TestIntegratedBrierScore:
    """Tests for integrating the Brier curve over time."""

    def test_trapezoid_divided_by_max_time(self):
        score = integrated_brier_score([1.0, 2.0, 3.0], [0.1, 0.2, 0.3])
        assert score == pytest.approx(0.4 / 3)

    def test_order_invariant(self):
        times = np.array([1.0, 2.0, 3.0, 5.0])
        scores = np.array([0.05, 0.12, 0.2, 0.18])
        order = np.array([3, 0, 2, 1])

        assert integrated_brier_score(times[order], scores[order]) == pytest.approx(
            integrated_brier_score(times, scores)
        )

    def test_constant_curve(self):
        # Area of a constant 0.25 curve from 1 to 4, divided by 4
        assert integrated_brier_score([1.0, 4.0], [0.25, 0.25]) == pytest.approx(0.25 * 3 / 4)

    def test_nan_scores_dropped(self):
        score = integrated_brier_score([1.0, 2.0, 3.0], [0.1, np.nan, 0.3])
        assert score == pytest.approx(0.4 / 3)

    def test_single_time_is_nan(self):
        assert np.isnan(integrated_brier_score([2.0], [0.1]))

    def test_mismatched_lengths_raise(self):
        with pytest.raises(ValueError):
            integrated_brier_score([1.0, 2.0], [0.1])


class TestWeightedRocAuc:
    """Tests for the weighted Mann-Whitney AUC."""

    def test_perfect_ranking(self):
        event = np.array([True, True, False, False])
        pred_survival = np.array([0.1, 0.2, 0.8, 0.9])

        assert weighted_roc_auc(event, pred_survival, np.ones(4)) == 1.0

    def test_inverse_ranking(self):
        event = np.array([True, True, False, False])
        pred_survival = np.array([0.8, 0.9, 0.1, 0.2])

        assert weighted_roc_auc(event, pred_survival, np.ones(4)) == 0.0

    def test_ties_count_half(self):
        event = np.array([True, False])
        assert weighted_roc_auc(event, np.array([0.5, 0.5]), np.ones(2)) == 0.5

    def test_hand_computed_weighted_auc(self):
        event = np.array([True, True, False, False])
        pred_survival = np.array([0.2, 0.6, 0.4, 0.8])
        weights = np.array([1.0, 2.0, 1.0, 1.0])

        # Concordant pair weight 4 out of (1 + 2) * (1 + 1)
        assert weighted_roc_auc(event, pred_survival, weights) == pytest.approx(4 / 6)

    def test_matches_pairwise_definition(self):
        rng = np.random.default_rng(0)
        n = 60
        event = rng.random(n) < 0.4
        pred_survival = np.round(rng.random(n), 1)  # force ties
        weights = rng.uniform(1, 3, n)

        num = den = 0.0
        for i in np.where(event)[0]:
            for j in np.where(~event)[0]:
                pair = weights[i] * weights[j]
                den += pair
                if pred_survival[i] < pred_survival[j]:
                    num += pair
                elif pred_survival[i] == pred_survival[j]:
                    num += 0.5 * pair

        assert weighted_roc_auc(event, pred_survival, weights) == pytest.approx(num / den)

    def test_single_class_is_half(self):
        assert weighted_roc_auc(np.array([True, True]), np.array([0.1, 0.9]), np.ones(2)) == 0.5
        assert weighted_roc_auc(np.array([False]), np.array([0.3]), np.ones(1)) == 0.5

    def test_empty_is_nan(self):
        assert np.isnan(weighted_roc_auc(np.array([]), np.array([]), np.array([])))


class TestWeightedRocCurve:
    """Tests for the weighted ROC curve."""

    def test_curve_endpoints(self):
        event = np.array([True, False, True, False])
        pred_survival = np.array([0.3, 0.6, 0.5, 0.2])
        fpr, tpr, thresholds = weighted_roc_curve(event, pred_survival, np.ones(4))

        assert (fpr[0], tpr[0]) == (0.0, 0.0)
        assert (fpr[-1], tpr[-1]) == (1.0, 1.0)
        assert thresholds[0] == -np.inf
        assert np.all(np.diff(fpr) >= 0)
        assert np.all(np.diff(tpr) >= 0)

    def test_area_matches_auc(self):
        rng = np.random.default_rng(1)
        n = 80
        event = rng.random(n) < 0.5
        pred_survival = np.round(rng.random(n), 2)
        weights = rng.uniform(1, 2, n)

        fpr, tpr, _ = weighted_roc_curve(event, pred_survival, weights)
        assert trapezoid(tpr, fpr) == pytest.approx(
            weighted_roc_auc(event, pred_survival, weights)
        )


class TestWeightedConfusionMatrix:
    """Tests for the weighted 2x2 table."""

    def test_hand_computed_cells(self):
        event = np.array([True, True, False, False])
        pred_survival = np.array([0.2, 0.7, 0.3, 0.9])
        weights = np.array([1.0, 2.0, 1.0, 1.0])

        matrix = weighted_confusion_matrix(event, pred_survival, weights)

        assert (matrix.tp, matrix.fn, matrix.fp, matrix.tn) == (1.0, 2.0, 1.0, 1.0)
        assert matrix.n_usable == 4
        assert matrix.sensitivity == pytest.approx(1 / 3)
        assert matrix.specificity == pytest.approx(0.5)
        assert matrix.miss_rate == pytest.approx(2 / 3)
        assert matrix.fall_out == pytest.approx(0.5)
        assert matrix.precision == pytest.approx(0.5)
        assert matrix.accuracy == pytest.approx(2 / 5)

    def test_threshold_boundary_predicts_event(self):
        matrix = weighted_confusion_matrix(np.array([True]), np.array([0.5]), np.ones(1))
        assert matrix.tp == 1.0

    def test_custom_threshold(self):
        matrix = weighted_confusion_matrix(
            np.array([True]), np.array([0.5]), np.ones(1), threshold=0.8
        )
        assert matrix.fn == 1.0

    def test_single_class_gives_nan_rates(self):
        matrix = weighted_confusion_matrix(
            np.array([True, True]), np.array([0.1, 0.9]), np.ones(2)
        )

        assert matrix.sensitivity == 0.5
        assert np.isnan(matrix.specificity)
        assert np.isnan(matrix.fall_out)

    def test_empty_table(self):
        matrix = weighted_confusion_matrix(np.array([]), np.array([]), np.array([]))

        assert matrix == WeightedConfusionMatrix()
        assert np.isnan(matrix.accuracy)
        assert np.isnan(matrix.sensitivity)

    def test_invalid_threshold_raises(self):
        with pytest.raises(ValueError, match="threshold"):
            weighted_confusion_matrix(np.array([True]), np.array([0.5]), np.ones(1), threshold=1.5)

    def test_dict_round_trip(self):
        matrix = WeightedConfusionMatrix(tp=1.5, fp=0.5, fn=2.0, tn=3.0, n_usable=5)
        assert WeightedConfusionMatrix.from_dict(matrix.to_dict()) == matrix
