"""
Unit tests for calibration training.
"""

import warnings

import pytest
import numpy as np

from pybiofusion.calibration import (
    fit_linear_model,
    impostor_mask,
    train_cohort_znorm,
    train_linear_fusion,
)
from pybiofusion.evaluation import compute_det
from pybiofusion.fusion import ScoreFuser
from pybiofusion.io import write_score_model


def synthetic_cohort(n=20000, seed=0):
    """Two algorithms with genuine scores shifted right of the impostors."""
    rng = np.random.default_rng(seed)
    genuine = rng.uniform(size=n) > 0.92
    ids1 = np.arange(n)
    ids2 = np.where(genuine, ids1, ids1 + n)

    pluto = rng.normal(3.0, 0.2, size=n)
    pluto[genuine] += 0.5
    venus = rng.normal(50.0, 2.0, size=n)
    venus[genuine] += 7.0
    return np.vstack([pluto, venus]), ids1, ids2, genuine


class TestImpostorMask:
    """Tests for impostor_mask."""

    def test_mask(self):
        """Test impostors are comparisons of different subjects."""
        np.testing.assert_array_equal(
            impostor_mask([1, 2, 3], [1, 5, 3]), [False, True, False]
        )

    def test_string_ids(self):
        """Test non-numeric identities."""
        np.testing.assert_array_equal(impostor_mask(["a", "b"], ["a", "c"]), [False, True])

    def test_length_mismatch(self):
        """Test ValueError for different lengths."""
        with pytest.raises(ValueError):
            impostor_mask([1, 2], [1])


class TestTrainCohortZnorm:
    """Tests for train_cohort_znorm."""

    def test_small_example(self):
        """Test mean and sample standard deviation of impostor scores."""
        scores = np.array([[1.0, 3.0, 100.0, 5.0], [10.0, 20.0, 0.0, 30.0]])
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            model = train_cohort_znorm(scores, [1, 2, 3, 4], [5, 6, 3, 7], ["a", "b"])
        assert model.algorithms == ("a", "b")
        np.testing.assert_allclose(model.positions, [3.0, 20.0])
        np.testing.assert_allclose(model.scales, [2.0, 10.0])

    def test_recovers_impostor_distribution(self):
        """Test calibration approximates the generating impostor parameters."""
        scores, ids1, ids2, _ = synthetic_cohort()
        model = train_cohort_znorm(scores, ids1, ids2, ["Pluto_University", "Venus_Corporation"])
        np.testing.assert_allclose(model.positions, [3.0, 50.0], rtol=0.01)
        np.testing.assert_allclose(model.scales, [0.2, 2.0], rtol=0.05)

    def test_too_few_impostors(self):
        """Test ValueError with fewer than two impostor comparisons."""
        with pytest.raises(ValueError, match="at least 2"):
            train_cohort_znorm(np.array([[1.0, 2.0]]), [1, 2], [1, 3], ["a"])

    def test_warns_small_cohort(self):
        """Test a warning for a small impostor cohort."""
        with pytest.warns(UserWarning, match="impostor"):
            train_cohort_znorm(np.array([[1.0, 2.0, 4.0]]), [1, 2, 3], [4, 5, 6], ["a"])

    def test_constant_scores(self):
        """Test ValueError when an algorithm's impostor scores are constant."""
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            with pytest.raises(ValueError, match="constant"):
                train_cohort_znorm(np.array([[2.0, 2.0, 2.0]]), [1, 2, 3], [4, 5, 6], ["a"])

    def test_name_count(self):
        """Test ValueError when names and rows disagree."""
        with pytest.raises(ValueError, match="algorithm names"):
            train_cohort_znorm(np.zeros((2, 3)), [1, 2, 3], [4, 5, 6], ["a"])

    def test_pair_count(self):
        """Test ValueError when identity pairs and comparisons disagree."""
        with pytest.raises(ValueError, match="identity pairs"):
            train_cohort_znorm(np.zeros((1, 3)), [1, 2], [4, 5], ["a"])


class TestTrainLinearFusion:
    """Tests for train_linear_fusion."""

    def test_basic_training(self):
        """Test weight shape and a sensible fused ordering."""
        tar = np.array([[2.0, 3.0, 2.5], [1.5, 2.5, 2.0]])
        non = np.array([[-1.0, -2.0, -1.5], [-0.5, -1.5, -1.0]])
        weights = train_linear_fusion(tar, non)
        assert weights.shape == (3,)
        fused_tar = weights[:-1] @ tar + weights[-1]
        fused_non = weights[:-1] @ non + weights[-1]
        assert np.all(fused_tar > fused_non.max())

    def test_uninformative_algorithm(self):
        """Test that an algorithm carrying no information gets a small weight."""
        rng = np.random.default_rng(3)
        noise = rng.normal(size=400)
        tar = np.vstack([rng.normal(2.0, 1.0, size=200), noise[:200]])
        non = np.vstack([rng.normal(-2.0, 1.0, size=200), noise[200:]])
        weights = train_linear_fusion(tar, non)
        assert weights[0] > 0
        assert abs(weights[1]) < weights[0] / 4

    def test_mismatched_algorithms(self):
        """Test ValueError when the score matrices disagree on K."""
        with pytest.raises(ValueError, match="must match"):
            train_linear_fusion(np.zeros((2, 3)), np.zeros((3, 3)))

    def test_invalid_prior(self):
        """Test ValueError for a prior outside (0, 1)."""
        with pytest.raises(ValueError, match="prior"):
            train_linear_fusion(np.ones((1, 2)), np.zeros((1, 2)), prior=1.0)

    def test_not_2d(self):
        """Test ValueError for 1-D inputs."""
        with pytest.raises(ValueError, match="2D"):
            train_linear_fusion(np.ones(3), np.zeros((1, 3)))


class TestFitLinearModel:
    """Tests for fit_linear_model."""

    def test_weighted_model(self):
        """Test that a weighted model with positive weights is returned."""
        scores, ids1, ids2, genuine = synthetic_cohort(n=5000, seed=1)
        model = train_cohort_znorm(scores, ids1, ids2, ["pluto", "venus"])
        weighted = fit_linear_model(model, scores, genuine)
        assert weighted.is_weighted
        assert weighted.calibrations == model.calibrations
        assert all(w > 0 for w in weighted.weights)

    def test_shape_check(self, pluto_venus_model):
        """Test ValueError when the score rows differ from K."""
        with pytest.raises(ValueError, match="shape"):
            fit_linear_model(pluto_venus_model, np.zeros((3, 4)), np.zeros(4, dtype=bool))


class TestTrainFuseEvaluate:
    """End-to-end: train a model directory, fuse and evaluate."""

    def test_fusion_improves_fnmr(self, tmp_path):
        """Test fused scores beat each single algorithm at FMR = 0.01."""
        scores, ids1, ids2, genuine = synthetic_cohort(seed=2)
        model = train_cohort_znorm(scores, ids1, ids2, ["Pluto_University", "Venus_Corporation"])
        write_score_model(model, tmp_path)

        fuser = ScoreFuser()
        assert fuser.initialize(tmp_path, ScoreFuser.Type.VERIFICATION).ok
        fused = np.empty(scores.shape[1])
        for i in range(scores.shape[1]):
            status, fused[i] = fuser.fuse_verification_scores(scores[:, i])
            assert status.ok

        fused_fnmr = compute_det(fused, genuine, [0.01])[0].fnmr
        for row in scores:
            assert fused_fnmr < compute_det(row, genuine, [0.01])[0].fnmr
