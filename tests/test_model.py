"""
Unit tests for value types and the FusionModel class.
"""

import pytest
import numpy as np

from pybiofusion.core import (
    AlgorithmCalibration,
    Candidate,
    FusionModel,
    NonCongruentVectors,
    ParseError,
    TemplateFormatError,
    VerifTemplateError,
    as_candidate_list,
    as_template,
    check_congruent,
    is_ranked,
)


class TestAlgorithmCalibration:
    """Tests for AlgorithmCalibration."""

    def test_normalize(self):
        """Test z-normalization of a single score."""
        cal = AlgorithmCalibration("pluto", 3.0, 0.2)
        assert np.isclose(cal.normalize(3.5), 2.5)

    def test_coerces_to_float(self):
        """Test that numpy and int values are stored as float."""
        cal = AlgorithmCalibration("pluto", np.float32(3), 2)
        assert type(cal.position) is float
        assert type(cal.scale) is float

    @pytest.mark.parametrize("scale", [0.0, -1.0, np.inf, np.nan])
    def test_invalid_scale(self, scale):
        """Test that scale must be positive and finite."""
        with pytest.raises(ValueError, match="scale"):
            AlgorithmCalibration("pluto", 3.0, scale)

    def test_invalid_position(self):
        """Test that position must be finite."""
        with pytest.raises(ValueError, match="position"):
            AlgorithmCalibration("pluto", np.nan, 1.0)

    def test_empty_name(self):
        """Test that the algorithm must be named."""
        with pytest.raises(ValueError):
            AlgorithmCalibration("", 0.0, 1.0)


class TestFusionModel:
    """Tests for FusionModel."""

    def test_basic_properties(self, pluto_venus_model):
        """Test K, algorithm order and parameter arrays."""
        model = pluto_venus_model
        assert model.k == 2
        assert model.algorithms == ("Pluto_University", "Venus_Corporation")
        np.testing.assert_array_equal(model.positions, [3.0, 50.0])
        np.testing.assert_array_equal(model.scales, [0.2, 2.0])
        assert not model.is_weighted
        np.testing.assert_array_equal(model.linear_weights(), [1.0, 1.0])

    def test_normalize(self, pluto_venus_model):
        """Test vector z-normalization."""
        z = pluto_venus_model.normalize([3.5, 51.0])
        np.testing.assert_allclose(z, [2.5, 0.5])

    def test_normalize_wrong_count(self, pluto_venus_model):
        """Test that the score count must match K."""
        with pytest.raises(ValueError, match="Expected 2 scores"):
            pluto_venus_model.normalize([1.0, 2.0, 3.0])

    def test_arrays_read_only(self, pluto_venus_model):
        """Test that the model cannot be modified in place."""
        with pytest.raises(ValueError):
            pluto_venus_model.positions[0] = 0.0

    def test_duplicate_algorithms(self):
        """Test that algorithm names must be unique."""
        with pytest.raises(ValueError, match="Duplicate"):
            FusionModel([
                AlgorithmCalibration("a", 0.0, 1.0),
                AlgorithmCalibration("a", 1.0, 1.0),
            ])

    def test_empty(self):
        """Test that at least one algorithm is required."""
        with pytest.raises(ValueError):
            FusionModel([])

    def test_with_linear_weights(self, pluto_venus_model):
        """Test attaching weights returns a new weighted model."""
        weighted = pluto_venus_model.with_linear_weights([2.0, 0.5], -1.0)
        assert weighted.is_weighted
        assert weighted.weights == (2.0, 0.5)
        assert weighted.offset == -1.0
        assert not pluto_venus_model.is_weighted

    def test_weight_count_mismatch(self, pluto_venus_model):
        """Test that one weight per algorithm is required."""
        with pytest.raises(ValueError, match="weights"):
            pluto_venus_model.with_linear_weights([1.0])

    def test_calibration_lookup(self, pluto_venus_model):
        """Test lookup by algorithm name."""
        assert pluto_venus_model.calibration("Venus_Corporation").position == 50.0
        with pytest.raises(KeyError):
            pluto_venus_model.calibration("Mars")

    def test_as_dict(self, pluto_venus_model):
        """Test mapping export."""
        assert pluto_venus_model.as_dict() == {
            "Pluto_University": (3.0, 0.2),
            "Venus_Corporation": (50.0, 2.0),
        }


class TestCandidates:
    """Tests for candidate list helpers."""

    def test_from_pairs(self):
        """Test building candidates from (identity, score) pairs."""
        candidates = as_candidate_list([("a", 3), ("b", 2.5)])
        assert candidates == [Candidate("a", 3.0), Candidate("b", 2.5)]

    def test_malformed_entry(self):
        """Test that malformed entries are rejected."""
        with pytest.raises(ParseError):
            as_candidate_list([("a", "high")])

    def test_repeated_identity(self):
        """Test that identities must be unique within a list."""
        with pytest.raises(ParseError, match="more than once"):
            as_candidate_list([("a", 3.0), ("a", 1.0)])

    def test_is_ranked(self):
        """Test ranking check with ties."""
        assert is_ranked([Candidate(1, 3.0), Candidate(2, 3.0), Candidate(3, 1.0)])
        assert not is_ranked([Candidate(1, 1.0), Candidate(2, 3.0)])
        assert is_ranked([])


class TestTemplates:
    """Tests for template validation helpers."""

    def test_as_template(self):
        """Test conversion to a float vector."""
        t = as_template([1, 2, 3])
        assert t.dtype == float
        assert t.shape == (3,)

    def test_empty_template(self):
        """Test that an empty template marks failed extraction."""
        with pytest.raises(VerifTemplateError):
            as_template([])

    def test_not_one_dimensional(self):
        """Test that matrices are not templates."""
        with pytest.raises(TemplateFormatError):
            as_template([[1.0, 2.0], [3.0, 4.0]])

    def test_not_numeric(self):
        """Test that text is not a template."""
        with pytest.raises(TemplateFormatError):
            as_template(["a", "b"])

    def test_check_congruent(self):
        """Test length comparison."""
        check_congruent(np.zeros(3), np.ones(3))
        with pytest.raises(NonCongruentVectors):
            check_congruent(np.zeros(3), np.ones(4))
