"""
Unit tests for model directory and HDF5 I/O.
"""

import pytest
import numpy as np

from pybiofusion.core import ConfigError, ParseError
from pybiofusion.io import (
    TemplateScheme,
    read_score_model,
    read_linear_weights,
    read_candidate_fusion_config,
    read_template_scheme,
    read_comparator_name,
    write_score_model,
    write_candidate_fusion_config,
    write_template_model,
)


class TestReadScoreModel:
    """Tests for reading z-norm tables."""

    def test_read(self, score_model_dir):
        """Test reading a valid table."""
        model = read_score_model(score_model_dir)
        assert model.algorithms == ("Pluto_University", "Venus_Corporation")
        np.testing.assert_array_equal(model.positions, [3.0, 50.0])
        np.testing.assert_array_equal(model.scales, [0.2, 2.0])
        assert not model.is_weighted

    def test_comments_and_blank_lines(self, tmp_path):
        """Test that comments and blank lines are ignored."""
        (tmp_path / "z_norm.txt").write_text(
            "# trained on cohort A\n"
            "Algorithm position scale\n"
            "\n"
            "a 1.0 2.0  # first\n"
        )
        model = read_score_model(tmp_path)
        assert model.k == 1

    def test_missing_directory(self, tmp_path):
        """Test ConfigError when the directory does not exist."""
        with pytest.raises(ConfigError, match="not found"):
            read_score_model(tmp_path / "nowhere")

    def test_missing_file(self, tmp_path):
        """Test ConfigError when the table is absent."""
        with pytest.raises(ConfigError, match="Missing"):
            read_score_model(tmp_path)

    def test_bad_header(self, tmp_path):
        """Test ParseError on a wrong header."""
        (tmp_path / "z_norm.txt").write_text("Algorithm mean sd\na 1.0 2.0\n")
        with pytest.raises(ParseError, match="header"):
            read_score_model(tmp_path)

    def test_no_rows(self, tmp_path):
        """Test ParseError on a table without algorithms."""
        (tmp_path / "z_norm.txt").write_text("Algorithm position scale\n")
        with pytest.raises(ParseError, match="no algorithms"):
            read_score_model(tmp_path)

    @pytest.mark.parametrize("row", [
        "a 1.0",
        "a one 2.0",
        "a 1.0 0.0",
        "a 1.0 nan",
    ])
    def test_malformed_row(self, tmp_path, row):
        """Test ParseError on malformed rows."""
        (tmp_path / "z_norm.txt").write_text(f"Algorithm position scale\n{row}\n")
        with pytest.raises(ParseError):
            read_score_model(tmp_path)

    def test_duplicate_algorithm(self, tmp_path):
        """Test ParseError on a repeated algorithm."""
        (tmp_path / "z_norm.txt").write_text(
            "Algorithm position scale\na 1.0 2.0\na 3.0 4.0\n"
        )
        with pytest.raises(ParseError, match="Duplicate"):
            read_score_model(tmp_path)

    def test_linear_weights_attached(self, score_model_dir):
        """Test that a linear fusion file adds weights."""
        (score_model_dir / "linear_fusion.txt").write_text(
            "Venus_Corporation 0.5\nPluto_University 2.0\noffset -1.5\n"
        )
        model = read_score_model(score_model_dir)
        assert model.is_weighted
        assert model.weights == (2.0, 0.5)
        assert model.offset == -1.5


class TestReadLinearWeights:
    """Tests for reading linear fusion weights."""

    def test_absent(self, score_model_dir):
        """Test that a missing file means no weights."""
        assert read_linear_weights(score_model_dir, ["Pluto_University"]) is None

    def test_unknown_algorithm(self, score_model_dir):
        """Test ParseError on a weight for an unknown algorithm."""
        (score_model_dir / "linear_fusion.txt").write_text("Mars 1.0\n")
        with pytest.raises(ParseError, match="unknown"):
            read_linear_weights(score_model_dir, ["Pluto_University"])

    def test_missing_weight(self, score_model_dir):
        """Test ParseError when an algorithm has no weight."""
        (score_model_dir / "linear_fusion.txt").write_text("Pluto_University 1.0\n")
        with pytest.raises(ParseError, match="no weight"):
            read_linear_weights(
                score_model_dir, ["Pluto_University", "Venus_Corporation"]
            )


class TestWriteScoreModel:
    """Tests for writing score models."""

    def test_write_read(self, tmp_path, pluto_venus_model):
        """Test that a written model reads back identically."""
        write_score_model(pluto_venus_model, tmp_path / "out")
        assert read_score_model(tmp_path / "out") == pluto_venus_model

    def test_write_weighted(self, tmp_path, pluto_venus_model):
        """Test that weights and offset are written and read back."""
        model = pluto_venus_model.with_linear_weights([1.25, 0.75], 0.1)
        write_score_model(model, tmp_path)
        assert (tmp_path / "linear_fusion.txt").exists()
        loaded = read_score_model(tmp_path)
        assert loaded.weights == (1.25, 0.75)
        assert loaded.offset == 0.1

    def test_unweighted_removes_stale_weights(self, tmp_path, pluto_venus_model):
        """Test that rewriting an unweighted model drops old weights."""
        write_score_model(pluto_venus_model.with_linear_weights([1.0, 2.0]), tmp_path)
        write_score_model(pluto_venus_model, tmp_path)
        assert not (tmp_path / "linear_fusion.txt").exists()
        assert not read_score_model(tmp_path).is_weighted

    def test_rejects_other_objects(self, tmp_path):
        """Test TypeError for a non-model."""
        with pytest.raises(TypeError):
            write_score_model({"a": (0.0, 1.0)}, tmp_path)


class TestCandidateFusionConfig:
    """Tests for candidate-list fusion settings."""

    def test_defaults(self, tmp_path):
        """Test defaults when the file is absent."""
        config = read_candidate_fusion_config(tmp_path)
        assert config == {"combiner": "product", "missing_score": None}

    def test_write_read(self, tmp_path):
        """Test written settings read back."""
        write_candidate_fusion_config(tmp_path, "sum", 0.5)
        config = read_candidate_fusion_config(tmp_path)
        assert config == {"combiner": "sum", "missing_score": 0.5}

    def test_unknown_setting(self, tmp_path):
        """Test ParseError on an unknown key."""
        (tmp_path / "candidate_fusion.txt").write_text("weighting rank\n")
        with pytest.raises(ParseError, match="unknown setting"):
            read_candidate_fusion_config(tmp_path)

    def test_missing_directory(self, tmp_path):
        """Test ConfigError when the directory does not exist."""
        with pytest.raises(ConfigError):
            read_candidate_fusion_config(tmp_path / "nowhere")


class TestTemplateScheme:
    """Tests for template fusion schemes."""

    def test_count_only(self, template_model_dir):
        """Test a scheme giving only K."""
        scheme = read_template_scheme(template_model_dir)
        assert scheme == TemplateScheme(2)
        assert scheme.fused_dim is None

    def test_write_read_layout(self, tmp_path):
        """Test a scheme with per-algorithm layout."""
        write_template_model(
            tmp_path, 2, algorithms=["a", "b"], dims=[3, 4], weights=[1.0, 0.5],
            comparator="l2"
        )
        scheme = read_template_scheme(tmp_path)
        assert scheme.k == 2
        assert scheme.algorithms == ("a", "b")
        assert scheme.dims == (3, 4)
        assert scheme.weights == (1.0, 0.5)
        assert scheme.fused_dim == 7
        assert read_comparator_name(tmp_path) == "l2"

    @pytest.mark.parametrize("content", ["0\n", "two\n", "2 3\n", "2\na 3\n"])
    def test_malformed(self, tmp_path, content):
        """Test ParseError on malformed schemes."""
        (tmp_path / "t_concatenator.txt").write_text(content)
        with pytest.raises(ParseError):
            read_template_scheme(tmp_path)

    def test_missing_file(self, tmp_path):
        """Test ConfigError when the scheme is absent."""
        with pytest.raises(ConfigError):
            read_template_scheme(tmp_path)

    def test_comparator_default(self, tmp_path):
        """Test that L1 is used when no comparator is named."""
        assert read_comparator_name(tmp_path) == "l1"

    def test_write_invalid(self, tmp_path):
        """Test writer argument checks."""
        with pytest.raises(ValueError):
            write_template_model(tmp_path, 0)
        with pytest.raises(ValueError, match="together"):
            write_template_model(tmp_path, 2, algorithms=["a", "b"])


class TestHDF5:
    """Tests for HDF5 model files."""

    def test_save_load(self, tmp_path, pluto_venus_model):
        """Test that an HDF5 model loads back identically."""
        pytest.importorskip("h5py")
        from pybiofusion.io import save_model_hdf5, load_model_hdf5

        filename = tmp_path / "fusion_model.h5"
        save_model_hdf5(pluto_venus_model, filename)
        assert load_model_hdf5(filename) == pluto_venus_model

    def test_save_load_weighted(self, tmp_path, pluto_venus_model):
        """Test that weights survive the round trip."""
        pytest.importorskip("h5py")
        from pybiofusion.io import save_model_hdf5, load_model_hdf5

        model = pluto_venus_model.with_linear_weights([1.5, 0.5], -0.25)
        filename = tmp_path / "fusion_model.h5"
        save_model_hdf5(model, filename, compression=None)
        loaded = load_model_hdf5(filename)
        assert loaded.weights == (1.5, 0.5)
        assert loaded.offset == -0.25

    def test_load_missing(self, tmp_path):
        """Test ConfigError for an unreadable file."""
        pytest.importorskip("h5py")
        from pybiofusion.io import load_model_hdf5

        with pytest.raises(ConfigError):
            load_model_hdf5(tmp_path / "absent.h5")

    def test_load_incomplete(self, tmp_path):
        """Test ParseError for a file without model datasets."""
        h5py = pytest.importorskip("h5py")
        from pybiofusion.io import load_model_hdf5

        filename = tmp_path / "other.h5"
        with h5py.File(filename, "w") as f:
            f.create_dataset("positions", data=np.zeros(2))
        with pytest.warns(UserWarning, match="type marker"):
            with pytest.raises(ParseError, match="missing"):
                load_model_hdf5(filename)
