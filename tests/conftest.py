"""
Shared fixtures: small model directories written to tmp_path.
"""

import pytest

from pybiofusion.core import AlgorithmCalibration, FusionModel


@pytest.fixture
def pluto_venus_model():
    """Two-algorithm calibration used throughout the score fusion tests."""
    return FusionModel([
        AlgorithmCalibration("Pluto_University", 3.0, 0.2),
        AlgorithmCalibration("Venus_Corporation", 50.0, 2.0),
    ])


@pytest.fixture
def score_model_dir(tmp_path):
    """Model directory holding a z-norm table for two algorithms."""
    directory = tmp_path / "pluto_venus"
    directory.mkdir()
    (directory / "z_norm.txt").write_text(
        "Algorithm position scale\n"
        "Pluto_University 3.0 0.2\n"
        "Venus_Corporation 50.0 2.0\n"
    )
    return directory


@pytest.fixture
def template_model_dir(tmp_path):
    """Model directory fusing two templates with the L1 comparator."""
    directory = tmp_path / "template_level"
    directory.mkdir()
    (directory / "t_concatenator.txt").write_text("2\n")
    (directory / "t_comparator.txt").write_text("l1\n")
    return directory
