"""
Input/Output functions for pybiofusion.

This module reads and writes the contents of model directories.

Formats Supported:
    Text tables: z-norm calibration, linear weights, candidate-list and
        template fusion settings
    HDF5: Binary copy of a FusionModel - requires h5py

Functions:
    read_score_model / write_score_model: Score calibration table
    read_linear_weights: Optional linear fusion weights
    read_candidate_fusion_config / write_candidate_fusion_config
    read_template_scheme / write_template_model: Template fusion scheme
    read_comparator_name: Comparator used by verify and search
    check_model_directory: Resolve and check a model directory path
    save_model_hdf5 / load_model_hdf5: HDF5 FusionModel (requires h5py)
"""

from .model_io import (
    TemplateScheme,
    read_score_model,
    read_linear_weights,
    read_candidate_fusion_config,
    read_template_scheme,
    read_comparator_name,
    check_model_directory,
    write_score_model,
    write_candidate_fusion_config,
    write_template_model,
)
from .hdf5_io import (
    save_model_hdf5,
    load_model_hdf5,
    HAS_H5PY
)

__all__ = [
    "TemplateScheme",
    "read_score_model",
    "read_linear_weights",
    "read_candidate_fusion_config",
    "read_template_scheme",
    "read_comparator_name",
    "check_model_directory",
    "write_score_model",
    "write_candidate_fusion_config",
    "write_template_model",
    "save_model_hdf5",
    "load_model_hdf5",
    "HAS_H5PY",
]
