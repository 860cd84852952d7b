"""
Core data structures for pybiofusion.

This module contains the fundamental classes for representing:
- Return codes and status objects
- Candidates, candidate lists and templates
- Score calibration models

Classes:
    ReturnCode: Enumeration of operation outcomes
    ReturnStatus: Outcome of one fuser call
    FusionError: Base of the internal error hierarchy
    Candidate: (identity, score) hypothesis of a search
    AlgorithmCalibration: Position/scale of one algorithm's scores
    FusionModel: Calibration of all fused algorithms
"""

from .status import (
    ReturnCode,
    ReturnStatus,
    FusionError,
    ConfigError,
    ParseError,
    TemplateCreationError,
    VerifTemplateError,
    NumDataError,
    TemplateFormatError,
    InputLocationError,
    NonCongruentVectors,
    NotImplementedFusionError,
    VendorError,
    returns_status,
)
from .types import (
    Candidate,
    CandidateList,
    as_candidate_list,
    as_template,
    check_congruent,
    is_ranked,
)
from .model import AlgorithmCalibration, FusionModel

__all__ = [
    "ReturnCode",
    "ReturnStatus",
    "FusionError",
    "ConfigError",
    "ParseError",
    "TemplateCreationError",
    "VerifTemplateError",
    "NumDataError",
    "TemplateFormatError",
    "InputLocationError",
    "NonCongruentVectors",
    "NotImplementedFusionError",
    "VendorError",
    "returns_status",
    "Candidate",
    "CandidateList",
    "as_candidate_list",
    "as_template",
    "check_congruent",
    "is_ranked",
    "AlgorithmCalibration",
    "FusionModel",
]
