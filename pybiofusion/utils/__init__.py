"""
Utility functions for pybiofusion.

Functions:
    validate_scores: Check a score array for NaN/inf values
    validate_mask: Check a genuine/impostor mask
    validate_probability: Check a value lies in [0, 1]
    validate_algorithm_names: Check algorithm names are usable
    check_sufficient_trials: Doddington's Rule of 30
    logit, sigmoid, neg_log_sigmoid: Log-odds helpers used by fusion training
"""

from .math_utils import logit, sigmoid, neg_log_sigmoid
from .validation import (
    validate_scores,
    validate_mask,
    validate_probability,
    validate_algorithm_names,
    check_sufficient_trials,
)

__all__ = [
    "logit",
    "sigmoid",
    "neg_log_sigmoid",
    "validate_scores",
    "validate_mask",
    "validate_probability",
    "validate_algorithm_names",
    "check_sufficient_trials",
]
