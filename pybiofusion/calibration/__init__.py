"""
Offline calibration training for pybiofusion.

Functions:
    train_cohort_znorm: Z-norm calibration from impostor scores of a cohort
    impostor_mask: Non-mated comparisons from identity pairs
    train_linear_fusion: Logistic-regression fusion weights
    fit_linear_model: Attach trained weights to a z-norm model
"""

from .cohort import impostor_mask, train_cohort_znorm
from .linear import fit_linear_model, train_linear_fusion

__all__ = [
    "impostor_mask",
    "train_cohort_znorm",
    "train_linear_fusion",
    "fit_linear_model",
]
