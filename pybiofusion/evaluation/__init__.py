"""
Accuracy evaluation for pybiofusion.

Functions:
    compute_det: DET operating points at requested false match rates
    fmr_threshold: Threshold giving a requested false match rate
    error_rates: FMR and FNMR at a threshold
    format_det_table: Text rendering of DET points
"""

from .det import DetPoint, compute_det, error_rates, fmr_threshold, format_det_table

__all__ = [
    "DetPoint",
    "compute_det",
    "error_rates",
    "fmr_threshold",
    "format_det_table",
]
