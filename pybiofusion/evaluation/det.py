"""
Detection error tradeoff (DET) evaluation for pybiofusion.

Given raw similarity scores and a parallel genuine/impostor mask, the DET
operating points report the false non-match rate at thresholds chosen to
give requested false match rates.
"""

import warnings
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from ..config import DEFAULT_FMR_TARGETS
from ..utils.validation import (
    check_sufficient_trials,
    validate_mask,
    validate_probability,
    validate_scores,
)


class DetPoint(NamedTuple):
    """One DET operating point."""

    threshold: float
    fmr: float
    fnmr: float


def fmr_threshold(impostor_scores: np.ndarray, fmr: float) -> float:
    """
    Threshold t with P(impostor >= t) = fmr.

    Computed as the empirical ``fmr``-quantile from the top of the impostor
    distribution, ``-quantile(-impostor, fmr)``, with linear interpolation.
    Returns NaN when there are no impostor scores.
    """
    impostor_scores = np.asarray(impostor_scores, dtype=float)
    if impostor_scores.size == 0:
        return float("nan")
    return float(-np.quantile(-impostor_scores, fmr))


def error_rates(
    genuine_scores: np.ndarray,
    impostor_scores: np.ndarray,
    threshold: float
):
    """
    False match and false non-match rates at ``threshold``.

    FMR = count(impostor >= t) / count(impostor) and
    FNMR = count(genuine < t) / count(genuine). A rate whose denominator is
    zero, or any rate at a NaN threshold, is NaN.
    """
    n_gen = len(genuine_scores)
    n_imp = len(impostor_scores)
    if np.isnan(threshold):
        return float("nan"), float("nan")

    fmr = np.sum(impostor_scores >= threshold) / n_imp if n_imp else float("nan")
    fnmr = np.sum(genuine_scores < threshold) / n_gen if n_gen else float("nan")
    return float(fmr), float(fnmr)


def compute_det(
    scores: np.ndarray,
    genuine: np.ndarray,
    fmr_targets: Sequence[float] = DEFAULT_FMR_TARGETS
) -> List[DetPoint]:
    """
    Compute DET operating points at requested false match rates.

    Parameters
    ----------
    scores : array_like
        Similarity scores, higher = more similar
    genuine : array_like of bool
        True where the comparison is genuine (mated), False for impostor
    fmr_targets : sequence of float, optional
        Requested false match rates in [0, 1]
        (default: 0.001, 0.01, 0.1)

    Returns
    -------
    list of DetPoint
        (threshold, fmr, fnmr) per requested rate, in the requested order

    Raises
    ------
    ValueError
        If the inputs differ in length, scores are not finite, or a target
        is outside [0, 1]

    Examples
    --------
    >>> scores = np.array([0.9, 0.8, 0.3, 0.2, 0.1])
    >>> genuine = np.array([True, True, False, False, False])
    >>> compute_det(scores, genuine, [0.5])
    [DetPoint(threshold=0.2, fmr=0.666..., fnmr=0.0)]

    Notes
    -----
    With no impostor scores the threshold, FMR and FNMR are NaN; with no
    genuine scores FNMR is NaN. No division by zero is performed.
    """
    scores = np.asarray(scores, dtype=float).ravel()
    genuine = np.asarray(genuine)
    if genuine.dtype != bool:
        genuine = genuine.astype(bool)
    validate_scores(scores)
    validate_mask(genuine.ravel(), expected_length=scores.shape[0])
    genuine = genuine.ravel()
    for f in fmr_targets:
        validate_probability(f, "fmr target")

    genuine_scores = scores[genuine]
    impostor_scores = scores[~genuine]
    check_sufficient_trials(len(genuine_scores), len(impostor_scores))

    points = []
    for f in fmr_targets:
        if 0 < f * len(impostor_scores) < 1:
            warnings.warn(
                f"FMR {f} is below the resolution of {len(impostor_scores)} impostor scores"
            )
        threshold = fmr_threshold(impostor_scores, f)
        fmr, fnmr = error_rates(genuine_scores, impostor_scores, threshold)
        points.append(DetPoint(threshold, fmr, fnmr))
    return points


def format_det_table(
    points: Sequence[DetPoint],
    title: Optional[str] = None
) -> str:
    """
    Render DET points as a plain-text table.

    Examples
    --------
    >>> print(format_det_table([DetPoint(1.5, 0.01, 0.2)], title="fused"))
    fused
       threshold        fmr       fnmr
          1.5000   0.010000   0.200000
    """
    lines = []
    if title:
        lines.append(title)
    lines.append(f"{'threshold':>12} {'fmr':>10} {'fnmr':>10}")
    for p in points:
        lines.append(f"{p.threshold:12.4f} {p.fmr:10.6f} {p.fnmr:10.6f}")
    return "\n".join(lines)
