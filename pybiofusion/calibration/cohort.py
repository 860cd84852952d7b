"""
Cohort z-norm calibration for pybiofusion.

The calibration of each algorithm is the mean and standard deviation of its
impostor scores on a training cohort. Scores normalized with it are
comparable across algorithms and can be summed.
"""

import logging
import warnings
from typing import Hashable, Sequence

import numpy as np

from ..core import AlgorithmCalibration, FusionModel
from ..utils.validation import validate_algorithm_names, validate_scores

logger = logging.getLogger(__name__)


def impostor_mask(ids1: Sequence[Hashable], ids2: Sequence[Hashable]) -> np.ndarray:
    """
    Boolean mask of impostor comparisons.

    A comparison is an impostor (non-mated) comparison when the two
    subject identities differ.

    Examples
    --------
    >>> impostor_mask([1, 2, 3], [1, 5, 3])
    array([False,  True, False])
    """
    ids1 = np.asarray(ids1)
    ids2 = np.asarray(ids2)
    if ids1.shape != ids2.shape or ids1.ndim != 1:
        raise ValueError(
            f"ids1 and ids2 must be 1-D of equal length, got {ids1.shape} and {ids2.shape}"
        )
    return ids1 != ids2


def train_cohort_znorm(
    scores: np.ndarray,
    ids1: Sequence[Hashable],
    ids2: Sequence[Hashable],
    algorithms: Sequence[str],
    min_impostors: int = 30
) -> FusionModel:
    """
    Estimate z-norm calibration from a training cohort.

    Parameters
    ----------
    scores : ndarray
        Score matrix of shape (K, N): row k holds algorithm k's scores for
        the N training comparisons
    ids1, ids2 : sequence
        Subject identities of the two samples in each comparison, length N
    algorithms : sequence of str
        Algorithm names, length K, in the order scores will be fused
    min_impostors : int, optional
        Warn when fewer impostor comparisons are available (default: 30)

    Returns
    -------
    FusionModel
        position = mean and scale = sample standard deviation of each
        algorithm's impostor scores

    Raises
    ------
    ValueError
        If shapes disagree, scores are not finite, there are fewer than two
        impostor comparisons, or an algorithm's impostor scores are constant

    Examples
    --------
    >>> scores = np.array([[3.1, 2.9, 3.6], [49.0, 51.0, 57.5]])
    >>> model = train_cohort_znorm(scores, [1, 2, 3], [4, 5, 3], ["pluto", "venus"])
    >>> model.calibration("pluto").position
    3.0
    """
    scores = np.asarray(scores, dtype=float)
    if scores.ndim == 1:
        scores = scores.reshape(1, -1)
    if scores.ndim != 2:
        raise ValueError(f"scores must be 2-D (K x N), got shape {scores.shape}")
    validate_scores(scores)

    names = validate_algorithm_names(algorithms)
    if len(names) != scores.shape[0]:
        raise ValueError(
            f"Got {len(names)} algorithm names for {scores.shape[0]} score rows"
        )

    mask = impostor_mask(ids1, ids2)
    if mask.shape[0] != scores.shape[1]:
        raise ValueError(
            f"Got {mask.shape[0]} identity pairs for {scores.shape[1]} comparisons"
        )

    n_impostor = int(np.sum(mask))
    if n_impostor < 2:
        raise ValueError(
            f"Need at least 2 impostor comparisons, got {n_impostor}"
        )
    if n_impostor < min_impostors:
        warnings.warn(
            f"Only {n_impostor} impostor comparisons (recommended: >= {min_impostors})"
        )

    impostor = scores[:, mask]
    positions = impostor.mean(axis=1)
    scales = impostor.std(axis=1, ddof=1)

    calibrations = []
    for name, position, scale in zip(names, positions, scales):
        if scale <= 0:
            raise ValueError(f"Impostor scores of {name} are constant")
        calibrations.append(AlgorithmCalibration(name, position, scale))

    logger.info(
        "Trained z-norm calibration for %d algorithms on %d impostor comparisons",
        len(names), n_impostor
    )
    return FusionModel(calibrations)
