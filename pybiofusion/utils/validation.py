"""
Validation functions for pybiofusion.

This module provides functions for validating input arrays and parameters
of the offline tools (calibration training, evaluation, model writers).
"""

import warnings
from typing import List, Optional, Sequence, Tuple

import numpy as np


def validate_scores(
    scores: np.ndarray,
    allow_nan: bool = False,
    allow_inf: bool = False
) -> None:
    """
    Validate score array.

    Parameters
    ----------
    scores : ndarray
        Array of scores to validate
    allow_nan : bool, optional
        Whether to allow NaN values (default: False)
    allow_inf : bool, optional
        Whether to allow infinite values (default: False)

    Raises
    ------
    TypeError
        If scores is not a numpy array
    ValueError
        If scores contain invalid values

    Examples
    --------
    >>> validate_scores(np.array([1.0, 2.0, 3.0]))  # No error
    >>> validate_scores(np.array([1.0, np.inf]))  # Raises ValueError
    """
    if not isinstance(scores, np.ndarray):
        raise TypeError(f"Scores must be numpy array, got {type(scores)}")

    if not allow_nan and np.any(np.isnan(scores)):
        raise ValueError("Scores contain NaN values")

    if not allow_inf and np.any(np.isinf(scores)):
        raise ValueError("Scores contain infinite values")


def validate_mask(
    mask: np.ndarray,
    expected_length: Optional[int] = None
) -> None:
    """
    Validate a boolean genuine/impostor mask.

    Parameters
    ----------
    mask : ndarray
        Boolean mask array
    expected_length : int, optional
        Expected number of elements (the length of the parallel score vector)

    Raises
    ------
    TypeError
        If mask is not a boolean numpy array
    ValueError
        If mask is not 1-D or has the wrong length

    Examples
    --------
    >>> validate_mask(np.array([True, False]), expected_length=2)  # No error
    >>> validate_mask(np.array([1, 0]))  # Raises TypeError (not boolean)
    """
    if not isinstance(mask, np.ndarray):
        raise TypeError(f"Mask must be numpy array, got {type(mask)}")

    if mask.dtype != bool:
        raise TypeError(f"Mask must be boolean array, got dtype {mask.dtype}")

    if mask.ndim != 1:
        raise ValueError(f"Mask must be 1-D, got shape {mask.shape}")

    if expected_length is not None and mask.shape[0] != expected_length:
        raise ValueError(
            f"Mask has {mask.shape[0]} entries, expected {expected_length}"
        )


def validate_probability(
    p: float,
    param_name: str = "probability"
) -> None:
    """
    Validate that a value is a valid probability in [0, 1].

    Raises
    ------
    TypeError
        If p is not a number
    ValueError
        If p is not in [0, 1]

    Examples
    --------
    >>> validate_probability(0.01, "fmr")  # No error
    >>> validate_probability(1.5, "fmr")  # Raises ValueError
    """
    try:
        p = float(p)
    except (TypeError, ValueError):
        raise TypeError(f"{param_name} must be a number, got {type(p)}")

    if not 0 <= p <= 1:
        raise ValueError(f"{param_name} must be in [0, 1], got {p}")


def validate_algorithm_names(names: Sequence[str]) -> List[str]:
    """
    Validate a list of algorithm names.

    Raises
    ------
    TypeError
        If a name is not a string
    ValueError
        If a name is empty, contains whitespace, or is duplicated
    """
    names = list(names)
    if not all(isinstance(name, str) for name in names):
        raise TypeError("All algorithm names must be strings")
    for name in names:
        if not name or any(ch.isspace() for ch in name):
            raise ValueError(
                f"Algorithm names must be non-empty and free of whitespace, got {name!r}"
            )
    if len(names) != len(set(names)):
        dups = [name for name in set(names) if names.count(name) > 1]
        raise ValueError(f"Duplicate algorithm names: {dups}")
    return names


def check_sufficient_trials(
    n_genuine: int,
    n_impostor: int,
    min_trials: int = 30,
    warn: bool = True
) -> Tuple[bool, bool]:
    """
    Check if there are sufficient trials for reliable evaluation.

    Based on Doddington's Rule of 30: need at least 30 errors of each type
    for reliable error rate estimation.

    Parameters
    ----------
    n_genuine : int
        Number of genuine (mated) comparisons
    n_impostor : int
        Number of impostor (non-mated) comparisons
    min_trials : int, optional
        Minimum number of trials recommended (default: 30)
    warn : bool, optional
        Whether to emit warnings (default: True)

    Returns
    -------
    sufficient_genuine : bool
    sufficient_impostor : bool

    Examples
    --------
    >>> check_sufficient_trials(100, 1000, min_trials=30)
    (True, True)
    """
    sufficient_genuine = n_genuine >= min_trials
    sufficient_impostor = n_impostor >= min_trials

    if warn:
        if not sufficient_genuine:
            warnings.warn(
                f"Only {n_genuine} genuine trials (recommended: >= {min_trials})"
            )
        if not sufficient_impostor:
            warnings.warn(
                f"Only {n_impostor} impostor trials (recommended: >= {min_trials})"
            )

    return sufficient_genuine, sufficient_impostor
