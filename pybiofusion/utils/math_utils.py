"""
Mathematical utility functions for pybiofusion.

Log-odds transformations used when training linear fusion weights.
"""

from typing import Union

import numpy as np
from scipy.special import expit

# Type alias for array-like inputs
ArrayLike = Union[float, np.ndarray]


def logit(p: ArrayLike) -> ArrayLike:
    """
    Compute log-odds: log(p / (1 - p)).

    Examples
    --------
    >>> logit(0.5)
    0.0

    Notes
    -----
    logit(0) = -inf and logit(1) = inf.
    """
    p = np.asarray(p, dtype=float)
    with np.errstate(divide='ignore'):
        return np.log(p) - np.log1p(-p)


def sigmoid(x: ArrayLike) -> ArrayLike:
    """
    Compute the logistic sigmoid 1 / (1 + exp(-x)), the inverse of logit.

    Examples
    --------
    >>> sigmoid(0.0)
    0.5
    """
    return expit(x)


def neg_log_sigmoid(x: ArrayLike) -> ArrayLike:
    """
    Compute -log(sigmoid(x)) = log(1 + exp(-x)) without overflow.

    Examples
    --------
    >>> neg_log_sigmoid(0.0)
    0.693...
    """
    return np.logaddexp(0.0, -np.asarray(x, dtype=float))
