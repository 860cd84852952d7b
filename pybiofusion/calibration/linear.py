"""
Linear score fusion training for pybiofusion.

Linear fusion replaces the equal-weight sum of z-scores with a weighted
sum plus offset, trained by logistic regression on genuine and impostor
comparisons. The weights act on z-normalized scores, so they are stored
alongside the z-norm calibration and applied by the same fuser.
"""

import logging
import warnings

import numpy as np
from scipy.optimize import minimize

from ..core import FusionModel
from ..utils import logit, neg_log_sigmoid
from ..utils.validation import check_sufficient_trials, validate_mask, validate_scores

logger = logging.getLogger(__name__)


def train_linear_fusion(
    tar_scores: np.ndarray,
    non_scores: np.ndarray,
    prior: float = 0.5,
    max_iter: int = 100
) -> np.ndarray:
    """
    Train linear fusion weights from genuine and impostor score matrices.

    The fusion computes:
        fused_score = w[0] * z_1 + w[1] * z_2 + ... + w[K-1] * z_K + w[K]

    where w[K] is the offset.

    Parameters
    ----------
    tar_scores : ndarray
        Genuine comparison scores, shape (K, n_genuine)
    non_scores : ndarray
        Impostor comparison scores, shape (K, n_impostor)
    prior : float, optional
        Genuine prior for optimization (default: 0.5)
    max_iter : int, optional
        Maximum optimization iterations (default: 100)

    Returns
    -------
    weights : ndarray
        Fusion weights of shape (K + 1,) where the last element is the offset

    Examples
    --------
    >>> tar = np.array([[2.0, 3.0], [1.5, 2.5]])
    >>> non = np.array([[-1.0, -2.0], [-0.5, -1.5]])
    >>> weights = train_linear_fusion(tar, non)
    >>> weights.shape
    (3,)

    Notes
    -----
    The loss is the prior-weighted logistic loss (Cllr-style), so the
    fused score is interpretable as a log-likelihood ratio on the training
    data.
    """
    tar_scores = np.asarray(tar_scores, dtype=float)
    non_scores = np.asarray(non_scores, dtype=float)

    if tar_scores.ndim != 2:
        raise ValueError("tar_scores must be 2D (K x n_genuine)")
    if non_scores.ndim != 2:
        raise ValueError("non_scores must be 2D (K x n_impostor)")
    if tar_scores.shape[0] != non_scores.shape[0]:
        raise ValueError(
            f"Number of algorithms must match: {tar_scores.shape[0]} vs {non_scores.shape[0]}"
        )
    if tar_scores.shape[1] == 0 or non_scores.shape[1] == 0:
        raise ValueError("Need at least one genuine and one impostor comparison")
    if not 0 < prior < 1:
        raise ValueError(f"prior must be in (0, 1), got {prior}")

    n_algorithms = tar_scores.shape[0]
    n_tar = tar_scores.shape[1]
    n_non = non_scores.shape[1]
    all_scores = np.hstack([tar_scores, non_scores])
    plo = logit(prior)

    def objective(w):
        fused = w[:-1] @ all_scores + w[-1]
        # Offset by the prior log-odds so the two classes weigh prior : 1 - prior
        loss_tar = np.mean(neg_log_sigmoid(fused[:n_tar] + plo))
        loss_non = np.mean(neg_log_sigmoid(-fused[n_tar:] - plo))
        return prior * loss_tar + (1 - prior) * loss_non

    w0 = np.ones(n_algorithms + 1) / n_algorithms
    w0[-1] = 0.0

    result = minimize(
        objective,
        w0,
        method='L-BFGS-B',
        options={'maxiter': max_iter, 'disp': False}
    )

    if not result.success:
        warnings.warn(
            f"Linear fusion optimization did not converge: {result.message}"
        )

    weights = result.x
    logger.debug("Linear fusion weights %s after %d iterations", weights, result.nit)
    return weights


def fit_linear_model(
    model: FusionModel,
    scores: np.ndarray,
    genuine: np.ndarray,
    prior: float = 0.5,
    max_iter: int = 100
) -> FusionModel:
    """
    Attach trained linear fusion weights to a z-norm model.

    Parameters
    ----------
    model : FusionModel
        Z-norm calibration of the K algorithms
    scores : ndarray
        Raw scores, shape (K, N)
    genuine : ndarray of bool
        True for genuine comparisons, length N
    prior : float, optional
        Genuine prior for training (default: 0.5)
    max_iter : int, optional
        Maximum optimization iterations (default: 100)

    Returns
    -------
    FusionModel
        Copy of ``model`` with weights and offset set

    Examples
    --------
    >>> model = train_cohort_znorm(scores, ids1, ids2, ["pluto", "venus"])
    >>> weighted = fit_linear_model(model, scores, ids1 == ids2)
    >>> weighted.is_weighted
    True
    """
    scores = np.asarray(scores, dtype=float)
    genuine = np.asarray(genuine)
    if scores.ndim != 2 or scores.shape[0] != model.k:
        raise ValueError(
            f"scores must have shape ({model.k}, N), got {scores.shape}"
        )
    validate_scores(scores)
    validate_mask(genuine, expected_length=scores.shape[1])
    check_sufficient_trials(int(np.sum(genuine)), int(np.sum(~genuine)))

    z = (scores - model.positions[:, None]) / model.scales[:, None]
    weights = train_linear_fusion(z[:, genuine], z[:, ~genuine], prior, max_iter)

    logger.info(
        "Trained linear fusion for %s: weights %s, offset %.4f",
        ", ".join(model.algorithms), np.round(weights[:-1], 4), weights[-1]
    )
    return model.with_linear_weights(weights[:-1], float(weights[-1]))
