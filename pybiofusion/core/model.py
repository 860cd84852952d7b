"""
FusionModel class for pybiofusion.

A FusionModel holds the per-algorithm score calibration (position and
scale) that a verification score fuser loads once at initialization, plus
optional linear fusion weights applied to the normalized scores.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class AlgorithmCalibration:
    """
    Calibration of one recognition algorithm's scores.

    Attributes
    ----------
    algorithm : str
        Algorithm name
    position : float
        Location of the reference score distribution (e.g. impostor mean)
    scale : float
        Spread of the reference score distribution (e.g. impostor stddev)
    """

    algorithm: str
    position: float
    scale: float

    def __post_init__(self):
        if not isinstance(self.algorithm, str) or not self.algorithm:
            raise ValueError("algorithm must be a non-empty string")
        if not np.isfinite(self.position):
            raise ValueError(
                f"position for {self.algorithm} must be finite, got {self.position}"
            )
        if not np.isfinite(self.scale) or self.scale <= 0:
            raise ValueError(
                f"scale for {self.algorithm} must be positive and finite, got {self.scale}"
            )
        object.__setattr__(self, "position", float(self.position))
        object.__setattr__(self, "scale", float(self.scale))

    def normalize(self, score: float) -> float:
        """Z-normalize a single score."""
        return (score - self.position) / self.scale


@dataclass(frozen=True)
class FusionModel:
    """
    Immutable calibration parameters for K fused algorithms.

    Parameters
    ----------
    calibrations : sequence of AlgorithmCalibration
        One entry per algorithm, in the order scores are supplied
    weights : sequence of float, optional
        Linear fusion weight per algorithm. If omitted every algorithm has
        weight 1 and the fused score is the sum of z-scores.
    offset : float, optional
        Constant added to the weighted sum (default: 0.0)

    Examples
    --------
    >>> model = FusionModel([
    ...     AlgorithmCalibration("pluto", 3.0, 0.2),
    ...     AlgorithmCalibration("venus", 50.0, 2.0),
    ... ])
    >>> model.k
    2
    >>> model.normalize([3.5, 51.0])
    array([2.5, 0.5])
    """

    calibrations: Tuple[AlgorithmCalibration, ...]
    weights: Optional[Tuple[float, ...]] = None
    offset: float = 0.0
    _positions: np.ndarray = field(init=False, repr=False, compare=False)
    _scales: np.ndarray = field(init=False, repr=False, compare=False)
    _weights: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        calibrations = tuple(self.calibrations)
        if len(calibrations) == 0:
            raise ValueError("FusionModel needs at least one algorithm")
        names = [c.algorithm for c in calibrations]
        if len(names) != len(set(names)):
            dups = sorted({name for name in names if names.count(name) > 1})
            raise ValueError(f"Duplicate algorithm names: {dups}")

        if self.weights is not None:
            weights = tuple(float(w) for w in self.weights)
            if len(weights) != len(calibrations):
                raise ValueError(
                    f"Got {len(weights)} weights for {len(calibrations)} algorithms"
                )
            if not all(np.isfinite(weights)):
                raise ValueError("Fusion weights must be finite")
            object.__setattr__(self, "weights", weights)
        if not np.isfinite(self.offset):
            raise ValueError(f"offset must be finite, got {self.offset}")

        object.__setattr__(self, "calibrations", calibrations)
        object.__setattr__(self, "offset", float(self.offset))

        positions = np.array([c.position for c in calibrations], dtype=float)
        scales = np.array([c.scale for c in calibrations], dtype=float)
        if self.weights is None:
            weights_arr = np.ones(len(calibrations))
        else:
            weights_arr = np.array(self.weights, dtype=float)
        for arr in (positions, scales, weights_arr):
            arr.setflags(write=False)
        object.__setattr__(self, "_positions", positions)
        object.__setattr__(self, "_scales", scales)
        object.__setattr__(self, "_weights", weights_arr)

    @property
    def k(self) -> int:
        """Number of algorithms the model was calibrated for."""
        return len(self.calibrations)

    @property
    def algorithms(self) -> Tuple[str, ...]:
        return tuple(c.algorithm for c in self.calibrations)

    @property
    def positions(self) -> np.ndarray:
        return self._positions

    @property
    def scales(self) -> np.ndarray:
        return self._scales

    @property
    def is_weighted(self) -> bool:
        """True if linear weights were supplied."""
        return self.weights is not None

    def linear_weights(self) -> np.ndarray:
        """Weights used by the fused sum (all ones when unweighted)."""
        return self._weights

    def calibration(self, algorithm: str) -> AlgorithmCalibration:
        """Look up the calibration of one algorithm by name."""
        for cal in self.calibrations:
            if cal.algorithm == algorithm:
                return cal
        raise KeyError(f"Unknown algorithm: {algorithm}")

    def as_dict(self) -> Dict[str, Tuple[float, float]]:
        """Mapping algorithm -> (position, scale)."""
        return {c.algorithm: (c.position, c.scale) for c in self.calibrations}

    def normalize(self, scores: Sequence[float]) -> np.ndarray:
        """
        Z-normalize one score per algorithm.

        Parameters
        ----------
        scores : sequence of float
            K scores in algorithm order

        Returns
        -------
        ndarray
            (score - position) / scale per algorithm
        """
        scores = np.asarray(scores, dtype=float)
        if scores.shape != self._positions.shape:
            raise ValueError(
                f"Expected {self.k} scores, got shape {scores.shape}"
            )
        return (scores - self._positions) / self._scales

    def with_linear_weights(
        self,
        weights: Sequence[float],
        offset: float = 0.0
    ) -> "FusionModel":
        """Return a copy of this model carrying linear fusion weights."""
        return FusionModel(self.calibrations, tuple(weights), offset)

    def __repr__(self) -> str:
        kind = "weighted" if self.is_weighted else "sum"
        return f"FusionModel({self.k} algorithms: {', '.join(self.algorithms)}; {kind})"
