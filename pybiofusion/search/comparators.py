"""
Template comparators for pybiofusion.

A comparator turns the distance between two fused templates into a
non-negative similarity score, higher meaning more similar. The same
comparator is used for 1:1 verification and for 1:N gallery search.
"""

from abc import ABC, abstractmethod
from typing import Dict, Type

import numpy as np

from ..config import SIMILARITY_SCALE


def distance_to_similarity(distance, scale: float = SIMILARITY_SCALE):
    """
    Map a distance to a similarity: scale / (1 + distance).

    Strictly positive and monotonically decreasing, with
    ``distance_to_similarity(0) == scale``.
    """
    return scale / (1.0 + distance)


class Comparator(ABC):
    """Base class for distance-based template comparators."""

    name = ""

    @abstractmethod
    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        """Distance between two equal-length templates."""

    @abstractmethod
    def distances(self, gallery: np.ndarray, probe: np.ndarray) -> np.ndarray:
        """Distance from ``probe`` to every row of ``gallery``."""

    def similarity(self, a: np.ndarray, b: np.ndarray) -> float:
        return float(distance_to_similarity(self.distance(a, b)))

    def similarities(self, gallery: np.ndarray, probe: np.ndarray) -> np.ndarray:
        return distance_to_similarity(self.distances(gallery, probe))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class L1Comparator(Comparator):
    """Manhattan distance, the reference comparator."""

    name = "l1"

    def distance(self, a, b):
        return float(np.sum(np.abs(a - b)))

    def distances(self, gallery, probe):
        return np.sum(np.abs(gallery - probe), axis=1)


class L2Comparator(Comparator):
    """Euclidean distance."""

    name = "l2"

    def distance(self, a, b):
        diff = a - b
        return float(np.sqrt(np.dot(diff, diff)))

    def distances(self, gallery, probe):
        diff = gallery - probe
        return np.sqrt(np.einsum('ij,ij->i', diff, diff))


COMPARATORS: Dict[str, Type[Comparator]] = {
    L1Comparator.name: L1Comparator,
    L2Comparator.name: L2Comparator,
}


def get_comparator(name: str) -> Comparator:
    """
    Instantiate a comparator by name.

    Raises
    ------
    KeyError
        If no comparator is registered under ``name``
    """
    try:
        return COMPARATORS[name.lower()]()
    except KeyError:
        raise KeyError(
            f"Unknown comparator {name!r}; available: {sorted(COMPARATORS)}"
        ) from None
