"""
Template comparison and gallery search for pybiofusion.

Classes:
    Comparator: Base class of distance-based comparators
    L1Comparator: Manhattan distance (reference)
    L2Comparator: Euclidean distance
    Gallery: Immutable enrolled templates with identity labels
    GallerySearchEngine: Ranked 1:N search over a Gallery

Functions:
    distance_to_similarity: scale / (1 + distance)
    get_comparator: Look up a comparator by name
"""

from .comparators import (
    Comparator,
    L1Comparator,
    L2Comparator,
    COMPARATORS,
    distance_to_similarity,
    get_comparator,
)
from .gallery import Gallery, GallerySearchEngine, DUPLICATE_POLICIES

__all__ = [
    "Comparator",
    "L1Comparator",
    "L2Comparator",
    "COMPARATORS",
    "distance_to_similarity",
    "get_comparator",
    "Gallery",
    "GallerySearchEngine",
    "DUPLICATE_POLICIES",
]
