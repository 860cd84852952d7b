"""
Gallery storage and 1:N search for pybiofusion.

A Gallery is built once from N enrolled templates and N identity labels and
is read-only afterwards: its template matrix is flagged non-writeable, so
any number of threads may search it at the same time. The search engine
scores a probe against every entry in one vectorized pass (O(N * D)) and
returns the best candidates in descending score order, ties broken by
gallery insertion order.
"""

import logging
from typing import Dict, Hashable, Sequence, Tuple

import numpy as np

from ..core import (
    Candidate,
    CandidateList,
    NonCongruentVectors,
    NumDataError,
    ParseError,
    as_template,
)
from .comparators import Comparator, L1Comparator

logger = logging.getLogger(__name__)

DUPLICATE_POLICIES = ("reject", "last")


class Gallery:
    """
    Immutable set of enrolled (identity, template) pairs.

    Parameters
    ----------
    templates : sequence of array_like
        N fused templates, all of the same dimensionality
    ids : sequence of hashable
        N identity labels; ``ids[i]`` corresponds to ``templates[i]``
    duplicate_ids : {'reject', 'last'}, optional
        What to do when an identity occurs more than once. 'reject'
        (default) raises ParseError; 'last' keeps the last template given
        for the identity at the position of its first occurrence.

    Raises
    ------
    NonCongruentVectors
        If ``templates`` and ``ids`` differ in length, or templates differ
        in dimensionality
    NumDataError
        If no templates are given
    ParseError
        If an identity is duplicated under the 'reject' policy

    Examples
    --------
    >>> gallery = Gallery([[0.0, 1.0], [2.0, 3.0]], [101, 102])
    >>> len(gallery), gallery.dim
    (2, 2)
    """

    def __init__(
        self,
        templates: Sequence,
        ids: Sequence[Hashable],
        duplicate_ids: str = "reject"
    ):
        if duplicate_ids not in DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicate_ids must be one of {DUPLICATE_POLICIES}, got {duplicate_ids!r}"
            )
        if len(templates) != len(ids):
            raise NonCongruentVectors(
                f"{len(templates)} templates but {len(ids)} identities"
            )
        if len(templates) == 0:
            raise NumDataError("A gallery needs at least one template")

        rows: Dict[Hashable, np.ndarray] = {}
        dim = None
        for identity, template in zip(ids, templates):
            template = as_template(template)
            if dim is None:
                dim = template.shape[0]
            elif template.shape[0] != dim:
                raise NonCongruentVectors(
                    f"Template for {identity!r} has {template.shape[0]} features, "
                    f"expected {dim}"
                )
            if identity in rows and duplicate_ids == "reject":
                raise ParseError(f"Duplicate gallery identity {identity!r}")
            rows[identity] = template

        matrix = np.empty((len(rows), dim), dtype=float)
        for i, template in enumerate(rows.values()):
            matrix[i] = template
        matrix.setflags(write=False)

        self._ids: Tuple[Hashable, ...] = tuple(rows)
        self._matrix = matrix
        self.duplicate_ids = duplicate_ids

        if len(self._ids) != len(ids):
            logger.info(
                "Gallery merged %d duplicate identities (last write wins)",
                len(ids) - len(self._ids)
            )

    @property
    def ids(self) -> Tuple[Hashable, ...]:
        """Identity labels in insertion order."""
        return self._ids

    @property
    def matrix(self) -> np.ndarray:
        """Read-only (N, D) template matrix."""
        return self._matrix

    @property
    def dim(self) -> int:
        return self._matrix.shape[1]

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, identity) -> bool:
        return identity in self._ids

    def template(self, identity: Hashable) -> np.ndarray:
        """Look up the enrolled template of one identity."""
        try:
            index = self._ids.index(identity)
        except ValueError:
            raise KeyError(identity) from None
        return self._matrix[index]

    def __repr__(self) -> str:
        return f"Gallery({len(self)} identities, {self.dim} features)"


class GallerySearchEngine:
    """
    Ranked nearest-match search over a Gallery.

    Parameters
    ----------
    gallery : Gallery
        Gallery to search
    comparator : Comparator, optional
        Similarity used for ranking (default: L1 comparator)
    """

    def __init__(self, gallery: Gallery, comparator: Comparator = None):
        self.gallery = gallery
        self.comparator = comparator if comparator is not None else L1Comparator()

    def scores(self, probe: np.ndarray) -> np.ndarray:
        """Similarity of ``probe`` to every gallery entry, in gallery order."""
        probe = as_template(probe)
        if probe.shape[0] != self.gallery.dim:
            raise NonCongruentVectors(
                f"Probe has {probe.shape[0]} features, gallery has {self.gallery.dim}"
            )
        return self.comparator.similarities(self.gallery.matrix, probe)

    def search(self, probe, n_candidates: int) -> CandidateList:
        """
        Return the ``n_candidates`` most similar gallery entries.

        Parameters
        ----------
        probe : array_like
            Probe template
        n_candidates : int
            Requested list length L; ``min(L, N)`` candidates are returned

        Returns
        -------
        list of Candidate
            In non-increasing score order, ties in gallery insertion order
        """
        try:
            length = int(n_candidates)
        except (TypeError, ValueError, OverflowError):
            length = None
        if length is None or length != n_candidates or length < 0:
            raise NumDataError(
                f"Candidate list length must be a non-negative integer, got {n_candidates!r}"
            )
        scores = self.scores(probe)

        # Stable sort of negated scores keeps insertion order among ties.
        order = np.argsort(-scores, kind='stable')[:length]
        ids = self.gallery.ids
        return [Candidate(ids[i], float(scores[i])) for i in order]
