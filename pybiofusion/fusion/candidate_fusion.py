"""
Candidate list fusion for pybiofusion.

K ranked candidate lists, one per identification algorithm, are fused by an
outer join on identity: every identity appearing on any list gets one
score per list, an explicit missing score standing in where the identity
is absent. The per-list scores are then reduced by a combiner and the
result sorted by descending combined score.

With K lists of length L the output holds between L (identical identity
sets) and K * L (pairwise disjoint sets) candidates.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

import numpy as np

from ..core import (
    Candidate,
    CandidateList,
    NonCongruentVectors,
    NumDataError,
    ParseError,
    as_candidate_list,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Combiner:
    """
    Reduction of per-list scores into one fused score.

    Attributes
    ----------
    name : str
        Registry name
    reduce : callable
        Maps an (n_identities, K) score array to n_identities fused scores
    neutral : float
        Missing score that leaves the reduction of the other lists
        unchanged; the default missing-score policy. The mean skips NaN,
        so its neutral value is NaN and an identity is averaged over the
        lists it appears on.
    """

    name: str
    reduce: Callable[[np.ndarray], np.ndarray]
    neutral: float


COMBINERS: Dict[str, Combiner] = {
    "product": Combiner("product", lambda s: np.prod(s, axis=1), 1.0),
    "sum": Combiner("sum", lambda s: np.sum(s, axis=1), 0.0),
    "max": Combiner("max", lambda s: np.max(s, axis=1), -np.inf),
    "mean": Combiner("mean", lambda s: np.nanmean(s, axis=1), np.nan),
}


def get_combiner(name: str) -> Combiner:
    """
    Look up a combiner by name.

    Raises
    ------
    KeyError
        If no combiner is registered under ``name``
    """
    try:
        return COMBINERS[name]
    except KeyError:
        raise KeyError(
            f"Unknown combiner {name!r}; available: {sorted(COMBINERS)}"
        ) from None


class CandidateListFuser:
    """
    Outer-join fusion of ranked candidate lists.

    Parameters
    ----------
    combiner : str or Combiner, optional
        How per-list scores are combined (default: 'product')
    missing_score : float, optional
        Score assigned to an identity absent from a list. Defaults to the
        combiner's neutral value (1 for product, 0 for sum, -inf for max,
        NaN for mean). This choice changes the ranking and is part of the
        scheme.

    Examples
    --------
    >>> fuser = CandidateListFuser()
    >>> a = [Candidate(1, 3.0), Candidate(2, 2.0)]
    >>> b = [Candidate(2, 4.0), Candidate(3, 1.5)]
    >>> [c.as_tuple() for c in fuser.fuse([a, b])]
    [(2, 8.0), (1, 3.0), (3, 1.5)]
    """

    def __init__(self, combiner="product", missing_score: Optional[float] = None):
        if isinstance(combiner, str):
            combiner = get_combiner(combiner)
        self.combiner = combiner
        self.missing_score = (
            combiner.neutral if missing_score is None else float(missing_score)
        )

    def join(self, lists: Sequence[CandidateList]):
        """
        Outer join K lists on identity.

        Returns
        -------
        identities : list
            Union of identities in order of first appearance (list 0 first)
        table : ndarray
            (n_identities, K) scores, ``missing_score`` where absent
        """
        rows: Dict[object, int] = {}
        for candidates in lists:
            for candidate in candidates:
                rows.setdefault(candidate.identity, len(rows))

        table = np.full((len(rows), len(lists)), self.missing_score, dtype=float)
        for k, candidates in enumerate(lists):
            for candidate in candidates:
                table[rows[candidate.identity], k] = candidate.score
        return list(rows), table

    def fuse(self, lists: Sequence) -> CandidateList:
        """
        Fuse K >= 2 candidate lists of equal length.

        Parameters
        ----------
        lists : sequence of candidate lists
            Each list holds Candidate objects or (identity, score) pairs with
            identities unique within the list

        Returns
        -------
        list of Candidate
            Fused candidates in non-increasing score order; ties keep
            the order of first appearance

        Raises
        ------
        NumDataError
            If fewer than two lists are given
        NonCongruentVectors
            If the lists differ in length
        ParseError
            If the input is not a sequence of lists, a list repeats an
            identity or holds malformed entries
        """
        if isinstance(lists, (str, bytes)) or not hasattr(lists, "__len__"):
            raise ParseError(
                f"Expected a sequence of candidate lists, got {type(lists).__name__}"
            )
        if len(lists) < 2:
            raise NumDataError(f"Need at least 2 candidate lists, got {len(lists)}")
        lists = [as_candidate_list(candidates) for candidates in lists]
        lengths = {len(candidates) for candidates in lists}
        if len(lengths) > 1:
            raise NonCongruentVectors(
                f"Candidate lists differ in length: {sorted(lengths)}"
            )

        identities, table = self.join(lists)
        if not identities:
            return []
        fused = self.combiner.reduce(table)

        order = np.argsort(-fused, kind='stable')
        logger.debug(
            "Fused %d lists of length %d into %d candidates",
            len(lists), lengths.pop(), len(identities)
        )
        return [Candidate(identities[i], float(fused[i])) for i in order]

    def __repr__(self) -> str:
        return (
            f"CandidateListFuser(combiner={self.combiner.name!r}, "
            f"missing_score={self.missing_score})"
        )
