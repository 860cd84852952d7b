"""
Value types shared by the fusers.

Templates are 1-D float arrays, candidate lists are plain lists of
Candidate objects ordered by non-increasing score.
"""

from dataclasses import dataclass
from typing import Hashable, Iterable, List, Sequence, Tuple

import numpy as np

from .status import (
    NonCongruentVectors,
    ParseError,
    TemplateFormatError,
    VerifTemplateError,
)

Identity = Hashable


@dataclass(frozen=True)
class Candidate:
    """
    One hypothesis of an identification search.

    Attributes
    ----------
    identity : hashable
        Identity label, a valid gallery identity
    score : float
        Similarity score from recognition or fusion (higher = more similar)
    """

    identity: Identity
    score: float

    def as_tuple(self) -> Tuple[Identity, float]:
        return (self.identity, self.score)


CandidateList = List[Candidate]


def as_candidate_list(items: Iterable) -> CandidateList:
    """
    Build a candidate list from Candidate objects or (identity, score) pairs.

    Raises
    ------
    ParseError
        If the input is not iterable, an item cannot be interpreted as a
        candidate, an identity is unhashable or occurs more than once
    """
    try:
        items = iter(items)
    except TypeError as exc:
        raise ParseError(f"A candidate list must be iterable, got {type(items).__name__}") from exc

    candidates = []
    seen = set()
    for item in items:
        if isinstance(item, Candidate):
            candidate = item
        else:
            try:
                identity, score = item
                candidate = Candidate(identity, float(score))
            except (TypeError, ValueError) as exc:
                raise ParseError(f"Cannot interpret {item!r} as a candidate") from exc
        try:
            hash(candidate.identity)
        except TypeError as exc:
            raise ParseError(f"Identity {candidate.identity!r} is not hashable") from exc
        if candidate.identity in seen:
            raise ParseError(
                f"Identity {candidate.identity!r} occurs more than once in a candidate list"
            )
        seen.add(candidate.identity)
        candidates.append(candidate)
    return candidates


def is_ranked(candidates: Sequence[Candidate]) -> bool:
    """True if scores are in non-increasing order."""
    return all(
        candidates[i].score >= candidates[i + 1].score
        for i in range(len(candidates) - 1)
    )


def as_template(template) -> np.ndarray:
    """
    Convert input to a 1-D float template.

    An empty template is the marker of a failed feature extraction.

    Raises
    ------
    TemplateFormatError
        If the input is not numeric or not one-dimensional
    VerifTemplateError
        If the template is empty
    """
    try:
        array = np.asarray(template, dtype=float)
    except (TypeError, ValueError) as exc:
        raise TemplateFormatError("Template is not numeric") from exc

    if array.ndim != 1:
        raise TemplateFormatError(
            f"Template must be one-dimensional, got shape {array.shape}"
        )
    if array.size == 0:
        raise VerifTemplateError("Template is the result of a failed extraction")
    return array


def check_congruent(a: np.ndarray, b: np.ndarray) -> None:
    """Raise NonCongruentVectors unless both templates have equal length."""
    if a.shape != b.shape:
        raise NonCongruentVectors(
            f"Template lengths differ: {a.shape[0]} vs {b.shape[0]}"
        )
