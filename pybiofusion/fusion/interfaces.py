"""
Fuser interfaces for pybiofusion.

A harness obtains a fuser, calls ``initialize`` once with a model directory
and then calls the fusion operations many times. Every operation returns a
ReturnStatus, alone or as the first element of a ``(status, output)``
tuple; callers must check ``status.ok`` before reading the output.

Lifecycle::

    UNINITIALIZED -> INITIALIZED -> READY [-> GALLERY_BUILT]

INITIALIZED means the model files were read, READY means the fusion
strategy is bound and operations may be called. There is no way back:
a new fusion scheme requires a new instance.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Hashable, List, Optional, Sequence, Tuple

import numpy as np

from ..core import CandidateList, ReturnStatus


class FuserState(Enum):
    """Lifecycle state of a fuser instance."""

    UNINITIALIZED = 0
    INITIALIZED = 1
    READY = 2
    GALLERY_BUILT = 3


class ScoreFuserInterface(ABC):
    """Fusion of verification scores and identification candidate lists."""

    class Type(Enum):
        VERIFICATION = 0
        IDENTIFICATION = 1

    @abstractmethod
    def initialize(
        self,
        directory: str,
        fusion_type: "ScoreFuserInterface.Type"
    ) -> ReturnStatus:
        """
        Read a pre-computed fusion scheme from ``directory``.

        Type.VERIFICATION loads the scheme for verification score fusion,
        Type.IDENTIFICATION the scheme for candidate list fusion.
        """

    @abstractmethod
    def fuse_verification_scores(
        self,
        scores: Sequence[float]
    ) -> Tuple[ReturnStatus, Optional[float]]:
        """Fuse K scores, one per algorithm, into one score."""

    @abstractmethod
    def fuse_candidate_lists(
        self,
        lists: Sequence[CandidateList]
    ) -> Tuple[ReturnStatus, Optional[CandidateList]]:
        """Fuse K >= 2 candidate lists of equal length L into one list."""

    @classmethod
    def get_implementation(cls) -> "ScoreFuserInterface":
        """Return the package's implementation of this interface."""
        from .score_fuser import ScoreFuser
        return ScoreFuser()


class TemplateFuserInterface(ABC):
    """Template fusion, 1:1 verification and 1:N search of fused templates."""

    class Action(Enum):
        FUSE = 0
        VERIFY = 1
        IDENTIFY = 2

    @abstractmethod
    def initialize(
        self,
        directory: str,
        action: "TemplateFuserInterface.Action"
    ) -> ReturnStatus:
        """
        Initialize the capability named by ``action`` from ``directory``.

        Action.FUSE reads the template fusion scheme, Action.VERIFY the
        information needed to select a comparator, and Action.IDENTIFY the
        same as VERIFY while enabling gallery construction.
        """

    @abstractmethod
    def fuse_templates(
        self,
        templates: Sequence[np.ndarray]
    ) -> Tuple[ReturnStatus, Optional[np.ndarray]]:
        """Fuse K templates, one per algorithm, into one template."""

    @abstractmethod
    def verify(
        self,
        enroll: np.ndarray,
        authentication: np.ndarray
    ) -> Tuple[ReturnStatus, Optional[float]]:
        """Compare two fused templates; return a similarity score."""

    @abstractmethod
    def create_gallery(
        self,
        templates: Sequence[np.ndarray],
        ids: Sequence[Hashable]
    ) -> ReturnStatus:
        """Enroll N templates under N identities; called once."""

    @abstractmethod
    def search(
        self,
        probe: np.ndarray,
        n_candidates: int
    ) -> Tuple[ReturnStatus, Optional[CandidateList]]:
        """Return up to ``n_candidates`` ranked gallery candidates."""

    def search_many(
        self,
        probes: Sequence[np.ndarray],
        n_candidates: int,
        num_workers: int = 1
    ) -> List[Tuple[ReturnStatus, Optional[CandidateList]]]:
        """Search several probes; results are in probe order."""
        return [self.search(probe, n_candidates) for probe in probes]

    @classmethod
    def get_implementation(cls) -> "TemplateFuserInterface":
        """Return the package's implementation of this interface."""
        from .template_fuser import TemplateFuser
        return TemplateFuser()
