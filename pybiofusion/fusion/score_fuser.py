"""
Verification score and candidate list fusion for pybiofusion.

The ScoreFuser loads its fusion scheme once from a model directory and then
fuses inputs without further I/O. Fusion is a pure function of the loaded
model and the input: repeated calls on the same input give bit-identical
results.
"""

import logging
from typing import Callable, Optional, Sequence

import numpy as np

from ..config import DEFAULT_LAYOUT, ModelLayout
from ..core import (
    FusionModel,
    NumDataError,
    ParseError,
    ReturnStatus,
    TemplateFormatError,
    VendorError,
    returns_status,
)
from ..io import (
    check_model_directory,
    load_model_hdf5,
    read_candidate_fusion_config,
    read_score_model,
)
from .candidate_fusion import CandidateListFuser
from .interfaces import FuserState, ScoreFuserInterface
from .strategies import ScoreFusionStrategy, ZNormFusion

logger = logging.getLogger(__name__)


class ScoreFuser(ScoreFuserInterface):
    """
    Fuses verification scores and identification candidate lists.

    Parameters
    ----------
    strategy : callable, optional
        Factory ``FusionModel -> ScoreFusionStrategy`` used for
        verification scores (default: ZNormFusion)
    layout : ModelLayout, optional
        File names inside the model directory

    Examples
    --------
    >>> fuser = ScoreFuser()
    >>> status = fuser.initialize("models/pluto_venus", ScoreFuser.Type.VERIFICATION)
    >>> status, fused = fuser.fuse_verification_scores([3.5, 51.0])
    >>> if status.ok:
    ...     print(fused)
    """

    def __init__(
        self,
        strategy: Callable[[FusionModel], ScoreFusionStrategy] = ZNormFusion,
        layout: ModelLayout = DEFAULT_LAYOUT
    ):
        self._strategy_factory = strategy
        self._layout = layout
        self._state = FuserState.UNINITIALIZED
        self._type: Optional[ScoreFuserInterface.Type] = None
        self._model: Optional[FusionModel] = None
        self._strategy: Optional[ScoreFusionStrategy] = None
        self._list_fuser: Optional[CandidateListFuser] = None

    @property
    def state(self) -> FuserState:
        return self._state

    @property
    def model(self) -> Optional[FusionModel]:
        """The loaded calibration model (verification mode only)."""
        return self._model

    @property
    def k(self) -> Optional[int]:
        """Number of scores expected per fusion call."""
        return self._model.k if self._model is not None else None

    @returns_status(with_output=False, loads_scheme=True)
    def initialize(self, directory, fusion_type) -> ReturnStatus:
        """
        Load a fusion scheme from ``directory``.

        Verification reads the z-norm calibration table, falling back to an
        HDF5 model file when no table is present; optional linear weights
        are attached. Identification reads the optional candidate list
        fusion settings.

        Returns
        -------
        ReturnStatus
            ConfigError if the directory or a required file is missing,
            ParseError if a file is malformed, VendorError if the instance
            was already initialized
        """
        if self._state is not FuserState.UNINITIALIZED:
            raise VendorError(
                "Fuser is already initialized; create a new instance to load another scheme"
            )
        if not isinstance(fusion_type, ScoreFuserInterface.Type):
            raise VendorError(f"Unknown fusion type: {fusion_type!r}")

        if fusion_type is ScoreFuserInterface.Type.VERIFICATION:
            model = self._load_model(directory)
            self._model = model
            self._state = FuserState.INITIALIZED
            self._strategy = self._strategy_factory(model)
        else:
            config = read_candidate_fusion_config(directory, self._layout)
            try:
                list_fuser = CandidateListFuser(
                    config["combiner"], config["missing_score"]
                )
            except KeyError as exc:
                raise ParseError(str(exc)) from exc
            self._state = FuserState.INITIALIZED
            self._list_fuser = list_fuser

        self._type = fusion_type
        self._state = FuserState.READY
        logger.info("Score fuser ready for %s from %s", fusion_type.name, directory)

    def _load_model(self, directory) -> FusionModel:
        directory = check_model_directory(directory)
        table = self._layout.path(directory, "z_norm")
        hdf5 = self._layout.path(directory, "hdf5_model")
        if not table.exists() and hdf5.exists():
            return load_model_hdf5(hdf5)
        return read_score_model(directory, self._layout)

    def _require(self, fusion_type) -> None:
        if self._state is not FuserState.READY:
            raise VendorError("Fuser is not initialized")
        if self._type is not fusion_type:
            raise VendorError(
                f"Fuser was initialized for {self._type.name}, not {fusion_type.name}"
            )

    @returns_status()
    def fuse_verification_scores(self, scores: Sequence[float]):
        """
        Fuse K verification scores into one.

        Parameters
        ----------
        scores : sequence of float
            One similarity score per algorithm, in model order

        Returns
        -------
        status : ReturnStatus
            NumDataError if the number of scores differs from the model's K
        fused : float or None
            Fused score; higher means more similar, range unbounded
        """
        self._require(ScoreFuserInterface.Type.VERIFICATION)
        try:
            scores = np.asarray(scores, dtype=float)
        except (TypeError, ValueError) as exc:
            raise ParseError("Scores are not numeric") from exc

        if scores.ndim != 1:
            raise TemplateFormatError(
                f"Scores must be a 1-D sequence, got shape {scores.shape}"
            )
        if scores.shape[0] != self._strategy.k:
            raise NumDataError(
                f"Expected {self._strategy.k} scores, got {scores.shape[0]}"
            )
        if not np.all(np.isfinite(scores)):
            raise ParseError("Scores must be finite")

        return self._strategy.fuse(scores)

    @returns_status()
    def fuse_candidate_lists(self, lists):
        """
        Fuse K >= 2 candidate lists of equal length into one ranked list.

        Returns
        -------
        status : ReturnStatus
            NumDataError for fewer than two lists, NonCongruentVectors for
            lists of different lengths, ParseError for a repeated identity
        fused : list of Candidate or None
            Between L and K * L candidates in non-increasing score order
        """
        self._require(ScoreFuserInterface.Type.IDENTIFICATION)
        return self._list_fuser.fuse(lists)

    def __repr__(self) -> str:
        return f"ScoreFuser(state={self._state.name}, model={self._model!r})"
