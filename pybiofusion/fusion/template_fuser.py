"""
Template fusion, verification and identification for pybiofusion.

One model directory serves three capabilities, selected at
initialization: fusing K per-algorithm templates into one, comparing two
fused templates, and searching a probe against an enrolled gallery.

The gallery is written once by ``create_gallery`` and never modified, so
``search`` calls on the same instance may run concurrently.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Hashable, List, Optional, Sequence

from ..config import DEFAULT_CANDIDATE_LIST_LENGTH, DEFAULT_LAYOUT, ModelLayout
from ..core import (
    ParseError,
    ReturnStatus,
    VendorError,
    as_template,
    check_congruent,
    returns_status,
)
from ..io import TemplateScheme, read_comparator_name, read_template_scheme
from ..search import (
    DUPLICATE_POLICIES,
    Comparator,
    Gallery,
    GallerySearchEngine,
    get_comparator,
)
from .interfaces import FuserState, TemplateFuserInterface
from .strategies import ConcatenationFusion, TemplateFusionStrategy

logger = logging.getLogger(__name__)


class TemplateFuser(TemplateFuserInterface):
    """
    Fuses templates and compares or searches fused templates.

    Parameters
    ----------
    strategy : callable, optional
        Factory ``TemplateScheme -> TemplateFusionStrategy`` used in FUSE
        mode (default: ConcatenationFusion)
    comparator : Comparator, optional
        Comparator for VERIFY/IDENTIFY. If omitted, the comparator named in
        the model directory is used (L1 when none is named).
    duplicate_ids : {'reject', 'last'}, optional
        Policy for repeated identities passed to ``create_gallery``:
        'reject' (default) fails with ParseError, 'last' keeps the last
        template of each identity
    layout : ModelLayout, optional
        File names inside the model directory

    Examples
    --------
    >>> fuser = TemplateFuser()
    >>> fuser.initialize("models/template_level", TemplateFuser.Action.IDENTIFY)
    >>> fuser.create_gallery(templates, ids)
    >>> status, candidates = fuser.search(probe, 20)
    """

    def __init__(
        self,
        strategy: Callable[[TemplateScheme], TemplateFusionStrategy] = ConcatenationFusion,
        comparator: Optional[Comparator] = None,
        duplicate_ids: str = "reject",
        layout: ModelLayout = DEFAULT_LAYOUT
    ):
        if duplicate_ids not in DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicate_ids must be one of {DUPLICATE_POLICIES}, got {duplicate_ids!r}"
            )
        self._strategy_factory = strategy
        self._comparator = comparator
        self._duplicate_ids = duplicate_ids
        self._layout = layout
        self._state = FuserState.UNINITIALIZED
        self._action: Optional[TemplateFuserInterface.Action] = None
        self._scheme: Optional[TemplateScheme] = None
        self._strategy: Optional[TemplateFusionStrategy] = None
        self._engine: Optional[GallerySearchEngine] = None

    @property
    def state(self) -> FuserState:
        return self._state

    @property
    def action(self) -> Optional[TemplateFuserInterface.Action]:
        return self._action

    @property
    def comparator(self) -> Optional[Comparator]:
        return self._comparator

    @property
    def gallery(self) -> Optional[Gallery]:
        return self._engine.gallery if self._engine is not None else None

    @returns_status(with_output=False, loads_scheme=True)
    def initialize(self, directory, action) -> ReturnStatus:
        """
        Initialize one capability from ``directory``.

        Returns
        -------
        ReturnStatus
            ConfigError if the directory or a required file is missing,
            ParseError if a file is malformed or names an unknown
            comparator, VendorError if the instance was already initialized
        """
        if self._state is not FuserState.UNINITIALIZED:
            raise VendorError(
                "Fuser is already initialized; create a new instance for another action"
            )
        if not isinstance(action, TemplateFuserInterface.Action):
            raise VendorError(f"Unknown action: {action!r}")

        if action is TemplateFuserInterface.Action.FUSE:
            scheme = read_template_scheme(directory, self._layout)
            self._scheme = scheme
            self._state = FuserState.INITIALIZED
            self._strategy = self._strategy_factory(scheme)
        else:
            name = read_comparator_name(directory, self._layout)
            if self._comparator is None:
                try:
                    self._comparator = get_comparator(name)
                except KeyError as exc:
                    raise ParseError(str(exc)) from exc
            self._state = FuserState.INITIALIZED

        self._action = action
        self._state = FuserState.READY
        logger.info("Template fuser ready for %s from %s", action.name, directory)

    def _require(self, *actions, gallery: bool = False) -> None:
        if self._state not in (FuserState.READY, FuserState.GALLERY_BUILT):
            raise VendorError("Fuser is not initialized")
        if self._action not in actions:
            raise VendorError(
                f"Fuser was initialized for {self._action.name}; this operation "
                f"requires {' or '.join(a.name for a in actions)}"
            )
        if gallery and self._state is not FuserState.GALLERY_BUILT:
            raise VendorError("No gallery has been created")

    @returns_status()
    def fuse_templates(self, templates: Sequence):
        """
        Fuse K templates, one per algorithm, in algorithm order.

        Returns
        -------
        status : ReturnStatus
            NumDataError if the count is not K, VerifTemplateError for an
            empty (failed) template, TemplateFormatError for a wrongly
            shaped template, TemplateCreationError when refusing to fuse
            templates with non-finite features
        fused : ndarray or None
            Fused template
        """
        self._require(TemplateFuserInterface.Action.FUSE)
        return self._strategy.fuse(templates)

    @returns_status()
    def verify(self, enroll, authentication):
        """
        Compare two fused templates.

        Returns
        -------
        status : ReturnStatus
            VerifTemplateError if a template is empty, NonCongruentVectors
            if their lengths differ
        score : float or None
            Similarity, strictly positive; 100 for identical templates
            under the reference comparator
        """
        self._require(
            TemplateFuserInterface.Action.VERIFY,
            TemplateFuserInterface.Action.IDENTIFY
        )
        enroll = as_template(enroll)
        authentication = as_template(authentication)
        check_congruent(enroll, authentication)
        return self._comparator.similarity(enroll, authentication)

    @returns_status(with_output=False)
    def create_gallery(self, templates: Sequence, ids: Sequence[Hashable]):
        """
        Enroll N templates under N identities.

        Returns
        -------
        ReturnStatus
            NonCongruentVectors if the counts or dimensions differ,
            ParseError for a duplicated identity under the 'reject' policy,
            MemoryError if the gallery cannot be allocated, VendorError if a
            gallery already exists
        """
        self._require(TemplateFuserInterface.Action.IDENTIFY)
        if self._state is FuserState.GALLERY_BUILT:
            raise VendorError("A gallery has already been created for this instance")

        gallery = Gallery(templates, ids, duplicate_ids=self._duplicate_ids)
        self._engine = GallerySearchEngine(gallery, self._comparator)
        self._state = FuserState.GALLERY_BUILT
        logger.info("Created %r", gallery)

    @returns_status()
    def search(self, probe, n_candidates: int = DEFAULT_CANDIDATE_LIST_LENGTH):
        """
        Search a probe against the gallery.

        Parameters
        ----------
        probe : array_like
            Fused probe template
        n_candidates : int, optional
            Requested candidate list length L (default: 20)

        Returns
        -------
        status : ReturnStatus
            NonCongruentVectors if the probe dimension differs from the
            gallery's, NumDataError for a negative length
        candidates : list of Candidate or None
            ``min(L, N)`` candidates by descending similarity, ties in
            gallery insertion order
        """
        self._require(TemplateFuserInterface.Action.IDENTIFY, gallery=True)
        return self._engine.search(probe, n_candidates)

    def search_many(
        self,
        probes: Sequence,
        n_candidates: int = DEFAULT_CANDIDATE_LIST_LENGTH,
        num_workers: int = 1
    ) -> List:
        """
        Search several probes, optionally on a thread pool.

        Each probe's search is independent and the gallery is read-only,
        so the searches run concurrently on ``num_workers`` threads.

        Returns
        -------
        list of (ReturnStatus, list of Candidate or None)
            One result per probe, in probe order
        """
        if num_workers <= 1:
            return [self.search(probe, n_candidates) for probe in probes]

        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            futures = [
                executor.submit(self.search, probe, n_candidates) for probe in probes
            ]
            return [future.result() for future in futures]

    def __repr__(self) -> str:
        action = self._action.name if self._action is not None else None
        return f"TemplateFuser(state={self._state.name}, action={action})"
