"""
Swappable fusion strategies for pybiofusion.

A strategy is built from the scheme loaded at initialization and then
applied to every input. Fusers only rely on the ``fuse`` method, so any
other strategy can be passed to a fuser's constructor in place of these.

Score strategies:
    ZNormFusion: (weighted) sum of z-normalized scores

Template strategies:
    ConcatenationFusion: (weighted) concatenation in algorithm order
"""

import threading
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple

import numpy as np

from ..core import (
    FusionModel,
    NumDataError,
    TemplateCreationError,
    TemplateFormatError,
    as_template,
)
from ..io import TemplateScheme


class ScoreFusionStrategy(ABC):
    """Fuses one score per algorithm into one score."""

    def __init__(self, model: FusionModel):
        self.model = model

    @property
    def k(self) -> int:
        return self.model.k

    @abstractmethod
    def fuse(self, scores: np.ndarray) -> float:
        """Fuse a validated 1-D array of K finite scores."""


class ZNormFusion(ScoreFusionStrategy):
    """
    Sum of z-normalized scores.

    Each score is normalized as ``(score - position) / scale`` with the
    algorithm's calibration; the normalized scores are combined as
    ``sum(w_i * z_i) + offset``. Without linear weights w_i = 1 and
    offset = 0, the equal-weight sum of z-scores.

    Examples
    --------
    >>> model = FusionModel([AlgorithmCalibration("pluto", 3.0, 0.2),
    ...                      AlgorithmCalibration("venus", 50.0, 2.0)])
    >>> ZNormFusion(model).fuse(np.array([3.5, 51.0]))
    3.0
    """

    def fuse(self, scores):
        z = self.model.normalize(scores)
        if not self.model.is_weighted:
            return float(np.sum(z))
        return float(np.dot(self.model.linear_weights(), z) + self.model.offset)


class TemplateFusionStrategy(ABC):
    """Fuses one template per algorithm into one template."""

    def __init__(self, scheme: TemplateScheme):
        self.scheme = scheme

    @property
    def k(self) -> int:
        return self.scheme.k

    @property
    def output_dim(self) -> Optional[int]:
        """Fixed dimensionality of fused templates, if known."""
        return None

    def prepare(self, templates: Sequence) -> list:
        """
        Validate K input templates.

        Raises
        ------
        NumDataError
            If the number of templates is not K
        VerifTemplateError
            If a template is empty (failed extraction)
        TemplateFormatError
            If the input is not a sequence or a template is not 1-D numeric
        TemplateCreationError
            If a template holds non-finite values
        """
        if isinstance(templates, (str, bytes)) or not hasattr(templates, "__len__"):
            raise TemplateFormatError(
                f"Expected a sequence of {self.k} templates, got {type(templates).__name__}"
            )
        if len(templates) != self.k:
            raise NumDataError(
                f"Expected {self.k} templates, got {len(templates)}"
            )
        arrays = [as_template(t) for t in templates]
        for i, array in enumerate(arrays):
            if not np.all(np.isfinite(array)):
                raise TemplateCreationError(
                    f"Template {i} holds non-finite features; refusing to fuse"
                )
        return arrays

    @abstractmethod
    def fuse(self, templates: Sequence) -> np.ndarray:
        """Fuse K templates."""


class ConcatenationFusion(TemplateFusionStrategy):
    """
    Concatenate templates in algorithm order.

    Each algorithm's features keep their internal order, so the fused
    dimensionality is the sum of the input dimensionalities. Per-algorithm
    dimensions declared by the scheme are enforced; a scheme that declares
    only K takes them from the first successful fusion and enforces them
    from then on. Declared weights multiply each algorithm's block.

    Examples
    --------
    >>> fusion = ConcatenationFusion(TemplateScheme(2))
    >>> fusion.fuse([np.array([1.0, 2.0]), np.array([3.0])])
    array([1., 2., 3.])
    """

    def __init__(self, scheme: TemplateScheme):
        super().__init__(scheme)
        self._dims = scheme.dims
        self._lock = threading.Lock()

    @property
    def dims(self) -> Optional[Tuple[int, ...]]:
        """Per-algorithm dimensions, declared or fixed by the first fusion."""
        return self._dims

    @property
    def output_dim(self):
        return int(sum(self._dims)) if self._dims is not None else None

    def _check_dims(self, arrays) -> None:
        names = self.scheme.algorithms or [f"algorithm {i}" for i in range(self.k)]
        for name, dim, array in zip(names, self._dims, arrays):
            if array.shape[0] != dim:
                raise TemplateFormatError(
                    f"Template from {name} has {array.shape[0]} features, expected {dim}"
                )

    def fuse(self, templates):
        arrays = self.prepare(templates)

        with self._lock:
            if self._dims is None:
                self._dims = tuple(array.shape[0] for array in arrays)
            else:
                self._check_dims(arrays)
        if self.scheme.weights is not None:
            arrays = [w * a for w, a in zip(self.scheme.weights, arrays)]

        return np.concatenate(arrays)
