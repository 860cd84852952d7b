"""
Configuration for pybiofusion.

The model directory handed to ``initialize`` is the runtime configuration
of a fuser. This module fixes the file names looked up inside it and the
defaults used when an optional file is absent.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union


@dataclass(frozen=True)
class ModelLayout:
    """
    File names inside a model directory.

    Attributes:
        z_norm: Per-algorithm calibration table (Algorithm position scale)
        linear_fusion: Optional per-algorithm weights and offset
        candidate_fusion: Optional candidate-list combiner settings
        template_fusion: Expected template count and optional layout
        template_comparator: Optional comparator name for verify/search
        hdf5_model: Optional HDF5 copy of the score calibration
    """
    z_norm: str = "z_norm.txt"
    linear_fusion: str = "linear_fusion.txt"
    candidate_fusion: str = "candidate_fusion.txt"
    template_fusion: str = "t_concatenator.txt"
    template_comparator: str = "t_comparator.txt"
    hdf5_model: str = "fusion_model.h5"

    def path(self, directory: Union[str, Path], name: str) -> Path:
        """Resolve one of the layout's file names inside ``directory``."""
        return Path(directory) / getattr(self, name)


DEFAULT_LAYOUT = ModelLayout()

# Operating points reported by the DET table.
DEFAULT_FMR_TARGETS: Tuple[float, ...] = (0.001, 0.01, 0.1)

# Candidates returned by a gallery search when no length is requested.
DEFAULT_CANDIDATE_LIST_LENGTH = 20

DEFAULT_COMBINER = "product"
DEFAULT_COMPARATOR = "l1"

# Similarity assigned to a zero distance: score = SIMILARITY_SCALE / (1 + d).
SIMILARITY_SCALE = 100.0
