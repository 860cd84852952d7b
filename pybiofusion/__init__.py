"""
pybiofusion: Fusion of biometric recognition algorithms

A framework for combining the outputs of K biometric recognition
algorithms into a single, more accurate decision, with a focus on face
recognition vendor evaluations.

The framework provides:
- Verification score fusion (cohort z-norm, optional linear weights)
- Identification candidate list fusion (outer join + combiner)
- Template fusion, verification and gallery search
- DET accuracy evaluation at fixed false match rates
- Offline calibration training and model directory writers
- Efficient binary model files (HDF5)

Every fuser call reports its outcome as a ReturnStatus carrying one of
the fixed ReturnCode values; no exception escapes the fuser API.
"""

__version__ = "1.0.0"
__author__ = "pybiofusion Contributors"
__license__ = "MIT"

# Import core classes
from .core import (
    ReturnCode,
    ReturnStatus,
    Candidate,
    AlgorithmCalibration,
    FusionModel,
)

# Import fusers
from .fusion import (
    ScoreFuserInterface,
    TemplateFuserInterface,
    ScoreFuser,
    TemplateFuser,
    CandidateListFuser,
)

# Import offline tools
from .calibration import train_cohort_znorm, train_linear_fusion, fit_linear_model
from .evaluation import compute_det, format_det_table
from .io import (
    read_score_model,
    write_score_model,
    write_candidate_fusion_config,
    write_template_model,
    HAS_H5PY,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Core classes
    "ReturnCode",
    "ReturnStatus",
    "Candidate",
    "AlgorithmCalibration",
    "FusionModel",
    # Fusers
    "ScoreFuserInterface",
    "TemplateFuserInterface",
    "ScoreFuser",
    "TemplateFuser",
    "CandidateListFuser",
    # Calibration
    "train_cohort_znorm",
    "train_linear_fusion",
    "fit_linear_model",
    # Evaluation
    "compute_det",
    "format_det_table",
    # I/O
    "read_score_model",
    "write_score_model",
    "write_candidate_fusion_config",
    "write_template_model",
    "HAS_H5PY",
]
