"""
Score, template and candidate list fusion for pybiofusion.

Classes:
    ScoreFuserInterface / ScoreFuser: Verification score and candidate
        list fusion
    TemplateFuserInterface / TemplateFuser: Template fusion, verification
        and gallery search
    CandidateListFuser: Outer-join fusion of ranked candidate lists
    ZNormFusion: Sum of z-normalized scores (reference score strategy)
    ConcatenationFusion: Template concatenation (reference template strategy)
    FuserState: Lifecycle states shared by the fusers
"""

from .interfaces import FuserState, ScoreFuserInterface, TemplateFuserInterface
from .strategies import (
    ScoreFusionStrategy,
    ZNormFusion,
    TemplateFusionStrategy,
    ConcatenationFusion,
)
from .candidate_fusion import CandidateListFuser, Combiner, COMBINERS, get_combiner
from .score_fuser import ScoreFuser
from .template_fuser import TemplateFuser

__all__ = [
    "FuserState",
    "ScoreFuserInterface",
    "TemplateFuserInterface",
    "ScoreFusionStrategy",
    "ZNormFusion",
    "TemplateFusionStrategy",
    "ConcatenationFusion",
    "CandidateListFuser",
    "Combiner",
    "COMBINERS",
    "get_combiner",
    "ScoreFuser",
    "TemplateFuser",
]
