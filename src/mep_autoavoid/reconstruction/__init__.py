# File: src/mep_autoavoid/reconstruction/__init__.py
"""
Network reconstruction: segment regeneration, bend stitching and
neighbour reconnection.
"""

from .realizers import (
    RunRealizer,
    PipeRealizer,
    DuctRealizer,
    ConduitRealizer,
    register_realizer,
    realizer_for,
)
from .stitching import StitchResult, stitch_bends, STITCH_TOLERANCE_FT
from .engine import ReconstructionEngine, ReconstructionOutcome, connector_at

__all__ = [
    "RunRealizer",
    "PipeRealizer",
    "DuctRealizer",
    "ConduitRealizer",
    "register_realizer",
    "realizer_for",
    "StitchResult",
    "stitch_bends",
    "STITCH_TOLERANCE_FT",
    "ReconstructionEngine",
    "ReconstructionOutcome",
    "connector_at",
]
