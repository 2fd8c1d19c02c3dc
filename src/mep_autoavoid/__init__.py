# File: src/mep_autoavoid/__init__.py
"""
Clash detection and detour reconstruction for MEP runs.

Finds the nearest obstacle conflicting with a pipe, duct or conduit run,
plans a clearance-preserving detour around it and rebuilds the run along
that detour while keeping its network connections.

Submodules:
    core: Run types, errors, model store interface and in-memory store
    config: Avoidance options, units and environment settings
    geometry: Vector, box and segment primitives
    clash: Obstacle collection and clash detection
    routing: Detour planning
    reconstruction: Segment regeneration and bend stitching
    processing: Run and batch processing with reports
    utils: Diagnostics sessions

Example:
    >>> from src.mep_autoavoid import AvoidanceOptions, AvoidanceProcessor
    >>> from src.mep_autoavoid import DiagnosticsSession
    >>>
    >>> with DiagnosticsSession(to_file=True) as session:
    ...     processor = AvoidanceProcessor(store, AvoidanceOptions(clearance_mm=50))
    ...     report = processor.process_runs(store.runs())
    >>> print(report.to_json())
"""

from .core import (
    RunKind,
    DirectionMode,
    ObstacleCategory,
    CrossSection,
    Connector,
    LinearRun,
    ErrorKind,
    Result,
    ModelStore,
    InMemoryModelStore,
)
from .config import AvoidanceOptions, ProjectUnits, validate_options
from .geometry import BoundingBox
from .clash import Obstacle, ClashRecord, ObstacleCollector, ClashDetector
from .routing import DetourPlan, DetourStrategy, RoutingPlanner
from .reconstruction import ReconstructionEngine, ReconstructionOutcome
from .processing import AvoidanceProcessor, ReportEntry, BatchReport
from .utils import DiagnosticsSession, get_logger

__all__ = [
    # Core types
    "RunKind",
    "DirectionMode",
    "ObstacleCategory",
    "CrossSection",
    "Connector",
    "LinearRun",
    "ErrorKind",
    "Result",
    "ModelStore",
    "InMemoryModelStore",
    # Configuration
    "AvoidanceOptions",
    "ProjectUnits",
    "validate_options",
    # Pipeline
    "BoundingBox",
    "Obstacle",
    "ClashRecord",
    "ObstacleCollector",
    "ClashDetector",
    "DetourPlan",
    "DetourStrategy",
    "RoutingPlanner",
    "ReconstructionEngine",
    "ReconstructionOutcome",
    "AvoidanceProcessor",
    "ReportEntry",
    "BatchReport",
    # Diagnostics
    "DiagnosticsSession",
    "get_logger",
]
