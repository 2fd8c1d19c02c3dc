# File: src/mep_autoavoid/core/__init__.py
"""
Core abstractions for the MEP auto-avoid engine.

Classes:
    RunKind: Enum for linear run kinds (pipe, duct, conduit)
    ObstacleCategory: Enum for categories queried as obstacles
    DirectionMode: Enum for detour direction preferences
    CrossSection, Connector, LinearRun: Run data model
    ModelStore: Abstract host-model interface
    InMemoryModelStore: Dictionary-backed ModelStore
    Result, ErrorKind: Recoverable outcomes and their categories
"""

from .mep_system import (
    RunKind,
    ObstacleCategory,
    DirectionMode,
    CrossSection,
    Connector,
    LinearRun,
)
from .errors import (
    ErrorKind,
    Result,
    AutoAvoidError,
    GeometryQueryError,
    ModelStoreError,
    ReconstructionError,
)
from .model_store import ModelStore, ModelTransaction
from .memory_store import InMemoryModelStore, ModelElement

__all__ = [
    "RunKind",
    "ObstacleCategory",
    "DirectionMode",
    "CrossSection",
    "Connector",
    "LinearRun",
    "ErrorKind",
    "Result",
    "AutoAvoidError",
    "GeometryQueryError",
    "ModelStoreError",
    "ReconstructionError",
    "ModelStore",
    "ModelTransaction",
    "InMemoryModelStore",
    "ModelElement",
]
