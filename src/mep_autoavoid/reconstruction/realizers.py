# File: src/mep_autoavoid/reconstruction/realizers.py
"""
Per-kind run realizers.

Every run kind exposes the same capability set to the reconstruction engine
(connectors, segment creation, section assignment). A realizer is selected
once per reconstruction from the registry instead of re-checking the run
kind at every call site.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..core.errors import ErrorKind, ReconstructionError
from ..core.mep_system import Connector, CrossSection, LinearRun, RunKind
from ..core.model_store import ModelStore
from ..geometry.kernel import Point3
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class RunRealizer(ABC):
    """
    Base class for kind-specific segment creation.

    Subclasses declare the run kind they handle and may add preconditions
    or post-creation fixes required by the host for that kind.
    """

    @property
    @abstractmethod
    def kind(self) -> RunKind:
        """Run kind this realizer handles."""
        pass

    def check(self, run: LinearRun) -> None:
        """
        Verify the run can be regenerated before anything is mutated.

        Raises:
            ReconstructionError: If the run lacks data required by the host
        """
        if run.kind != self.kind:
            raise ReconstructionError(
                f"{type(self).__name__} cannot realize {run.kind.value} run {run.id}",
                error_kind=ErrorKind.UNSUPPORTED_RUN,
            )

    def get_connectors(self, model: ModelStore, element) -> List[Connector]:
        return model.get_connectors(element)

    def create_segment(
        self,
        model: ModelStore,
        template: LinearRun,
        start: Point3,
        end: Point3
    ) -> LinearRun:
        """Create one straight segment copying kind and section from ``template``."""
        return model.create_segment(self.kind, template.cross_section, start, end, template)

    def set_cross_section(
        self,
        model: ModelStore,
        segment: LinearRun,
        cross_section: CrossSection
    ) -> None:
        model.set_cross_section(segment, cross_section)


class PipeRealizer(RunRealizer):
    """Pipes keep their type and section through the segment template."""

    @property
    def kind(self) -> RunKind:
        return RunKind.PIPE


class DuctRealizer(RunRealizer):
    """Round and rectangular ducts."""

    @property
    def kind(self) -> RunKind:
        return RunKind.DUCT


class ConduitRealizer(RunRealizer):
    """
    Conduits are created on a reference level and do not inherit their
    diameter from the type, so the diameter is re-applied on every segment.
    """

    @property
    def kind(self) -> RunKind:
        return RunKind.CONDUIT

    def check(self, run: LinearRun) -> None:
        super().check(run)
        if not run.level_id:
            raise ReconstructionError(
                f"Conduit {run.id} has no reference level",
                error_kind=ErrorKind.UNSUPPORTED_RUN,
            )

    def create_segment(
        self,
        model: ModelStore,
        template: LinearRun,
        start: Point3,
        end: Point3
    ) -> LinearRun:
        segment = super().create_segment(model, template, start, end)
        if template.cross_section.diameter:
            self.set_cross_section(model, segment, template.cross_section)
        return segment


_REALIZERS: Dict[RunKind, RunRealizer] = {}


def register_realizer(realizer: RunRealizer) -> None:
    """Register (or replace) the realizer for its run kind."""
    _REALIZERS[realizer.kind] = realizer
    logger.debug(f"Registered realizer for {realizer.kind.value}")


def realizer_for(kind: RunKind) -> Optional[RunRealizer]:
    """Look up the realizer for a run kind, or None if unsupported."""
    return _REALIZERS.get(kind)


for _realizer in (PipeRealizer(), DuctRealizer(), ConduitRealizer()):
    register_realizer(_realizer)
