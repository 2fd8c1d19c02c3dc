# File: src/mep_autoavoid/core/errors.py
"""
Error taxonomy and result type for the auto-avoid engine.

Recoverable outcomes (no feasible plan, reconstruction aborted) travel as
``Result`` values; exceptions are reserved for failures raised by the model
store or by geometry queries, and are converted into results at the per-run
boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Machine-readable failure categories reported per run."""
    GEOMETRY_QUERY_FAILURE = "geometry_query_failure"
    NO_FEASIBLE_PLAN = "no_feasible_plan"
    RECONSTRUCTION_FAILURE = "reconstruction_failure"
    CONNECTOR_STITCH_FAILURE = "connector_stitch_failure"
    UNSUPPORTED_RUN = "unsupported_run"
    UNEXPECTED_ERROR = "unexpected_error"


class AutoAvoidError(Exception):
    """
    Base class for engine exceptions.

    Carries an ErrorKind and structured context so the processor can turn
    the exception into a report entry.
    """

    error_kind = ErrorKind.UNEXPECTED_ERROR

    def __init__(
        self,
        message: str,
        error_kind: Optional[ErrorKind] = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the error.

        Args:
            message: Human-readable error message
            error_kind: Optional override of the class error kind
            extra: Optional additional error context
        """
        self.message = message
        if error_kind is not None:
            self.error_kind = error_kind
        self.extra = extra or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = {"message": self.message, "error_kind": self.error_kind.value}
        if self.extra:
            result["extra"] = self.extra
        return result


class GeometryQueryError(AutoAvoidError):
    """Raised when an element has no centerline or bounding box."""
    error_kind = ErrorKind.GEOMETRY_QUERY_FAILURE

    def __init__(self, element_id: str, what: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(f"Element '{element_id}' has no {what}", extra=extra)
        self.element_id = element_id


class ModelStoreError(AutoAvoidError):
    """Raised by a model store when a host operation fails."""
    error_kind = ErrorKind.RECONSTRUCTION_FAILURE


class ReconstructionError(AutoAvoidError):
    """Raised when segment regeneration cannot complete."""
    error_kind = ErrorKind.RECONSTRUCTION_FAILURE


@dataclass
class Result(Generic[T]):
    """
    Outcome of an engine operation.

    Attributes:
        value: Payload on success (may also be set on partial failure)
        error_kind: Failure category, None on success
        message: Failure description
        warnings: Non-fatal issues collected along the way
    """
    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    warnings: List[str] = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def ok(cls, value: T, warnings: Optional[List[str]] = None) -> "Result[T]":
        return cls(value=value, warnings=list(warnings or []))

    @classmethod
    def fail(cls, error_kind: ErrorKind, message: str, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value, error_kind=error_kind, message=message)
