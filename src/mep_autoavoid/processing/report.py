# File: src/mep_autoavoid/processing/report.py
"""
Per-run report entries and batch reports.

Every processed run produces exactly one ReportEntry, whether it succeeded,
had nothing to do, or failed; a BatchReport aggregates them with statistics.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
from datetime import datetime
import json

from ..core.errors import ErrorKind


@dataclass
class ReportEntry:
    """
    Outcome of processing one run.

    Attributes:
        run_id: Id of the processed run
        clash_found: Whether a clash was detected
        plan_found: Whether a detour plan was produced
        reconstructed: Whether the plan was committed to the model
        failure_reason: Human-readable failure reason (None on success)
        error_kind: Machine-readable failure category
        obstacle_id: Id of the obstacle that caused the clash
        strategy: Strategy of the committed plan
        direction: Direction of the committed plan
        segments_created: New segments created
        bends_created: Bend fittings created
        unmatched_connectors: Internal connectors left free
        attempts: Planning attempts made
        warnings: Non-fatal issues
    """
    run_id: str
    clash_found: bool = False
    plan_found: bool = False
    reconstructed: bool = False
    failure_reason: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    obstacle_id: Optional[str] = None
    strategy: Optional[str] = None
    direction: Optional[str] = None
    segments_created: int = 0
    bends_created: int = 0
    unmatched_connectors: int = 0
    attempts: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True for a clean no-op or a committed reconstruction."""
        if self.failure_reason is not None:
            return False
        return not self.clash_found or self.reconstructed

    def fail(self, error_kind: ErrorKind, reason: str) -> "ReportEntry":
        """Mark the entry as failed and return it."""
        self.error_kind = error_kind
        self.failure_reason = reason
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "run_id": self.run_id,
            "success": self.success,
            "clash_found": self.clash_found,
            "plan_found": self.plan_found,
            "reconstructed": self.reconstructed,
            "failure_reason": self.failure_reason,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "obstacle_id": self.obstacle_id,
            "strategy": self.strategy,
            "direction": self.direction,
            "segments_created": self.segments_created,
            "bends_created": self.bends_created,
            "unmatched_connectors": self.unmatched_connectors,
            "attempts": self.attempts,
            "warnings": list(self.warnings),
        }


@dataclass
class BatchStatistics:
    """
    Statistics about a batch of runs.

    Attributes:
        total_runs: Number of runs processed
        succeeded: Runs reconstructed successfully
        failed: Runs that failed
        no_clash: Runs without any clash
        bends_created: Bend fittings created across the batch
        processing_time_ms: Wall time for the batch in milliseconds
    """
    total_runs: int = 0
    succeeded: int = 0
    failed: int = 0
    no_clash: int = 0
    bends_created: int = 0
    processing_time_ms: float = 0.0

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if self.total_runs == 0:
            return 0.0
        return ((self.succeeded + self.no_clash) / self.total_runs) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_runs": self.total_runs,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "no_clash": self.no_clash,
            "success_rate": self.success_rate,
            "bends_created": self.bends_created,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class BatchReport:
    """
    Complete result of processing a batch of runs.

    Attributes:
        entries: One entry per run, in processing order
        statistics: Batch statistics
        timestamp: When the batch was processed
        metadata: Additional metadata (options used, model units)
    """
    entries: List[ReportEntry] = field(default_factory=list)
    statistics: BatchStatistics = field(default_factory=BatchStatistics)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_entry(self, entry: ReportEntry) -> None:
        """Add an entry and update statistics."""
        self.entries.append(entry)
        self.statistics.total_runs += 1
        if not entry.success:
            self.statistics.failed += 1
        elif entry.clash_found:
            self.statistics.succeeded += 1
        else:
            self.statistics.no_clash += 1
        self.statistics.bends_created += entry.bends_created

    def get_entry(self, run_id: str) -> Optional[ReportEntry]:
        for entry in self.entries:
            if entry.run_id == run_id:
                return entry
        return None

    def failures(self) -> List[ReportEntry]:
        return [e for e in self.entries if not e.success]

    def is_complete(self) -> bool:
        """Check if every run succeeded."""
        return self.statistics.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "entries": [e.to_dict() for e in self.entries],
            "statistics": self.statistics.to_dict(),
            "timestamp": self.timestamp,
            "metadata": self.metadata,
            "is_complete": self.is_complete(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
