"""
Diagnostics for the MEP auto-avoid engine.

A DiagnosticsSession is opened at the start of a processing session and closed
deterministically at the end. While open, every record emitted under the
``mep_autoavoid`` logger hierarchy is appended to an in-memory list of
structured entries and, optionally, written to a timestamped log file and the
console. Components receive their logger from the session instead of relying
on process-wide state.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

ROOT_LOGGER_NAME = "mep_autoavoid"


@dataclass
class DiagnosticEntry:
    """
    One structured diagnostic line.

    Attributes:
        timestamp: ISO timestamp of the record
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        component: Logger name relative to the session root
        message: Formatted message, including exception details if any
    """
    timestamp: str
    level: str
    component: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level,
            "component": self.component,
            "message": self.message,
        }


class _EntrySink(logging.Handler):
    """Handler appending every record to a DiagnosticEntry list."""

    def __init__(self, entries: List[DiagnosticEntry], root_name: str):
        super().__init__(level=logging.DEBUG)
        self._entries = entries
        self._root_name = root_name

    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()
        if record.exc_info and record.exc_info[1] is not None:
            message = f"{message}\nException details: {record.exc_info[1]}"
        component = record.name
        if component.startswith(self._root_name + "."):
            component = component[len(self._root_name) + 1:]
        self._entries.append(DiagnosticEntry(
            timestamp=datetime.fromtimestamp(record.created).isoformat(),
            level=record.levelname,
            component=component,
            message=message,
        ))


@dataclass
class DiagnosticsSession:
    """
    Scoped diagnostics for one processing session.

    Example:
        >>> with DiagnosticsSession(log_dir="logs", to_file=True) as diag:
        ...     processor = AvoidanceProcessor(store, options,
        ...                                    logger=diag.get_logger("processor"))
        ...     processor.process_runs(runs)
        >>> warnings = diag.entries_at_least(logging.WARNING)

    Attributes:
        level: Minimum level captured by the session
        log_dir: Directory for the log file
        to_file: Whether to write a timestamped log file
        to_console: Whether to echo records to stdout
        root_name: Logger hierarchy the session listens to
    """
    level: int = logging.INFO
    log_dir: str = "logs"
    to_file: bool = False
    to_console: bool = False
    root_name: str = ROOT_LOGGER_NAME
    entries: List[DiagnosticEntry] = field(default_factory=list)
    log_file: Optional[str] = None
    _handlers: List[logging.Handler] = field(default_factory=list, repr=False)
    _previous_level: Optional[int] = field(default=None, repr=False)

    @classmethod
    def from_settings(cls, settings: Any) -> "DiagnosticsSession":
        """Build a session from a config.Settings instance."""
        return cls(
            level=settings.log_level,
            log_dir=settings.log_dir,
            to_file=settings.log_to_file,
            to_console=settings.log_to_console,
        )

    @property
    def is_open(self) -> bool:
        return bool(self._handlers)

    @property
    def root_logger(self) -> logging.Logger:
        return logging.getLogger(self.root_name)

    def open(self) -> "DiagnosticsSession":
        """Attach the session handlers to the root logger of the hierarchy."""
        if self.is_open:
            return self

        root = self.root_logger
        self._previous_level = root.level
        root.setLevel(self.level)

        sink = _EntrySink(self.entries, self.root_name)
        sink.setLevel(self.level)
        self._handlers.append(sink)

        if self.to_file:
            os.makedirs(self.log_dir, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = os.path.join(self.log_dir, f"mep_autoavoid_{timestamp}.log")
            file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            file_handler.setLevel(self.level)
            self._handlers.append(file_handler)

        if self.to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            console_handler.setLevel(logging.INFO)
            self._handlers.append(console_handler)

        for handler in self._handlers:
            root.addHandler(handler)
        return self

    def close(self) -> None:
        """Detach and close every handler opened by the session."""
        root = self.root_logger
        for handler in self._handlers:
            root.removeHandler(handler)
            handler.close()
        self._handlers.clear()
        if self._previous_level is not None:
            root.setLevel(self._previous_level)
            self._previous_level = None

    def __enter__(self) -> "DiagnosticsSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_logger(self, component: str) -> logging.Logger:
        """Logger for a component, inside the session hierarchy."""
        return logging.getLogger(f"{self.root_name}.{component}")

    def entries_at_least(self, level: int) -> List[DiagnosticEntry]:
        """Entries at or above a level (e.g. logging.WARNING)."""
        return [e for e in self.entries if logging.getLevelName(e.level) >= level]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log_file": self.log_file,
            "entries": [e.to_dict() for e in self.entries],
        }


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger inside the ``mep_autoavoid`` hierarchy.

    Module names such as ``src.mep_autoavoid.clash.clash_detector`` are
    rebased so that records reach an open DiagnosticsSession.

    Args:
        name: Logger name, typically __name__
        level: Optional specific level for this logger

    Returns:
        A configured logger
    """
    marker = ROOT_LOGGER_NAME
    if marker in name:
        name = name[name.index(marker):]
    else:
        name = f"{marker}.{name}"
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(level)
    return logger
