"""Utility helpers: diagnostics sessions and logger lookup."""

from .logging_config import DiagnosticEntry, DiagnosticsSession, get_logger, ROOT_LOGGER_NAME

__all__ = ["DiagnosticEntry", "DiagnosticsSession", "get_logger", "ROOT_LOGGER_NAME"]
