# File: src/mep_autoavoid/processing/__init__.py
"""
Run and batch processing with per-run reports.
"""

from .report import ReportEntry, BatchStatistics, BatchReport
from .processor import AvoidanceProcessor

__all__ = [
    "ReportEntry",
    "BatchStatistics",
    "BatchReport",
    "AvoidanceProcessor",
]
