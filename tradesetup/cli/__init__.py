"""
Command-line helpers for screening snapshot files.
"""

from .analyzer import SnapshotAnalyzer, SnapshotFileError, load_snapshots
from .formatter import OutputFormatter

__all__ = ["SnapshotAnalyzer", "SnapshotFileError", "load_snapshots", "OutputFormatter"]
