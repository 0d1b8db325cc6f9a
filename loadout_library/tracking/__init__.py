"""Change tracking for compiled scripts."""

from .differ import DiffLine
from .differ import DiffStats
from .differ import DiffType
from .differ import LineDiff
from .tracker import ChangeTracker
from .tracker import CompilationHistory

__all__ = ["ChangeTracker", "CompilationHistory", "DiffLine", "DiffStats", "DiffType", "LineDiff"]
