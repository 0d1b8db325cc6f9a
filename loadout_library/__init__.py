"""Loadout library: compiles hardware profiles and tweak selections into scripts.

Public Interface:
    - compile_loadout: Compile a snapshot into a CompiledScript
    - render_guide: Render the companion HTML guide
    - ChangeTracker: Track the two most recent compiled scripts
    - LineDiff: Line-level diff between two script texts
"""

from .compiler import compile_loadout
from .compiler import render_guide
from .tracking import ChangeTracker
from .tracking import LineDiff

__version__ = "0.1.0"

__all__ = [
    "compile_loadout",
    "render_guide",
    "ChangeTracker",
    "LineDiff",
    "__version__",
]
