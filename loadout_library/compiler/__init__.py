"""Configuration-to-script compiler.

Public Interface:
    - compile_loadout: Compile a CompileSnapshot into a CompiledScript
    - render_guide: Render the companion HTML guide
    - render_verification_script: Render the read-only verification script
    - encode_literal_block / decode_literal_block: Here-string payload codec
"""

from .compiler import compile_loadout
from .conflicts import CONFLICT_RULES
from .conflicts import ConflictRule
from .conflicts import applied_keys
from .conflicts import resolve_conflicts
from .flags import Tcpip6Components
from .guide import GUIDE_SECTIONS
from .guide import render_guide
from .literal import decode_literal_block
from .literal import encode_literal_block
from .registry import DEFAULT_REGISTRY
from .registry import RuleRegistry
from .verify import render_verification_script

__all__ = [
    "CONFLICT_RULES",
    "ConflictRule",
    "DEFAULT_REGISTRY",
    "GUIDE_SECTIONS",
    "RuleRegistry",
    "Tcpip6Components",
    "applied_keys",
    "compile_loadout",
    "decode_literal_block",
    "encode_literal_block",
    "render_guide",
    "render_verification_script",
    "resolve_conflicts",
]
