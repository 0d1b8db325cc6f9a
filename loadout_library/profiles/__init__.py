"""Saved profile persistence.

Public Interface:
    - load_profile: Build a snapshot from a profile document
    - load_profile_file: Load a profile document from disk
    - dump_profile: Export a snapshot as a profile document
    - LoadedProfile: Loaded snapshot plus ignored keys
"""

from .loader import LEGACY_KEYS
from .loader import LoadedProfile
from .loader import dump_profile
from .loader import load_profile
from .loader import load_profile_file

__all__ = [
    "LEGACY_KEYS",
    "LoadedProfile",
    "dump_profile",
    "load_profile",
    "load_profile_file",
]
