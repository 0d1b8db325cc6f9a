"""Storage locations for loadoutd.

Public Interface:
    - get_home_dir: Get LOADOUTD_HOME
    - get_config_dir: Get config directory
    - get_share_dir: Get data directory
    - get_profiles_dir: Get saved profile directory
"""

from .paths import get_config_dir
from .paths import get_home_dir
from .paths import get_profiles_dir
from .paths import get_share_dir

__all__ = [
    "get_home_dir",
    "get_config_dir",
    "get_share_dir",
    "get_profiles_dir",
]
