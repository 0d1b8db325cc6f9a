"""Where loadoutd keeps its config file and saved profiles.

Everything lives under LOADOUTD_HOME (``~/.loadoutd``); the config and
share directories can each be moved with their own variable.

Contract:
- Inputs: Environment variables (LOADOUTD_HOME, LOADOUTD_CONFIG_DIR, LOADOUTD_SHARE_DIR)
- Outputs: Resolved Path objects
- Side Effects: Creates directories if they don't exist
"""

import os
from pathlib import Path


def get_home_dir() -> Path:
    """Root of loadoutd state, LOADOUTD_HOME or ``~/.loadoutd``."""
    root = os.environ.get("LOADOUTD_HOME", "~/.loadoutd")
    return Path(root).expanduser().resolve()


def get_config_dir() -> Path:
    """Directory holding daemon.yaml.

    Returns:
        LOADOUTD_CONFIG_DIR if set, else $LOADOUTD_HOME/config
    """
    config_dir: Path = get_home_dir() / "config"

    env_override: str | None = os.environ.get("LOADOUTD_CONFIG_DIR")
    if env_override is not None:
        config_dir = Path(env_override).resolve()

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_share_dir() -> Path:
    """Directory for data loadoutd writes at runtime.

    Returns:
        LOADOUTD_SHARE_DIR if set, else $LOADOUTD_HOME/share
    """
    share_dir: Path = get_home_dir() / "share"

    env_override: str | None = os.environ.get("LOADOUTD_SHARE_DIR")
    if env_override is not None:
        share_dir = Path(env_override).resolve()

    share_dir.mkdir(parents=True, exist_ok=True)
    return share_dir


def get_profiles_dir() -> Path:
    """Directory of saved ``<name>.yaml`` hardware and selection profiles."""
    profiles_dir = get_share_dir() / "profiles"
    profiles_dir.mkdir(parents=True, exist_ok=True)
    return profiles_dir
