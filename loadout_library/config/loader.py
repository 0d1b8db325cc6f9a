"""Configuration loading for loadoutd.

Contract:
- Inputs: Config file paths, environment variables
- Outputs: LoadoutSettings objects
- Side Effects: Creates default config file if missing
"""

import logging
import os
from pathlib import Path

import yaml

from ..storage.paths import get_config_dir
from .settings import LoadoutSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "LOADOUTD_"

DEFAULT_CONFIG = """# loadoutd configuration

# Server settings
host: "127.0.0.1"
port: 8430
log_level: "info"

# Browser origins allowed to call the API
cors_origins:
  - "http://localhost:5173"
  - "http://127.0.0.1:5173"

# Compiler defaults
dns_provider: "cloudflare"

# Clients should wait this long after the last selection change before
# recompiling and refreshing the diff view
debounce_ms: 300

# File name the full script writes its guide to
guide_filename: "loadout-guide.html"
"""


def get_config_path() -> Path:
    """Get path to config file.

    Returns:
        Path to daemon.yaml in config directory
    """
    return get_config_dir() / "daemon.yaml"


def create_default_config() -> None:
    """Create default config file if it doesn't exist."""
    config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Config file already exists: {config_path}")
        return

    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Created default config: {config_path}")


def load_config(config_path: Path | None = None) -> LoadoutSettings:
    """Load configuration from YAML and environment.

    Precedence is defaults < YAML < environment variables (LOADOUTD_PORT
    and so on).

    Args:
        config_path: Optional config file path (default: daemon.yaml in config dir)

    Returns:
        Validated settings

    Example:
        >>> settings = load_config()
        >>> assert settings.port > 0
    """
    if config_path is None:
        config_path = get_config_path()
        if not config_path.exists():
            create_default_config()

    yaml_settings = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.info("Using default settings and environment variables")

    # YAML values only fill in settings that have no environment variable
    filtered_yaml = {
        key: value for key, value in yaml_settings.items() if f"{ENV_PREFIX}{str(key).upper()}" not in os.environ
    }

    settings = LoadoutSettings(**filtered_yaml)

    logger.info(f"Configuration loaded: host={settings.host}, port={settings.port}, log_level={settings.log_level}")

    return settings
