"""Entry point for running the loadoutd server.

This module provides the ``python -m loadoutd`` entry point.
"""

import logging
import sys

import uvicorn

from loadout_library.config import load_config

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the loadoutd server.

    Loads configuration and starts the uvicorn server.
    """
    try:
        # Load configuration
        config = load_config()

        # Start uvicorn server
        uvicorn.run(
            "loadoutd.main:app",
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        )

    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Failed to start loadoutd: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
