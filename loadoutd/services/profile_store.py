"""Saved profile store.

Profiles are kept as one JSON document per name under the profiles
directory ($LOADOUTD_HOME/share/profiles/<name>.json).
"""

import json
import logging
import re
from pathlib import Path
from threading import Lock
from typing import Any

from loadout_library.exceptions import ProfileLoadError
from loadout_library.models.snapshot import CompileSnapshot
from loadout_library.profiles import dump_profile
from loadout_library.profiles import load_profile

from ..models.responses import SavedProfileInfo

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")


class ProfileStore:
    """File-backed store of saved profile documents.

    Security-critical: names are validated so that no path outside the
    profiles directory can be addressed.
    """

    def __init__(self, profiles_dir: Path) -> None:
        self.profiles_dir = Path(profiles_dir)
        self._lock = Lock()

    def _path(self, name: str) -> Path:
        if not NAME_PATTERN.match(name):
            raise ValueError(f"Invalid profile name '{name}': use lowercase letters, digits and hyphens")
        return self.profiles_dir / f"{name}.json"

    def list_profiles(self) -> list[SavedProfileInfo]:
        """List saved profiles sorted by name.

        Unreadable documents are skipped with a warning.
        """
        profiles = []
        for path in sorted(self.profiles_dir.glob("*.json")):
            try:
                document = json.loads(path.read_text(encoding="utf-8"))
                loaded = load_profile(document)
            except (OSError, json.JSONDecodeError, ProfileLoadError) as e:
                logger.warning(f"Skipping unreadable profile {path.name}: {e}")
                continue
            profiles.append(
                SavedProfileInfo(
                    name=path.stem,
                    created=loaded.created,
                    optimization_count=len(loaded.snapshot.optimizations),
                    package_count=len(loaded.snapshot.packages),
                )
            )
        return profiles

    def get(self, name: str) -> dict[str, Any]:
        """Read a saved profile document.

        Raises:
            ValueError: If the name is invalid
            FileNotFoundError: If no profile has that name
        """
        path = self._path(name)
        if not path.exists():
            raise FileNotFoundError(f"Profile not found: {name}")
        return json.loads(path.read_text(encoding="utf-8"))

    def save(self, name: str, snapshot: CompileSnapshot) -> dict[str, Any]:
        """Export a snapshot and write it under ``name``, replacing any existing profile.

        Returns:
            The written document
        """
        path = self._path(name)
        document = dump_profile(snapshot)

        with self._lock:
            self.profiles_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                tmp_path.replace(path)
            except Exception:
                if tmp_path.exists():
                    tmp_path.unlink()
                raise

        logger.info(f"Saved profile {name}")
        return document

    def delete(self, name: str) -> None:
        """Delete a saved profile.

        Raises:
            ValueError: If the name is invalid
            FileNotFoundError: If no profile has that name
        """
        path = self._path(name)
        if not path.exists():
            raise FileNotFoundError(f"Profile not found: {name}")
        path.unlink()
        logger.info(f"Deleted profile {name}")
