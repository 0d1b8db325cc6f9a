"""
Shared pytest fixtures for the loadout test suite.

Provides fixtures for:
- Temporary storage directories
- Fixed generation times
- Sample snapshots and saved profile documents
"""

import os
import tempfile
from collections.abc import Generator
from datetime import datetime
from datetime import timezone
from pathlib import Path
from typing import Any

import pytest

from loadout_library.models.fragments import CompileMode
from loadout_library.models.hardware import HardwareProfile
from loadout_library.models.optimizations import OptimizationKey
from loadout_library.models.snapshot import CompileSnapshot

# Keep modules that load config at import time (loadoutd.main) away from ~/.loadoutd
os.environ.setdefault("LOADOUTD_HOME", tempfile.mkdtemp(prefix="loadoutd-tests-"))

K = OptimizationKey

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_storage_dir() -> Generator[Path, None, None]:
    """Create temporary storage directory for tests.

    Automatically cleaned up after test completes.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_storage_env(temp_storage_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point LOADOUTD_HOME at a temp directory.

    Args:
        temp_storage_dir: Temporary directory fixture
        monkeypatch: pytest monkeypatch fixture

    Returns:
        Path to temporary storage directory
    """
    monkeypatch.setenv("LOADOUTD_HOME", str(temp_storage_dir))
    monkeypatch.delenv("LOADOUTD_CONFIG_DIR", raising=False)
    monkeypatch.delenv("LOADOUTD_SHARE_DIR", raising=False)
    return temp_storage_dir


@pytest.fixture
def now() -> datetime:
    """Fixed generation time."""
    return FIXED_NOW


@pytest.fixture
def x3d_profile() -> HardwareProfile:
    return HardwareProfile(cpu="amd_x3d", gpu="nvidia", peripherals=["logitech"], monitor_software=["dell"])


@pytest.fixture
def sample_snapshot(x3d_profile: HardwareProfile) -> CompileSnapshot:
    """A mixed-tier full-mode selection."""
    return CompileSnapshot(
        hardware=x3d_profile,
        optimizations=frozenset(
            {
                K.DNS,
                K.GAMEDVR,
                K.GAME_BAR,
                K.MOUSE_ACCEL,
                K.IPV4_PREFER,
                K.TEREDO_DISABLE,
                K.HAGS,
                K.POWER_PLAN,
            }
        ),
        packages=frozenset({"Valve.Steam", "Discord.Discord"}),
        mode=CompileMode.FULL,
    )


@pytest.fixture
def profile_document() -> dict[str, Any]:
    """A saved profile document as written by dump_profile."""
    return {
        "version": "1.0",
        "created": "2025-01-01T00:00:00Z",
        "hardware": {
            "cpu": "intel",
            "gpu": "amd",
            "peripherals": ["razer"],
            "monitorSoftware": [],
        },
        "optimizations": ["dns", "gamedvr", "restore_point", "hyperdrive"],
        "software": ["Valve.Steam"],
    }
