"""
Unit tests for saved profile loading and export.

Tests tolerant loading of legacy and unknown keys, malformed documents,
file loading and deterministic export.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from loadout_library.exceptions import ProfileLoadError
from loadout_library.models.fragments import CompileMode
from loadout_library.models.hardware import CpuClass
from loadout_library.models.hardware import PeripheralType
from loadout_library.models.optimizations import OptimizationKey
from loadout_library.models.snapshot import CompileSnapshot
from loadout_library.profiles import dump_profile
from loadout_library.profiles import load_profile
from loadout_library.profiles import load_profile_file

K = OptimizationKey


@pytest.mark.unit
class TestLoadProfile:
    """Test load_profile."""

    def test_loads_known_keys(self, profile_document: dict[str, Any]) -> None:
        loaded = load_profile(profile_document)

        assert loaded.snapshot.optimizations == {K.DNS, K.GAMEDVR}
        assert loaded.snapshot.packages == {"Valve.Steam"}
        assert loaded.snapshot.hardware.cpu is CpuClass.INTEL
        assert loaded.snapshot.hardware.peripherals == {PeripheralType.RAZER}

    def test_legacy_and_unknown_keys_are_ignored(self, profile_document: dict[str, Any]) -> None:
        """Test restore_point and unknown keys are reported instead of failing the load."""
        loaded = load_profile(profile_document)

        assert loaded.ignored_keys == ("restore_point", "hyperdrive")

    def test_accepts_json_text(self, profile_document: dict[str, Any]) -> None:
        loaded = load_profile(json.dumps(profile_document))

        assert loaded.snapshot.optimizations == {K.DNS, K.GAMEDVR}

    def test_mode_and_dns_are_applied(self, profile_document: dict[str, Any]) -> None:
        loaded = load_profile(profile_document, mode=CompileMode.SAFE, dns_provider="quad9")

        assert loaded.snapshot.mode is CompileMode.SAFE
        assert loaded.snapshot.dns_provider == "quad9"

    def test_created_is_parsed(self, profile_document: dict[str, Any]) -> None:
        loaded = load_profile(profile_document)

        assert loaded.created.year == 2025
        assert loaded.created.utcoffset() is not None

    def test_duplicate_keys_collapse(self, profile_document: dict[str, Any]) -> None:
        profile_document["optimizations"] = ["dns", "dns", "hyperdrive", "hyperdrive"]

        loaded = load_profile(profile_document)

        assert loaded.snapshot.optimizations == {K.DNS}
        assert loaded.ignored_keys == ("hyperdrive",)

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ProfileLoadError, match="not valid JSON"):
            load_profile("{not json")

    def test_non_object_raises(self) -> None:
        with pytest.raises(ProfileLoadError):
            load_profile("[1, 2, 3]")

    def test_missing_hardware_raises(self, profile_document: dict[str, Any]) -> None:
        del profile_document["hardware"]

        with pytest.raises(ProfileLoadError, match="hardware"):
            load_profile(profile_document)

    def test_unsupported_version_raises(self, profile_document: dict[str, Any]) -> None:
        profile_document["version"] = "2.0"

        with pytest.raises(ProfileLoadError):
            load_profile(profile_document)

    def test_unknown_peripheral_raises(self, profile_document: dict[str, Any]) -> None:
        profile_document["hardware"]["peripherals"] = ["toaster"]

        with pytest.raises(ProfileLoadError):
            load_profile(profile_document)

    def test_cpu_tag_outside_tag_alphabet_raises(self, profile_document: dict[str, Any]) -> None:
        profile_document["hardware"]["cpu"] = "riscv #>\nStop-Computer"

        with pytest.raises(ProfileLoadError, match="Invalid hardware class"):
            load_profile(profile_document)

    def test_unknown_cpu_is_kept(self, profile_document: dict[str, Any]) -> None:
        profile_document["hardware"]["cpu"] = "riscv"

        loaded = load_profile(profile_document)

        assert loaded.snapshot.hardware.cpu == "riscv"
        assert not loaded.snapshot.hardware.is_known_cpu


@pytest.mark.unit
class TestLoadProfileFile:
    """Test load_profile_file."""

    def test_reads_file(self, temp_storage_dir: Path, profile_document: dict[str, Any]) -> None:
        path = temp_storage_dir / "profile.json"
        path.write_text(json.dumps(profile_document), encoding="utf-8")

        loaded = load_profile_file(path)

        assert loaded.snapshot.optimizations == {K.DNS, K.GAMEDVR}

    def test_missing_file_raises(self, temp_storage_dir: Path) -> None:
        with pytest.raises(ProfileLoadError, match="Cannot read profile"):
            load_profile_file(temp_storage_dir / "missing.json")


@pytest.mark.unit
class TestDumpProfile:
    """Test dump_profile."""

    def test_document_shape(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        document = dump_profile(sample_snapshot, now)

        assert document["version"] == "1.0"
        assert document["hardware"] == {
            "cpu": "amd_x3d",
            "gpu": "nvidia",
            "peripherals": ["logitech"],
            "monitorSoftware": ["dell"],
        }
        assert document["software"] == ["Discord.Discord", "Valve.Steam"]

    def test_dump_is_deterministic(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        assert dump_profile(sample_snapshot, now) == dump_profile(sample_snapshot, now)

    def test_dump_then_load_keeps_selection(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        loaded = load_profile(dump_profile(sample_snapshot, now))

        assert loaded.snapshot.optimizations == sample_snapshot.optimizations
        assert loaded.snapshot.packages == sample_snapshot.packages
        assert loaded.snapshot.hardware == sample_snapshot.hardware
        assert loaded.ignored_keys == ()
