"""Unit tests for CompileService."""

from datetime import datetime
from datetime import timedelta
from typing import Any

import pytest
from pydantic import ValidationError

from loadout_library.config.settings import LoadoutSettings
from loadout_library.exceptions import ProfileLoadError
from loadout_library.models.fragments import CompileMode
from loadout_library.models.optimizations import CATALOG
from loadoutd.models.requests import CompileRequest
from loadoutd.models.requests import HardwareRequest
from loadoutd.models.requests import LoadProfileRequest
from loadoutd.services.compile_service import CompileService
from loadoutd.services.compile_service import split_keys


@pytest.mark.unit
class TestSplitKeys:
    """Tests for split_keys."""

    def test_separates_unknown_keys(self) -> None:
        keys, ignored = split_keys(["dns", "restore_point", "GameDVR", "hyperdrive"])

        assert {key.value for key in keys} == {"dns", "gamedvr"}
        assert ignored == ["restore_point", "hyperdrive"]

    def test_ignored_keys_are_not_repeated(self) -> None:
        _, ignored = split_keys(["bogus", "bogus"])

        assert ignored == ["bogus"]


@pytest.mark.unit
class TestCompileService:
    """Tests for CompileService."""

    @pytest.fixture
    def service(self) -> CompileService:
        return CompileService(LoadoutSettings(dns_provider="cloudflare"))

    @pytest.fixture
    def request_body(self) -> CompileRequest:
        return CompileRequest(
            hardware=HardwareRequest(cpu="amd_x3d", gpu="nvidia", peripherals=["logitech"]),
            optimizations=["dns", "gamedvr", "hags", "not_a_key"],
            packages=["Valve.Steam"],
        )

    def test_build_snapshot_uses_configured_dns(self, service: CompileService, request_body: CompileRequest) -> None:
        service.settings = LoadoutSettings(dns_provider="quad9")

        snapshot, ignored = service.build_snapshot(request_body)

        assert snapshot.dns_provider == "quad9"
        assert ignored == ["not_a_key"]

    def test_request_dns_wins(self, service: CompileService, request_body: CompileRequest) -> None:
        request_body.dns_provider = "google"

        snapshot, _ = service.build_snapshot(request_body)

        assert snapshot.dns_provider == "google"

    def test_invalid_dns_is_value_error(self, service: CompileService, request_body: CompileRequest) -> None:
        request_body.dns_provider = "example"

        with pytest.raises(ValueError):
            service.build_snapshot(request_body)

    def test_unknown_peripheral_is_validation_error(self, service: CompileService) -> None:
        request_body = CompileRequest(hardware=HardwareRequest(peripherals=["toaster"]))

        with pytest.raises(ValidationError):
            service.build_snapshot(request_body)

    def test_compile_response(self, service: CompileService, request_body: CompileRequest, now: datetime) -> None:
        response = service.compile(request_body, now)

        assert response.mode is CompileMode.FULL
        assert set(response.selected_keys) == {"dns", "gamedvr", "hags"}
        assert response.ignored_keys == ["not_a_key"]
        assert "Valve.Steam" in response.packages
        assert response.requires_reboot is True
        assert response.guide
        assert response.generated_at == now
        assert response.changed is True
        assert any("hags" in fragment.source_keys for fragment in response.fragments)

    def test_recompile_is_unchanged(self, service: CompileService, request_body: CompileRequest, now: datetime) -> None:
        """Test recompiling the same request later keeps the tracked pair."""
        first = service.compile(request_body, now)
        second = service.compile(request_body, now + timedelta(seconds=30))

        assert second.changed is False
        assert second.fingerprint == first.fingerprint
        assert service.diff().removed == 0

    def test_diff_after_selection_change(
        self, service: CompileService, request_body: CompileRequest, now: datetime
    ) -> None:
        service.compile(request_body, now)
        request_body.optimizations = ["dns", "gamedvr"]

        response = service.compile(request_body, now)
        diff = service.diff()

        assert response.changed is True
        assert diff.has_changes
        assert diff.removed > 0
        assert diff.change_starts
        assert diff.unchanged + diff.removed + diff.added == len(diff.lines)

    def test_safe_mode_has_no_guide(self, service: CompileService, request_body: CompileRequest, now: datetime) -> None:
        request_body.mode = CompileMode.SAFE

        response = service.compile(request_body, now)

        assert response.guide == ""
        assert "hags" not in response.selected_keys

    def test_verify(self, service: CompileService, request_body: CompileRequest, now: datetime) -> None:
        response = service.verify(request_body, now)

        assert "Test-RegValue" in response.script
        assert response.ignored_keys == ["not_a_key"]

    def test_load_profile(self, service: CompileService, profile_document: dict[str, Any]) -> None:
        response = service.load_profile(LoadProfileRequest(profile=profile_document))

        assert response.hardware.cpu == "intel"
        assert response.hardware.peripherals == ["razer"]
        assert set(response.optimizations) == {"dns", "gamedvr"}
        assert response.packages == ["Valve.Steam"]
        assert response.ignored_keys == ["restore_point", "hyperdrive"]

    def test_load_profile_malformed(self, service: CompileService) -> None:
        with pytest.raises(ProfileLoadError):
            service.load_profile(LoadProfileRequest(profile={"version": "1.0"}))

    def test_catalog_lists_every_key(self, service: CompileService) -> None:
        catalog = service.catalog()

        assert len(catalog.entries) == len(CATALOG)
        assert "cloudflare" in catalog.dns_providers
        entries = {entry.key: entry for entry in catalog.entries}
        assert entries["hags"].requires_reboot is True
        assert entries["audio_enhancements"].conflicts_with == "audio_communications"
        assert entries["audio_communications"].conflicts_with == "audio_enhancements"
