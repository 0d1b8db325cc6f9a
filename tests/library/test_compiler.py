"""
Unit tests for compile_loadout.

Tests determinism, coverage, ordering, conflict combination, safe mode and
the steam/dns/gamedvr end-to-end example.
"""

import json
import logging
import re
from datetime import datetime
from datetime import timedelta

import pytest
from pydantic import ValidationError

from loadout_library.compiler import applied_keys
from loadout_library.compiler import compile_loadout
from loadout_library.compiler import decode_literal_block
from loadout_library.compiler.registry import DEFAULT_REGISTRY
from loadout_library.models.fragments import CompileMode
from loadout_library.models.hardware import HardwareProfile
from loadout_library.models.optimizations import OptimizationKey
from loadout_library.models.optimizations import Tier
from loadout_library.models.snapshot import CompileSnapshot

K = OptimizationKey


def fragment_titles(text: str) -> list[str]:
    return re.findall(r"^# --- (.+) ---$", text, flags=re.MULTILINE)


@pytest.mark.unit
class TestDeterminism:
    """Same snapshot, same script."""

    def test_same_snapshot_same_text(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        first = compile_loadout(sample_snapshot, now)
        second = compile_loadout(sample_snapshot, now)

        assert first.text == second.text

    def test_fingerprint_ignores_timestamp(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        first = compile_loadout(sample_snapshot, now)
        later = compile_loadout(sample_snapshot, now + timedelta(hours=5))

        assert first.text != later.text
        assert first.normalized_text == later.normalized_text
        assert first.fingerprint == later.fingerprint

    def test_fingerprint_changes_with_selection(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        changed = sample_snapshot.model_copy(update={"optimizations": sample_snapshot.optimizations | {K.NAGLE}})

        assert compile_loadout(sample_snapshot, now).fingerprint != compile_loadout(changed, now).fingerprint

    def test_text_is_concatenation_of_sections(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        script = compile_loadout(sample_snapshot, now)

        assert script.text.startswith(script.header)
        assert script.text.index(script.preflight) < script.text.index(script.hardware_detection)
        assert script.text.index(script.install_block) < script.text.index(script.footer)
        assert script.text.endswith(script.footer + "\n")


@pytest.mark.unit
class TestKeyCoverage:
    """Each key alone yields exactly one fragment naming it."""

    @pytest.mark.parametrize("key", list(OptimizationKey), ids=lambda key: key.value)
    def test_single_key_yields_one_fragment(self, key: OptimizationKey, now: datetime) -> None:
        snapshot = CompileSnapshot(hardware=HardwareProfile(cpu="intel", gpu="amd"), optimizations={key})

        script = compile_loadout(snapshot, now)

        assert len(script.fragments_for(key)) == 1
        assert script.selected_keys == (key,)


@pytest.mark.unit
class TestOrderStability:
    """Body order comes from the registry."""

    def test_reverse_selection_same_body(self, now: datetime) -> None:
        keys = list(OptimizationKey)
        forward = CompileSnapshot(optimizations=keys)
        backward = CompileSnapshot(optimizations=list(reversed(keys)))

        assert compile_loadout(forward, now).text == compile_loadout(backward, now).text

    def test_body_follows_registry_order(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        script = compile_loadout(sample_snapshot, now)
        selected = [fragment for fragment in script.body if not fragment.is_implied]

        positions = [min(DEFAULT_REGISTRY.position(key) for key in fragment.source_keys) for fragment in selected]
        assert positions == sorted(positions)

    def test_implied_fragments_come_first(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        script = compile_loadout(sample_snapshot, now)

        assert script.body[0].title == "AMD X3D V-Cache check"
        assert script.body[1].title == "NVIDIA telemetry tasks"


@pytest.mark.unit
class TestConflictCombination:
    """Conflicting pairs compile to one fragment."""

    def test_tcpip6_pair_compiles_to_33(self, now: datetime) -> None:
        snapshot = CompileSnapshot(optimizations={K.IPV4_PREFER, K.TEREDO_DISABLE})

        script = compile_loadout(snapshot, now)

        assert re.findall(r'"DisabledComponents" (\d+)', script.text) == ["33"]
        assert len(script.fragments_for(K.IPV4_PREFER)) == 1
        assert script.fragments_for(K.IPV4_PREFER) == script.fragments_for(K.TEREDO_DISABLE)


@pytest.mark.unit
class TestSafeMode:
    """Safe mode keeps a subset of full mode."""

    def test_safe_fragments_subset_of_full(self, now: datetime) -> None:
        keys = set(OptimizationKey)
        profile = HardwareProfile(cpu="amd_x3d", gpu="nvidia", peripherals=["razer"])
        full = compile_loadout(CompileSnapshot(hardware=profile, optimizations=keys, packages={"Valve.Steam"}), now)
        safe = compile_loadout(
            CompileSnapshot(hardware=profile, optimizations=keys, packages={"Valve.Steam"}, mode=CompileMode.SAFE),
            now,
        )

        assert set(safe.body) <= set(full.body)
        assert len(safe.body) < len(full.body)

    def test_safe_mode_has_only_safe_fragments(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        safe = compile_loadout(sample_snapshot.model_copy(update={"mode": CompileMode.SAFE}), now)

        assert all(fragment.tier is Tier.SAFE and not fragment.requires_ack for fragment in safe.body)
        assert K.GAME_BAR not in safe.selected_keys
        assert K.DNS in safe.selected_keys

    def test_safe_mode_drops_install_and_guide(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        safe = compile_loadout(sample_snapshot.model_copy(update={"mode": CompileMode.SAFE}), now)

        assert safe.install_block == ""
        assert safe.packages == ()
        assert safe.guide_html == ""
        assert "winget" not in safe.text
        assert "$htmlGuide" not in safe.text

    def test_safe_mode_restore_point_is_unconditional(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        safe = compile_loadout(sample_snapshot.model_copy(update={"mode": CompileMode.SAFE}), now)
        full = compile_loadout(sample_snapshot, now)

        assert "Checkpoint-Computer" in safe.preflight
        assert "Read-Host" not in safe.preflight
        assert "Read-Host" in full.preflight

    def test_conflict_pair_with_unsafe_member_is_left_out(self, now: datetime) -> None:
        # power_plan is safe, ultimate_perf is caution: the merged fragment is caution
        snapshot = CompileSnapshot(optimizations={K.POWER_PLAN, K.ULTIMATE_PERF}, mode=CompileMode.SAFE)

        script = compile_loadout(snapshot, now)

        assert script.fragments_for(K.POWER_PLAN) == []
        assert script.selected_keys == ()

    @pytest.mark.parametrize(
        ("safe_key", "partner"),
        [
            (K.POWER_PLAN, K.ULTIMATE_PERF),
            (K.NAGLE, K.TCP_OPTIMIZER),
            (K.AUDIO_SYSTEM_SOUNDS, K.AUDIO_EXCLUSIVE),
        ],
    )
    def test_safe_key_merged_with_unsafe_partner_is_reported(
        self, safe_key: OptimizationKey, partner: OptimizationKey, now: datetime
    ) -> None:
        snapshot = CompileSnapshot(optimizations={safe_key, partner, K.DNS}, mode=CompileMode.SAFE)

        script = compile_loadout(snapshot, now)

        assert safe_key not in script.selected_keys
        assert set(script.skipped_keys) == {safe_key, partner}
        assert script.selected_keys == (K.DNS,)

    def test_full_mode_skips_nothing(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        script = compile_loadout(sample_snapshot, now)

        assert script.skipped_keys == ()

    def test_merged_away_safe_key_is_logged(self, now: datetime, caplog: pytest.LogCaptureFixture) -> None:
        snapshot = CompileSnapshot(optimizations={K.NAGLE, K.TCP_OPTIMIZER}, mode=CompileMode.SAFE)

        with caplog.at_level(logging.WARNING, logger="loadout_library.compiler.compiler"):
            compile_loadout(snapshot, now)

        assert "combined with a non-safe partner: nagle" in caplog.text
        assert "tcp_optimizer" not in caplog.text

    @pytest.mark.parametrize("mode", [CompileMode.FULL, CompileMode.SAFE])
    def test_applied_keys_matches_compiled_selection(self, mode: CompileMode, now: datetime) -> None:
        keys = set(OptimizationKey)

        script = compile_loadout(CompileSnapshot(optimizations=keys, mode=mode), now)

        assert applied_keys(keys, mode) == list(script.selected_keys)


@pytest.mark.unit
class TestScriptSections:
    """Header, config and footer content."""

    def test_config_json_round_trips(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        script = compile_loadout(sample_snapshot, now)

        config = json.loads(decode_literal_block(script.text, "ConfigJson"))

        assert config["generated"] == "2025-03-01T12:00:00Z"
        assert config["hardware"]["cpu"] == "amd_x3d"
        assert config["hardware"]["monitorSoftware"] == ["dell"]
        assert config["optimizations"] == [key.value for key in script.selected_keys]
        assert config["packages"] == list(script.packages)
        assert config["risk_profile"] == "risky"

    def test_guide_is_embedded_verbatim(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        script = compile_loadout(sample_snapshot, now)

        assert decode_literal_block(script.text, "htmlGuide") == script.guide_html
        assert "loadout-guide.html" in script.footer

    def test_custom_guide_filename(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        script = compile_loadout(sample_snapshot, now, guide_filename="my-guide.html")
        assert "my-guide.html" in script.footer

    def test_danger_banner_only_with_restricted_keys(self, now: datetime) -> None:
        plain = compile_loadout(CompileSnapshot(optimizations={K.DNS}), now)
        danger = compile_loadout(CompileSnapshot(optimizations={K.SPECTRE_MELTDOWN_OFF}), now)

        assert "DANGER_ZONE_ENABLED" not in plain.header
        assert "DANGER_ZONE_ENABLED" in danger.header
        assert "spectre_meltdown_off" in danger.header

    def test_reboot_list(self, now: datetime) -> None:
        script = compile_loadout(CompileSnapshot(optimizations={K.HAGS, K.DNS}), now)

        assert script.requires_reboot
        assert "Reboot required for:" in script.footer
        assert "No reboot required." not in script.footer

    def test_empty_selection_still_compiles(self, now: datetime) -> None:
        script = compile_loadout(CompileSnapshot(hardware=HardwareProfile(cpu="intel", gpu="intel")), now)

        assert script.body == ()
        assert "No optimizations selected" in script.text
        assert "No reboot required." in script.footer

    def test_step_total_counts_install(self, sample_snapshot: CompileSnapshot, now: datetime) -> None:
        with_install = compile_loadout(sample_snapshot, now)
        without = compile_loadout(sample_snapshot.model_copy(update={"packages": frozenset()}), now)

        assert "$script:StepTotal = 4" in with_install.header
        assert "$script:StepTotal = 3" in without.header
        assert with_install.text.count("Write-Step ") == 4 + 1


@pytest.mark.unit
class TestHardwareTags:
    """Raw CPU/GPU tags outside the known classes are written into the header comment."""

    @pytest.mark.parametrize(
        "tag",
        [
            "zen9 #>\nRemove-Item C:\\Users -Recurse -Force\n<#",
            "zen9#>",
            "zen9\nStop-Computer",
            "zen9; Stop-Computer",
            "$(Stop-Computer)",
            "zen9'",
        ],
    )
    def test_tags_that_leave_the_comment_are_rejected(self, tag: str) -> None:
        with pytest.raises(ValidationError):
            HardwareProfile(cpu=tag)
        with pytest.raises(ValidationError):
            HardwareProfile(gpu=tag)

    def test_raw_tag_stays_inside_comment_block(self, now: datetime) -> None:
        snapshot = CompileSnapshot(hardware=HardwareProfile(cpu="Zen-9.X", gpu="arc_b580"))

        script = compile_loadout(snapshot, now)

        lines = script.header.splitlines()
        start = lines.index("<#")
        end = lines.index("#>", start)
        comment = lines[start:end]
        assert any("(zen-9.x)" in line and "(arc_b580)" in line for line in comment)
        assert not any("zen-9.x" in line for line in lines[:start])


@pytest.mark.unit
class TestEndToEnd:
    """intel/nvidia with dns, gamedvr and steam."""

    def test_dns_gamedvr_steam(self, now: datetime) -> None:
        snapshot = CompileSnapshot(
            hardware=HardwareProfile(cpu="intel", gpu="nvidia"),
            optimizations={"dns", "gamedvr"},
            packages={"steam"},
            mode=CompileMode.FULL,
        )

        script = compile_loadout(snapshot, now)

        titles = fragment_titles(script.text)
        assert titles.count("DNS (cloudflare)") == 1
        assert titles.count("Game DVR") == 1
        assert script.text.count("Set-DnsClientServerAddress") == 1
        assert script.text.count('"GameDVR_Enabled" 0') == 1
        assert '$pkgs = @("steam")' in script.text
        assert "foreach ($pkg in $pkgs)" in script.text

        keyed = [fragment for fragment in script.body if not fragment.is_implied]
        assert {key for fragment in keyed for key in fragment.source_keys} == {K.DNS, K.GAMEDVR}
        assert script.selected_keys == (K.GAMEDVR, K.DNS)
        for key in OptimizationKey:
            if key not in (K.DNS, K.GAMEDVR):
                assert script.fragments_for(key) == []
