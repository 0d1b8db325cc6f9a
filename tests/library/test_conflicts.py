"""
Unit tests for the conflict resolver.

Tests combined fragments for keys sharing a target and metadata merging.
"""

import re

import pytest

from loadout_library.compiler.conflicts import CONFLICT_RULES
from loadout_library.compiler.conflicts import CONFLICTS_BY_KEY
from loadout_library.compiler.conflicts import ConflictRule
from loadout_library.compiler.conflicts import _index_rules
from loadout_library.compiler.conflicts import combine_tcpip6
from loadout_library.compiler.conflicts import resolve_conflicts
from loadout_library.compiler.context import RuleContext
from loadout_library.compiler.registry import DEFAULT_REGISTRY
from loadout_library.compiler.registry import RuleRegistry
from loadout_library.exceptions import CompilationError
from loadout_library.exceptions import CoverageError
from loadout_library.models.hardware import HardwareProfile
from loadout_library.models.optimizations import OptimizationKey
from loadout_library.models.optimizations import Tier

K = OptimizationKey


@pytest.fixture
def ctx() -> RuleContext:
    return RuleContext.for_profile(HardwareProfile(cpu="intel", gpu="nvidia"))


def disabled_components_values(text: str) -> list[int]:
    return [int(value) for value in re.findall(r'"DisabledComponents" (\d+)', text)]


@pytest.mark.unit
class TestConflictTable:
    """Conflict table validation."""

    def test_every_rule_names_two_registered_keys(self) -> None:
        for rule in CONFLICT_RULES:
            assert len(rule.keys) == 2
            assert all(key in DEFAULT_REGISTRY.keys() for key in rule.keys)

    def test_each_key_has_at_most_one_partner(self) -> None:
        keys = [key for rule in CONFLICT_RULES for key in rule.keys]
        assert len(keys) == len(set(keys))
        assert set(CONFLICTS_BY_KEY) == set(keys)

    def test_key_in_two_rules_raises_coverage_error(self) -> None:
        rules = (
            ConflictRule(frozenset({K.DNS, K.NAGLE}), "first", combine_tcpip6),
            ConflictRule(frozenset({K.DNS, K.QOS_GAMING}), "second", combine_tcpip6),
        )
        with pytest.raises(CoverageError):
            _index_rules(rules, DEFAULT_REGISTRY)

    def test_single_key_rule_raises_coverage_error(self) -> None:
        with pytest.raises(CoverageError):
            _index_rules((ConflictRule(frozenset({K.DNS}), "lonely", combine_tcpip6),), DEFAULT_REGISTRY)


@pytest.mark.unit
class TestResolveConflicts:
    """Combination of conflicting fragments."""

    def test_tcpip6_pair_writes_combined_bits_once(self, ctx: RuleContext) -> None:
        fragments = resolve_conflicts({K.IPV4_PREFER, K.TEREDO_DISABLE}, ctx)

        assert len(fragments) == 1
        text = fragments[0].text
        assert disabled_components_values(text) == [33]
        assert "teredo set state disabled" in text
        assert fragments[0].source_keys == {K.IPV4_PREFER, K.TEREDO_DISABLE}

    def test_single_tcpip6_key_writes_its_own_bit(self, ctx: RuleContext) -> None:
        prefer = resolve_conflicts({K.IPV4_PREFER}, ctx)
        teredo = resolve_conflicts({K.TEREDO_DISABLE}, ctx)

        assert disabled_components_values(prefer[0].text) == [32]
        assert disabled_components_values(teredo[0].text) == [1]

    def test_combined_fragment_takes_earlier_position(self, ctx: RuleContext) -> None:
        fragments = resolve_conflicts({K.DNS, K.TEREDO_DISABLE, K.IPV4_PREFER, K.RSS_ENABLE}, ctx)

        keys = [fragment.source_keys for fragment in fragments]
        assert keys[0] == {K.DNS}
        assert keys[1] == {K.IPV4_PREFER, K.TEREDO_DISABLE}
        assert keys[-1] == {K.RSS_ENABLE}

    def test_combined_metadata_is_union(self, ctx: RuleContext) -> None:
        fragments = resolve_conflicts({K.NAGLE, K.TCP_OPTIMIZER}, ctx)

        assert len(fragments) == 1
        merged = fragments[0]
        assert merged.tier is Tier.RISKY
        assert merged.requires_ack
        assert "Reset with: netsh int tcp reset" in merged.warnings
        assert merged.text.count("Get-NetAdapter") == 1
        assert '"TCPNoDelay" 1' in merged.text
        assert '"TcpDelAckTicks" 0' in merged.text

    def test_reboot_flag_is_ored(self, ctx: RuleContext) -> None:
        fragments = resolve_conflicts({K.IPV4_PREFER, K.TEREDO_DISABLE}, ctx)
        assert fragments[0].requires_reboot

    def test_power_plans_fall_back_to_high_performance(self, ctx: RuleContext) -> None:
        fragments = resolve_conflicts({K.POWER_PLAN, K.ULTIMATE_PERF}, ctx)

        assert len(fragments) == 1
        text = fragments[0].text
        assert "Ultimate Performance" in text
        assert "8c5e7fda-e8bf-4a96-9a85-a6e23a8c635c" in text
        assert text.count("powercfg /duplicatescheme") == 1

    def test_privacy_tiers_use_strictest_telemetry_level(self, ctx: RuleContext) -> None:
        fragments = resolve_conflicts({K.PRIVACY_TIER2, K.PRIVACY_TIER3}, ctx)

        assert len(fragments) == 1
        text = fragments[0].text
        assert re.findall(r'"AllowTelemetry" (\d+)', text) == ["0"]
        assert "XblAuthManager" in text
        assert "Start_TrackProgs" in text

    def test_ducking_pair_writes_value_once(self, ctx: RuleContext) -> None:
        fragments = resolve_conflicts({K.AUDIO_ENHANCEMENTS, K.AUDIO_COMMUNICATIONS}, ctx)

        assert len(fragments) == 1
        assert fragments[0].text.count("UserDuckingPreference") == 1

    def test_every_rule_combines_to_one_fragment(self, ctx: RuleContext) -> None:
        for rule in CONFLICT_RULES:
            fragments = resolve_conflicts(rule.keys, ctx)
            assert len(fragments) == 1, rule.target
            assert fragments[0].source_keys == rule.keys

    def test_unrelated_keys_are_untouched(self, ctx: RuleContext) -> None:
        fragments = resolve_conflicts({K.DNS, K.GAMEDVR, K.MOUSE_ACCEL}, ctx)
        assert [len(fragment.source_keys) for fragment in fragments] == [1, 1, 1]

    def test_generator_failure_names_key(self, ctx: RuleContext) -> None:
        def broken(ctx):
            raise RuntimeError("boom")

        generators = {key: DEFAULT_REGISTRY.resolve(key) for key in DEFAULT_REGISTRY.keys()}
        generators[K.DNS] = broken
        registry = RuleRegistry(generators)

        with pytest.raises(CompilationError) as exc_info:
            resolve_conflicts({K.DNS}, ctx, registry)

        assert exc_info.value.key == "dns"
        assert "boom" in str(exc_info.value)
