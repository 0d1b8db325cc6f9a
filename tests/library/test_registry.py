"""
Unit tests for the rule registry.

Tests key coverage, declaration order and table validation.
"""

import pytest

from loadout_library.compiler.context import RuleContext
from loadout_library.compiler.registry import DEFAULT_REGISTRY
from loadout_library.compiler.registry import RuleRegistry
from loadout_library.compiler.rules import RULE_SETS
from loadout_library.compiler.rules.base import RuleSet
from loadout_library.exceptions import CoverageError
from loadout_library.models.hardware import HardwareProfile
from loadout_library.models.optimizations import Category
from loadout_library.models.optimizations import OptimizationKey

K = OptimizationKey


@pytest.mark.unit
class TestRegistryCoverage:
    """Every key resolves to exactly one generator."""

    def test_every_key_has_a_generator(self) -> None:
        assert set(DEFAULT_REGISTRY.keys()) == set(OptimizationKey)
        assert len(DEFAULT_REGISTRY) == len(OptimizationKey)

    def test_every_generator_returns_a_fragment_for_its_key(self) -> None:
        ctx = RuleContext.for_profile(HardwareProfile())
        for key in DEFAULT_REGISTRY.keys():
            fragment = DEFAULT_REGISTRY.resolve(key)(ctx)
            assert fragment.source_keys == frozenset({key})
            assert fragment.text.strip()
            assert fragment.title

    def test_missing_key_raises_coverage_error(self) -> None:
        partial = RuleSet(Category.SYSTEM)

        @partial.rule(K.DNS)
        def dns(ctx):
            return None

        with pytest.raises(CoverageError) as exc_info:
            RuleRegistry.from_rule_sets([partial])

        assert "missing" in str(exc_info.value)

    def test_duplicate_key_raises_coverage_error(self) -> None:
        extra = RuleSet(Category.NETWORK)

        @extra.rule(K.DNS)
        def dns_again(ctx):
            return None

        with pytest.raises(CoverageError):
            RuleRegistry.from_rule_sets([*RULE_SETS, extra])


@pytest.mark.unit
class TestRegistryOrder:
    """Output order is declaration order, never selection order."""

    def test_ordered_ignores_input_order(self) -> None:
        forward = DEFAULT_REGISTRY.ordered([K.DNS, K.PAGEFILE, K.GAMEDVR])
        backward = DEFAULT_REGISTRY.ordered([K.GAMEDVR, K.PAGEFILE, K.DNS])

        assert forward == backward
        assert forward == [K.PAGEFILE, K.GAMEDVR, K.DNS]

    def test_ordered_drops_duplicates(self) -> None:
        assert DEFAULT_REGISTRY.ordered([K.DNS, K.DNS]) == [K.DNS]

    def test_position_follows_keys(self) -> None:
        keys = DEFAULT_REGISTRY.keys()
        for index, key in enumerate(keys):
            assert DEFAULT_REGISTRY.position(key) == index

    def test_categories_are_grouped(self) -> None:
        keys = DEFAULT_REGISTRY.keys()
        assert keys.index(K.PAGEFILE) < keys.index(K.GAMEDVR) < keys.index(K.POWER_PLAN)
        assert keys.index(K.POWER_PLAN) < keys.index(K.DNS) < keys.index(K.PRIVACY_TIER1)
        assert keys.index(K.PRIVACY_TIER1) < keys.index(K.AUDIO_ENHANCEMENTS)
