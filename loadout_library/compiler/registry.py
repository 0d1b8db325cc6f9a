"""Rule registry.

Maps every optimization key to exactly one fragment generator. The registry
is built from the rule sets at import time, and building it fails with
CoverageError if a key has no generator or more than one.

Contract:
- Inputs: Rule sets in declaration order
- Outputs: resolve(key) and ordered(selected) lookups
- Side Effects: Raises CoverageError at import if coverage is incomplete
"""

from collections.abc import Iterable

from ..exceptions import CoverageError
from ..models.optimizations import OptimizationKey
from .rules import RULE_SETS
from .rules import FragmentGenerator
from .rules import RuleSet


class RuleRegistry:
    """Exhaustive key → generator dispatch in fixed declaration order."""

    def __init__(self, generators: dict[OptimizationKey, FragmentGenerator]) -> None:
        self._generators = generators
        self._order = {key: index for index, key in enumerate(generators)}

    @classmethod
    def from_rule_sets(cls, rule_sets: Iterable[RuleSet]) -> "RuleRegistry":
        """Build a registry, checking that the vocabulary is covered exactly once.

        Raises:
            CoverageError: If a key is registered twice or not at all
        """
        generators: dict[OptimizationKey, FragmentGenerator] = {}
        duplicates = []
        for rule_set in rule_sets:
            for rule in rule_set:
                if rule.key in generators:
                    duplicates.append(rule.key.value)
                    continue
                generators[rule.key] = rule.generate

        missing = [key.value for key in OptimizationKey if key not in generators]
        if duplicates or missing:
            raise CoverageError(f"Rule registry does not cover the vocabulary: missing={missing}, duplicated={duplicates}")
        return cls(generators)

    def resolve(self, key: OptimizationKey) -> FragmentGenerator:
        """Get the generator for a key."""
        return self._generators[key]

    def position(self, key: OptimizationKey) -> int:
        """Declaration index of a key."""
        return self._order[key]

    def ordered(self, selected: Iterable[OptimizationKey]) -> list[OptimizationKey]:
        """Filter the declaration order down to the selected keys.

        Selection order is irrelevant; each selected key appears once.

        Example:
            >>> DEFAULT_REGISTRY.ordered({OptimizationKey.GAMEDVR, OptimizationKey.DNS})
            [<OptimizationKey.GAMEDVR: 'gamedvr'>, <OptimizationKey.DNS: 'dns'>]
        """
        chosen = set(selected)
        return [key for key in self._generators if key in chosen]

    def keys(self) -> list[OptimizationKey]:
        return list(self._generators)

    def __len__(self) -> int:
        return len(self._generators)


DEFAULT_REGISTRY = RuleRegistry.from_rule_sets(RULE_SETS)
