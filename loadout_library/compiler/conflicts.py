"""Conflict resolver.

Some optimization keys act on the same target: two keys that both write the
Tcpip6 DisabledComponents bit-field, two ways of activating a power plan, and
so on. Emitting their fragments independently would let the second write
silently override the first. Each such pair declares a combiner here; when
both keys are selected the combiner replaces the two fragments with one,
placed at the earlier key's position in the registry order.

Contract:
- Inputs: Selected keys, RuleContext, RuleRegistry
- Outputs: Conflict-resolved fragments in registry order
- Side Effects: Raises CoverageError at import if the table is malformed
"""

import logging
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from functools import reduce
from operator import or_

from ..exceptions import CompilationError
from ..exceptions import CoverageError
from ..models.fragments import CompileMode
from ..models.fragments import Fragment
from ..models.optimizations import OptimizationKey
from ..models.optimizations import get_info
from ..models.optimizations import highest_tier
from .context import RuleContext
from .flags import Tcpip6Components
from .registry import DEFAULT_REGISTRY
from .registry import RuleRegistry
from .rules.audio import ducking_lines
from .rules.audio import mute_events_lines
from .rules.audio import silent_scheme_lines
from .rules.base import ok
from .rules.network import NAGLE_VALUES
from .rules.network import TCP_GLOBALS
from .rules.network import TCP_OPTIMIZER_VALUES
from .rules.network import TCPIP6_FLAGS
from .rules.network import TEREDO_OFF
from .rules.network import disabled_components_lines
from .rules.network import tcp_interface_lines
from .rules.power import high_performance_lines
from .rules.power import ultimate_performance_lines
from .rules.power import usb_driver_lines
from .rules.power import usb_powercfg_lines
from .rules.privacy import GAME_PASS_WARNING
from .rules.privacy import TELEMETRY_LEVELS
from .rules.privacy import telemetry_lines
from .rules.privacy import tracking_lines
from .rules.privacy import xbox_service_lines

logger = logging.getLogger(__name__)

K = OptimizationKey

Combiner = Callable[[Mapping[OptimizationKey, Fragment], RuleContext], Fragment]


@dataclass(frozen=True)
class ConflictRule:
    """A pair of keys acting on a shared target, and how to combine them.

    Attributes:
        keys: The two conflicting keys
        target: Description of the shared target
        combine: Builds the single fragment emitted when both keys are selected
    """

    keys: frozenset[OptimizationKey]
    target: str
    combine: Combiner


def merge_fragments(
    parts: Mapping[OptimizationKey, Fragment],
    title: str,
    lines: Iterable[str],
    warnings: Iterable[str] = (),
) -> Fragment:
    """Build a combined fragment whose metadata is the union of its parts.

    Source keys are unioned, warnings are concatenated in part order with
    duplicates dropped, reboot and acknowledgement flags are OR-ed and the
    tier is the highest among the parts.
    """
    merged_warnings: list[str] = []
    for warning in [*(w for part in parts.values() for w in part.warnings), *warnings]:
        if warning not in merged_warnings:
            merged_warnings.append(warning)

    return Fragment(
        source_keys=frozenset().union(*(part.source_keys for part in parts.values())),
        title=title,
        text="\n".join(lines),
        requires_reboot=any(part.requires_reboot for part in parts.values()),
        warnings=tuple(merged_warnings),
        tier=highest_tier(part.tier for part in parts.values()),
        requires_ack=any(part.requires_ack for part in parts.values()),
    )


def combine_tcpip6(parts: Mapping[OptimizationKey, Fragment], ctx: RuleContext) -> Fragment:
    flags = reduce(or_, (TCPIP6_FLAGS[key] for key in parts), Tcpip6Components.NONE)
    return merge_fragments(
        parts,
        "Prefer IPv4 and disable Teredo",
        [TEREDO_OFF, *disabled_components_lines(flags, "IPv4 preferred, Teredo and IPv6 tunnels disabled")],
    )


def combine_power_plans(parts: Mapping[OptimizationKey, Fragment], ctx: RuleContext) -> Fragment:
    return merge_fragments(
        parts,
        "Power plan (Ultimate Performance, High Performance fallback)",
        ultimate_performance_lines(fallback=high_performance_lines()),
    )


def combine_usb_suspend(parts: Mapping[OptimizationKey, Fragment], ctx: RuleContext) -> Fragment:
    return merge_fragments(parts, "USB selective suspend", [*usb_powercfg_lines(), *usb_driver_lines()])


def combine_tcp_interface(parts: Mapping[OptimizationKey, Fragment], ctx: RuleContext) -> Fragment:
    return merge_fragments(
        parts,
        "Nagle's algorithm and TCP stack tuning",
        [*TCP_GLOBALS, *tcp_interface_lines(NAGLE_VALUES + TCP_OPTIMIZER_VALUES, "Nagle disabled, TCP stack tuned")],
    )


def combine_ducking(parts: Mapping[OptimizationKey, Fragment], ctx: RuleContext) -> Fragment:
    return merge_fragments(
        parts,
        "Audio ducking and communications volume",
        ducking_lines("Audio ducking disabled, full volume kept during calls"),
    )


def combine_sound_scheme(parts: Mapping[OptimizationKey, Fragment], ctx: RuleContext) -> Fragment:
    return merge_fragments(
        parts,
        "Sound scheme",
        [*silent_scheme_lines(), *mute_events_lines(), ok("Sound scheme set to No Sounds, system sounds muted")],
    )


def combine_privacy(parts: Mapping[OptimizationKey, Fragment], ctx: RuleContext) -> Fragment:
    level = min(TELEMETRY_LEVELS[key] for key in parts)
    return merge_fragments(
        parts,
        "Privacy tiers 2 and 3",
        [*telemetry_lines(level), *tracking_lines(), *xbox_service_lines()],
        warnings=[GAME_PASS_WARNING],
    )


CONFLICT_RULES: tuple[ConflictRule, ...] = (
    ConflictRule(frozenset({K.IPV4_PREFER, K.TEREDO_DISABLE}), "Tcpip6 DisabledComponents", combine_tcpip6),
    ConflictRule(frozenset({K.POWER_PLAN, K.ULTIMATE_PERF}), "Active power scheme", combine_power_plans),
    ConflictRule(frozenset({K.USB_POWER, K.USB_SUSPEND}), "USB selective suspend", combine_usb_suspend),
    ConflictRule(frozenset({K.NAGLE, K.TCP_OPTIMIZER}), "Per-interface TCP parameters", combine_tcp_interface),
    ConflictRule(
        frozenset({K.AUDIO_ENHANCEMENTS, K.AUDIO_COMMUNICATIONS}),
        "UserDuckingPreference",
        combine_ducking,
    ),
    ConflictRule(frozenset({K.AUDIO_EXCLUSIVE, K.AUDIO_SYSTEM_SOUNDS}), "Sound scheme", combine_sound_scheme),
    ConflictRule(frozenset({K.PRIVACY_TIER2, K.PRIVACY_TIER3}), "AllowTelemetry policy", combine_privacy),
)


def _index_rules(rules: Iterable[ConflictRule], registry: RuleRegistry) -> dict[OptimizationKey, ConflictRule]:
    """Index conflict rules by key, validating the table.

    Raises:
        CoverageError: If a pair does not name two registered keys, or a key
            appears in more than one pair
    """
    by_key: dict[OptimizationKey, ConflictRule] = {}
    registered = set(registry.keys())
    for rule in rules:
        if len(rule.keys) != 2 or not rule.keys <= registered:
            raise CoverageError(f"Conflict rule for '{rule.target}' must name two registered keys")
        for key in rule.keys:
            if key in by_key:
                raise CoverageError(f"Key '{key.value}' appears in more than one conflict rule")
            by_key[key] = rule
    return by_key


CONFLICTS_BY_KEY = _index_rules(CONFLICT_RULES, DEFAULT_REGISTRY)


def generate(key: OptimizationKey, ctx: RuleContext, registry: RuleRegistry = DEFAULT_REGISTRY) -> Fragment:
    """Run one key's generator, wrapping unexpected failures.

    Raises:
        CompilationError: If the generator raises
    """
    try:
        return registry.resolve(key)(ctx)
    except Exception as e:
        raise CompilationError(key.value, str(e)) from e


def resolve_conflicts(
    selected: Iterable[OptimizationKey],
    ctx: RuleContext,
    registry: RuleRegistry = DEFAULT_REGISTRY,
    rules: Mapping[OptimizationKey, ConflictRule] = CONFLICTS_BY_KEY,
) -> list[Fragment]:
    """Generate fragments for the selected keys and merge declared conflicts.

    Every selected key's generator runs exactly once. When both keys of a
    conflict pair are selected, their fragments are replaced by the
    combiner's fragment at the earlier key's position.

    Args:
        selected: Selected keys (order is irrelevant)
        ctx: Rule context for this compilation
        registry: Rule registry
        rules: Conflict rules indexed by key

    Returns:
        Fragments in registry declaration order

    Example:
        >>> ctx = RuleContext.for_profile(HardwareProfile())
        >>> fragments = resolve_conflicts({K.TEREDO_DISABLE, K.IPV4_PREFER}, ctx)
        >>> assert len(fragments) == 1
    """
    ordered = registry.ordered(selected)
    generated = {key: generate(key, ctx, registry) for key in ordered}

    fragments: list[Fragment] = []
    for key in ordered:
        rule = rules.get(key)
        if rule is None or not all(k in generated for k in rule.keys):
            fragments.append(generated[key])
            continue

        pair = registry.ordered(rule.keys)
        if key != pair[0]:
            continue
        logger.debug(f"Combining {', '.join(k.value for k in pair)} ({rule.target})")
        fragments.append(rule.combine({k: generated[k] for k in pair}, ctx))
    return fragments


def applied_keys(
    selected: Iterable[OptimizationKey],
    mode: CompileMode,
    registry: RuleRegistry = DEFAULT_REGISTRY,
    rules: Mapping[OptimizationKey, ConflictRule] = CONFLICTS_BY_KEY,
) -> list[OptimizationKey]:
    """Selected keys that produce script text in the given mode.

    Safe mode leaves out keys that need acknowledgement. A safe key whose
    conflict partner is also selected shares the partner's combined
    fragment, so it is left out too when the partner is not safe.

    Example:
        >>> applied_keys({K.POWER_PLAN, K.ULTIMATE_PERF}, CompileMode.SAFE)
        []
    """
    ordered = registry.ordered(selected)
    if mode is CompileMode.FULL:
        return ordered

    chosen = set(ordered)
    applied = []
    for key in ordered:
        rule = rules.get(key)
        group = rule.keys if rule is not None and rule.keys <= chosen else {key}
        if not any(get_info(member).requires_ack for member in group):
            applied.append(key)
    return applied
