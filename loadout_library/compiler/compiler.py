"""Top-level compilation.

Contract:
- Inputs: CompileSnapshot (immutable), optional generation time
- Outputs: CompiledScript
- Side Effects: None (pure apart from logging)
"""

import logging
from datetime import datetime
from datetime import timezone

from ..models.fragments import CompiledScript
from ..models.fragments import CompileMode
from ..models.optimizations import get_info
from ..models.snapshot import CompileSnapshot
from .assembler import DEFAULT_GUIDE_FILENAME
from .assembler import assemble
from .assembler import render_footer
from .assembler import render_hardware_detection
from .assembler import render_header
from .assembler import render_install_block
from .assembler import render_preflight
from .assembler import select_fragments
from .conditioner import condition
from .conditioner import select_packages
from .conflicts import CONFLICTS_BY_KEY
from .conflicts import resolve_conflicts
from .context import RuleContext
from .guide import render_guide
from .registry import DEFAULT_REGISTRY
from .registry import RuleRegistry

logger = logging.getLogger(__name__)


def compile_loadout(
    snapshot: CompileSnapshot,
    now: datetime | None = None,
    *,
    registry: RuleRegistry = DEFAULT_REGISTRY,
    guide_filename: str = DEFAULT_GUIDE_FILENAME,
) -> CompiledScript:
    """Compile a snapshot into a script.

    The output is a function of the snapshot and ``now`` only. Recompiling
    the same snapshot yields the same text apart from the timestamp, and the
    same ``fingerprint``.

    Args:
        snapshot: Hardware profile, selected keys and packages, mode
        now: Generation time (defaults to the current UTC time)
        registry: Rule registry to resolve keys against
        guide_filename: File name the full script writes the guide to

    Returns:
        CompiledScript with the full text and its sections

    Raises:
        CompilationError: If a fragment generator fails

    Example:
        >>> snapshot = CompileSnapshot(
        ...     hardware=HardwareProfile(cpu="intel", gpu="nvidia"),
        ...     optimizations={"dns", "gamedvr"},
        ...     packages={"steam"},
        ... )
        >>> script = compile_loadout(snapshot)
        >>> assert script.text.count("Set-DnsClientServerAddress") == 1
    """
    generated_at = now or datetime.now(timezone.utc)
    mode = snapshot.mode
    profile = snapshot.hardware

    selected = registry.ordered(snapshot.optimizations)
    logger.info(f"Compiling {mode.value} loadout: {len(selected)} optimizations, {len(snapshot.packages)} packages")

    conditions = condition(profile)
    ctx = RuleContext(profile=profile, params=conditions.params, dns_provider=snapshot.dns_provider)
    resolved = resolve_conflicts(selected, ctx, registry, CONFLICTS_BY_KEY)
    body = tuple(select_fragments([*conditions.extra_fragments, *resolved], mode))

    packages = select_packages(snapshot.packages, profile)
    install_list = packages if mode is CompileMode.FULL else ()

    applied = [key for key in selected if any(key in fragment.source_keys for fragment in body)]
    skipped = [key for key in selected if key not in applied]
    merged_away = [key for key in skipped if not get_info(key).requires_ack]
    if merged_away:
        logger.warning(
            f"Safe mode left out safe keys combined with a non-safe partner: {', '.join(k.value for k in merged_away)}"
        )

    guide_html = render_guide(profile, applied, install_list) if mode is CompileMode.FULL else ""

    header = render_header(profile, conditions.params, applied, install_list, mode, generated_at)
    preflight = render_preflight(mode)
    hardware_detection = render_hardware_detection(profile, conditions.params)
    footer = render_footer(body, mode, guide_html, guide_filename)

    text = assemble(header, preflight, hardware_detection, body, install_list, mode, footer)

    dropped = len(resolved) + len(conditions.extra_fragments) - len(body)
    if dropped:
        logger.info(f"Safe mode left out {dropped} fragments that are not safe-tier")
    logger.info(f"Compiled {len(body)} fragments ({len(text.splitlines())} lines)")

    return CompiledScript(
        mode=mode,
        header=header,
        preflight=preflight,
        hardware_detection=hardware_detection,
        body=body,
        install_block=render_install_block(install_list),
        footer=footer,
        generated_at=generated_at,
        text=text,
        packages=install_list,
        guide_html=guide_html,
        selected_keys=tuple(applied),
        skipped_keys=tuple(skipped),
    )

