"""Saved profile loading and export.

Loading is tolerant: optimization keys that are unknown to this catalog
version, or that older versions used and this one dropped, are filtered out
with a warning instead of failing the load. Only structurally malformed
documents raise.

Contract:
- Inputs: Profile documents (dict, JSON text or file path)
- Outputs: LoadedProfile (snapshot plus ignored keys); profile documents
- Side Effects: Reads files in load_profile_file
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..compiler.registry import DEFAULT_REGISTRY
from ..exceptions import ProfileLoadError
from ..models.fragments import CompileMode
from ..models.hardware import HardwareProfile
from ..models.optimizations import parse_key
from ..models.profiles import PROFILE_VERSION
from ..models.profiles import SavedHardware
from ..models.profiles import SavedProfile
from ..models.snapshot import DEFAULT_DNS_PROVIDER
from ..models.snapshot import CompileSnapshot

logger = logging.getLogger(__name__)

# Keys earlier catalog versions accepted that no longer have a rule
LEGACY_KEYS = frozenset(
    {
        "restore_point",
        "input_buffer",
        "filesystem_perf",
        "dwm_perf",
        "memory_gaming",
        "priority_boost_off",
        "power_throttle_off",
    }
)


@dataclass(frozen=True)
class LoadedProfile:
    """Result of loading a saved profile.

    Attributes:
        snapshot: Compiler input built from the document
        ignored_keys: Optimization entries that were not resolved, in
            document order
        created: Creation time recorded in the document
    """

    snapshot: CompileSnapshot
    ignored_keys: tuple[str, ...]
    created: datetime


def _format_errors(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())


def load_profile(
    data: dict[str, Any] | str,
    mode: CompileMode = CompileMode.FULL,
    dns_provider: str = DEFAULT_DNS_PROVIDER,
) -> LoadedProfile:
    """Build a compiler snapshot from a saved profile document.

    Args:
        data: Parsed document or JSON text
        mode: Script mode for the snapshot
        dns_provider: DNS provider for the snapshot

    Returns:
        LoadedProfile with the snapshot and any ignored optimization keys

    Raises:
        ProfileLoadError: If the document is not valid JSON or does not
            match the profile schema

    Example:
        >>> loaded = load_profile({
        ...     "version": "1.0",
        ...     "created": "2025-01-01T00:00:00Z",
        ...     "hardware": {"cpu": "intel", "gpu": "nvidia"},
        ...     "optimizations": ["dns", "restore_point"],
        ...     "software": [],
        ... })
        >>> assert loaded.ignored_keys == ("restore_point",)
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ProfileLoadError(f"Profile is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProfileLoadError("Profile must be a JSON object")

    try:
        document = SavedProfile.model_validate(data)
    except ValidationError as e:
        raise ProfileLoadError(f"Invalid profile: {_format_errors(e)}") from e

    keys = []
    ignored = []
    for raw in document.optimizations:
        key = parse_key(raw)
        if key is None:
            ignored.append(raw)
        else:
            keys.append(key)

    if ignored:
        legacy = [raw for raw in ignored if raw.strip().lower() in LEGACY_KEYS]
        unknown = [raw for raw in ignored if raw not in legacy]
        if legacy:
            logger.warning(f"Ignoring legacy optimization keys: {', '.join(legacy)}")
        if unknown:
            logger.warning(f"Ignoring unknown optimization keys: {', '.join(unknown)}")

    try:
        snapshot = CompileSnapshot(
            hardware=HardwareProfile(
                cpu=document.hardware.cpu,
                gpu=document.hardware.gpu,
                peripherals=document.hardware.peripherals,
                monitor_software=document.hardware.monitor_software,
            ),
            optimizations=frozenset(keys),
            packages=frozenset(document.software),
            mode=mode,
            dns_provider=dns_provider,
        )
    except ValidationError as e:
        raise ProfileLoadError(f"Invalid profile: {_format_errors(e)}") from e

    return LoadedProfile(snapshot=snapshot, ignored_keys=tuple(ignored), created=document.created)


def load_profile_file(path: Path, mode: CompileMode = CompileMode.FULL, dns_provider: str = DEFAULT_DNS_PROVIDER) -> LoadedProfile:
    """Load a saved profile from disk.

    Raises:
        ProfileLoadError: If the file cannot be read or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProfileLoadError(f"Cannot read profile {path}: {e}") from e
    return load_profile(text, mode=mode, dns_provider=dns_provider)


def dump_profile(snapshot: CompileSnapshot, now: datetime | None = None) -> dict[str, Any]:
    """Export a snapshot as a saved profile document.

    Keys are written in registry order and software in sorted order so the
    same snapshot always produces the same document.
    """
    hardware = snapshot.hardware
    document = SavedProfile(
        version=PROFILE_VERSION,
        created=now or datetime.now(timezone.utc),
        hardware=SavedHardware(
            cpu=hardware.cpu_tag,
            gpu=hardware.gpu_tag,
            peripherals=hardware.sorted_peripherals(),
            monitor_software=hardware.sorted_monitor_software(),
        ),
        optimizations=[key.value for key in DEFAULT_REGISTRY.ordered(snapshot.optimizations)],
        software=sorted(snapshot.packages, key=lambda p: (p.lower(), p)),
    )
    return document.model_dump(mode="json", by_alias=True)
