"""Compile service for loadoutd.

Turns API requests into compiler snapshots, runs the compiler and keeps the
change tracker that every compile request shares, so that the latest two
scripts can be diffed.

Contract:
- Inputs: CompileRequest / LoadProfileRequest models
- Outputs: API response models
- Side Effects: Updates the shared ChangeTracker on compile
"""

import logging
from datetime import datetime

from loadout_library.compiler import compile_loadout
from loadout_library.compiler import render_verification_script
from loadout_library.compiler.conflicts import CONFLICTS_BY_KEY
from loadout_library.compiler.guide import GUIDE_SECTIONS
from loadout_library.compiler.registry import DEFAULT_REGISTRY
from loadout_library.config.settings import LoadoutSettings
from loadout_library.models.fragments import CompiledScript
from loadout_library.models.hardware import HardwareProfile
from loadout_library.models.optimizations import CATALOG
from loadout_library.models.optimizations import CATALOG_VERSION
from loadout_library.models.optimizations import OptimizationKey
from loadout_library.models.optimizations import parse_key
from loadout_library.models.snapshot import DNS_PROVIDERS
from loadout_library.models.snapshot import CompileSnapshot
from loadout_library.profiles import LoadedProfile
from loadout_library.profiles import load_profile
from loadout_library.tracking import ChangeTracker
from loadout_library.tracking import LineDiff

from ..models.requests import CompileRequest
from ..models.requests import HardwareRequest
from ..models.requests import LoadProfileRequest
from ..models.responses import CatalogEntry
from ..models.responses import CatalogResponse
from ..models.responses import CompileResponse
from ..models.responses import DiffLineResponse
from ..models.responses import DiffResponse
from ..models.responses import FragmentSummary
from ..models.responses import LoadedProfileResponse
from ..models.responses import VerifyResponse

logger = logging.getLogger(__name__)


def split_keys(raw_keys: list[str]) -> tuple[frozenset[OptimizationKey], list[str]]:
    """Split raw key strings into catalog keys and unknown entries.

    Example:
        >>> keys, ignored = split_keys(["dns", "restore_point"])
        >>> assert keys == {OptimizationKey.DNS}
        >>> assert ignored == ["restore_point"]
    """
    keys = set()
    ignored = []
    for raw in raw_keys:
        key = parse_key(raw)
        if key is None:
            if raw not in ignored:
                ignored.append(raw)
        else:
            keys.add(key)
    return frozenset(keys), ignored


def diff_response(diff: LineDiff) -> DiffResponse:
    """Convert a LineDiff into its API model."""
    lines = [
        DiffLineResponse(type=line.type, content=line.content, old_line=line.old_line, new_line=line.new_line)
        for line in diff
    ]
    stats = diff.stats()
    return DiffResponse(
        has_changes=stats.added + stats.removed > 0,
        added=stats.added,
        removed=stats.removed,
        unchanged=stats.unchanged,
        change_starts=list(diff.change_starts()),
        lines=lines,
    )


class CompileService:
    """Service wrapping the loadout compiler for the API and CLI.

    One instance is shared across requests; its tracker holds the two most
    recent distinct scripts.
    """

    def __init__(self, settings: LoadoutSettings, tracker: ChangeTracker | None = None) -> None:
        """Initialize compile service.

        Args:
            settings: Daemon settings (DNS default, guide file name)
            tracker: Change tracker (default: a fresh tracker)
        """
        self.settings = settings
        self.tracker = tracker or ChangeTracker()

    def build_snapshot(self, request: CompileRequest) -> tuple[CompileSnapshot, list[str]]:
        """Build a compiler snapshot from a request.

        Args:
            request: Compile request

        Returns:
            Tuple of (snapshot, ignored keys)

        Raises:
            ValueError: If the hardware tags or DNS provider are invalid
        """
        keys, ignored = split_keys(request.optimizations)
        if ignored:
            logger.warning(f"Ignoring unknown optimization keys: {', '.join(ignored)}")

        snapshot = CompileSnapshot(
            hardware=HardwareProfile(
                cpu=request.hardware.cpu,
                gpu=request.hardware.gpu,
                peripherals=request.hardware.peripherals,
                monitor_software=request.hardware.monitor_software,
            ),
            optimizations=keys,
            packages=frozenset(request.packages),
            mode=request.mode,
            dns_provider=request.dns_provider or self.settings.dns_provider,
        )
        return snapshot, ignored

    def compile_snapshot(self, snapshot: CompileSnapshot, now: datetime | None = None) -> tuple[CompiledScript, bool]:
        """Compile a snapshot and record the result in the tracker.

        Returns:
            Tuple of (compiled script, whether the tracked pair changed)
        """
        script = compile_loadout(snapshot, now, guide_filename=self.settings.guide_filename)
        changed = self.tracker.record(script)
        if not changed:
            logger.debug("Recompiled script is unchanged")
        return script, changed

    def compile(self, request: CompileRequest, now: datetime | None = None) -> CompileResponse:
        """Compile a request into a script.

        Raises:
            ValueError: If the request describes an invalid snapshot
            CompilationError: If a fragment generator fails
        """
        snapshot, ignored = self.build_snapshot(request)
        script, changed = self.compile_snapshot(snapshot, now)

        fragments = [
            FragmentSummary(
                title=fragment.title,
                source_keys=[key.value for key in DEFAULT_REGISTRY.ordered(fragment.source_keys)],
                tier=fragment.tier.value,
                requires_reboot=fragment.requires_reboot,
                warnings=list(fragment.warnings),
            )
            for fragment in script.body
        ]

        return CompileResponse(
            mode=script.mode,
            script=script.text,
            guide=script.guide_html,
            packages=list(script.packages),
            fragments=fragments,
            selected_keys=[key.value for key in script.selected_keys],
            skipped_keys=[key.value for key in script.skipped_keys],
            ignored_keys=ignored,
            fingerprint=script.fingerprint,
            generated_at=script.generated_at,
            requires_reboot=script.requires_reboot,
            changed=changed,
        )

    def diff(self) -> DiffResponse:
        """Diff of the previous tracked script against the current one."""
        return diff_response(self.tracker.diff())

    def verify(self, request: CompileRequest, now: datetime | None = None) -> VerifyResponse:
        """Render the verification script for a request."""
        snapshot, ignored = self.build_snapshot(request)
        return VerifyResponse(script=render_verification_script(snapshot, now), ignored_keys=ignored)

    def load_profile(self, request: LoadProfileRequest) -> LoadedProfileResponse:
        """Normalize a saved profile document.

        Raises:
            ProfileLoadError: If the document is malformed
        """
        loaded = load_profile(
            request.profile,
            mode=request.mode,
            dns_provider=request.dns_provider or self.settings.dns_provider,
        )
        return loaded_profile_response(loaded)

    def catalog(self) -> CatalogResponse:
        """List the optimization catalog in registry order."""
        entries = []
        for key in DEFAULT_REGISTRY.keys():
            info = CATALOG[key]
            rule = CONFLICTS_BY_KEY.get(key)
            partner = next((other for other in rule.keys if other is not key), None) if rule else None
            entries.append(
                CatalogEntry(
                    key=key.value,
                    label=info.label,
                    tier=info.tier.value,
                    category=info.category.value,
                    requires_ack=info.requires_ack,
                    requires_reboot=info.requires_reboot,
                    conflicts_with=partner.value if partner else None,
                    has_guide=key in GUIDE_SECTIONS,
                )
            )
        return CatalogResponse(version=CATALOG_VERSION, entries=entries, dns_providers=list(DNS_PROVIDERS))


def loaded_profile_response(loaded: LoadedProfile) -> LoadedProfileResponse:
    hardware = loaded.snapshot.hardware
    return LoadedProfileResponse(
        created=loaded.created,
        hardware=HardwareRequest(
            cpu=hardware.cpu_tag,
            gpu=hardware.gpu_tag,
            peripherals=hardware.sorted_peripherals(),
            monitor_software=hardware.sorted_monitor_software(),
        ),
        optimizations=[key.value for key in DEFAULT_REGISTRY.ordered(loaded.snapshot.optimizations)],
        packages=sorted(loaded.snapshot.packages, key=lambda p: (p.lower(), p)),
        ignored_keys=list(loaded.ignored_keys),
    )
