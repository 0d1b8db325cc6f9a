"""Verification script generator.

Emits a read-only script that checks whether the registry values written by
the selected optimizations are present on the machine. Keys whose effect is
not a single registry value (service changes, bcdedit, app removal) are
listed as skipped.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone
from functools import reduce
from operator import or_

from ..models.fragments import format_timestamp
from ..models.optimizations import OptimizationKey
from ..models.snapshot import CompileSnapshot
from .conflicts import applied_keys
from .flags import Tcpip6Components
from .registry import DEFAULT_REGISTRY
from .rules.audio import AUDIO
from .rules.base import escape_ps
from .rules.base import ps_value
from .rules.network import TCPIP6_FLAGS
from .rules.network import TCPIP6_PARAMETERS
from .rules.performance import GAME_BAR
from .rules.performance import GAME_CONFIG
from .rules.performance import KERNEL
from .rules.performance import MEMORY_MANAGEMENT
from .rules.performance import PRIORITY_CONTROL
from .rules.privacy import DATA_COLLECTION
from .rules.privacy import TELEMETRY_LEVELS
from .rules.system import KEYBOARD
from .rules.system import MOUSE

K = OptimizationKey


@dataclass(frozen=True)
class Probe:
    """A registry value expected after an optimization is applied."""

    path: str
    name: str
    expected: int
    label: str

    def render(self) -> str:
        label = escape_ps(self.label)
        return (
            f'if (Test-RegValue "{self.path}" "{self.name}" {ps_value(self.expected)}) '
            f'{{ Write-Pass "{label}" }} else {{ Write-Fail "{label} NOT applied" }}'
        )


PROBES: dict[OptimizationKey, Probe] = {
    K.MOUSE_ACCEL: Probe(MOUSE, "MouseSpeed", 0, "Mouse acceleration disabled"),
    K.KEYBOARD_RESPONSE: Probe(KEYBOARD, "KeyboardDelay", 0, "Keyboard delay minimized"),
    K.FASTBOOT: Probe(
        r"HKLM:\SYSTEM\CurrentControlSet\Control\Session Manager\Power", "HiberbootEnabled", 0, "Fast startup disabled"
    ),
    K.END_TASK: Probe(
        r"HKCU:\Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced\TaskbarDeveloperSettings",
        "TaskbarEndTask",
        1,
        "End Task enabled in taskbar",
    ),
    K.NOTIFICATIONS_OFF: Probe(
        r"HKCU:\Software\Policies\Microsoft\Windows\Explorer", "DisableNotificationCenter", 1, "Notifications disabled"
    ),
    K.GAMEDVR: Probe(GAME_CONFIG, "GameDVR_Enabled", 0, "Game DVR disabled"),
    K.HAGS: Probe(r"HKLM:\SYSTEM\CurrentControlSet\Control\GraphicsDrivers", "HwSchMode", 2, "HAGS enabled"),
    K.FSO_DISABLE: Probe(GAME_CONFIG, "GameDVR_FSEBehaviorMode", 2, "Fullscreen optimizations disabled"),
    K.GAME_MODE: Probe(GAME_BAR, "AutoGameModeEnabled", 1, "Game Mode enabled"),
    K.MULTIPLANE_OVERLAY: Probe(r"HKLM:\SOFTWARE\Microsoft\Windows\Dwm", "OverlayTestMode", 5, "Multiplane overlay disabled"),
    K.PROCESS_MITIGATION: Probe(KERNEL, "KernelShadowStacksForceDisabled", 1, "Kernel shadow stacks disabled"),
    K.SPECTRE_MELTDOWN_OFF: Probe(MEMORY_MANAGEMENT, "FeatureSettingsOverride", 3, "Spectre/Meltdown mitigations disabled"),
    K.SCHEDULER_OPT: Probe(PRIORITY_CONTROL, "Win32PrioritySeparation", 26, "Foreground scheduling set"),
    K.TIMER_REGISTRY: Probe(KERNEL, "GlobalTimerResolutionRequests", 1, "Global timer resolution requests enabled"),
    K.NETWORK_THROTTLING: Probe(
        r"HKLM:\SOFTWARE\Microsoft\Windows NT\CurrentVersion\Multimedia\SystemProfile",
        "NetworkThrottlingIndex",
        0xFFFFFFFF,
        "Network throttling disabled",
    ),
    K.QOS_GAMING: Probe(r"HKLM:\SOFTWARE\Policies\Microsoft\Windows\Psched", "NonBestEffortLimit", 0, "QoS reservation released"),
    K.PRIVACY_TIER1: Probe(
        r"HKCU:\Software\Microsoft\Windows\CurrentVersion\AdvertisingInfo", "Enabled", 0, "Advertising ID disabled"
    ),
    K.BACKGROUND_APPS: Probe(
        r"HKCU:\Software\Microsoft\Windows\CurrentVersion\BackgroundAccessApplications",
        "GlobalUserDisabled",
        1,
        "Background apps disabled",
    ),
    K.COPILOT_DISABLE: Probe(
        r"HKCU:\Software\Policies\Microsoft\Windows\WindowsCopilot", "TurnOffWindowsCopilot", 1, "Copilot disabled"
    ),
    K.DELIVERY_OPT: Probe(
        r"HKLM:\SOFTWARE\Policies\Microsoft\Windows\DeliveryOptimization", "DODownloadMode", 0, "Delivery Optimization P2P disabled"
    ),
    K.AUDIO_ENHANCEMENTS: Probe(AUDIO, "UserDuckingPreference", 3, "Audio ducking disabled"),
    K.AUDIO_COMMUNICATIONS: Probe(AUDIO, "UserDuckingPreference", 3, "Full volume during calls"),
}


def shared_target_probes(applied: Iterable[OptimizationKey]) -> dict[OptimizationKey, Probe]:
    """Probes for values several keys write together.

    The expected value is the combined one the conflict resolver writes, so
    the probe is attached to every contributing key that was applied.
    """
    applied = list(applied)
    probes: dict[OptimizationKey, Probe] = {}

    flag_keys = [key for key in applied if key in TCPIP6_FLAGS]
    if flag_keys:
        flags = reduce(or_, (TCPIP6_FLAGS[key] for key in flag_keys), Tcpip6Components.NONE)
        probe = Probe(TCPIP6_PARAMETERS, "DisabledComponents", int(flags), f"IPv6 DisabledComponents = {int(flags)}")
        probes.update(dict.fromkeys(flag_keys, probe))

    telemetry_keys = [key for key in applied if key in TELEMETRY_LEVELS]
    if telemetry_keys:
        level = min(TELEMETRY_LEVELS[key] for key in telemetry_keys)
        probe = Probe(DATA_COLLECTION, "AllowTelemetry", level, f"Telemetry level {level}")
        probes.update(dict.fromkeys(telemetry_keys, probe))

    return probes


HELPERS = r"""$script:PassCount = 0
$script:FailCount = 0
$script:SkipCount = 0

function Write-Pass { param([string]$M) $script:PassCount++; Write-Host "  [PASS] $M" -ForegroundColor Green }
function Write-Fail { param([string]$M) $script:FailCount++; Write-Host "  [FAIL] $M" -ForegroundColor Red }
function Write-Skip { param([string]$M) $script:SkipCount++; Write-Host "  [SKIP] $M" -ForegroundColor DarkGray }
function Test-RegValue { param([string]$Path, [string]$Name, $Expected)
    try {
        if (-not (Test-Path $Path)) { return $false }
        $actual = (Get-ItemProperty -Path $Path -Name $Name -EA SilentlyContinue).$Name
        return $actual -eq $Expected
    } catch { return $false }
}"""

SUMMARY = (
    'Write-Host ""',
    "$total = $script:PassCount + $script:FailCount",
    'Write-Host "  Passed:  $($script:PassCount)/$total" -ForegroundColor Green',
    'if ($script:FailCount -gt 0) { Write-Host "  Failed:  $($script:FailCount)" -ForegroundColor Red }',
    'if ($script:SkipCount -gt 0) { Write-Host "  Skipped: $($script:SkipCount)" -ForegroundColor DarkGray }',
    'if ($script:FailCount -eq 0) { Write-Host "  All checked optimizations verified" -ForegroundColor Green }',
    'else { Write-Host "  Some optimizations may need to be re-applied or need a reboot" -ForegroundColor Yellow }',
)


def render_verification_script(snapshot: CompileSnapshot, now: datetime | None = None) -> str:
    """Render a script that checks whether a snapshot's optimizations were applied.

    Args:
        snapshot: Snapshot the loadout script was compiled from
        now: Generation time (defaults to the current UTC time)

    Returns:
        PowerShell script text
    """
    generated_at = now or datetime.now(timezone.utc)
    ordered = DEFAULT_REGISTRY.ordered(snapshot.optimizations)
    applied = applied_keys(ordered, snapshot.mode)
    shared = shared_target_probes(applied)

    lines = [
        "<#",
        ".SYNOPSIS",
        f"    Loadout verification generated {format_timestamp(generated_at)}",
        ".DESCRIPTION",
        "    Read-only: checks whether the loadout's registry changes are present.",
        "#>",
        "",
        HELPERS,
        "",
        'Write-Host "Verifying loadout" -ForegroundColor Cyan',
    ]

    rendered: set[Probe] = set()
    for key in ordered:
        if key not in applied:
            lines.append(f'Write-Skip "{key.value}: not applied in safe mode"')
            continue
        probe = shared.get(key) or PROBES.get(key)
        if probe is None:
            lines.append(f'Write-Skip "{key.value}: no registry probe"')
        elif probe not in rendered:
            rendered.add(probe)
            lines.append(probe.render())

    lines.extend(SUMMARY)
    return "\n".join(lines) + "\n"
