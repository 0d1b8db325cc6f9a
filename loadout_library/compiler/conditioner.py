"""Hardware conditioner.

Derives hardware-dependent parameters, implied fragments and implied packages
from a HardwareProfile. Total over the profile domain: every enumerated CPU
and GPU class has an explicit entry, and anything outside the enumeration
falls back to DEFAULT_CPU_PARAMS / DEFAULT_GPU_PARAMS.

Contract:
- Inputs: HardwareProfile
- Outputs: HardwareConditions (params, extra fragments, packages)
- Side Effects: None
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..models.fragments import Fragment
from ..models.hardware import CpuClass
from ..models.hardware import GpuClass
from ..models.hardware import HardwareProfile
from ..models.hardware import MonitorSoftwareType
from ..models.hardware import PeripheralType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CpuParams:
    """CPU-dependent parameters.

    Attributes:
        label: Display name
        min_processor_state: Minimum processor state percentage for the power plan
        keep_game_bar: Leave Game Bar enabled (X3D scheduling depends on it)
        detect_pattern: Regex matched against the detected CPU name
    """

    label: str
    min_processor_state: int
    keep_game_bar: bool = False
    detect_pattern: str = ""


@dataclass(frozen=True)
class GpuParams:
    label: str
    detect_pattern: str = ""


@dataclass(frozen=True)
class HardwareParams:
    cpu: CpuParams
    gpu: GpuParams

    @property
    def min_processor_state(self) -> int:
        return self.cpu.min_processor_state

    @property
    def keep_game_bar(self) -> bool:
        return self.cpu.keep_game_bar


@dataclass(frozen=True)
class HardwareConditions:
    """Everything the compiler derives from the hardware profile."""

    params: HardwareParams
    extra_fragments: tuple[Fragment, ...]
    packages: tuple[str, ...]


DEFAULT_CPU_PARAMS = CpuParams(label="Unknown CPU", min_processor_state=10)
DEFAULT_GPU_PARAMS = GpuParams(label="Unknown GPU")

_CPU_PARAMS: dict[CpuClass, CpuParams] = {
    CpuClass.AMD_X3D: CpuParams(
        label="AMD Ryzen X3D",
        min_processor_state=5,
        keep_game_bar=True,
        detect_pattern="X3D",
    ),
    CpuClass.AMD: CpuParams(label="AMD Ryzen", min_processor_state=10, detect_pattern="AMD"),
    CpuClass.INTEL: CpuParams(label="Intel Core", min_processor_state=10, detect_pattern="Intel"),
}

_GPU_PARAMS: dict[GpuClass, GpuParams] = {
    GpuClass.NVIDIA: GpuParams(label="NVIDIA GeForce", detect_pattern="NVIDIA"),
    GpuClass.AMD: GpuParams(label="AMD Radeon", detect_pattern="AMD|Radeon"),
    GpuClass.INTEL: GpuParams(label="Intel Arc", detect_pattern="Intel"),
}

PERIPHERAL_PACKAGES: dict[PeripheralType, str] = {
    PeripheralType.LOGITECH: "Logitech.GHUB",
    PeripheralType.RAZER: "RazerInc.RazerInstaller.Synapse4",
    PeripheralType.CORSAIR: "Corsair.iCUE.5",
    PeripheralType.STEELSERIES: "SteelSeries.GG",
    PeripheralType.ASUS: "Asus.ArmouryCrate",
    PeripheralType.WOOTING: "Wooting.Wootility",
}

MONITOR_PACKAGES: dict[MonitorSoftwareType, str] = {
    MonitorSoftwareType.DELL: "Dell.DisplayManager",
    MonitorSoftwareType.LG: "LG.OnScreenControl",
    MonitorSoftwareType.HP: "HP.DisplayCenter",
}

X3D_FRAGMENT = Fragment(
    source_keys=frozenset(),
    title="AMD X3D V-Cache check",
    text="\n".join(
        [
            '$vcache = Get-Service -Name "amd3dvcache" -EA SilentlyContinue',
            'if ($vcache) { Write-OK "AMD 3D V-Cache driver present ($($vcache.Status))" }',
            'else { Write-Warn "AMD 3D V-Cache driver not found - install the latest AMD chipset driver" }',
            'Write-OK "AMD X3D detected - ensure CPPC and CPPC Preferred Cores are enabled in BIOS"',
        ]
    ),
)

NVIDIA_FRAGMENT = Fragment(
    source_keys=frozenset(),
    title="NVIDIA telemetry tasks",
    text="\n".join(
        [
            '$nvTasks = Get-ScheduledTask -TaskName "NvTm*" -EA SilentlyContinue',
            "if ($nvTasks) {",
            "    $nvTasks | Disable-ScheduledTask -EA SilentlyContinue | Out-Null",
            '    Write-OK "NVIDIA telemetry tasks disabled"',
            '} else { Write-OK "No NVIDIA telemetry tasks found" }',
        ]
    ),
)


def cpu_params(cpu: CpuClass | str) -> CpuParams:
    """Get CPU parameters, falling back to DEFAULT_CPU_PARAMS."""
    if isinstance(cpu, CpuClass):
        return _CPU_PARAMS[cpu]
    logger.debug(f"CPU class '{cpu}' is not enumerated, using default parameters")
    return DEFAULT_CPU_PARAMS


def gpu_params(gpu: GpuClass | str) -> GpuParams:
    """Get GPU parameters, falling back to DEFAULT_GPU_PARAMS."""
    if isinstance(gpu, GpuClass):
        return _GPU_PARAMS[gpu]
    logger.debug(f"GPU class '{gpu}' is not enumerated, using default parameters")
    return DEFAULT_GPU_PARAMS


def implied_fragments(profile: HardwareProfile) -> tuple[Fragment, ...]:
    """Fragments that fire because of the hardware, not a user selection."""
    fragments = []
    if profile.cpu == CpuClass.AMD_X3D:
        fragments.append(X3D_FRAGMENT)
    if profile.gpu == GpuClass.NVIDIA:
        fragments.append(NVIDIA_FRAGMENT)
    return tuple(fragments)


def implied_packages(profile: HardwareProfile) -> tuple[str, ...]:
    """Vendor software packages for the profile's peripherals and monitors."""
    packages = [PERIPHERAL_PACKAGES[p] for p in PeripheralType if p in profile.peripherals]
    packages.extend(MONITOR_PACKAGES[m] for m in MonitorSoftwareType if m in profile.monitor_software)
    return tuple(packages)


def select_packages(requested: Iterable[str], profile: HardwareProfile) -> tuple[str, ...]:
    """Build the ordered, deduplicated package selection.

    Requested packages come first, sorted case-insensitively since the input
    is an unordered set. Hardware-implied packages follow in enum order.
    Package IDs are compared case-insensitively when deduplicating.

    Example:
        >>> profile = HardwareProfile(peripherals=["logitech"])
        >>> select_packages({"Valve.Steam", "logitech.ghub"}, profile)
        ('logitech.ghub', 'Valve.Steam')
    """
    ordered = sorted((p.strip() for p in requested if p.strip()), key=lambda p: (p.lower(), p))
    ordered.extend(implied_packages(profile))

    seen: set[str] = set()
    selection = []
    for package in ordered:
        folded = package.lower()
        if folded in seen:
            continue
        seen.add(folded)
        selection.append(package)
    return tuple(selection)


def condition(profile: HardwareProfile) -> HardwareConditions:
    """Resolve hardware facts for a profile.

    Args:
        profile: Hardware profile snapshot

    Returns:
        Parameters for the fragment generators, implied fragments and
        implied packages

    Example:
        >>> conditions = condition(HardwareProfile(cpu="amd_x3d"))
        >>> assert conditions.params.min_processor_state == 5
    """
    params = HardwareParams(cpu=cpu_params(profile.cpu), gpu=gpu_params(profile.gpu))
    return HardwareConditions(
        params=params,
        extra_fragments=implied_fragments(profile),
        packages=implied_packages(profile),
    )
