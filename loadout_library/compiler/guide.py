"""Companion guide generator.

Renders a standalone HTML document from the same three inputs the script is
compiled from. Hardware sections are chosen by CPU and GPU class; per-key
sections come from GUIDE_SECTIONS, and a selected key without an entry is
simply absent from the guide.

Contract:
- Inputs: HardwareProfile, selected keys, package list
- Outputs: HTML text (no timestamp, deterministic)
- Side Effects: Raises CoverageError at import if GUIDE_SECTIONS names a key
  outside the vocabulary
"""

import html
from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass

from ..exceptions import CoverageError
from ..models.hardware import CpuClass
from ..models.hardware import GpuClass
from ..models.hardware import HardwareProfile
from ..models.optimizations import OptimizationKey
from ..models.optimizations import get_info
from .conditioner import cpu_params
from .conditioner import gpu_params
from .registry import DEFAULT_REGISTRY

K = OptimizationKey


@dataclass(frozen=True)
class ChecklistItem:
    setting: str
    value: str
    why: str


@dataclass(frozen=True)
class Checklist:
    title: str
    description: str
    items: tuple[ChecklistItem, ...]
    note: str = ""


@dataclass(frozen=True)
class GuideSection:
    """Follow-up notes for one optimization key."""

    title: str
    steps: tuple[str, ...]


BIOS_X3D = Checklist(
    title="AMD X3D CPU Settings",
    description="For 7800X3D, 9800X3D and similar V-Cache CPUs",
    note="Game Mode plus Game Bar enabled lets the V-Cache optimizer work. Do not disable Game Bar.",
    items=(
        ChecklistItem("CPPC", "Enabled / Auto", "Required for Windows to use the V-Cache optimizer."),
        ChecklistItem("CPPC Preferred Cores", "Enabled / Auto", "Tells Windows which cores have V-Cache."),
        ChecklistItem("PBO", "Auto or Enabled", "Safe on X3D. Avoid aggressive Curve Optimizer values."),
        ChecklistItem("Core Performance Boost", "Enabled", "Allows boost clocks."),
    ),
)

BIOS_AMD = Checklist(
    title="AMD CPU Settings",
    description="Restart > DEL/F2 during POST > Enter BIOS",
    items=(
        ChecklistItem("XMP / EXPO", "Enabled", "RAM runs at its rated speed instead of JEDEC defaults."),
        ChecklistItem("Resizable BAR / SAM", "Enabled", "GPU can address its full VRAM."),
        ChecklistItem("PBO", "Auto", "Boost behaviour within safe limits."),
    ),
)

BIOS_INTEL = Checklist(
    title="Intel CPU Settings",
    description="Restart > DEL/F2 during POST > Enter BIOS",
    items=(
        ChecklistItem("XMP", "Enabled", "RAM runs at its rated speed instead of JEDEC defaults."),
        ChecklistItem("C-States", "Enabled for daily use", "Save power at the cost of some wake latency."),
        ChecklistItem("Speed Shift / HWP", "Enabled", "Modern frequency scaling."),
        ChecklistItem("Turbo Boost", "Enabled", "Higher clocks when thermal headroom exists."),
    ),
)

GPU_NVIDIA = Checklist(
    title="NVIDIA Control Panel",
    description="Right-click desktop > NVIDIA Control Panel",
    items=(
        ChecklistItem("Low Latency Mode", "On", "Shorter render queue without heavy CPU overhead."),
        ChecklistItem("Power Management Mode", "Prefer Maximum Performance", "Prevents downclocking mid-game."),
        ChecklistItem("Vertical Sync", "Off", "Use in-game sync or a frame cap instead."),
        ChecklistItem("G-SYNC", "Enable for fullscreen and windowed", "Variable refresh everywhere."),
        ChecklistItem("Max Frame Rate", "3 below refresh", "Keeps you inside the VRR range."),
    ),
)

GPU_AMD = Checklist(
    title="AMD Adrenalin Settings",
    description="Right-click desktop > AMD Software: Adrenalin Edition",
    items=(
        ChecklistItem("Anti-Lag", "Enabled", "Reduces input latency."),
        ChecklistItem("Enhanced Sync", "Off", "Can cause stutter. Use FreeSync instead."),
        ChecklistItem("FreeSync", "Enabled", "Tear-free variable refresh."),
        ChecklistItem("Frame Rate Target Control", "3 below refresh", "Stays inside the FreeSync range."),
    ),
)

GPU_INTEL = Checklist(
    title="Intel Graphics Software",
    description="Start > Intel Graphics Software",
    items=(
        ChecklistItem("Driver", "Latest WHQL", "Arc performance depends heavily on driver version."),
        ChecklistItem("Low Latency", "On", "Reduces render queue depth."),
        ChecklistItem("Resizable BAR", "Enabled in BIOS", "Arc GPUs lose significant performance without it."),
    ),
)

DEFAULT_CPU_CHECKLIST = BIOS_AMD

CPU_CHECKLISTS: dict[CpuClass, Checklist] = {
    CpuClass.AMD_X3D: BIOS_X3D,
    CpuClass.AMD: BIOS_AMD,
    CpuClass.INTEL: BIOS_INTEL,
}

GPU_CHECKLISTS: dict[GpuClass, Checklist] = {
    GpuClass.NVIDIA: GPU_NVIDIA,
    GpuClass.AMD: GPU_AMD,
    GpuClass.INTEL: GPU_INTEL,
}

GUIDE_SECTIONS: dict[OptimizationKey, GuideSection] = {
    K.PAGEFILE: GuideSection(
        "Page file",
        ("Check System > About > Advanced system settings > Performance > Advanced > Virtual memory after reboot.",),
    ),
    K.CLASSIC_MENU: GuideSection("Classic context menu", ("Restart Explorer or sign out to see the classic menu.",)),
    K.GAME_BAR: GuideSection(
        "Game Bar",
        ("Overlays are off. On X3D CPUs Game Bar itself stays on so games are detected for V-Cache scheduling.",),
    ),
    K.HAGS: GuideSection(
        "Hardware-accelerated GPU scheduling",
        ("Confirm under Settings > Display > Graphics > Default graphics settings after reboot.",),
    ),
    K.TIMER: GuideSection(
        "Timer resolution",
        (
            "Download timer-tool.ps1 and run it before launching a game.",
            "Pass -GameProcess with the game's executable name to stop it automatically.",
        ),
    ),
    K.MSI_MODE: GuideSection(
        "GPU MSI mode",
        ("Driver updates can reset MSI mode. Re-run the loadout after installing a new GPU driver.",),
    ),
    K.HPET: GuideSection(
        "HPET and dynamic tick",
        ("Undo with: bcdedit /deletevalue disabledynamictick",),
    ),
    K.CORE_ISOLATION_OFF: GuideSection(
        "Core Isolation",
        (
            "Memory integrity stays off until re-enabled in Windows Security > Device security.",
            "Some anti-cheat software requires it. Re-enable it if a game refuses to start.",
        ),
    ),
    K.SPECTRE_MELTDOWN_OFF: GuideSection(
        "Spectre/Meltdown mitigations",
        ("Re-enable by deleting FeatureSettingsOverride and FeatureSettingsOverrideMask, then reboot.",),
    ),
    K.SMT_DISABLE: GuideSection(
        "SMT / Hyper-Threading",
        ("Disabling SMT in BIOS is more reliable than the boot setting. Benchmark before and after.",),
    ),
    K.ULTIMATE_PERF: GuideSection(
        "Ultimate Performance plan",
        ("Check the active plan with: powercfg /getactivescheme",),
    ),
    K.MIN_PROCESSOR_STATE: GuideSection(
        "Minimum processor state",
        ("The value depends on the CPU class in your profile. Check it in Power Options > Processor power management.",),
    ),
    K.DNS: GuideSection("DNS", ("Verify with: Get-DnsClientServerAddress -AddressFamily IPv4",)),
    K.TCP_OPTIMIZER: GuideSection("TCP stack tuning", ("Reset the global TCP settings with: netsh int tcp reset",)),
    K.IPV4_PREFER: GuideSection(
        "Prefer IPv4",
        ("Set DisabledComponents back to 0 under Tcpip6\\Parameters to restore the default.",),
    ),
    K.TEREDO_DISABLE: GuideSection(
        "Teredo",
        ("Xbox party chat and some peer-to-peer games need Teredo. Re-enable with: netsh interface teredo set state default",),
    ),
    K.PRIVACY_TIER3: GuideSection(
        "Xbox services",
        ("Game Pass and Xbox app sign-in stop working. Set the Xbl* services back to Manual to restore them.",),
    ),
    K.BLOATWARE: GuideSection("Removed apps", ("Reinstall anything you miss from the Microsoft Store.",)),
    K.AUDIO_EXCLUSIVE: GuideSection(
        "Exclusive-mode audio",
        ("Enable exclusive mode per device in Sound > Device properties > Advanced.",),
    ),
}


def _check_sections(sections: Iterable[object]) -> None:
    unknown = [repr(key) for key in sections if not isinstance(key, OptimizationKey)]
    if unknown:
        raise CoverageError(f"Guide sections reference unknown keys: {', '.join(unknown)}")


_check_sections(GUIDE_SECTIONS)

STYLE = """body { font-family: system-ui, sans-serif; margin: 2rem auto; max-width: 880px; color: #1b1b1f; }
h1 { border-bottom: 2px solid #6c3cff; padding-bottom: .3rem; }
h2 { margin-top: 2rem; color: #3d2a8c; }
table { border-collapse: collapse; width: 100%; }
th, td { border: 1px solid #ddd; padding: .4rem .6rem; text-align: left; vertical-align: top; }
th { background: #f3f0ff; }
.note { background: #fff7e0; border-left: 4px solid #f0b400; padding: .5rem .8rem; }
code { background: #f4f4f4; padding: 0 .2rem; }"""


def _render_checklist(checklist: Checklist, section_id: str) -> str:
    rows = "".join(
        f"<tr><td>{html.escape(item.setting)}</td><td>{html.escape(item.value)}</td><td>{html.escape(item.why)}</td></tr>"
        for item in checklist.items
    )
    note = f"<p class='note'>{html.escape(checklist.note)}</p>" if checklist.note else ""
    return (
        f"<section id='{section_id}'>"
        f"<h2>{html.escape(checklist.title)}</h2>"
        f"<p>{html.escape(checklist.description)}</p>"
        f"{note}"
        f"<table><tr><th>Setting</th><th>Value</th><th>Why</th></tr>{rows}</table>"
        "</section>"
    )


def _render_list(items: Iterable[str]) -> str:
    return "<ul>" + "".join(f"<li>{html.escape(item)}</li>" for item in items) + "</ul>"


def _render_hardware_summary(profile: HardwareProfile) -> str:
    rows = [
        ("CPU", f"{cpu_params(profile.cpu).label} ({profile.cpu_tag})"),
        ("GPU", f"{gpu_params(profile.gpu).label} ({profile.gpu_tag})"),
        ("Peripherals", ", ".join(profile.sorted_peripherals()) or "none"),
        ("Monitor software", ", ".join(profile.sorted_monitor_software()) or "none"),
    ]
    body = "".join(f"<tr><th>{k}</th><td>{html.escape(v)}</td></tr>" for k, v in rows)
    return f"<section id='hardware'><h2>Hardware</h2><table>{body}</table></section>"


def cpu_checklist(profile: HardwareProfile) -> Checklist:
    if isinstance(profile.cpu, CpuClass):
        return CPU_CHECKLISTS[profile.cpu]
    return DEFAULT_CPU_CHECKLIST


def gpu_checklist(profile: HardwareProfile) -> Checklist | None:
    if isinstance(profile.gpu, GpuClass):
        return GPU_CHECKLISTS[profile.gpu]
    return None


def render_guide(
    profile: HardwareProfile,
    selected_keys: Iterable[OptimizationKey],
    packages: Sequence[str],
) -> str:
    """Render the companion HTML guide.

    Args:
        profile: Hardware profile
        selected_keys: Selected optimization keys (order is irrelevant)
        packages: Packages the script installs

    Returns:
        Complete HTML document

    Example:
        >>> page = render_guide(HardwareProfile(cpu="amd_x3d"), [OptimizationKey.TIMER], [])
        >>> assert "CPPC" in page and "Timer resolution" in page
    """
    ordered = DEFAULT_REGISTRY.ordered(selected_keys)

    sections = [_render_hardware_summary(profile), _render_checklist(cpu_checklist(profile), "cpu")]
    gpu = gpu_checklist(profile)
    if gpu is not None:
        sections.append(_render_checklist(gpu, "gpu"))

    if profile.peripherals:
        sections.append(
            "<section id='peripherals'><h2>Peripheral software</h2>"
            "<p>Vendor software is installed by the script. Set polling rate and on-board profiles there, "
            "then close it from the tray if you do not need RGB control while gaming.</p>"
            f"{_render_list(profile.sorted_peripherals())}</section>"
        )

    for key in ordered:
        section = GUIDE_SECTIONS.get(key)
        if section is None:
            continue
        sections.append(
            f"<section id='opt-{key.value}'><h2>{html.escape(section.title)}</h2>{_render_list(section.steps)}</section>"
        )

    reboot = [get_info(key).label for key in ordered if get_info(key).requires_reboot]
    if reboot:
        sections.append(f"<section id='reboot'><h2>Reboot required</h2>{_render_list(reboot)}</section>")

    if packages:
        sections.append(
            "<section id='packages'><h2>Installed software</h2>"
            f"<p>Sign in and configure these after the script finishes:</p>{_render_list(packages)}</section>"
        )

    return "\n".join(
        [
            "<!DOCTYPE html>",
            "<html lang='en'>",
            "<head>",
            "<meta charset='utf-8'>",
            "<title>Loadout guide</title>",
            f"<style>\n{STYLE}\n</style>",
            "</head>",
            "<body>",
            "<h1>Loadout guide</h1>",
            *sections,
            "</body>",
            "</html>",
        ]
    )
