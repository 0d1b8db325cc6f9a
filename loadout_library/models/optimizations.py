"""Optimization key vocabulary and catalog metadata.

The vocabulary is closed and versioned: every key listed in OptimizationKey
must have a catalog entry here, a generator in the rule registry, and may have
at most one conflict partner.

Contract:
- Inputs: None (static data)
- Outputs: OptimizationKey enum, Tier enum, CATALOG mapping
- Side Effects: Raises CoverageError at import if the catalog is incomplete
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from ..exceptions import CoverageError

CATALOG_VERSION = "1.0"


class Tier(str, Enum):
    """Risk classification for an optimization."""

    SAFE = "safe"
    CAUTION = "caution"
    RISKY = "risky"
    RESTRICTED = "restricted"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {Tier.SAFE: 0, Tier.CAUTION: 1, Tier.RISKY: 2, Tier.RESTRICTED: 3}


def highest_tier(tiers: Iterable[Tier]) -> Tier:
    """Return the most dangerous tier in a collection (SAFE when empty)."""
    return max(tiers, key=lambda tier: tier.rank, default=Tier.SAFE)


class Category(str, Enum):
    SYSTEM = "system"
    PERFORMANCE = "performance"
    POWER = "power"
    NETWORK = "network"
    PRIVACY = "privacy"
    AUDIO = "audio"


class OptimizationKey(str, Enum):
    """Closed vocabulary of selectable optimizations."""

    # System
    PAGEFILE = "pagefile"
    MOUSE_ACCEL = "mouse_accel"
    KEYBOARD_RESPONSE = "keyboard_response"
    FASTBOOT = "fastboot"
    CLASSIC_MENU = "classic_menu"
    END_TASK = "end_task"
    DISPLAY_PERF = "display_perf"
    EXPLORER_SPEED = "explorer_speed"
    TEMP_PURGE = "temp_purge"
    STORAGE_SENSE = "storage_sense"
    EXPLORER_CLEANUP = "explorer_cleanup"
    NOTIFICATIONS_OFF = "notifications_off"
    PS7_TELEMETRY = "ps7_telemetry"
    ACCESSIBILITY_SHORTCUTS = "accessibility_shortcuts"
    SERVICES_SEARCH_OFF = "services_search_off"

    # Performance
    GAMEDVR = "gamedvr"
    GAME_BAR = "game_bar"
    HAGS = "hags"
    FSO_DISABLE = "fso_disable"
    TIMER = "timer"
    MSI_MODE = "msi_mode"
    HPET = "hpet"
    MULTIPLANE_OVERLAY = "multiplane_overlay"
    PROCESS_MITIGATION = "process_mitigation"
    INTERRUPT_AFFINITY = "interrupt_affinity"
    CORE_ISOLATION_OFF = "core_isolation_off"
    SPECTRE_MELTDOWN_OFF = "spectre_meltdown_off"
    KERNEL_MITIGATIONS_OFF = "kernel_mitigations_off"
    DEP_OFF = "dep_off"
    NATIVE_NVME = "native_nvme"
    SMT_DISABLE = "smt_disable"
    MMCSS_GAMING = "mmcss_gaming"
    SCHEDULER_OPT = "scheduler_opt"
    GAME_MODE = "game_mode"
    TIMER_REGISTRY = "timer_registry"
    SYSMAIN_DISABLE = "sysmain_disable"

    # Power
    POWER_PLAN = "power_plan"
    ULTIMATE_PERF = "ultimate_perf"
    USB_POWER = "usb_power"
    USB_SUSPEND = "usb_suspend"
    PCIE_POWER = "pcie_power"
    CORE_PARKING = "core_parking"
    MIN_PROCESSOR_STATE = "min_processor_state"
    HIBERNATION_DISABLE = "hibernation_disable"

    # Network
    DNS = "dns"
    NAGLE = "nagle"
    TCP_OPTIMIZER = "tcp_optimizer"
    NETWORK_THROTTLING = "network_throttling"
    QOS_GAMING = "qos_gaming"
    IPV4_PREFER = "ipv4_prefer"
    TEREDO_DISABLE = "teredo_disable"
    RSS_ENABLE = "rss_enable"
    RSC_DISABLE = "rsc_disable"
    ADAPTER_POWER = "adapter_power"

    # Privacy
    PRIVACY_TIER1 = "privacy_tier1"
    PRIVACY_TIER2 = "privacy_tier2"
    PRIVACY_TIER3 = "privacy_tier3"
    BACKGROUND_APPS = "background_apps"
    COPILOT_DISABLE = "copilot_disable"
    BLOATWARE = "bloatware"
    EDGE_DEBLOAT = "edge_debloat"
    RAZER_BLOCK = "razer_block"
    WPBT_DISABLE = "wpbt_disable"
    SERVICES_TRIM = "services_trim"
    DISK_CLEANUP = "disk_cleanup"
    DELIVERY_OPT = "delivery_opt"
    WER_DISABLE = "wer_disable"
    WIFI_SENSE = "wifi_sense"
    SPOTLIGHT_DISABLE = "spotlight_disable"
    FEEDBACK_DISABLE = "feedback_disable"
    CLIPBOARD_SYNC = "clipboard_sync"

    # Audio
    AUDIO_ENHANCEMENTS = "audio_enhancements"
    AUDIO_EXCLUSIVE = "audio_exclusive"
    AUDIO_COMMUNICATIONS = "audio_communications"
    AUDIO_SYSTEM_SOUNDS = "audio_system_sounds"


@dataclass(frozen=True)
class OptimizationInfo:
    """Catalog metadata for one optimization key.

    Attributes:
        key: Optimization key
        tier: Risk tier
        category: Catalog category
        label: Human-readable name
        requires_reboot: Whether the change only applies after a reboot
        manual_opt_in: Whether the key needs acknowledgement despite its tier
    """

    key: OptimizationKey
    tier: Tier
    category: Category
    label: str
    requires_reboot: bool = False
    manual_opt_in: bool = False

    @property
    def requires_ack(self) -> bool:
        """Whether selecting this key needs explicit user acknowledgement."""
        return self.tier is not Tier.SAFE or self.manual_opt_in


K = OptimizationKey
S, C, R, X = Tier.SAFE, Tier.CAUTION, Tier.RISKY, Tier.RESTRICTED

_ENTRIES: tuple[OptimizationInfo, ...] = (
    OptimizationInfo(K.PAGEFILE, S, Category.SYSTEM, "Fixed page file", requires_reboot=True),
    OptimizationInfo(K.MOUSE_ACCEL, S, Category.SYSTEM, "Disable mouse acceleration"),
    OptimizationInfo(K.KEYBOARD_RESPONSE, S, Category.SYSTEM, "Faster keyboard response"),
    OptimizationInfo(K.FASTBOOT, S, Category.SYSTEM, "Disable fast startup"),
    OptimizationInfo(K.CLASSIC_MENU, S, Category.SYSTEM, "Classic context menu"),
    OptimizationInfo(K.END_TASK, S, Category.SYSTEM, "End Task in taskbar"),
    OptimizationInfo(K.DISPLAY_PERF, S, Category.SYSTEM, "Visual effects for performance"),
    OptimizationInfo(K.EXPLORER_SPEED, S, Category.SYSTEM, "Explorer folder-type detection off"),
    OptimizationInfo(K.TEMP_PURGE, S, Category.SYSTEM, "Purge temp folders"),
    OptimizationInfo(K.STORAGE_SENSE, S, Category.SYSTEM, "Disable Storage Sense"),
    OptimizationInfo(K.EXPLORER_CLEANUP, S, Category.SYSTEM, "Remove Explorer Home/Gallery"),
    OptimizationInfo(K.NOTIFICATIONS_OFF, S, Category.SYSTEM, "Disable notifications"),
    OptimizationInfo(K.PS7_TELEMETRY, S, Category.SYSTEM, "PowerShell 7 telemetry opt-out"),
    OptimizationInfo(K.ACCESSIBILITY_SHORTCUTS, S, Category.SYSTEM, "Disable Sticky Keys shortcuts"),
    OptimizationInfo(K.SERVICES_SEARCH_OFF, C, Category.SYSTEM, "Windows Search indexing to manual"),
    OptimizationInfo(K.GAMEDVR, S, Category.PERFORMANCE, "Disable Game DVR"),
    OptimizationInfo(K.GAME_BAR, C, Category.PERFORMANCE, "Game Bar overlays"),
    OptimizationInfo(K.HAGS, C, Category.PERFORMANCE, "Hardware-accelerated GPU scheduling", requires_reboot=True),
    OptimizationInfo(K.FSO_DISABLE, C, Category.PERFORMANCE, "Disable fullscreen optimizations"),
    OptimizationInfo(K.TIMER, S, Category.PERFORMANCE, "Timer resolution tool"),
    OptimizationInfo(K.MSI_MODE, C, Category.PERFORMANCE, "GPU MSI mode", requires_reboot=True),
    OptimizationInfo(K.HPET, C, Category.PERFORMANCE, "Disable HPET / dynamic tick", requires_reboot=True),
    OptimizationInfo(K.MULTIPLANE_OVERLAY, S, Category.PERFORMANCE, "Disable multiplane overlay", requires_reboot=True),
    OptimizationInfo(
        K.PROCESS_MITIGATION,
        C,
        Category.PERFORMANCE,
        "Disable kernel shadow stacks",
        requires_reboot=True,
        manual_opt_in=True,
    ),
    OptimizationInfo(K.INTERRUPT_AFFINITY, C, Category.PERFORMANCE, "GPU interrupt affinity", requires_reboot=True),
    OptimizationInfo(
        K.CORE_ISOLATION_OFF,
        X,
        Category.PERFORMANCE,
        "Disable Core Isolation (VBS/HVCI)",
        requires_reboot=True,
        manual_opt_in=True,
    ),
    OptimizationInfo(K.SPECTRE_MELTDOWN_OFF, X, Category.PERFORMANCE, "Disable Spectre/Meltdown mitigations", requires_reboot=True),
    OptimizationInfo(K.KERNEL_MITIGATIONS_OFF, X, Category.PERFORMANCE, "Disable kernel mitigations", requires_reboot=True),
    OptimizationInfo(K.DEP_OFF, X, Category.PERFORMANCE, "Disable DEP", requires_reboot=True),
    OptimizationInfo(K.NATIVE_NVME, R, Category.PERFORMANCE, "Native NVMe I/O", requires_reboot=True),
    OptimizationInfo(K.SMT_DISABLE, R, Category.PERFORMANCE, "Disable SMT / Hyper-Threading", requires_reboot=True),
    OptimizationInfo(K.MMCSS_GAMING, C, Category.PERFORMANCE, "MMCSS gaming priority"),
    OptimizationInfo(K.SCHEDULER_OPT, C, Category.PERFORMANCE, "Foreground scheduler quantum"),
    OptimizationInfo(K.GAME_MODE, S, Category.PERFORMANCE, "Enable Game Mode"),
    OptimizationInfo(K.TIMER_REGISTRY, C, Category.PERFORMANCE, "Global timer resolution requests", requires_reboot=True),
    OptimizationInfo(K.SYSMAIN_DISABLE, C, Category.PERFORMANCE, "Disable SysMain"),
    OptimizationInfo(K.POWER_PLAN, S, Category.POWER, "High Performance power plan"),
    OptimizationInfo(K.ULTIMATE_PERF, C, Category.POWER, "Ultimate Performance power plan"),
    OptimizationInfo(K.USB_POWER, S, Category.POWER, "USB selective suspend (power plan)"),
    OptimizationInfo(K.USB_SUSPEND, S, Category.POWER, "USB selective suspend (driver)"),
    OptimizationInfo(K.PCIE_POWER, S, Category.POWER, "PCIe link state power management off"),
    OptimizationInfo(K.CORE_PARKING, C, Category.POWER, "Disable core parking"),
    OptimizationInfo(K.MIN_PROCESSOR_STATE, S, Category.POWER, "Minimum processor state"),
    OptimizationInfo(K.HIBERNATION_DISABLE, S, Category.POWER, "Disable hibernation"),
    OptimizationInfo(K.DNS, S, Category.NETWORK, "DNS provider"),
    OptimizationInfo(K.NAGLE, S, Category.NETWORK, "Disable Nagle's algorithm"),
    OptimizationInfo(K.TCP_OPTIMIZER, R, Category.NETWORK, "TCP stack tuning"),
    OptimizationInfo(K.NETWORK_THROTTLING, C, Category.NETWORK, "Disable network throttling"),
    OptimizationInfo(K.QOS_GAMING, C, Category.NETWORK, "QoS bandwidth reservation off"),
    OptimizationInfo(K.IPV4_PREFER, R, Category.NETWORK, "Prefer IPv4 over IPv6", requires_reboot=True),
    OptimizationInfo(K.TEREDO_DISABLE, R, Category.NETWORK, "Disable Teredo tunneling", requires_reboot=True),
    OptimizationInfo(K.RSS_ENABLE, S, Category.NETWORK, "Receive side scaling"),
    OptimizationInfo(K.RSC_DISABLE, C, Category.NETWORK, "Disable receive segment coalescing"),
    OptimizationInfo(K.ADAPTER_POWER, S, Category.NETWORK, "Network adapter power saving off"),
    OptimizationInfo(K.PRIVACY_TIER1, R, Category.PRIVACY, "Privacy tier 1 (advertising)"),
    OptimizationInfo(K.PRIVACY_TIER2, R, Category.PRIVACY, "Privacy tier 2 (telemetry)"),
    OptimizationInfo(K.PRIVACY_TIER3, R, Category.PRIVACY, "Privacy tier 3 (Xbox services)"),
    OptimizationInfo(K.BACKGROUND_APPS, S, Category.PRIVACY, "Disable background apps"),
    OptimizationInfo(K.COPILOT_DISABLE, S, Category.PRIVACY, "Disable Copilot"),
    OptimizationInfo(K.BLOATWARE, R, Category.PRIVACY, "Remove preinstalled apps"),
    OptimizationInfo(K.EDGE_DEBLOAT, S, Category.PRIVACY, "Edge debloat policies"),
    OptimizationInfo(K.RAZER_BLOCK, S, Category.PRIVACY, "Block Razer auto-install"),
    OptimizationInfo(K.WPBT_DISABLE, C, Category.PRIVACY, "Disable WPBT"),
    OptimizationInfo(K.SERVICES_TRIM, C, Category.PRIVACY, "Trim background services"),
    OptimizationInfo(K.DISK_CLEANUP, C, Category.PRIVACY, "Deep disk cleanup"),
    OptimizationInfo(K.DELIVERY_OPT, S, Category.PRIVACY, "Delivery Optimization P2P off"),
    OptimizationInfo(K.WER_DISABLE, S, Category.PRIVACY, "Disable Windows Error Reporting"),
    OptimizationInfo(K.WIFI_SENSE, S, Category.PRIVACY, "Disable WiFi Sense"),
    OptimizationInfo(K.SPOTLIGHT_DISABLE, S, Category.PRIVACY, "Disable Windows Spotlight"),
    OptimizationInfo(K.FEEDBACK_DISABLE, S, Category.PRIVACY, "Disable feedback prompts"),
    OptimizationInfo(K.CLIPBOARD_SYNC, S, Category.PRIVACY, "Disable clipboard history sync"),
    OptimizationInfo(K.AUDIO_ENHANCEMENTS, S, Category.AUDIO, "Disable audio ducking"),
    OptimizationInfo(K.AUDIO_EXCLUSIVE, R, Category.AUDIO, "Exclusive-mode sound scheme"),
    OptimizationInfo(K.AUDIO_COMMUNICATIONS, S, Category.AUDIO, "Full volume during calls"),
    OptimizationInfo(K.AUDIO_SYSTEM_SOUNDS, S, Category.AUDIO, "Mute system sounds"),
)

CATALOG: dict[OptimizationKey, OptimizationInfo] = {entry.key: entry for entry in _ENTRIES}

del K, S, C, R, X

_missing = [key.value for key in OptimizationKey if key not in CATALOG]
if _missing or len(CATALOG) != len(_ENTRIES):
    raise CoverageError(f"Optimization catalog is incomplete or duplicated: missing={_missing}")


def get_info(key: OptimizationKey) -> OptimizationInfo:
    """Get catalog metadata for a key."""
    return CATALOG[key]


def parse_key(value: str) -> OptimizationKey | None:
    """Parse a raw key string, returning None for keys outside the vocabulary.

    Example:
        >>> assert parse_key("dns") is OptimizationKey.DNS
        >>> assert parse_key("restore_point") is None
    """
    try:
        return OptimizationKey(value.strip().lower())
    except ValueError:
        return None
