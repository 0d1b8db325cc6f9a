"""Gaming performance rules, including the restricted mitigation toggles."""

from ...models.fragments import Fragment
from ...models.optimizations import Category
from ...models.optimizations import OptimizationKey
from ..context import RuleContext
from .base import RuleSet
from .base import fragment
from .base import ok
from .base import set_reg
from .base import set_reg_checked

RULES = RuleSet(Category.PERFORMANCE)

K = OptimizationKey

GAME_CONFIG = r"HKCU:\System\GameConfigStore"
GAME_BAR = r"HKCU:\Software\Microsoft\GameBar"
KERNEL = r"HKLM:\SYSTEM\CurrentControlSet\Control\Session Manager\kernel"
MEMORY_MANAGEMENT = r"HKLM:\SYSTEM\CurrentControlSet\Control\Session Manager\Memory Management"
PRIORITY_CONTROL = r"HKLM:\SYSTEM\CurrentControlSet\Control\PriorityControl"
SYSTEM_PROFILE = r"HKLM:\SOFTWARE\Microsoft\Windows NT\CurrentVersion\Multimedia\SystemProfile"
INTERRUPT_MANAGEMENT = r"HKLM:\SYSTEM\CurrentControlSet\Enum\$($gpuDevice.InstanceId)\Device Parameters\Interrupt Management"

FIND_GPU_DEVICE = '$gpuDevice = Get-PnpDevice -Class Display | Where-Object {$_.Status -eq "OK"} | Select-Object -First 1'

TIMER_TOOL_URL = "https://github.com/thepedroferrari/rocktune/blob/master/timer-tool.ps1"


def _danger(message: str) -> str:
    return f'Write-Host "  [!!] DANGER: {message}" -ForegroundColor Red'


@RULES.rule(K.GAMEDVR)
def gamedvr(ctx: RuleContext) -> Fragment:
    return fragment(
        K.GAMEDVR,
        "Game DVR",
        [
            set_reg(GAME_CONFIG, "GameDVR_Enabled", 0),
            set_reg(r"HKLM:\SOFTWARE\Policies\Microsoft\Windows\GameDVR", "AllowGameDVR", 0),
            set_reg(r"HKCU:\Software\Microsoft\Windows\CurrentVersion\GameDVR", "AppCaptureEnabled", 0),
            ok("Game DVR disabled"),
        ],
    )


@RULES.rule(K.GAME_BAR)
def game_bar(ctx: RuleContext) -> Fragment:
    lines = [
        set_reg(GAME_BAR, "ShowStartupPanel", 0),
        set_reg(GAME_BAR, "GamePanelStartupTipIndex", 3),
    ]
    warnings = []
    if ctx.params.keep_game_bar:
        lines.append(ok("Game Bar overlays disabled (Game Bar kept for X3D game detection)"))
        warnings.append("Game Bar stays enabled: the X3D V-Cache driver uses it to detect games")
    else:
        lines.append(set_reg(GAME_BAR, "UseNexusForGameBarEnabled", 0))
        lines.append(ok("Game Bar overlays and controller shortcut disabled"))
    return fragment(K.GAME_BAR, "Game Bar", lines, warnings)


@RULES.rule(K.HAGS)
def hags(ctx: RuleContext) -> Fragment:
    return fragment(
        K.HAGS,
        "Hardware-accelerated GPU scheduling",
        [set_reg_checked(r"HKLM:\SYSTEM\CurrentControlSet\Control\GraphicsDrivers", "HwSchMode", 2, "HAGS enabled")],
    )


@RULES.rule(K.FSO_DISABLE)
def fso_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.FSO_DISABLE,
        "Fullscreen optimizations",
        [
            set_reg(GAME_CONFIG, "GameDVR_FSEBehaviorMode", 2),
            set_reg(GAME_CONFIG, "GameDVR_HonorUserFSEBehaviorMode", 1),
            set_reg(GAME_CONFIG, "GameDVR_FSEBehavior", 2),
            ok("Fullscreen optimizations disabled"),
        ],
    )


@RULES.rule(K.TIMER)
def timer(ctx: RuleContext) -> Fragment:
    return fragment(
        K.TIMER,
        "Timer resolution (manual step)",
        [
            "# Run timer-tool.ps1 before launching games and keep it running while playing.",
            f"# Download: {TIMER_TOOL_URL}",
            '#   .\\timer-tool.ps1 -GameProcess "cs2"   # exits when the game closes',
            'Write-Host "  [!] MANUAL STEP: run timer-tool.ps1 before gaming (0.5ms timer)" -ForegroundColor Yellow',
            f'Write-Host "      {TIMER_TOOL_URL}" -ForegroundColor Cyan',
        ],
    )


@RULES.rule(K.MSI_MODE)
def msi_mode(ctx: RuleContext) -> Fragment:
    return fragment(
        K.MSI_MODE,
        "GPU MSI mode",
        [
            FIND_GPU_DEVICE,
            "if ($gpuDevice) {",
            f'    $msiPath = "{INTERRUPT_MANAGEMENT}\\MessageSignaledInterruptProperties"',
            '    if (Set-Reg $msiPath "MSISupported" 1 -PassThru) { Write-OK "MSI mode enabled for $($gpuDevice.FriendlyName)" }',
            '    else { Write-Fail "Could not enable MSI mode" }',
            '} else { Write-Warn "No active display adapter found" }',
        ],
    )


@RULES.rule(K.HPET)
def hpet(ctx: RuleContext) -> Fragment:
    return fragment(
        K.HPET,
        "HPET and dynamic tick",
        [
            "bcdedit /deletevalue useplatformclock 2>&1 | Out-Null",
            "bcdedit /set disabledynamictick yes 2>&1 | Out-Null",
            ok("Platform clock forcing removed, dynamic tick disabled"),
        ],
    )


@RULES.rule(K.MULTIPLANE_OVERLAY)
def multiplane_overlay(ctx: RuleContext) -> Fragment:
    return fragment(
        K.MULTIPLANE_OVERLAY,
        "Multiplane overlay",
        [
            set_reg(r"HKLM:\SOFTWARE\Microsoft\Windows\Dwm", "OverlayTestMode", 5),
            ok("Multiplane overlay disabled"),
        ],
    )


@RULES.rule(K.PROCESS_MITIGATION)
def process_mitigation(ctx: RuleContext) -> Fragment:
    return fragment(
        K.PROCESS_MITIGATION,
        "Kernel shadow stacks",
        [
            set_reg(KERNEL, "KernelShadowStacksForceDisabled", 1),
            ok("Kernel shadow stacks disabled"),
        ],
        warnings=["Process mitigations reduced - some anti-cheat software may refuse to start"],
    )


@RULES.rule(K.INTERRUPT_AFFINITY)
def interrupt_affinity(ctx: RuleContext) -> Fragment:
    return fragment(
        K.INTERRUPT_AFFINITY,
        "GPU interrupt affinity",
        [
            FIND_GPU_DEVICE,
            "if ($gpuDevice) {",
            f'    $affinityPath = "{INTERRUPT_MANAGEMENT}\\Affinity Policy"',
            '    Set-Reg $affinityPath "DevicePolicy" 3',
            '    Set-Reg $affinityPath "AssignmentSetOverride" ([byte[]](0x02)) "Binary"',
            '    Write-OK "GPU interrupts pinned to CPU 1"',
            '} else { Write-Warn "No active display adapter found" }',
        ],
    )


@RULES.rule(K.CORE_ISOLATION_OFF)
def core_isolation_off(ctx: RuleContext) -> Fragment:
    return fragment(
        K.CORE_ISOLATION_OFF,
        "Core Isolation (VBS/HVCI)",
        [
            _danger("disabling Core Isolation"),
            set_reg(r"HKLM:\SYSTEM\CurrentControlSet\Control\DeviceGuard", "EnableVirtualizationBasedSecurity", 0),
            set_reg(
                r"HKLM:\SYSTEM\CurrentControlSet\Control\DeviceGuard\Scenarios\HypervisorEnforcedCodeIntegrity",
                "Enabled",
                0,
            ),
            ok("Core Isolation disabled"),
        ],
        warnings=["Memory integrity is off - kernel drivers are no longer isolated"],
    )


@RULES.rule(K.SPECTRE_MELTDOWN_OFF)
def spectre_meltdown_off(ctx: RuleContext) -> Fragment:
    return fragment(
        K.SPECTRE_MELTDOWN_OFF,
        "Spectre/Meltdown mitigations",
        [
            _danger("disabling CPU speculative-execution mitigations (CVE-2017-5753, CVE-2017-5715, CVE-2017-5754)"),
            set_reg(MEMORY_MANAGEMENT, "FeatureSettingsOverride", 3),
            set_reg(MEMORY_MANAGEMENT, "FeatureSettingsOverrideMask", 3),
            ok("Spectre/Meltdown mitigations disabled"),
        ],
        warnings=["Do not use this machine for browsing or untrusted code with mitigations off"],
    )


@RULES.rule(K.KERNEL_MITIGATIONS_OFF)
def kernel_mitigations_off(ctx: RuleContext) -> Fragment:
    return fragment(
        K.KERNEL_MITIGATIONS_OFF,
        "Kernel mitigations",
        [
            _danger("disabling kernel exploit protections"),
            set_reg(KERNEL, "DisableExceptionChainValidation", 1),
            set_reg(KERNEL, "KernelSEHOPEnabled", 0),
            ok("Kernel mitigations disabled"),
        ],
    )


@RULES.rule(K.DEP_OFF)
def dep_off(ctx: RuleContext) -> Fragment:
    return fragment(
        K.DEP_OFF,
        "Data Execution Prevention",
        [
            _danger("disabling DEP"),
            "bcdedit /set nx AlwaysOff 2>&1 | Out-Null",
            ok("DEP disabled"),
        ],
        warnings=["Re-enable DEP with: bcdedit /set nx OptIn"],
    )


@RULES.rule(K.NATIVE_NVME)
def native_nvme(ctx: RuleContext) -> Fragment:
    return fragment(
        K.NATIVE_NVME,
        "Native NVMe I/O",
        [
            "$build = [int](Get-CimInstance Win32_OperatingSystem).BuildNumber",
            "if ($build -ge 26100) {",
            '    Set-Reg "HKLM:\\SYSTEM\\CurrentControlSet\\Policies\\Microsoft\\FeatureManagement\\Overrides" "1176759950" 1',
            '    Write-OK "Native NVMe enabled"',
            '} else { Write-Warn "Native NVMe requires Windows 11 24H2 or newer" }',
        ],
    )


@RULES.rule(K.SMT_DISABLE)
def smt_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.SMT_DISABLE,
        "SMT / Hyper-Threading",
        [
            "$cores = (Get-CimInstance Win32_Processor | Measure-Object -Property NumberOfCores -Sum).Sum",
            "bcdedit /set numproc $cores 2>&1 | Out-Null",
            'Write-OK "Logical processors limited to $cores physical cores"',
        ],
        warnings=["Undo with: bcdedit /deletevalue numproc"],
    )


@RULES.rule(K.MMCSS_GAMING)
def mmcss_gaming(ctx: RuleContext) -> Fragment:
    games = SYSTEM_PROFILE + r"\Tasks\Games"
    return fragment(
        K.MMCSS_GAMING,
        "MMCSS game priority",
        [
            set_reg(games, "GPU Priority", 8),
            set_reg(games, "Priority", 6),
            set_reg(games, "Scheduling Category", "High"),
            set_reg(games, "SFIO Priority", "High"),
            ok("MMCSS game priority configured"),
        ],
    )


@RULES.rule(K.SCHEDULER_OPT)
def scheduler_opt(ctx: RuleContext) -> Fragment:
    return fragment(
        K.SCHEDULER_OPT,
        "Foreground scheduling",
        [
            set_reg(PRIORITY_CONTROL, "Win32PrioritySeparation", 26),
            ok("Short, variable quantum with foreground boost set"),
        ],
    )


@RULES.rule(K.GAME_MODE)
def game_mode(ctx: RuleContext) -> Fragment:
    return fragment(
        K.GAME_MODE,
        "Game Mode",
        [
            set_reg(GAME_BAR, "AllowAutoGameMode", 1),
            set_reg(GAME_BAR, "AutoGameModeEnabled", 1),
            ok("Game Mode enabled"),
        ],
    )


@RULES.rule(K.TIMER_REGISTRY)
def timer_registry(ctx: RuleContext) -> Fragment:
    return fragment(
        K.TIMER_REGISTRY,
        "Timer resolution requests",
        [
            set_reg(KERNEL, "GlobalTimerResolutionRequests", 1),
            set_reg(SYSTEM_PROFILE, "SystemResponsiveness", 0),
            ok("Global timer resolution requests enabled"),
        ],
    )


@RULES.rule(K.SYSMAIN_DISABLE)
def sysmain_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.SYSMAIN_DISABLE,
        "SysMain",
        [
            "Stop-Service SysMain -Force -EA SilentlyContinue",
            "Set-Service SysMain -StartupType Disabled -EA SilentlyContinue",
            ok("SysMain (Superfetch) disabled"),
        ],
    )
