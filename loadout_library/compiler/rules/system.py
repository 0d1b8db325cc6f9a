"""System and desktop rules."""

from ...models.fragments import Fragment
from ...models.optimizations import Category
from ...models.optimizations import OptimizationKey
from ..context import RuleContext
from .base import RuleSet
from .base import fragment
from .base import ok
from .base import set_reg
from .base import set_reg_checked

RULES = RuleSet(Category.SYSTEM)

K = OptimizationKey

MOUSE = r"HKCU:\Control Panel\Mouse"
KEYBOARD = r"HKCU:\Control Panel\Keyboard"
EXPLORER_ADVANCED = r"HKCU:\Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced"
ACCESSIBILITY = r"HKCU:\Control Panel\Accessibility"
NAMESPACE = r"HKLM:\SOFTWARE\Microsoft\Windows\CurrentVersion\Explorer\Desktop\NameSpace"


@RULES.rule(K.PAGEFILE)
def pagefile(ctx: RuleContext) -> Fragment:
    return fragment(
        K.PAGEFILE,
        "Fixed page file",
        [
            "$ramGb = [math]::Round((Get-CimInstance Win32_PhysicalMemory | Measure-Object Capacity -Sum).Sum / 1GB)",
            "if ($ramGb -ge 16) {",
            "    $size = if ($ramGb -ge 32) { 4096 } else { 8192 }",
            "    $cs = Get-CimInstance Win32_ComputerSystem",
            "    Set-CimInstance -InputObject $cs -Property @{ AutomaticManagedPagefile = $false } -EA SilentlyContinue",
            "    $pf = Get-CimInstance Win32_PageFileSetting -EA SilentlyContinue | Where-Object { $_.Name -like \"*pagefile.sys\" } | Select-Object -First 1",
            "    if ($pf) {",
            "        Set-CimInstance -InputObject $pf -Property @{ InitialSize = $size; MaximumSize = $size } -EA SilentlyContinue",
            '        Write-OK "Page file set to ${size}MB fixed"',
            '    } else { Write-Warn "Page file setting not found" }',
            '} else { Write-Warn "Less than 16GB RAM - page file left system managed" }',
        ],
    )


@RULES.rule(K.MOUSE_ACCEL)
def mouse_accel(ctx: RuleContext) -> Fragment:
    return fragment(
        K.MOUSE_ACCEL,
        "Mouse acceleration",
        [
            set_reg_checked(MOUSE, "MouseSpeed", "0", "Mouse acceleration disabled"),
            set_reg(MOUSE, "MouseThreshold1", "0"),
            set_reg(MOUSE, "MouseThreshold2", "0"),
        ],
    )


@RULES.rule(K.KEYBOARD_RESPONSE)
def keyboard_response(ctx: RuleContext) -> Fragment:
    return fragment(
        K.KEYBOARD_RESPONSE,
        "Keyboard response",
        [
            set_reg_checked(KEYBOARD, "KeyboardDelay", "0", "Keyboard delay minimized"),
            set_reg(KEYBOARD, "KeyboardSpeed", "31"),
        ],
    )


@RULES.rule(K.FASTBOOT)
def fastboot(ctx: RuleContext) -> Fragment:
    return fragment(
        K.FASTBOOT,
        "Fast startup",
        [
            set_reg_checked(
                r"HKLM:\SYSTEM\CurrentControlSet\Control\Session Manager\Power",
                "HiberbootEnabled",
                0,
                "Fast startup disabled",
            )
        ],
    )


@RULES.rule(K.CLASSIC_MENU)
def classic_menu(ctx: RuleContext) -> Fragment:
    return fragment(
        K.CLASSIC_MENU,
        "Classic context menu",
        [
            r'$menuPath = "HKCU:\Software\Classes\CLSID\{86ca1aa0-34aa-4e8b-a509-50c905bae2a2}\InprocServer32"',
            "if (-not (Test-Path $menuPath)) { New-Item -Path $menuPath -Force | Out-Null }",
            'Set-ItemProperty -Path $menuPath -Name "(Default)" -Value ""',
            ok("Classic context menu enabled (restart Explorer to apply)"),
        ],
    )


@RULES.rule(K.END_TASK)
def end_task(ctx: RuleContext) -> Fragment:
    return fragment(
        K.END_TASK,
        "End Task in taskbar",
        [set_reg_checked(EXPLORER_ADVANCED + r"\TaskbarDeveloperSettings", "TaskbarEndTask", 1, "End Task enabled in taskbar")],
    )


@RULES.rule(K.DISPLAY_PERF)
def display_perf(ctx: RuleContext) -> Fragment:
    return fragment(
        K.DISPLAY_PERF,
        "Visual effects",
        [
            set_reg(r"HKCU:\Software\Microsoft\Windows\CurrentVersion\Explorer\VisualEffects", "VisualFXSetting", 2),
            set_reg(r"HKCU:\Control Panel\Desktop\WindowMetrics", "MinAnimate", "0"),
            ok("Visual effects set to performance"),
        ],
    )


@RULES.rule(K.EXPLORER_SPEED)
def explorer_speed(ctx: RuleContext) -> Fragment:
    return fragment(
        K.EXPLORER_SPEED,
        "Explorer folder detection",
        [
            set_reg(
                r"HKCU:\Software\Classes\Local Settings\Software\Microsoft\Windows\Shell\Bags\AllFolders\Shell",
                "FolderType",
                "NotSpecified",
            ),
            ok("Explorer automatic folder-type detection disabled"),
        ],
    )


@RULES.rule(K.TEMP_PURGE)
def temp_purge(ctx: RuleContext) -> Fragment:
    return fragment(
        K.TEMP_PURGE,
        "Temp folders",
        [
            'Remove-Item "$env:TEMP\\*" -Recurse -Force -EA SilentlyContinue',
            'Remove-Item "$env:WINDIR\\Temp\\*" -Recurse -Force -EA SilentlyContinue',
            ok("Temp folders purged"),
        ],
    )


@RULES.rule(K.STORAGE_SENSE)
def storage_sense(ctx: RuleContext) -> Fragment:
    return fragment(
        K.STORAGE_SENSE,
        "Storage Sense",
        [
            set_reg(r"HKCU:\Software\Microsoft\Windows\CurrentVersion\StorageSense\Parameters\StoragePolicy", "01", 0),
            ok("Storage Sense disabled"),
        ],
    )


@RULES.rule(K.EXPLORER_CLEANUP)
def explorer_cleanup(ctx: RuleContext) -> Fragment:
    return fragment(
        K.EXPLORER_CLEANUP,
        "Explorer Home and Gallery",
        [
            f'Remove-Item "{NAMESPACE}\\{{f874310e-b6b7-47dc-bc84-b9e6b38f5903}}" -Force -EA SilentlyContinue',
            f'Remove-Item "{NAMESPACE}\\{{e88865ea-0e1c-4e20-9aa6-edcd0212c87c}}" -Force -EA SilentlyContinue',
            ok("Explorer Home and Gallery removed"),
        ],
    )


@RULES.rule(K.NOTIFICATIONS_OFF)
def notifications_off(ctx: RuleContext) -> Fragment:
    return fragment(
        K.NOTIFICATIONS_OFF,
        "Notifications",
        [
            set_reg(r"HKCU:\Software\Policies\Microsoft\Windows\Explorer", "DisableNotificationCenter", 1),
            set_reg(r"HKCU:\Software\Microsoft\Windows\CurrentVersion\PushNotifications", "ToastEnabled", 0),
            ok("Notifications disabled"),
        ],
    )


@RULES.rule(K.PS7_TELEMETRY)
def ps7_telemetry(ctx: RuleContext) -> Fragment:
    return fragment(
        K.PS7_TELEMETRY,
        "PowerShell 7 telemetry",
        [
            '[Environment]::SetEnvironmentVariable("POWERSHELL_TELEMETRY_OPTOUT", "1", "Machine")',
            ok("PowerShell 7 telemetry opt-out set"),
        ],
    )


@RULES.rule(K.ACCESSIBILITY_SHORTCUTS)
def accessibility_shortcuts(ctx: RuleContext) -> Fragment:
    return fragment(
        K.ACCESSIBILITY_SHORTCUTS,
        "Accessibility shortcuts",
        [
            set_reg(ACCESSIBILITY + r"\StickyKeys", "Flags", "506"),
            set_reg(ACCESSIBILITY + r"\Keyboard Response", "Flags", "122"),
            set_reg(ACCESSIBILITY + r"\ToggleKeys", "Flags", "58"),
            set_reg(ACCESSIBILITY + r"\MouseKeys", "Flags", "58"),
            ok("Sticky/Filter/Toggle Keys shortcuts disabled"),
        ],
    )


@RULES.rule(K.SERVICES_SEARCH_OFF)
def services_search_off(ctx: RuleContext) -> Fragment:
    return fragment(
        K.SERVICES_SEARCH_OFF,
        "Windows Search indexing",
        [
            "Stop-Service WSearch -Force -EA SilentlyContinue",
            "Set-Service WSearch -StartupType Manual -EA SilentlyContinue",
            ok("Windows Search set to Manual"),
        ],
        warnings=["Start menu and Explorer search will be slower without the index"],
    )
