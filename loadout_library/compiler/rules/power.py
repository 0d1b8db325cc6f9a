"""Power plan and device power rules."""

from ...models.fragments import Fragment
from ...models.optimizations import Category
from ...models.optimizations import OptimizationKey
from ..context import RuleContext
from .base import RuleSet
from .base import fragment
from .base import ok
from .base import powercfg_setting
from .base import set_reg

RULES = RuleSet(Category.POWER)

K = OptimizationKey

HIGH_PERFORMANCE_GUID = "8c5e7fda-e8bf-4a96-9a85-a6e23a8c635c"
ULTIMATE_PERFORMANCE_GUID = "e9a42b02-d5df-448d-aa00-03f14749eb61"
USB_SUBGROUP = "2a737441-1930-4402-8d77-b2bebba308a3"
USB_SELECTIVE_SUSPEND = "48e6b7a6-50f5-4782-a5d4-53bb8f07e226"
USB_SERVICE = r"HKLM:\SYSTEM\CurrentControlSet\Services\USB"


def high_performance_lines() -> list[str]:
    return [
        f"powercfg /setactive {HIGH_PERFORMANCE_GUID} 2>&1 | Out-Null",
        'if ($LASTEXITCODE -eq 0) { Write-OK "High Performance power plan active" }',
        'else { Write-Warn "High Performance plan not available" }',
    ]


def ultimate_performance_lines(fallback: list[str] | None = None) -> list[str]:
    """Activate Ultimate Performance, optionally running ``fallback`` when it is unavailable."""
    missing = ['    Write-Warn "Ultimate Performance plan not available"']
    if fallback:
        missing = [f"    {line}" for line in fallback]
    return [
        f"powercfg /duplicatescheme {ULTIMATE_PERFORMANCE_GUID} 2>&1 | Out-Null",
        '$ultimate = powercfg /list 2>&1 | Select-String "Ultimate Performance" | Select-Object -First 1',
        '$ultimateGuid = if ($ultimate) { [regex]::Match($ultimate.Line, "([A-Fa-f0-9-]{36})").Value } else { "" }',
        "if ($ultimateGuid) {",
        "    powercfg /setactive $ultimateGuid 2>&1 | Out-Null",
        '    Write-OK "Ultimate Performance power plan active"',
        "} else {",
        *missing,
        "}",
    ]


def usb_powercfg_lines() -> list[str]:
    return powercfg_setting(USB_SUBGROUP, USB_SELECTIVE_SUSPEND, 0, "USB selective suspend disabled in power plan")


def usb_driver_lines() -> list[str]:
    return [
        set_reg(USB_SERVICE, "DisableSelectiveSuspend", 1),
        ok("USB selective suspend disabled for the USB driver"),
    ]


@RULES.rule(K.POWER_PLAN)
def power_plan(ctx: RuleContext) -> Fragment:
    return fragment(K.POWER_PLAN, "High Performance power plan", high_performance_lines())


@RULES.rule(K.ULTIMATE_PERF)
def ultimate_perf(ctx: RuleContext) -> Fragment:
    return fragment(K.ULTIMATE_PERF, "Ultimate Performance power plan", ultimate_performance_lines())


@RULES.rule(K.USB_POWER)
def usb_power(ctx: RuleContext) -> Fragment:
    return fragment(K.USB_POWER, "USB selective suspend", usb_powercfg_lines())


@RULES.rule(K.USB_SUSPEND)
def usb_suspend(ctx: RuleContext) -> Fragment:
    return fragment(K.USB_SUSPEND, "USB selective suspend (driver)", usb_driver_lines())


@RULES.rule(K.PCIE_POWER)
def pcie_power(ctx: RuleContext) -> Fragment:
    return fragment(
        K.PCIE_POWER,
        "PCIe link state power management",
        powercfg_setting("sub_pciexpress", "ee12f906-d166-476a-8f3a-af931b6e9d31", 0, "PCIe power saving disabled"),
    )


@RULES.rule(K.CORE_PARKING)
def core_parking(ctx: RuleContext) -> Fragment:
    return fragment(
        K.CORE_PARKING,
        "Core parking",
        powercfg_setting("sub_processor", "CPMINCORES", 100, "Core parking disabled"),
    )


@RULES.rule(K.MIN_PROCESSOR_STATE)
def min_processor_state(ctx: RuleContext) -> Fragment:
    percent = ctx.params.min_processor_state
    return fragment(
        K.MIN_PROCESSOR_STATE,
        "Minimum processor state",
        powercfg_setting("sub_processor", "PROCTHROTTLEMIN", percent, f"Minimum processor state set to {percent}%"),
    )


@RULES.rule(K.HIBERNATION_DISABLE)
def hibernation_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.HIBERNATION_DISABLE,
        "Hibernation",
        [
            "powercfg /hibernate off 2>&1 | Out-Null",
            'if ($LASTEXITCODE -eq 0) { Write-OK "Hibernation disabled" } else { Write-Warn "Could not disable hibernation" }',
        ],
    )
