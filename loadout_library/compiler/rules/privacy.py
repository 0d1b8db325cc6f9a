"""Privacy and debloat rules."""

from ...models.fragments import Fragment
from ...models.optimizations import Category
from ...models.optimizations import OptimizationKey
from ..context import RuleContext
from .base import RuleSet
from .base import fragment
from .base import ok
from .base import set_reg

RULES = RuleSet(Category.PRIVACY)

K = OptimizationKey

DATA_COLLECTION = r"HKLM:\SOFTWARE\Policies\Microsoft\Windows\DataCollection"
CONTENT_DELIVERY = r"HKCU:\Software\Microsoft\Windows\CurrentVersion\ContentDeliveryManager"
EDGE_POLICIES = r"HKLM:\SOFTWARE\Policies\Microsoft\Edge"

# AllowTelemetry level each privacy tier asks for; lower is stricter.
TELEMETRY_LEVELS: dict[OptimizationKey, int] = {
    K.PRIVACY_TIER2: 1,
    K.PRIVACY_TIER3: 0,
}

XBOX_SERVICES = ("XblAuthManager", "XblGameSave", "XboxGipSvc", "XboxNetApiSvc")

BLOATWARE_APPS = (
    "Microsoft.BingNews",
    "Microsoft.GetHelp",
    "Microsoft.Getstarted",
    "Microsoft.MicrosoftSolitaireCollection",
    "Microsoft.People",
    "Microsoft.PowerAutomateDesktop",
    "Microsoft.Todos",
    "Microsoft.WindowsAlarms",
    "Microsoft.WindowsFeedbackHub",
    "Microsoft.WindowsMaps",
    "Microsoft.WindowsSoundRecorder",
    "Microsoft.ZuneMusic",
    "Microsoft.ZuneVideo",
    "Clipchamp.Clipchamp",
)

TRIMMED_SERVICES = ("DiagTrack", "dmwappushservice", "lfsvc", "RetailDemo", "Fax", "MapsBroker")


def ps_array(values: tuple[str, ...]) -> str:
    return "@(" + ", ".join(f'"{value}"' for value in values) + ")"


def telemetry_lines(level: int) -> list[str]:
    return [set_reg(DATA_COLLECTION, "AllowTelemetry", level)]


def tracking_lines() -> list[str]:
    return [
        set_reg(r"HKCU:\Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced", "Start_TrackProgs", 0),
        ok("Telemetry reduced and app launch tracking disabled"),
    ]


def xbox_service_lines() -> list[str]:
    return [
        f"$xboxServices = {ps_array(XBOX_SERVICES)}",
        "foreach ($svc in $xboxServices) {",
        "    Stop-Service $svc -Force -EA SilentlyContinue",
        "    Set-Service $svc -StartupType Disabled -EA SilentlyContinue",
        "}",
        ok("Xbox services disabled"),
    ]


GAME_PASS_WARNING = "Xbox services are disabled - Game Pass and Xbox app sign-in will stop working"


@RULES.rule(K.PRIVACY_TIER1)
def privacy_tier1(ctx: RuleContext) -> Fragment:
    return fragment(
        K.PRIVACY_TIER1,
        "Privacy tier 1",
        [
            set_reg(r"HKCU:\Software\Microsoft\Windows\CurrentVersion\AdvertisingInfo", "Enabled", 0),
            set_reg(
                r"HKCU:\Software\Microsoft\Windows\CurrentVersion\Privacy",
                "TailoredExperiencesWithDiagnosticDataEnabled",
                0,
            ),
            ok("Advertising ID and tailored experiences disabled"),
        ],
    )


@RULES.rule(K.PRIVACY_TIER2)
def privacy_tier2(ctx: RuleContext) -> Fragment:
    return fragment(
        K.PRIVACY_TIER2,
        "Privacy tier 2",
        [*telemetry_lines(TELEMETRY_LEVELS[K.PRIVACY_TIER2]), *tracking_lines()],
    )


@RULES.rule(K.PRIVACY_TIER3)
def privacy_tier3(ctx: RuleContext) -> Fragment:
    return fragment(
        K.PRIVACY_TIER3,
        "Privacy tier 3",
        [*telemetry_lines(TELEMETRY_LEVELS[K.PRIVACY_TIER3]), *xbox_service_lines()],
        warnings=[GAME_PASS_WARNING],
    )


@RULES.rule(K.BACKGROUND_APPS)
def background_apps(ctx: RuleContext) -> Fragment:
    return fragment(
        K.BACKGROUND_APPS,
        "Background apps",
        [
            set_reg(
                r"HKCU:\Software\Microsoft\Windows\CurrentVersion\BackgroundAccessApplications",
                "GlobalUserDisabled",
                1,
            ),
            ok("Background apps disabled"),
        ],
    )


@RULES.rule(K.COPILOT_DISABLE)
def copilot_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.COPILOT_DISABLE,
        "Copilot",
        [
            set_reg(r"HKCU:\Software\Policies\Microsoft\Windows\WindowsCopilot", "TurnOffWindowsCopilot", 1),
            ok("Copilot disabled"),
        ],
    )


@RULES.rule(K.BLOATWARE)
def bloatware(ctx: RuleContext) -> Fragment:
    return fragment(
        K.BLOATWARE,
        "Preinstalled apps",
        [
            f"$bloatApps = {ps_array(BLOATWARE_APPS)}",
            "foreach ($app in $bloatApps) {",
            "    Get-AppxPackage -Name $app -AllUsers | Remove-AppxPackage -AllUsers -EA SilentlyContinue",
            "}",
            ok("Preinstalled apps removed"),
        ],
        warnings=["Removed apps can be reinstalled from the Microsoft Store"],
    )


@RULES.rule(K.EDGE_DEBLOAT)
def edge_debloat(ctx: RuleContext) -> Fragment:
    return fragment(
        K.EDGE_DEBLOAT,
        "Edge policies",
        [
            set_reg(EDGE_POLICIES, "HideFirstRunExperience", 1),
            set_reg(EDGE_POLICIES, "EdgeShoppingAssistantEnabled", 0),
            set_reg(EDGE_POLICIES, "WebWidgetAllowed", 0),
            ok("Edge debloat policies applied"),
        ],
    )


@RULES.rule(K.RAZER_BLOCK)
def razer_block(ctx: RuleContext) -> Fragment:
    return fragment(
        K.RAZER_BLOCK,
        "Razer auto-install",
        [
            set_reg(r"HKLM:\SOFTWARE\Microsoft\Windows\CurrentVersion\Device Installer", "DisableCoInstallers", 1),
            ok("Device co-installers blocked (Razer auto-install)"),
        ],
    )


@RULES.rule(K.WPBT_DISABLE)
def wpbt_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.WPBT_DISABLE,
        "Windows Platform Binary Table",
        [
            set_reg(r"HKLM:\SYSTEM\CurrentControlSet\Control\Session Manager", "DisableWpbtExecution", 1),
            ok("WPBT execution disabled"),
        ],
    )


@RULES.rule(K.SERVICES_TRIM)
def services_trim(ctx: RuleContext) -> Fragment:
    return fragment(
        K.SERVICES_TRIM,
        "Background services",
        [
            f"$trimServices = {ps_array(TRIMMED_SERVICES)}",
            "foreach ($svc in $trimServices) {",
            "    Set-Service $svc -StartupType Manual -EA SilentlyContinue",
            "    Stop-Service $svc -Force -EA SilentlyContinue",
            "}",
            ok("Background services set to Manual"),
        ],
    )


@RULES.rule(K.DISK_CLEANUP)
def disk_cleanup(ctx: RuleContext) -> Fragment:
    return fragment(
        K.DISK_CLEANUP,
        "Disk cleanup",
        [
            "Dism.exe /Online /Cleanup-Image /StartComponentCleanup 2>&1 | Out-Null",
            "Clear-RecycleBin -Force -EA SilentlyContinue",
            ok("Component store and recycle bin cleaned"),
        ],
    )


@RULES.rule(K.DELIVERY_OPT)
def delivery_opt(ctx: RuleContext) -> Fragment:
    return fragment(
        K.DELIVERY_OPT,
        "Delivery Optimization",
        [
            set_reg(r"HKLM:\SOFTWARE\Policies\Microsoft\Windows\DeliveryOptimization", "DODownloadMode", 0),
            ok("Delivery Optimization peer-to-peer disabled"),
        ],
    )


@RULES.rule(K.WER_DISABLE)
def wer_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.WER_DISABLE,
        "Windows Error Reporting",
        [
            set_reg(r"HKLM:\SOFTWARE\Microsoft\Windows\Windows Error Reporting", "Disabled", 1),
            "Stop-Service WerSvc -Force -EA SilentlyContinue",
            "Set-Service WerSvc -StartupType Disabled -EA SilentlyContinue",
            ok("Windows Error Reporting disabled"),
        ],
    )


@RULES.rule(K.WIFI_SENSE)
def wifi_sense(ctx: RuleContext) -> Fragment:
    return fragment(
        K.WIFI_SENSE,
        "WiFi Sense",
        [
            set_reg(r"HKLM:\SOFTWARE\Microsoft\WcmSvc\wifinetworkmanager\config", "AutoConnectAllowedOEM", 0),
            ok("WiFi Sense disabled"),
        ],
    )


@RULES.rule(K.SPOTLIGHT_DISABLE)
def spotlight_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.SPOTLIGHT_DISABLE,
        "Windows Spotlight",
        [
            set_reg(CONTENT_DELIVERY, "RotatingLockScreenEnabled", 0),
            set_reg(CONTENT_DELIVERY, "RotatingLockScreenOverlayEnabled", 0),
            ok("Windows Spotlight disabled"),
        ],
    )


@RULES.rule(K.FEEDBACK_DISABLE)
def feedback_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.FEEDBACK_DISABLE,
        "Feedback prompts",
        [
            set_reg(r"HKCU:\Software\Microsoft\Siuf\Rules", "NumberOfSIUFInPeriod", 0),
            ok("Feedback prompts disabled"),
        ],
    )


@RULES.rule(K.CLIPBOARD_SYNC)
def clipboard_sync(ctx: RuleContext) -> Fragment:
    return fragment(
        K.CLIPBOARD_SYNC,
        "Clipboard history",
        [
            set_reg(r"HKCU:\Software\Microsoft\Clipboard", "EnableClipboardHistory", 0),
            set_reg(r"HKLM:\SOFTWARE\Policies\Microsoft\Windows\System", "AllowCrossDeviceClipboard", 0),
            ok("Clipboard history and cloud sync disabled"),
        ],
    )
