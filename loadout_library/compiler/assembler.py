"""Script assembler.

Orders fragments into the fixed script sections and serializes them:

    header (privilege declaration, doc block, config JSON, helpers)
    pre-flight (restore point)
    hardware detection
    optimization block
    install loop
    footer (summary, reboot list, companion guide)

Safe mode keeps only fragments that are safe-tier and need no
acknowledgement, drops the install loop and the guide block, and creates
the restore point without prompting.

Contract:
- Inputs: Rendered sections, fragments, package list, mode
- Outputs: Script text
- Side Effects: None
"""

import json
from collections.abc import Iterable
from collections.abc import Sequence
from datetime import datetime

from ..models.fragments import CompileMode
from ..models.fragments import Fragment
from ..models.fragments import format_timestamp
from ..models.hardware import HardwareProfile
from ..models.optimizations import CATALOG_VERSION
from ..models.optimizations import OptimizationKey
from ..models.optimizations import Tier
from ..models.optimizations import get_info
from ..models.optimizations import highest_tier
from .conditioner import HardwareParams
from .literal import encode_literal_block
from .rules.base import escape_ps

DEFAULT_GUIDE_FILENAME = "loadout-guide.html"

HELPER_FUNCTIONS = r"""# --- Progress tracking ---
$script:StepCount = 0
$script:SuccessCount = 0
$script:FailCount = 0
$script:WarningCount = 0

function Write-Step { param([string]$M) $script:StepCount++; Write-Host ""; Write-Host "[$script:StepCount/$script:StepTotal] $M" -ForegroundColor Cyan }
function Write-OK { param([string]$M) $script:SuccessCount++; Write-Host "  [OK] $M" -ForegroundColor Green }
function Write-Fail { param([string]$M) $script:FailCount++; Write-Host "  [FAIL] $M" -ForegroundColor Red }
function Write-Warn { param([string]$M) $script:WarningCount++; Write-Host "  [!] $M" -ForegroundColor Yellow }
function Set-Reg {
    param([string]$Path, [string]$Name, $Value, [string]$Type = "DWORD", [switch]$PassThru)
    $success = $false
    try {
        if (-not (Test-Path $Path)) { New-Item -Path $Path -Force | Out-Null }
        $existing = Get-ItemProperty -Path $Path -Name $Name -EA SilentlyContinue
        if ($null -eq $existing) {
            New-ItemProperty -Path $Path -Name $Name -Value $Value -PropertyType $Type -Force | Out-Null
        } else {
            Set-ItemProperty -Path $Path -Name $Name -Value $Value -EA Stop
        }
        $success = $true
    } catch { $success = $false }
    if ($PassThru) { return $success }
}"""

DANGER_BANNER = (
    "# ========================================================================",
    "#  DANGER_ZONE_ENABLED=true",
    "#  WARNING: Security mitigations disabled. OFFLINE USE ONLY.",
    "# ========================================================================",
)

_RESTORE_POINT = (
    "$recentRestorePoint = $null",
    "try { $recentRestorePoint = Get-ComputerRestorePoint -EA Stop | Sort-Object CreationTime -Descending | Select-Object -First 1 } catch { $recentRestorePoint = $null }",
    "if ($recentRestorePoint -and $recentRestorePoint.CreationTime -gt (Get-Date).AddMinutes(-1440)) {",
    '    Write-Warn "Restore point already created within last 24 hours (skipped)"',
    "} else {",
    "    try {",
    '        Checkpoint-Computer -Description "Before Loadout" -RestorePointType MODIFY_SETTINGS -EA Stop -WarningAction SilentlyContinue',
    '        Write-OK "Restore point created"',
    "    } catch {",
    '        Write-Warn "Could not create restore point: $($_.Exception.Message)"',
    "    }",
    "}",
)


def select_fragments(fragments: Iterable[Fragment], mode: CompileMode) -> list[Fragment]:
    """Fragments that belong in a script of the given mode."""
    if mode is CompileMode.SAFE:
        return [fragment for fragment in fragments if fragment.is_safe]
    return list(fragments)


def step_total(mode: CompileMode, has_install: bool) -> int:
    """Number of Write-Step calls the assembled script makes."""
    # pre-flight, optimizations and the closing summary always run
    return 3 + int(has_install and mode is CompileMode.FULL)


def render_config_json(
    profile: HardwareProfile,
    selected_keys: Sequence[OptimizationKey],
    packages: Sequence[str],
    mode: CompileMode,
    generated_at: datetime,
) -> str:
    """Serialize the loadout configuration embedded at the top of the script."""
    config = {
        "generated": format_timestamp(generated_at),
        "catalog_version": CATALOG_VERSION,
        "mode": mode.value,
        "risk_profile": highest_tier(get_info(key).tier for key in selected_keys).value,
        "restore_point_required": any(get_info(key).requires_ack for key in selected_keys),
        "hardware": {
            "cpu": profile.cpu_tag,
            "gpu": profile.gpu_tag,
            "peripherals": profile.sorted_peripherals(),
            "monitorSoftware": profile.sorted_monitor_software(),
        },
        "optimizations": [key.value for key in selected_keys],
        "packages": list(packages),
    }
    return json.dumps(config, indent=2)


def render_header(
    profile: HardwareProfile,
    params: HardwareParams,
    selected_keys: Sequence[OptimizationKey],
    packages: Sequence[str],
    mode: CompileMode,
    generated_at: datetime,
) -> str:
    """Render the privilege declaration, doc block, config and helpers.

    Args:
        profile: Hardware profile
        params: Conditioned hardware parameters (for display labels)
        selected_keys: Selected keys in registry order
        packages: Packages the install loop will cover
        mode: Script mode
        generated_at: Generation time

    Returns:
        Header text
    """
    restricted = [key for key in selected_keys if get_info(key).tier is Tier.RESTRICTED]
    peripherals = ", ".join(profile.sorted_peripherals()) or "none"

    lines = ["#Requires -RunAsAdministrator"]
    if restricted:
        lines.extend(DANGER_BANNER)
        lines.append("")
    lines.extend(
        [
            "<#",
            ".SYNOPSIS",
            f"    Loadout generated {format_timestamp(generated_at)}",
            ".DESCRIPTION",
            f"    Core: {params.cpu.label} ({profile.cpu_tag}) + {params.gpu.label} ({profile.gpu_tag})",
            f"    Peripherals: {peripherals}",
            f"    Mode: {mode.value}",
            f"    Catalog: {CATALOG_VERSION}",
        ]
    )
    if restricted:
        lines.extend(
            [
                "",
                f"    DANGER ZONE: {', '.join(key.value for key in restricted)} selected.",
                "    DO NOT run this on any machine connected to the internet.",
            ]
        )
    lines.extend(["#>", ""])

    lines.append(
        encode_literal_block("ConfigJson", render_config_json(profile, selected_keys, packages, mode, generated_at))
    )
    lines.append("$Config = $ConfigJson | ConvertFrom-Json")
    lines.append("")
    lines.append(HELPER_FUNCTIONS)
    lines.append("")
    lines.append(f"$script:StepTotal = {step_total(mode, bool(packages))}")
    return "\n".join(lines)


def render_preflight(mode: CompileMode) -> str:
    """Render the restore-point step.

    Full mode asks before creating the restore point; safe mode creates it
    unconditionally.
    """
    lines = ['Write-Step "Pre-flight: System Restore Point"']
    if mode is CompileMode.SAFE:
        lines.extend(_RESTORE_POINT)
    else:
        lines.append('$answer = Read-Host "Create a system restore point before continuing? (y/N)"')
        lines.append("if ($answer -match '^[Yy]') {")
        lines.extend(f"    {line}" for line in _RESTORE_POINT)
        lines.append('} else { Write-Warn "Restore point skipped" }')
    return "\n".join(lines)


def render_hardware_detection(profile: HardwareProfile, params: HardwareParams) -> str:
    """Render detection code that reports the machine and flags profile mismatches."""
    lines = [
        "$cpu = (Get-CimInstance Win32_Processor).Name",
        '$gpu = (Get-CimInstance Win32_VideoController | Where-Object {$_.Status -eq "OK"} | Select-Object -First 1).Name',
        "$ram = [math]::Round((Get-CimInstance Win32_PhysicalMemory | Measure-Object -Property Capacity -Sum).Sum / 1GB)",
        'Write-Host "  CPU: $cpu" -ForegroundColor White',
        'Write-Host "  GPU: $gpu" -ForegroundColor White',
        'Write-Host "  RAM: ${ram}GB" -ForegroundColor White',
    ]
    for var, hw in (("cpu", params.cpu), ("gpu", params.gpu)):
        if hw.detect_pattern:
            lines.append(
                f'if (${var} -notmatch "{hw.detect_pattern}") '
                f'{{ Write-Warn "Detected {var.upper()} does not look like {escape_ps(hw.label)}; check your profile" }}'
            )
    return "\n".join(lines)


def render_fragment(fragment: Fragment) -> str:
    lines = [f"# --- {fragment.title} ---", fragment.text]
    lines.extend(f'Write-Warn "{escape_ps(warning)}"' for warning in fragment.warnings)
    return "\n".join(lines)


def render_body(fragments: Sequence[Fragment]) -> str:
    """Render the optimization block."""
    sections = ['Write-Step "Upgrades"']
    if not fragments:
        sections.append('Write-Host "  No optimizations selected" -ForegroundColor DarkGray')
    sections.extend(render_fragment(fragment) for fragment in fragments)
    return "\n\n".join(sections)


def render_install_block(packages: Sequence[str]) -> str:
    """Render the winget install loop (empty when there is nothing to install).

    Example:
        >>> print(render_install_block(["steam"]).splitlines()[5].strip())
        $pkgs = @("steam")
    """
    if not packages:
        return ""
    package_list = ", ".join(f'"{escape_ps(package)}"' for package in packages)
    return "\n".join(
        [
            'Write-Step "Arsenal (winget)"',
            "$wingetPath = Get-Command winget -EA SilentlyContinue",
            "if (-not $wingetPath) {",
            '    Write-Fail "winget not found. Install App Installer from Microsoft Store."',
            "} else {",
            f"    $pkgs = @({package_list})",
            "    foreach ($pkg in $pkgs) {",
            '        Write-Host "  Installing $pkg..." -NoNewline',
            "        $installOutput = winget install --id $pkg --exact --silent --accept-package-agreements --accept-source-agreements 2>&1",
            '        if ($LASTEXITCODE -eq 0) { Write-OK "" }',
            '        elseif ($installOutput -match "No available upgrade found|No newer package versions are available|already installed") { Write-OK "Already installed" }',
            '        else { Write-Fail ""; $installOutput | ForEach-Object { Write-Host "    $_" -ForegroundColor DarkGray } }',
            "    }",
            "}",
        ]
    )


def render_footer(
    fragments: Sequence[Fragment],
    mode: CompileMode,
    guide_html: str = "",
    guide_filename: str = DEFAULT_GUIDE_FILENAME,
) -> str:
    """Render the summary, the reboot list and, in full mode, the guide block."""
    lines = [
        'Write-Step "Complete"',
        'Write-Host ""',
        'Write-Host "  LOADOUT SUMMARY" -ForegroundColor White',
        'Write-Host ""',
        'Write-Host "  Applied:  $($script:SuccessCount) changes" -ForegroundColor Green',
        'if ($script:WarningCount -gt 0) { Write-Host "  Warnings: $($script:WarningCount)" -ForegroundColor Yellow }',
        'if ($script:FailCount -gt 0) { Write-Host "  Failed:   $($script:FailCount)" -ForegroundColor Red }',
        'Write-Host ""',
    ]

    reboot = [fragment.title for fragment in fragments if fragment.requires_reboot]
    if reboot:
        lines.append('Write-Host "  Reboot required for:" -ForegroundColor Cyan')
        lines.extend(f'Write-Host "    - {escape_ps(title)}" -ForegroundColor Cyan' for title in reboot)
    else:
        lines.append('Write-Host "  No reboot required." -ForegroundColor Cyan')

    if mode is CompileMode.FULL and guide_html:
        lines.append("")
        lines.append(encode_literal_block("htmlGuide", guide_html))
        lines.extend(
            [
                f'$guidePath = Join-Path $env:TEMP "{escape_ps(guide_filename)}"',
                "Set-Content -Path $guidePath -Value $htmlGuide -Encoding UTF8",
                'Write-OK "Guide written to $guidePath"',
                "Start-Process $guidePath",
            ]
        )
    lines.append('Write-Host ""')
    return "\n".join(lines)


def assemble(
    header: str,
    preflight: str,
    hardware_facts: str,
    fragments: Sequence[Fragment],
    install_list: Sequence[str],
    mode: CompileMode,
    footer: str,
) -> str:
    """Serialize the sections in fixed order.

    Safe mode filters the fragments and drops the install list regardless of
    what the caller passes.

    Returns:
        Script text ending in a newline
    """
    body = select_fragments(fragments, mode)
    install_block = render_install_block(install_list) if mode is CompileMode.FULL else ""
    sections = [header, preflight, hardware_facts, render_body(body), install_block, footer]
    return "\n\n".join(section for section in sections if section) + "\n"
