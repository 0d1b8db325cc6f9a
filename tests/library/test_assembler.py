"""
Unit tests for the script assembler sections.
"""

import pytest

from loadout_library.compiler.assembler import assemble
from loadout_library.compiler.assembler import render_footer
from loadout_library.compiler.assembler import render_hardware_detection
from loadout_library.compiler.assembler import render_install_block
from loadout_library.compiler.assembler import step_total
from loadout_library.compiler.conditioner import condition
from loadout_library.models.fragments import CompileMode
from loadout_library.models.fragments import Fragment
from loadout_library.models.hardware import HardwareProfile
from loadout_library.models.optimizations import OptimizationKey
from loadout_library.models.optimizations import Tier

K = OptimizationKey

SAFE = Fragment(source_keys=frozenset({K.DNS}), title="safe one", text="Write-OK 'safe'")
RISKY = Fragment(
    source_keys=frozenset({K.BLOATWARE}),
    title="risky one",
    text="Write-OK 'risky'",
    tier=Tier.RISKY,
    requires_ack=True,
    requires_reboot=True,
)
GATED = Fragment(source_keys=frozenset({K.PROCESS_MITIGATION}), title="gated one", text="x", requires_ack=True)


@pytest.mark.unit
class TestAssemble:
    """Section ordering and mode filtering."""

    def test_sections_in_fixed_order(self) -> None:
        text = assemble("HEADER", "PREFLIGHT", "DETECT", [SAFE], ["Valve.Steam"], CompileMode.FULL, "FOOTER")

        order = [text.index(marker) for marker in ("HEADER", "PREFLIGHT", "DETECT", "safe one", "Valve.Steam", "FOOTER")]
        assert order == sorted(order)
        assert text.endswith("FOOTER\n")

    def test_safe_mode_filters_fragments_and_install(self) -> None:
        text = assemble("H", "P", "D", [SAFE, RISKY, GATED], ["Valve.Steam"], CompileMode.SAFE, "F")

        assert "safe one" in text
        assert "risky one" not in text
        assert "gated one" not in text
        assert "Valve.Steam" not in text

    def test_warnings_render_after_fragment(self) -> None:
        warned = Fragment(source_keys=frozenset({K.DNS}), title="t", text="body", warnings=('say "hi"',))

        text = assemble("H", "P", "D", [warned], [], CompileMode.FULL, "F")

        assert 'body\nWrite-Warn "say `"hi`""' in text


@pytest.mark.unit
class TestSections:
    """Individual section renderers."""

    def test_install_block_empty_without_packages(self) -> None:
        assert render_install_block([]) == ""

    def test_install_block_lists_packages_in_order(self) -> None:
        block = render_install_block(["b.pkg", "a.pkg"])

        assert '$pkgs = @("b.pkg", "a.pkg")' in block
        assert "--exact" in block

    def test_step_total(self) -> None:
        assert step_total(CompileMode.FULL, True) == 4
        assert step_total(CompileMode.FULL, False) == 3
        assert step_total(CompileMode.SAFE, True) == 3

    def test_footer_lists_reboot_titles(self) -> None:
        footer = render_footer([SAFE, RISKY], CompileMode.FULL)

        assert "- risky one" in footer
        assert "- safe one" not in footer

    def test_footer_guide_only_in_full_mode(self) -> None:
        full = render_footer([SAFE], CompileMode.FULL, "<html></html>", "g.html")
        safe = render_footer([SAFE], CompileMode.SAFE, "<html></html>", "g.html")

        assert "$htmlGuide = @'" in full
        assert "g.html" in full
        assert "$htmlGuide" not in safe

    def test_hardware_detection_warns_on_mismatch(self) -> None:
        profile = HardwareProfile(cpu="intel", gpu="nvidia")

        text = render_hardware_detection(profile, condition(profile).params)

        assert '$cpu -notmatch "Intel"' in text
        assert '$gpu -notmatch "NVIDIA"' in text

    def test_hardware_detection_skips_unknown_classes(self) -> None:
        profile = HardwareProfile(cpu="mystery", gpu="mystery")

        text = render_hardware_detection(profile, condition(profile).params)

        assert "-notmatch" not in text
        assert "Win32_Processor" in text
