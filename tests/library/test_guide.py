"""
Unit tests for the companion guide.
"""

import pytest

from loadout_library.compiler.guide import GUIDE_SECTIONS
from loadout_library.compiler.guide import render_guide
from loadout_library.models.hardware import HardwareProfile
from loadout_library.models.optimizations import OptimizationKey

K = OptimizationKey


@pytest.mark.unit
class TestRenderGuide:
    """HTML guide content."""

    def test_cpu_checklist_follows_cpu_class(self) -> None:
        x3d = render_guide(HardwareProfile(cpu="amd_x3d"), [], [])
        intel = render_guide(HardwareProfile(cpu="intel"), [], [])

        assert "CPPC" in x3d
        assert "id='cpu'" in intel
        assert x3d != intel

    def test_unknown_gpu_has_no_gpu_section(self) -> None:
        page = render_guide(HardwareProfile(gpu="mystery"), [], [])

        assert "id='gpu'" not in page
        assert "id='cpu'" in page

    def test_sections_for_selected_keys_only(self) -> None:
        page = render_guide(HardwareProfile(), [K.DNS, K.HPET], [])

        assert "id='opt-dns'" in page
        assert "id='opt-hpet'" in page
        assert "id='opt-timer'" not in page

    def test_sections_follow_registry_order(self) -> None:
        page = render_guide(HardwareProfile(), [K.DNS, K.PAGEFILE], [])
        assert page.index("id='opt-pagefile'") < page.index("id='opt-dns'")

    def test_reboot_and_package_sections(self) -> None:
        page = render_guide(HardwareProfile(peripherals=["razer"]), [K.HAGS], ["Valve.Steam"])

        assert "id='reboot'" in page
        assert "id='packages'" in page
        assert "Valve.Steam" in page
        assert "id='peripherals'" in page

    def test_values_are_html_escaped(self) -> None:
        page = render_guide(HardwareProfile(), [], ["<script>", "<b>pkg</b>"])

        assert "<script>" not in page
        assert "&lt;b&gt;pkg&lt;/b&gt;" in page

    def test_guide_is_deterministic(self) -> None:
        profile = HardwareProfile(peripherals=["logitech"])
        assert render_guide(profile, [K.DNS], ["a"]) == render_guide(profile, [K.DNS], ["a"])

    def test_every_guide_section_has_steps(self) -> None:
        for key, section in GUIDE_SECTIONS.items():
            assert section.title, key
            assert section.steps, key
