"""Request models for loadoutd API.

Optimization keys and package IDs arrive as plain strings; keys outside the
catalog are filtered by the compile service and reported back, not rejected.
"""

from typing import Any

from pydantic import Field

from loadout_library.models.fragments import CompileMode
from loadoutd.models.base import CamelCaseModel


class HardwareRequest(CamelCaseModel):
    """Hardware section of a request.

    Attributes:
        cpu: CPU class tag (amd_x3d, amd, intel)
        gpu: GPU class tag (nvidia, amd, intel)
        peripherals: Peripheral brand tags
        monitor_software: Monitor vendor tags
    """

    cpu: str = Field(default="amd_x3d", min_length=1, description="CPU class")
    gpu: str = Field(default="nvidia", min_length=1, description="GPU class")
    peripherals: list[str] = Field(default_factory=list, description="Peripheral brands")
    monitor_software: list[str] = Field(default_factory=list, description="Monitor software vendors")


class CompileRequest(CamelCaseModel):
    """Request body for compiling a loadout.

    Attributes:
        hardware: Hardware profile
        optimizations: Selected optimization keys
        packages: Requested package IDs
        mode: Full or safe script
        dns_provider: DNS provider (defaults to the configured provider)
    """

    hardware: HardwareRequest = Field(default_factory=HardwareRequest)
    optimizations: list[str] = Field(default_factory=list, description="Optimization keys")
    packages: list[str] = Field(default_factory=list, description="Package IDs")
    mode: CompileMode = Field(default=CompileMode.FULL, description="Script mode")
    dns_provider: str | None = Field(default=None, description="DNS provider")


class LoadProfileRequest(CamelCaseModel):
    """Request body for loading a saved profile document."""

    profile: dict[str, Any] = Field(..., description="Saved profile document")
    mode: CompileMode = Field(default=CompileMode.FULL, description="Script mode")
    dns_provider: str | None = Field(default=None, description="DNS provider")
