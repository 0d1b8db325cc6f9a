"""Hardware profile models.

A HardwareProfile is the immutable snapshot of the target machine that a
compilation is conditioned on.

Contract:
- Inputs: CPU/GPU class tags, peripheral and monitor software tags
- Outputs: Frozen, validated HardwareProfile objects
- Side Effects: None
"""

import re
from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator


class CpuClass(str, Enum):
    """CPU families the compiler distinguishes."""

    AMD_X3D = "amd_x3d"
    AMD = "amd"
    INTEL = "intel"


class GpuClass(str, Enum):
    """GPU vendors the compiler distinguishes."""

    NVIDIA = "nvidia"
    AMD = "amd"
    INTEL = "intel"


class PeripheralType(str, Enum):
    """Peripheral brands with companion software."""

    LOGITECH = "logitech"
    RAZER = "razer"
    CORSAIR = "corsair"
    STEELSERIES = "steelseries"
    ASUS = "asus"
    WOOTING = "wooting"


class MonitorSoftwareType(str, Enum):
    """Monitor vendors with display-management software."""

    DELL = "dell"
    LG = "lg"
    HP = "hp"


MAX_PERIPHERALS = len(PeripheralType)
MAX_MONITOR_SOFTWARE = len(MonitorSoftwareType)

# Raw class tags end up in script comments and detection messages
CLASS_TAG_PATTERN = re.compile(r"[a-z0-9][a-z0-9_.-]{0,63}")


def _normalize_tag(value: object) -> object:
    if isinstance(value, Enum):
        return value
    if isinstance(value, str):
        return value.strip().lower()
    return value


class HardwareProfile(BaseModel):
    """Hardware snapshot for one compilation.

    CPU and GPU values outside the enumerated classes are kept as plain
    strings instead of being rejected; the hardware conditioner maps them to
    its default parameter set.

    Attributes:
        cpu: CPU class (or raw tag when outside the known classes)
        gpu: GPU class (or raw tag when outside the known classes)
        peripherals: Peripheral brands present
        monitor_software: Monitor vendors whose software should be installed

    Example:
        >>> profile = HardwareProfile(cpu="intel", gpu="nvidia")
        >>> assert profile.cpu is CpuClass.INTEL
        >>> assert profile.is_known_cpu
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cpu: CpuClass | str = Field(
        default=CpuClass.AMD_X3D,
        union_mode="left_to_right",
        description="CPU class",
    )
    gpu: GpuClass | str = Field(
        default=GpuClass.NVIDIA,
        union_mode="left_to_right",
        description="GPU class",
    )
    peripherals: frozenset[PeripheralType] = Field(
        default_factory=frozenset,
        description="Peripheral brands",
    )
    monitor_software: frozenset[MonitorSoftwareType] = Field(
        default_factory=frozenset,
        alias="monitorSoftware",
        description="Monitor software vendors",
    )

    @field_validator("cpu", "gpu", mode="before")
    @classmethod
    def normalize_class_tag(cls, v: object) -> object:
        """Lower-case and strip class tags, rejecting anything outside the tag alphabet."""
        v = _normalize_tag(v)
        if isinstance(v, str):
            if not v:
                raise ValueError("hardware class must not be empty")
            if not CLASS_TAG_PATTERN.fullmatch(v):
                raise ValueError(f"Invalid hardware class '{v}': use letters, digits, '_', '.' and '-'")
        return v

    @field_validator("peripherals", "monitor_software", mode="before")
    @classmethod
    def normalize_tag_collection(cls, v: object) -> object:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list | tuple | set | frozenset):
            return frozenset(_normalize_tag(item) for item in v)
        return v

    @property
    def is_known_cpu(self) -> bool:
        return isinstance(self.cpu, CpuClass)

    @property
    def is_known_gpu(self) -> bool:
        return isinstance(self.gpu, GpuClass)

    @property
    def cpu_tag(self) -> str:
        """CPU class as a plain string."""
        return self.cpu.value if isinstance(self.cpu, CpuClass) else self.cpu

    @property
    def gpu_tag(self) -> str:
        """GPU class as a plain string."""
        return self.gpu.value if isinstance(self.gpu, GpuClass) else self.gpu

    def sorted_peripherals(self) -> list[str]:
        """Peripheral tags in a stable order."""
        return sorted(p.value for p in self.peripherals)

    def sorted_monitor_software(self) -> list[str]:
        """Monitor software tags in a stable order."""
        return sorted(m.value for m in self.monitor_software)
