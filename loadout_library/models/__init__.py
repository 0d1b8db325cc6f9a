"""Data models for the loadout library."""

from .fragments import CompiledScript
from .fragments import CompileMode
from .fragments import Fragment
from .hardware import CpuClass
from .hardware import GpuClass
from .hardware import HardwareProfile
from .hardware import MonitorSoftwareType
from .hardware import PeripheralType
from .optimizations import CATALOG
from .optimizations import CATALOG_VERSION
from .optimizations import Category
from .optimizations import OptimizationInfo
from .optimizations import OptimizationKey
from .optimizations import Tier
from .profiles import SavedHardware
from .profiles import SavedProfile
from .snapshot import DEFAULT_DNS_PROVIDER
from .snapshot import DNS_PROVIDERS
from .snapshot import CompileSnapshot

__all__ = [
    "CATALOG",
    "CATALOG_VERSION",
    "Category",
    "CompileMode",
    "CompileSnapshot",
    "CompiledScript",
    "CpuClass",
    "DEFAULT_DNS_PROVIDER",
    "DNS_PROVIDERS",
    "Fragment",
    "GpuClass",
    "HardwareProfile",
    "MonitorSoftwareType",
    "OptimizationInfo",
    "OptimizationKey",
    "PeripheralType",
    "SavedHardware",
    "SavedProfile",
    "Tier",
]
