"""Saved profile document model.

A saved profile is the versioned JSON document users export and re-import:
``{version, created, hardware, optimizations, software}``. Optimization and
software entries are plain strings so that documents written by other
catalog versions still parse; resolving them is the profile loader's job.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from .hardware import MAX_MONITOR_SOFTWARE
from .hardware import MAX_PERIPHERALS

PROFILE_VERSION = "1.0"


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class SavedHardware(BaseModel):
    """Hardware section of a saved profile."""

    model_config = ConfigDict(populate_by_name=True)

    cpu: str = Field(..., min_length=1, description="CPU class")
    gpu: str = Field(..., min_length=1, description="GPU class")
    peripherals: list[str] = Field(default_factory=list, max_length=MAX_PERIPHERALS)
    monitor_software: list[str] = Field(
        default_factory=list,
        alias="monitorSoftware",
        max_length=MAX_MONITOR_SOFTWARE,
    )

    @field_validator("peripherals", "monitor_software", mode="before")
    @classmethod
    def collapse_duplicates(cls, v: object) -> object:
        if isinstance(v, list):
            return _dedupe([str(item).strip().lower() for item in v])
        return v


class SavedProfile(BaseModel):
    """Versioned, portable profile document.

    Example:
        >>> doc = SavedProfile.model_validate({
        ...     "version": "1.0",
        ...     "created": "2025-01-01T00:00:00Z",
        ...     "hardware": {"cpu": "intel", "gpu": "nvidia"},
        ...     "optimizations": ["dns"],
        ...     "software": ["Valve.Steam"],
        ... })
        >>> assert doc.hardware.cpu == "intel"
    """

    model_config = ConfigDict(populate_by_name=True)

    version: Literal["1.0"] = PROFILE_VERSION
    created: datetime
    hardware: SavedHardware
    optimizations: list[str] = Field(default_factory=list)
    software: list[str] = Field(default_factory=list)

    @field_validator("optimizations", "software", mode="before")
    @classmethod
    def collapse_duplicates(cls, v: object) -> object:
        if isinstance(v, list):
            return _dedupe([str(item).strip() for item in v])
        return v
