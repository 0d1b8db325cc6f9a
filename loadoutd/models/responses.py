"""Response models for loadoutd API.

Pydantic models for API responses.
"""

from datetime import datetime

from pydantic import Field

from loadout_library.models.fragments import CompileMode
from loadout_library.tracking.differ import DiffType
from loadoutd.models.base import CamelCaseModel
from loadoutd.models.requests import HardwareRequest


class StatusResponse(CamelCaseModel):
    """Response for daemon status.

    Attributes:
        status: Daemon status
        version: Daemon version
        catalog_version: Optimization catalog version
        optimization_count: Number of keys in the catalog
        debounce_ms: Recommended delay before recompiling after an edit
        uptime_seconds: Daemon uptime in seconds
    """

    status: str = Field(..., description="Daemon status")
    version: str = Field(..., description="Daemon version")
    catalog_version: str = Field(..., description="Catalog version")
    optimization_count: int = Field(..., description="Catalog size")
    debounce_ms: int = Field(..., description="Recompile debounce in milliseconds")
    uptime_seconds: float = Field(..., description="Uptime in seconds")


class CatalogEntry(CamelCaseModel):
    """One optimization key as shown to clients."""

    key: str = Field(..., description="Optimization key")
    label: str = Field(..., description="Human-readable name")
    tier: str = Field(..., description="Risk tier")
    category: str = Field(..., description="Catalog category")
    requires_ack: bool = Field(..., description="Needs explicit acknowledgement")
    requires_reboot: bool = Field(..., description="Only applies after a reboot")
    conflicts_with: str | None = Field(default=None, description="Key sharing the same target")
    has_guide: bool = Field(default=False, description="Whether the guide has a section for the key")


class CatalogResponse(CamelCaseModel):
    """Response for the optimization catalog."""

    version: str = Field(..., description="Catalog version")
    entries: list[CatalogEntry] = Field(default_factory=list, description="Keys in registry order")
    dns_providers: list[str] = Field(default_factory=list, description="Accepted DNS providers")


class FragmentSummary(CamelCaseModel):
    """Metadata of one emitted fragment."""

    title: str = Field(..., description="Fragment heading")
    source_keys: list[str] = Field(default_factory=list, description="Keys the fragment implements")
    tier: str = Field(..., description="Highest risk tier of the source keys")
    requires_reboot: bool = Field(default=False, description="Needs a reboot")
    warnings: list[str] = Field(default_factory=list, description="Warnings printed after the fragment")


class CompileResponse(CamelCaseModel):
    """Response for a compilation.

    Attributes:
        mode: Script mode
        script: Full script text
        guide: Companion HTML guide (empty in safe mode)
        packages: Packages the script installs
        fragments: Emitted fragments in script order
        selected_keys: Keys that produced script text
        skipped_keys: Requested keys the mode left out
        ignored_keys: Requested keys outside the catalog
        fingerprint: Hash of the script with the timestamp masked
        generated_at: Generation time
        requires_reboot: Whether any fragment needs a reboot
        changed: Whether the script differs from the last tracked one
    """

    mode: CompileMode = Field(..., description="Script mode")
    script: str = Field(..., description="Script text")
    guide: str = Field(default="", description="HTML guide")
    packages: list[str] = Field(default_factory=list, description="Installed packages")
    fragments: list[FragmentSummary] = Field(default_factory=list, description="Emitted fragments")
    selected_keys: list[str] = Field(default_factory=list, description="Applied keys")
    skipped_keys: list[str] = Field(default_factory=list, description="Keys left out by the mode")
    ignored_keys: list[str] = Field(default_factory=list, description="Unknown keys")
    fingerprint: str = Field(..., description="Script fingerprint")
    generated_at: datetime = Field(..., description="Generation time")
    requires_reboot: bool = Field(default=False, description="Reboot needed")
    changed: bool = Field(default=True, description="Differs from the last tracked script")


class DiffLineResponse(CamelCaseModel):
    """One line of a script diff."""

    type: DiffType = Field(..., description="added, removed or unchanged")
    content: str = Field(..., description="Line text")
    old_line: int | None = Field(default=None, description="1-based line number in the previous script")
    new_line: int | None = Field(default=None, description="1-based line number in the current script")


class DiffResponse(CamelCaseModel):
    """Diff of the previous tracked script against the current one."""

    has_changes: bool = Field(..., description="Whether any line differs")
    added: int = Field(default=0, description="Added line count")
    removed: int = Field(default=0, description="Removed line count")
    unchanged: int = Field(default=0, description="Unchanged line count")
    change_starts: list[int] = Field(default_factory=list, description="Indexes where change runs begin")
    lines: list[DiffLineResponse] = Field(default_factory=list, description="Diff lines")


class LoadedProfileResponse(CamelCaseModel):
    """Normalized snapshot built from a saved profile."""

    created: datetime = Field(..., description="Creation time recorded in the profile")
    hardware: HardwareRequest = Field(..., description="Hardware profile")
    optimizations: list[str] = Field(default_factory=list, description="Resolved keys in registry order")
    packages: list[str] = Field(default_factory=list, description="Requested packages")
    ignored_keys: list[str] = Field(default_factory=list, description="Keys that were filtered out")


class VerifyResponse(CamelCaseModel):
    """Verification script for a selection."""

    script: str = Field(..., description="Verification script text")
    ignored_keys: list[str] = Field(default_factory=list, description="Unknown keys")


class SavedProfileInfo(CamelCaseModel):
    """Saved profile listing entry."""

    name: str = Field(..., description="Profile name")
    created: datetime = Field(..., description="Creation time")
    optimization_count: int = Field(default=0, description="Number of selected keys")
    package_count: int = Field(default=0, description="Number of requested packages")
