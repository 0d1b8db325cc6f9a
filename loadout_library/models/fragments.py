"""Compiler output models: fragments and compiled scripts.

Contract:
- Inputs: Generated script text and metadata
- Outputs: Immutable Fragment and CompiledScript values
- Side Effects: None
"""

import hashlib
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone
from enum import Enum

from .optimizations import OptimizationKey
from .optimizations import Tier

TIMESTAMP_PLACEHOLDER = "<generated-at>"


class CompileMode(str, Enum):
    """Which script variant to produce."""

    FULL = "full"
    SAFE = "safe"


@dataclass(frozen=True)
class Fragment:
    """A self-contained unit of generated script text.

    Attributes:
        source_keys: Optimization keys this fragment implements (empty for
            fragments implied by hardware)
        title: Short heading rendered above the fragment
        text: PowerShell statements
        requires_reboot: Whether the effect needs a reboot
        warnings: Messages printed after the fragment runs
        tier: Highest risk tier among the source keys
        requires_ack: Whether any source key needs explicit acknowledgement
    """

    source_keys: frozenset[OptimizationKey]
    title: str
    text: str
    requires_reboot: bool = False
    warnings: tuple[str, ...] = ()
    tier: Tier = Tier.SAFE
    requires_ack: bool = False

    @property
    def is_safe(self) -> bool:
        """Whether the fragment may appear in a safe-mode script."""
        return self.tier is Tier.SAFE and not self.requires_ack

    @property
    def is_implied(self) -> bool:
        return not self.source_keys


def format_timestamp(generated_at: datetime) -> str:
    """Render the generation timestamp embedded in scripts (UTC)."""
    if generated_at.tzinfo is not None:
        generated_at = generated_at.astimezone(timezone.utc)
    return generated_at.strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class CompiledScript:
    """Result of one compilation. Built fresh on every compile.

    The text is the concatenation of the section strings in fixed order.
    ``fingerprint`` hashes the text with the timestamp replaced by a
    placeholder so that recompiling the same snapshot is recognisable as
    unchanged. ``selected_keys`` are the keys that produced script text and
    ``skipped_keys`` the selected keys the mode left out.
    """

    mode: CompileMode
    header: str
    preflight: str
    hardware_detection: str
    body: tuple[Fragment, ...]
    install_block: str
    footer: str
    generated_at: datetime
    text: str
    packages: tuple[str, ...] = ()
    guide_html: str = ""
    selected_keys: tuple[OptimizationKey, ...] = ()
    skipped_keys: tuple[OptimizationKey, ...] = ()

    @property
    def timestamp(self) -> str:
        return format_timestamp(self.generated_at)

    @property
    def normalized_text(self) -> str:
        """Script text with the generation timestamp replaced by a placeholder."""
        return self.text.replace(self.timestamp, TIMESTAMP_PLACEHOLDER)

    @property
    def fingerprint(self) -> str:
        return hashlib.sha256(self.normalized_text.encode("utf-8")).hexdigest()

    @property
    def requires_reboot(self) -> bool:
        return any(fragment.requires_reboot for fragment in self.body)

    def fragments_for(self, key: OptimizationKey) -> list[Fragment]:
        """Body fragments whose source keys include ``key``."""
        return [fragment for fragment in self.body if key in fragment.source_keys]
