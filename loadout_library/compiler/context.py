"""Inputs visible to fragment generators."""

from dataclasses import dataclass

from ..models.hardware import HardwareProfile
from ..models.snapshot import DEFAULT_DNS_PROVIDER
from .conditioner import HardwareParams
from .conditioner import condition


@dataclass(frozen=True)
class RuleContext:
    """Immutable context passed to every fragment generator.

    Attributes:
        profile: Hardware profile being compiled for
        params: Parameters derived from the profile by the conditioner
        dns_provider: DNS provider name for the DNS rule
    """

    profile: HardwareProfile
    params: HardwareParams
    dns_provider: str = DEFAULT_DNS_PROVIDER

    @classmethod
    def for_profile(cls, profile: HardwareProfile, dns_provider: str = DEFAULT_DNS_PROVIDER) -> "RuleContext":
        return cls(profile=profile, params=condition(profile).params, dns_provider=dns_provider)
