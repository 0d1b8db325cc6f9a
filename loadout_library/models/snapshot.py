"""Compiler input snapshot."""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from .fragments import CompileMode
from .hardware import HardwareProfile
from .optimizations import OptimizationKey

DEFAULT_DNS_PROVIDER = "cloudflare"

DNS_PROVIDERS: dict[str, tuple[str, str]] = {
    "cloudflare": ("1.1.1.1", "1.0.0.1"),
    "google": ("8.8.8.8", "8.8.4.4"),
    "quad9": ("9.9.9.9", "149.112.112.112"),
    "opendns": ("208.67.222.222", "208.67.220.220"),
    "adguard": ("94.140.14.14", "94.140.15.15"),
}


class CompileSnapshot(BaseModel):
    """Immutable input for one compilation.

    Optimization keys and packages are sets: their input order carries no
    meaning. Output order comes from the rule registry and the package
    selection rules.

    Attributes:
        hardware: Hardware profile
        optimizations: Selected optimization keys
        packages: Requested install-manager package IDs
        mode: Full or safe script
        dns_provider: DNS provider used by the DNS rule
    """

    model_config = ConfigDict(frozen=True)

    hardware: HardwareProfile = Field(default_factory=HardwareProfile)
    optimizations: frozenset[OptimizationKey] = Field(default_factory=frozenset)
    packages: frozenset[str] = Field(default_factory=frozenset)
    mode: CompileMode = CompileMode.FULL
    dns_provider: str = DEFAULT_DNS_PROVIDER

    @field_validator("packages", mode="before")
    @classmethod
    def strip_package_ids(cls, v: object) -> object:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list | tuple | set | frozenset):
            return frozenset(item.strip() for item in v if isinstance(item, str) and item.strip())
        return v

    @field_validator("dns_provider")
    @classmethod
    def validate_dns_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in DNS_PROVIDERS:
            raise ValueError(f"Unknown DNS provider '{v}'. Expected one of: {', '.join(DNS_PROVIDERS)}")
        return v
