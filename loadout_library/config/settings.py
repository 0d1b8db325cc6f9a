"""Settings model for the loadoutd service.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from ..models.snapshot import DEFAULT_DNS_PROVIDER
from ..models.snapshot import DNS_PROVIDERS


class LoadoutSettings(BaseSettings):
    """Configuration for loadoutd.

    Attributes:
        host: Listen address (default: 127.0.0.1)
        port: Listen port (default: 8430)
        log_level: Logging level (default: info)
        cors_origins: Origins allowed to call the API from a browser
        dns_provider: DNS provider used when a request names none
        debounce_ms: Recommended client delay before recompiling after an edit
        guide_filename: File name the full script writes its guide to

    Example:
        >>> settings = LoadoutSettings()
        >>> assert settings.debounce_ms == 300
    """

    model_config = SettingsConfigDict(
        env_prefix="LOADOUTD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8430
    log_level: str = "info"
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    dns_provider: str = DEFAULT_DNS_PROVIDER
    debounce_ms: int = 300

    guide_filename: str = "loadout-guide.html"

    @field_validator("dns_provider")
    @classmethod
    def validate_dns_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in DNS_PROVIDERS:
            raise ValueError(f"Unknown DNS provider '{v}'")
        return v

    @field_validator("debounce_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError("debounce_ms must not be negative")
        return v
