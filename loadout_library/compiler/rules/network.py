"""Network stack rules."""

from ...models.fragments import Fragment
from ...models.optimizations import Category
from ...models.optimizations import OptimizationKey
from ...models.snapshot import DNS_PROVIDERS
from ..context import RuleContext
from ..flags import Tcpip6Components
from .base import RuleSet
from .base import active_adapters_loop
from .base import escape_ps
from .base import fragment
from .base import ok
from .base import set_reg
from .base import set_reg_checked

RULES = RuleSet(Category.NETWORK)

K = OptimizationKey

TCPIP6_PARAMETERS = r"HKLM:\SYSTEM\CurrentControlSet\Services\Tcpip6\Parameters"
TCPIP_INTERFACE = r"HKLM:\SYSTEM\CurrentControlSet\Services\Tcpip\Parameters\Interfaces\$($_.InterfaceGuid)"

# Bits each key contributes to Tcpip6 DisabledComponents.
TCPIP6_FLAGS: dict[OptimizationKey, Tcpip6Components] = {
    K.IPV4_PREFER: Tcpip6Components.PREFER_IPV4,
    K.TEREDO_DISABLE: Tcpip6Components.DISABLE_TUNNELS,
}

TEREDO_OFF = "netsh interface teredo set state disabled 2>&1 | Out-Null"

NAGLE_VALUES = (("TcpAckFrequency", 1), ("TCPNoDelay", 1))
TCP_OPTIMIZER_VALUES = (("TcpDelAckTicks", 0),)
TCP_GLOBALS = (
    "netsh int tcp set global autotuninglevel=normal 2>&1 | Out-Null",
    "netsh int tcp set global ecncapability=disabled 2>&1 | Out-Null",
    "netsh int tcp set global timestamps=disabled 2>&1 | Out-Null",
)


def disabled_components_lines(flags: Tcpip6Components, message: str) -> list[str]:
    """Write the combined DisabledComponents value once."""
    return [set_reg_checked(TCPIP6_PARAMETERS, "DisabledComponents", int(flags), message)]


def tcp_interface_lines(values: tuple[tuple[str, int], ...], message: str) -> list[str]:
    """Set per-interface TCP values on every active adapter."""
    body = [f'$ifPath = "{TCPIP_INTERFACE}"']
    body.extend(set_reg("$ifPath", name, value) for name, value in values)
    return [*active_adapters_loop(body), ok(message)]


@RULES.rule(K.DNS)
def dns(ctx: RuleContext) -> Fragment:
    primary, secondary = DNS_PROVIDERS.get(ctx.dns_provider, DNS_PROVIDERS["cloudflare"])
    label = escape_ps(ctx.dns_provider)
    return fragment(
        K.DNS,
        f"DNS ({label})",
        [
            'Get-NetAdapter | Where-Object {$_.Status -eq "Up"} | '
            f'Set-DnsClientServerAddress -ServerAddresses "{primary}","{secondary}"',
            "Clear-DnsClientCache",
            ok(f"DNS set to {ctx.dns_provider} ({primary}, {secondary})"),
        ],
    )


@RULES.rule(K.NAGLE)
def nagle(ctx: RuleContext) -> Fragment:
    return fragment(K.NAGLE, "Nagle's algorithm", tcp_interface_lines(NAGLE_VALUES, "Nagle's algorithm disabled"))


@RULES.rule(K.TCP_OPTIMIZER)
def tcp_optimizer(ctx: RuleContext) -> Fragment:
    return fragment(
        K.TCP_OPTIMIZER,
        "TCP stack tuning",
        [*TCP_GLOBALS, *tcp_interface_lines(TCP_OPTIMIZER_VALUES, "TCP stack tuned")],
        warnings=["Reset with: netsh int tcp reset"],
    )


@RULES.rule(K.NETWORK_THROTTLING)
def network_throttling(ctx: RuleContext) -> Fragment:
    return fragment(
        K.NETWORK_THROTTLING,
        "Network throttling",
        [
            set_reg(
                r"HKLM:\SOFTWARE\Microsoft\Windows NT\CurrentVersion\Multimedia\SystemProfile",
                "NetworkThrottlingIndex",
                0xFFFFFFFF,
            ),
            ok("Network throttling disabled"),
        ],
    )


@RULES.rule(K.QOS_GAMING)
def qos_gaming(ctx: RuleContext) -> Fragment:
    return fragment(
        K.QOS_GAMING,
        "QoS reserved bandwidth",
        [
            set_reg(r"HKLM:\SOFTWARE\Policies\Microsoft\Windows\Psched", "NonBestEffortLimit", 0),
            ok("QoS reserved bandwidth released"),
        ],
    )


@RULES.rule(K.IPV4_PREFER)
def ipv4_prefer(ctx: RuleContext) -> Fragment:
    return fragment(
        K.IPV4_PREFER,
        "Prefer IPv4",
        disabled_components_lines(TCPIP6_FLAGS[K.IPV4_PREFER], "IPv4 preferred over IPv6"),
    )


@RULES.rule(K.TEREDO_DISABLE)
def teredo_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.TEREDO_DISABLE,
        "Teredo and tunnel adapters",
        [TEREDO_OFF, *disabled_components_lines(TCPIP6_FLAGS[K.TEREDO_DISABLE], "Teredo and IPv6 tunnels disabled")],
        warnings=["Some peer-to-peer games rely on Teredo for NAT traversal"],
    )


@RULES.rule(K.RSS_ENABLE)
def rss_enable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.RSS_ENABLE,
        "Receive side scaling",
        [
            *active_adapters_loop(["Enable-NetAdapterRss -Name $_.Name -EA SilentlyContinue"]),
            ok("RSS enabled on active adapters"),
        ],
    )


@RULES.rule(K.RSC_DISABLE)
def rsc_disable(ctx: RuleContext) -> Fragment:
    return fragment(
        K.RSC_DISABLE,
        "Receive segment coalescing",
        [
            *active_adapters_loop(["Disable-NetAdapterRsc -Name $_.Name -EA SilentlyContinue"]),
            ok("RSC disabled on active adapters"),
        ],
    )


@RULES.rule(K.ADAPTER_POWER)
def adapter_power(ctx: RuleContext) -> Fragment:
    return fragment(
        K.ADAPTER_POWER,
        "Network adapter power saving",
        [
            *active_adapters_loop(
                [
                    "Set-NetAdapterPowerManagement -Name $_.Name -WakeOnMagicPacket Disabled "
                    "-WakeOnPattern Disabled -EA SilentlyContinue"
                ]
            ),
            ok("Network adapter power saving disabled"),
        ],
    )
