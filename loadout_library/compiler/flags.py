"""Typed bit flags for registry values shared by several optimizations."""

from enum import IntFlag


class Tcpip6Components(IntFlag):
    """Bits of ``HKLM\\SYSTEM\\CurrentControlSet\\Services\\Tcpip6\\Parameters\\DisabledComponents``.

    Keys that touch this value contribute individual bits. When several are
    selected their contributions are combined with ``|`` and written once.

    Example:
        >>> value = Tcpip6Components.PREFER_IPV4 | Tcpip6Components.DISABLE_TUNNELS
        >>> assert int(value) == 33
    """

    NONE = 0x00
    DISABLE_TUNNELS = 0x01
    PREFER_IPV4 = 0x20
