"""MAC/IPv4 parsing and the fixed-width hex encoding used in NXM loads.

``ovs-ofctl`` ``load:`` actions take their immediate value as a hex
integer, so the ARP responder needs the advertised MAC as 12 hex digits and
the advertised IPv4 address as 8 hex digits.  Parsing is fallible: a bad
address raises :class:`~ovs_evpn.exceptions.AddressParseError` rather than
silently degrading to a zero address.
"""

from __future__ import annotations

import ipaddress
import re

import netaddr

from .exceptions import AddressParseError

ZERO_IPV4 = "0.0.0.0"

_IPV4_HEX_WIDTH = 8
_MAC_HEX_WIDTH = 12

_MAC_RE = re.compile(
    r"^(?:[0-9a-f]{2}([:-])(?:[0-9a-f]{2}\1){4}[0-9a-f]{2}"
    r"|[0-9a-f]{4}\.[0-9a-f]{4}\.[0-9a-f]{4}"
    r"|[0-9a-f]{12})$",
    re.IGNORECASE,
)


def parse_ipv4(value: object) -> ipaddress.IPv4Address:
    try:
        return ipaddress.IPv4Address(str(value).strip())
    except ValueError as exc:
        raise AddressParseError(f"invalid IPv4 address {value!r}") from exc


def parse_mac(value: object) -> netaddr.EUI:
    """Parse a 48-bit MAC address.

    Only full-width notations are accepted (``aa:bb:cc:dd:ee:ff``,
    ``aa-bb-cc-dd-ee-ff``, ``aabb.ccdd.eeff`` and ``aabbccddeeff``); netaddr
    on its own pads short groups such as ``a:b:c:d:e:f``.
    """

    if not isinstance(value, str) or not _MAC_RE.match(value.strip()):
        raise AddressParseError(f"invalid MAC address {value!r}")
    try:
        return netaddr.EUI(value.strip(), version=48, dialect=netaddr.mac_unix_expanded)
    except (netaddr.AddrFormatError, TypeError, ValueError) as exc:
        raise AddressParseError(f"invalid MAC address {value!r}") from exc


def format_mac(mac: netaddr.EUI) -> str:
    """Render ``mac`` as lowercase colon separated octets."""

    return str(netaddr.EUI(int(mac), dialect=netaddr.mac_unix_expanded)).lower()


def ipv4_to_hex(address: ipaddress.IPv4Address | str) -> str:
    if not isinstance(address, ipaddress.IPv4Address):
        address = parse_ipv4(address)
    return f"{int(address):0{_IPV4_HEX_WIDTH}x}"


def hex_to_ipv4(value: str) -> ipaddress.IPv4Address:
    return ipaddress.IPv4Address(_decode_hex(value, _IPV4_HEX_WIDTH))


def mac_to_hex(mac: netaddr.EUI | str) -> str:
    if not isinstance(mac, netaddr.EUI):
        mac = parse_mac(mac)
    return f"{int(mac):0{_MAC_HEX_WIDTH}x}"


def hex_to_mac(value: str) -> netaddr.EUI:
    return netaddr.EUI(
        _decode_hex(value, _MAC_HEX_WIDTH), version=48, dialect=netaddr.mac_unix_expanded
    )


def _decode_hex(value: str, width: int) -> int:
    digits = value[2:] if value.lower().startswith("0x") else value
    if len(digits) != width:
        raise AddressParseError(
            f"expected {width} hex digits, got {len(digits)} in {value!r}"
        )
    try:
        return int(digits, 16)
    except ValueError as exc:
        raise AddressParseError(f"invalid hex value {value!r}") from exc
