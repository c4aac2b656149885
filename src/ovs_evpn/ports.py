"""Resolve the switch port an endpoint's traffic must leave through."""

from __future__ import annotations

import logging

from .addresses import parse_ipv4, parse_mac
from .exceptions import PortNotFound
from .model import Advertisement, InventorySnapshot, LocalEndpointInfo
from .switch import SwitchControl

LOG = logging.getLogger(__name__)


def find_local_endpoint(
    advertisement: Advertisement, inventory: InventorySnapshot
) -> LocalEndpointInfo:
    """Return the single inventory entry matching ip, mac and VNI.

    Matching on all three guards against two containers on different
    networks sharing a MAC or IP.  Entries with unparsable addresses never
    match.  Zero or several matches raise :class:`PortNotFound`.
    """

    ip = parse_ipv4(advertisement.ip)
    mac = parse_mac(advertisement.mac)
    vni = advertisement.require_vni()

    matches = []
    for info in inventory.endpoints:
        try:
            if parse_ipv4(info.ip) != ip or parse_mac(info.mac) != mac:
                continue
        except ValueError:
            LOG.debug("Ignoring inventory entry with bad address: %s", info)
            continue
        if inventory.vni_for(info.network_id) != vni:
            LOG.debug(
                "Inventory entry %s matches %s/%s but not VNI %s",
                info.port_name,
                advertisement.ip,
                advertisement.mac,
                vni,
            )
            continue
        matches.append(info)

    if not matches:
        raise PortNotFound(
            f"no local endpoint {advertisement.ip}/{advertisement.mac} in VNI {vni}"
        )
    if len(matches) > 1:
        raise PortNotFound(
            f"{len(matches)} local endpoints match {advertisement.ip}/"
            f"{advertisement.mac} in VNI {vni}: "
            + ", ".join(m.port_name for m in matches)
        )
    return matches[0]


class PortResolver:
    """Single-attempt port lookups delegated to the switch."""

    def __init__(self, switch: SwitchControl) -> None:
        self._switch = switch

    def resolve_remote_port(self, nexthop: str) -> int:
        port = self._switch.find_port_by_address(nexthop)
        LOG.debug("Next-hop %s is reachable through port %s", nexthop, port)
        return port

    def resolve_local_port(
        self, advertisement: Advertisement, inventory: InventorySnapshot
    ) -> int:
        endpoint = find_local_endpoint(advertisement, inventory)
        port = self._switch.find_port_by_name(endpoint.port_name)
        LOG.debug("Local endpoint %s is on port %s", endpoint.port_name, port)
        return port
