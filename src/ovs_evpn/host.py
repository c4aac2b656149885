"""Discover this host's fabric-facing IPv4 address."""

from __future__ import annotations

import logging
import socket
from typing import Optional

import pyroute2
from pyroute2.netlink.exceptions import NetlinkError

from .model import HostIdentity

LOG = logging.getLogger(__name__)


def _first_ipv4(ipr: pyroute2.IPRoute, interface: str) -> Optional[str]:
    links = ipr.link_lookup(ifname=interface)
    if not links:
        LOG.warning("Interface %s not found", interface)
        return None

    for msg in ipr.get_addr(family=socket.AF_INET, index=links[0]):
        address = msg.get_attr("IFA_LOCAL") or msg.get_attr("IFA_ADDRESS")
        if address:
            return address
    LOG.warning("Interface %s has no IPv4 address", interface)
    return None


def discover_host_identity(interface: str) -> HostIdentity:
    """Return the first IPv4 address on ``interface``.

    Any failure yields the ``0.0.0.0`` sentinel, which makes every
    advertisement with an unknown next-hop look local.
    """

    try:
        with pyroute2.IPRoute() as ipr:
            address = _first_ipv4(ipr, interface)
    except (NetlinkError, OSError) as exc:
        LOG.warning("Could not query addresses of %s: %s", interface, exc)
        address = None

    if address is None:
        return HostIdentity.unknown(interface)
    return HostIdentity(address=address, interface=interface)


class HostIdentityProvider:
    """Callable refreshing :class:`HostIdentity` on each use.

    A static ``address`` short-circuits discovery, which is useful on hosts
    where the fabric address lives on a loopback or is assigned elsewhere.
    """

    def __init__(self, interface: str, address: Optional[str] = None) -> None:
        self._interface = interface
        self._address = address

    def __call__(self) -> HostIdentity:
        if self._address:
            return HostIdentity(address=self._address, interface=self._interface)
        return discover_host_identity(self._interface)
