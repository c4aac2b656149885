"""Decide whether an advertised endpoint lives on this host."""

from __future__ import annotations

import ipaddress
from enum import Enum

from .addresses import ZERO_IPV4


class Locality(Enum):
    SELF = "self"
    UNKNOWN = "unknown"
    REMOTE = "remote"

    @property
    def wants_remote_flows(self) -> bool:
        """ARP responder and remote port selection only apply to remote endpoints."""

        return self is Locality.REMOTE

    @property
    def wants_local_flow(self) -> bool:
        # Unknown origin is treated as ours for local delivery.
        return self is not Locality.REMOTE


def _normalise(address: str) -> str:
    try:
        return str(ipaddress.IPv4Address(address.strip()))
    except ValueError:
        return address.strip()


def classify(nexthop: str, host_ip: str) -> Locality:
    nexthop = _normalise(nexthop)
    if nexthop == _normalise(host_ip):
        return Locality.SELF
    if nexthop == ZERO_IPV4:
        return Locality.UNKNOWN
    return Locality.REMOTE
