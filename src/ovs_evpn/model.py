"""Data structures shared by the flow synthesis core.

These light-weight dataclasses describe what the routing layer hands us
(:class:`Advertisement`), what the container inventory knows about local
endpoints (:class:`LocalEndpointInfo`, :class:`NetworkInfo`) and the flow
rules we derive from both (:class:`FlowRule`).  None of them carry identity
beyond their values, so re-synthesising from the same inputs always yields
an equal rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .addresses import ZERO_IPV4, format_mac, parse_mac
from .exceptions import AddressParseError, AdvertisementError

MAX_VNI = (1 << 24) - 1


@dataclass(frozen=True)
class Advertisement:
    """An EVPN MAC/IP advertisement as delivered by the routing layer.

    Attributes
    ----------
    mac:
        Hardware address of the endpoint, unparsed.
    ip:
        IPv4 address of the endpoint, unparsed.
    vnis:
        The route's labels.  Only the first one is used as the VNI.
    nexthop:
        Fabric node currently believed to host the endpoint.

    Addresses stay raw strings so that a malformed field only fails the
    rules which actually need it.
    """

    mac: str
    ip: str
    vnis: Tuple[int, ...]
    nexthop: str

    @property
    def vni(self) -> Optional[int]:
        return self.vnis[0] if self.vnis else None

    @property
    def endpoint_key(self) -> Tuple[str, str]:
        """Identity of the endpoint, independent of MAC notation."""

        try:
            mac = format_mac(parse_mac(self.mac))
        except AddressParseError:
            mac = self.mac.strip().lower()
        return mac, self.ip.strip()

    def require_vni(self) -> int:
        vni = self.vni
        if vni is None:
            raise AdvertisementError(f"advertisement for {self.mac} carries no VNI label")
        if not 0 <= vni <= MAX_VNI:
            raise AdvertisementError(f"VNI {vni} is outside the 24-bit range")
        return vni

    @classmethod
    def from_dict(cls, entry: Mapping[str, Any]) -> "Advertisement":
        mac = entry.get("mac", entry.get("mac_addr"))
        ip = entry.get("ip", entry.get("ip_addr"))
        if mac is None or ip is None:
            raise ValueError("advertisement requires 'mac' and 'ip'")

        labels = entry.get("vnis", entry.get("labels", entry.get("vni", ())))
        if isinstance(labels, (int, str)):
            labels = [labels]
        try:
            vnis = tuple(int(label) for label in labels)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid VNI labels {labels!r}") from exc

        return cls(
            mac=str(mac),
            ip=str(ip),
            vnis=vnis,
            nexthop=str(entry.get("nexthop") or ZERO_IPV4),
        )


@dataclass(frozen=True)
class LocalEndpointInfo:
    """A container port known to the local inventory."""

    ip: str
    mac: str
    network_id: str
    port_name: str


@dataclass(frozen=True)
class NetworkInfo:
    network_id: str
    vni: int


@dataclass(frozen=True)
class InventorySnapshot:
    """Point-in-time view of the container inventory."""

    endpoints: Sequence[LocalEndpointInfo] = ()
    networks: Mapping[str, NetworkInfo] = field(default_factory=dict)

    def vni_for(self, network_id: str) -> Optional[int]:
        network = self.networks.get(network_id)
        return network.vni if network else None


@dataclass(frozen=True)
class HostIdentity:
    """Fabric-facing address of this host.

    ``0.0.0.0`` is the sentinel for "could not be determined".
    """

    address: str
    interface: Optional[str] = None

    @classmethod
    def unknown(cls, interface: Optional[str] = None) -> "HostIdentity":
        return cls(address=ZERO_IPV4, interface=interface)

    @property
    def is_known(self) -> bool:
        return self.address != ZERO_IPV4


class RuleKind(str, Enum):
    ARP_RESPONDER = "arp-responder"
    REMOTE_PORT = "remote-port-selection"
    LOCAL_PORT = "local-port-selection"


@dataclass(frozen=True)
class FlowMatch:
    """Equality constraints of a flow, rendered in a fixed field order."""

    dl_type: Optional[int] = None
    nw_dst: Optional[str] = None
    dl_dst: Optional[str] = None
    dl_vlan: Optional[int] = None

    def fields(self) -> List[Tuple[str, str]]:
        fields: List[Tuple[str, str]] = []
        if self.dl_type is not None:
            fields.append(("dl_type", f"0x{self.dl_type:04x}"))
        if self.nw_dst is not None:
            fields.append(("nw_dst", self.nw_dst))
        if self.dl_dst is not None:
            fields.append(("dl_dst", self.dl_dst))
        if self.dl_vlan is not None:
            fields.append(("dl_vlan", str(self.dl_vlan)))
        return fields


@dataclass(frozen=True)
class FlowRule:
    """A prioritised match/actions pair ready to hand to the switch."""

    kind: RuleKind
    priority: int
    match: FlowMatch
    actions: Tuple[str, ...]

    def to_ofctl(self) -> str:
        """Encode the rule in ``ovs-ofctl add-flow`` syntax."""

        parts = [f"priority={self.priority}"]
        parts.extend(f"{name}={value}" for name, value in self.match.fields())
        parts.append("actions=" + ",".join(self.actions))
        return ",".join(parts)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "priority": self.priority,
            "match": dict(self.match.fields()),
            "actions": list(self.actions),
            "flow": self.to_ofctl(),
        }
