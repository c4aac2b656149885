"""Flow rule builders for the three EVPN-derived flow kinds.

Each builder is a pure function of the advertisement and, where needed, the
resolved output port.  Applicability (remote vs local) is decided by the
caller from :func:`ovs_evpn.locality.classify`; builders only validate the
fields they consume and raise on anything malformed.
"""

from __future__ import annotations

from .addresses import format_mac, ipv4_to_hex, mac_to_hex, parse_ipv4, parse_mac
from .model import Advertisement, FlowMatch, FlowRule, RuleKind

ARP_RESPONDER_PRIORITY = 100
PORT_SELECTION_PRIORITY = 50

ETH_TYPE_ARP = 0x0806
ARP_OP_REPLY = 0x2


def build_arp_responder_rule(advertisement: Advertisement) -> FlowRule:
    """Answer ARP requests for a remote endpoint on the local bridge.

    The request is turned around in place: the requester becomes the
    target, the advertised MAC/IP become the sender, and the packet goes
    back out of the port it arrived on.
    """

    ip = parse_ipv4(advertisement.ip)
    mac = parse_mac(advertisement.mac)

    actions = (
        "move:NXM_OF_ETH_SRC[]->NXM_OF_ETH_DST[]",
        f"mod_dl_src:{format_mac(mac)}",
        f"load:{ARP_OP_REPLY:#x}->NXM_OF_ARP_OP[]",
        "move:NXM_NX_ARP_SHA[]->NXM_NX_ARP_THA[]",
        "move:NXM_OF_ARP_SPA[]->NXM_OF_ARP_TPA[]",
        f"load:0x{mac_to_hex(mac)}->NXM_NX_ARP_SHA[]",
        f"load:0x{ipv4_to_hex(ip)}->NXM_OF_ARP_SPA[]",
        "output:in_port",
    )
    return FlowRule(
        kind=RuleKind.ARP_RESPONDER,
        priority=ARP_RESPONDER_PRIORITY,
        match=FlowMatch(dl_type=ETH_TYPE_ARP, nw_dst=str(ip)),
        actions=actions,
    )


def build_remote_port_rule(advertisement: Advertisement, port: int) -> FlowRule:
    """Tag unicast traffic for a remote endpoint with its VNI and send it uplink."""

    mac = parse_mac(advertisement.mac)
    vni = advertisement.require_vni()
    return FlowRule(
        kind=RuleKind.REMOTE_PORT,
        priority=PORT_SELECTION_PRIORITY,
        match=FlowMatch(dl_dst=format_mac(mac)),
        actions=(f"mod_vlan_vid:{vni}", f"output:{port}"),
    )


def build_local_port_rule(advertisement: Advertisement, port: int) -> FlowRule:
    """Untag fabric traffic for a local endpoint and deliver it to the container."""

    mac = parse_mac(advertisement.mac)
    vni = advertisement.require_vni()
    return FlowRule(
        kind=RuleKind.LOCAL_PORT,
        priority=PORT_SELECTION_PRIORITY,
        match=FlowMatch(dl_dst=format_mac(mac), dl_vlan=vni),
        actions=("strip_vlan", f"output:{port}"),
    )
