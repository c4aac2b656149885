import pytest

from ovs_evpn.exceptions import PortNotFound
from ovs_evpn.model import (
    Advertisement,
    FlowRule,
    InventorySnapshot,
    LocalEndpointInfo,
    NetworkInfo,
)
from ovs_evpn.ports import PortResolver, find_local_endpoint
from ovs_evpn.switch import SwitchControl


class StaticSwitch(SwitchControl):
    def __init__(self, ports=None, tunnels=None):
        self.ports = ports or {}
        self.tunnels = tunnels or {}

    def find_port_by_address(self, address):
        if address not in self.tunnels:
            raise PortNotFound(address)
        return self.tunnels[address]

    def find_port_by_name(self, name):
        if name not in self.ports:
            raise PortNotFound(name)
        return self.ports[name]

    def install_rule(self, rule: FlowRule):
        raise AssertionError("port resolution must not install flows")


ADV = Advertisement(mac="aa:bb:cc:dd:ee:ff", ip="10.0.0.5", vnis=(42,), nexthop="10.1.1.1")

NETWORKS = {
    "net-a": NetworkInfo(network_id="net-a", vni=42),
    "net-b": NetworkInfo(network_id="net-b", vni=43),
}


def snapshot(*endpoints) -> InventorySnapshot:
    return InventorySnapshot(endpoints=list(endpoints), networks=NETWORKS)


def test_triple_match_selects_endpoint():
    wanted = LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:ff", "net-a", "veth-a")
    inventory = snapshot(
        LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:ff", "net-b", "veth-b"),
        wanted,
    )

    assert find_local_endpoint(ADV, inventory) == wanted


def test_mac_comparison_is_notation_insensitive():
    wanted = LocalEndpointInfo("10.0.0.5", "AA-BB-CC-DD-EE-FF", "net-a", "veth-a")

    assert find_local_endpoint(ADV, snapshot(wanted)) == wanted


@pytest.mark.parametrize(
    "endpoint",
    [
        LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:00", "net-a", "veth-mac"),
        LocalEndpointInfo("10.0.0.6", "aa:bb:cc:dd:ee:ff", "net-a", "veth-ip"),
        LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:ff", "net-b", "veth-vni"),
        LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:ff", "net-missing", "veth-net"),
        LocalEndpointInfo("bogus", "aa:bb:cc:dd:ee:ff", "net-a", "veth-bad"),
    ],
)
def test_partial_match_is_rejected(endpoint):
    with pytest.raises(PortNotFound):
        find_local_endpoint(ADV, snapshot(endpoint))


def test_ambiguous_match_is_rejected():
    inventory = snapshot(
        LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:ff", "net-a", "veth-1"),
        LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:ff", "net-a", "veth-2"),
    )

    with pytest.raises(PortNotFound, match="veth-1, veth-2"):
        find_local_endpoint(ADV, inventory)


def test_resolve_local_port():
    resolver = PortResolver(StaticSwitch(ports={"veth-a": 4}))
    inventory = snapshot(LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:ff", "net-a", "veth-a"))

    assert resolver.resolve_local_port(ADV, inventory) == 4


def test_resolve_local_port_missing_on_switch():
    resolver = PortResolver(StaticSwitch(ports={}))
    inventory = snapshot(LocalEndpointInfo("10.0.0.5", "aa:bb:cc:dd:ee:ff", "net-a", "veth-a"))

    with pytest.raises(PortNotFound):
        resolver.resolve_local_port(ADV, inventory)


def test_resolve_remote_port():
    resolver = PortResolver(StaticSwitch(tunnels={"10.1.1.1": 2}))

    assert resolver.resolve_remote_port("10.1.1.1") == 2
    with pytest.raises(PortNotFound):
        resolver.resolve_remote_port("10.1.1.9")
