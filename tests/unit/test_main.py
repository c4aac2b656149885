import json
from pathlib import Path

from evpn_flow_agent import main as main_module
from ovs_evpn.exceptions import PortNotFound
from ovs_evpn.model import RuleKind
from ovs_evpn.switch import SwitchControl


class RecordingSwitch(SwitchControl):
    def __init__(self):
        self.installed = []

    def find_port_by_address(self, address):
        if address != "10.1.1.1":
            raise PortNotFound(address)
        return 2

    def find_port_by_name(self, name):
        if name != "veth1a2b3c":
            raise PortNotFound(name)
        return 4

    def install_rule(self, rule):
        self.installed.append(rule)


def test_oneshot_run(tmp_path: Path, monkeypatch):
    routes = tmp_path / "routes.json"
    routes.write_text(
        json.dumps(
            {
                "routes": [
                    {"mac": "aa:bb:cc:dd:ee:ff", "ip": "10.0.0.5", "vni": 42, "nexthop": "10.1.1.1"},
                    {"mac": "02:42:ac:11:00:02", "ip": "10.0.0.6", "vni": 42, "nexthop": "10.1.1.2"},
                ]
            }
        )
    )
    inventory = tmp_path / "inventory.yaml"
    inventory.write_text(
        """
networks:
  - id: net-a
    vni: 42
endpoints:
  - ip: 10.0.0.6
    mac: 02:42:ac:11:00:02
    network: net-a
    port: veth1a2b3c
"""
    )
    config = tmp_path / "agent.yaml"
    config.write_text(
        f"""
host:
  interface: eth1
  address: 10.1.1.2
inventory:
  path: {inventory}
watchers:
  - type: file
    path: {routes}
"""
    )

    switch = RecordingSwitch()
    monkeypatch.setattr(main_module, "OvsSwitch", lambda *args, **kwargs: switch)

    assert main_module.main(["--config", str(config), "--oneshot"]) == 0

    assert sorted(r.kind.value for r in switch.installed) == sorted(
        [RuleKind.ARP_RESPONDER.value, RuleKind.REMOTE_PORT.value, RuleKind.LOCAL_PORT.value]
    )
