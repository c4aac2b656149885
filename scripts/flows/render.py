#!/usr/bin/env python3
"""Render the OpenFlow rules for a routes file without touching a switch.

Port lookups are answered from a static topology file instead of
``ovs-ofctl``::

    ports:            # port name -> OpenFlow port number
      veth1a2b3c: 4
    tunnels:          # next-hop address -> OpenFlow port number
      10.1.1.1: 2
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import yaml

REPO_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from ovs_evpn.driver import FlowSynthesizer  # noqa: E402
from ovs_evpn.exceptions import PortNotFound  # noqa: E402
from ovs_evpn.inventory import FileInventory  # noqa: E402
from ovs_evpn.model import Advertisement, FlowRule, HostIdentity  # noqa: E402
from ovs_evpn.switch import SwitchControl  # noqa: E402

LOG = logging.getLogger(__name__)


class TopologySwitch(SwitchControl):
    """Answer port lookups from a static topology; refuse to install."""

    def __init__(self, ports: Dict[str, int], tunnels: Dict[str, int]) -> None:
        self._ports = ports
        self._tunnels = tunnels

    def find_port_by_address(self, address: str) -> int:
        if address not in self._tunnels:
            raise PortNotFound(f"no tunnel to {address} in topology")
        return self._tunnels[address]

    def find_port_by_name(self, name: str) -> int:
        if name not in self._ports:
            raise PortNotFound(f"no port {name} in topology")
        return self._ports[name]

    def install_rule(self, rule: FlowRule) -> None:
        raise NotImplementedError("render only synthesises flows")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--routes", type=Path, required=True, help="Routes JSON file")
    parser.add_argument("--inventory", type=Path, required=True, help="Inventory YAML file")
    parser.add_argument("--topology", type=Path, required=True, help="Topology YAML file")
    parser.add_argument("--host-address", required=True, help="Fabric address of this host")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of flows")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args()


def load_topology(path: Path) -> TopologySwitch:
    data = yaml.safe_load(path.read_text()) or {}
    ports = {str(k): int(v) for k, v in (data.get("ports") or {}).items()}
    tunnels = {str(k): int(v) for k, v in (data.get("tunnels") or {}).items()}
    return TopologySwitch(ports, tunnels)


def load_routes(path: Path) -> List[Advertisement]:
    payload: Any = json.loads(path.read_text())
    routes = payload.get("routes", []) if isinstance(payload, dict) else payload
    return [Advertisement.from_dict(entry) for entry in routes]


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    synthesizer = FlowSynthesizer(load_topology(args.topology), FileInventory(args.inventory))
    host = HostIdentity(address=args.host_address)

    rendered = []
    failures = 0
    for advertisement in load_routes(args.routes):
        report = synthesizer.synthesize(advertisement, host)
        failures += len(report.failures)
        rendered.extend(report.rules)

    if args.json:
        print(json.dumps([rule.as_dict() for rule in rendered], indent=2))
    else:
        for rule in rendered:
            print(rule.to_ofctl())

    if failures:
        LOG.warning("%d flow(s) could not be synthesised", failures)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
