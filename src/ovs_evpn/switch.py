"""Switch-control channel used for port lookups and flow installation.

:class:`SwitchControl` is the capability the synthesis core depends on.
:class:`OvsSwitch` satisfies it by shelling out to ``ovs-ofctl`` and
``ovs-vsctl``; every call is bounded by a timeout and nothing is cached, so
each lookup reflects the switch state at decision time.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from .exceptions import PortNotFound, SwitchError
from .model import FlowRule

LOG = logging.getLogger(__name__)

DEFAULT_BRIDGE = "docker0-ovs"
DEFAULT_TIMEOUT = 5.0

# " 3(vxlan-10.1.1.1): addr:aa:bb:cc:dd:ee:ff"
_OFCTL_PORT_RE = re.compile(r"^\s*(\d+)\((.+)\):\s+addr:", re.MULTILINE)


class SwitchControl(ABC):
    """Operations the flow synthesis needs from the local switch."""

    @abstractmethod
    def find_port_by_address(self, address: str) -> int:
        """Return the port through which fabric node ``address`` is reachable."""

    @abstractmethod
    def find_port_by_name(self, name: str) -> int:
        """Return the port number of the port called ``name``."""

    @abstractmethod
    def install_rule(self, rule: FlowRule) -> None:
        """Add ``rule`` to the switch flow table."""


@dataclass
class InterfaceRow:
    name: str
    options: Dict[str, str] = field(default_factory=dict)


def parse_ofctl_show(output: str) -> Dict[str, int]:
    """Map port names to OpenFlow port numbers from ``ovs-ofctl show`` output.

    The ``LOCAL`` bridge port has no number and is left out.
    """

    return {name: int(number) for number, name in _OFCTL_PORT_RE.findall(output)}


def _ovsdb_map(value: Any) -> Dict[str, str]:
    # OVSDB JSON encodes maps as ["map", [[key, value], ...]]
    if isinstance(value, list) and len(value) == 2 and value[0] == "map":
        return {str(k): str(v) for k, v in value[1]}
    return {}


def parse_interface_table(payload: Mapping[str, Any]) -> List[InterfaceRow]:
    """Decode ``ovs-vsctl --format=json list Interface`` output."""

    headings: Sequence[str] = payload.get("headings", [])
    rows: List[InterfaceRow] = []
    for data in payload.get("data", []):
        record = dict(zip(headings, data))
        name = record.get("name")
        if not isinstance(name, str):
            continue
        rows.append(InterfaceRow(name=name, options=_ovsdb_map(record.get("options"))))
    return rows


class OvsSwitch(SwitchControl):
    """Open vSwitch bridge driven through its command line tools.

    Parameters
    ----------
    bridge:
        Name of the integration bridge carrying the overlay.
    timeout:
        Seconds to wait for each ``ovs-*`` invocation.  Expiry is reported
        as a :class:`SwitchError`.
    ofctl, vsctl:
        Paths of the ``ovs-ofctl`` and ``ovs-vsctl`` binaries.
    """

    def __init__(
        self,
        bridge: str = DEFAULT_BRIDGE,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        ofctl: str = "ovs-ofctl",
        vsctl: str = "ovs-vsctl",
    ) -> None:
        self._bridge = bridge
        self._timeout = timeout
        self._ofctl = ofctl
        self._vsctl = vsctl

    @property
    def bridge(self) -> str:
        return self._bridge

    def _run(self, cmd: List[str]) -> str:
        LOG.debug("Executing: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise SwitchError(f"{cmd[0]} timed out after {self._timeout}s") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            raise SwitchError(f"{cmd[0]} exited with {exc.returncode}: {stderr}") from exc
        except OSError as exc:
            raise SwitchError(f"cannot execute {cmd[0]}: {exc}") from exc
        return proc.stdout

    def list_ports(self) -> Dict[str, int]:
        return parse_ofctl_show(self._run([self._ofctl, "show", self._bridge]))

    def list_interfaces(self) -> List[InterfaceRow]:
        output = self._run(
            [
                self._vsctl,
                "--format=json",
                "--data=json",
                "--columns=name,options",
                "list",
                "Interface",
            ]
        )
        try:
            payload = json.loads(output)
        except json.JSONDecodeError as exc:
            raise SwitchError(f"unparsable ovs-vsctl output: {exc}") from exc
        return parse_interface_table(payload)

    def find_port_by_address(self, address: str) -> int:
        candidates = [
            row.name
            for row in self.list_interfaces()
            if row.options.get("remote_ip") == address
        ]
        if not candidates:
            raise PortNotFound(f"no tunnel interface with remote_ip {address}")

        ports = self.list_ports()
        for name in candidates:
            if name in ports:
                return ports[name]
        raise PortNotFound(
            f"tunnel to {address} ({', '.join(candidates)}) is not on bridge {self._bridge}"
        )

    def find_port_by_name(self, name: str) -> int:
        ports = self.list_ports()
        try:
            return ports[name]
        except KeyError:
            raise PortNotFound(f"port {name} not found on bridge {self._bridge}") from None

    def install_rule(self, rule: FlowRule) -> None:
        self._run([self._ofctl, "add-flow", self._bridge, rule.to_ofctl()])
