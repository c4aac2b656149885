"""Read-only access to the container/network inventory.

The inventory is owned by whatever creates container ports (a network
plugin, an orchestrator, ...).  We only ever ask it for a snapshot.
:class:`FileInventory` reads a YAML (or JSON) document that such a plugin
keeps up to date::

    networks:
      - id: net-a
        vni: 42
    endpoints:
      - ip: 10.0.0.5
        mac: "aa:bb:cc:dd:ee:ff"   # quote MACs, YAML reads 12:34:56 as a number
        network: net-a
        port: veth1a2b3c
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import yaml

from .exceptions import InventoryError
from .model import InventorySnapshot, LocalEndpointInfo, NetworkInfo

LOG = logging.getLogger(__name__)


class Inventory(ABC):
    @abstractmethod
    def snapshot(self) -> InventorySnapshot:
        """Return the current endpoints and network to VNI mapping."""


class StaticInventory(Inventory):
    """Inventory backed by a fixed snapshot."""

    def __init__(self, snapshot: InventorySnapshot | None = None) -> None:
        self._snapshot = snapshot or InventorySnapshot()

    def snapshot(self) -> InventorySnapshot:
        return self._snapshot


def _parse_networks(entries: Iterable[Mapping[str, Any]]) -> Dict[str, NetworkInfo]:
    networks: Dict[str, NetworkInfo] = {}
    for entry in entries:
        network_id = str(entry["id"])
        networks[network_id] = NetworkInfo(network_id=network_id, vni=int(entry["vni"]))
    return networks


def _parse_endpoints(entries: Iterable[Mapping[str, Any]]) -> List[LocalEndpointInfo]:
    return [
        LocalEndpointInfo(
            ip=str(entry["ip"]),
            mac=str(entry["mac"]),
            network_id=str(entry["network"]),
            port_name=str(entry["port"]),
        )
        for entry in entries
    ]


def parse_inventory(data: Any) -> InventorySnapshot:
    if data is None:
        return InventorySnapshot()
    if not isinstance(data, dict):
        raise InventoryError("inventory document must be a mapping")

    networks_section = data.get("networks") or []
    endpoints_section = data.get("endpoints") or []
    if not isinstance(networks_section, list) or not isinstance(endpoints_section, list):
        raise InventoryError("'networks' and 'endpoints' must be lists")

    try:
        networks = _parse_networks(networks_section)
        endpoints = _parse_endpoints(endpoints_section)
    except (KeyError, TypeError, ValueError) as exc:
        raise InventoryError(f"malformed inventory entry: {exc!r}") from exc
    return InventorySnapshot(endpoints=endpoints, networks=networks)


class FileInventory(Inventory):
    """Inventory read from disk on every :meth:`snapshot` call."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def snapshot(self) -> InventorySnapshot:
        if not self._path.exists():
            LOG.debug("inventory file %s does not exist yet", self._path)
            return InventorySnapshot()

        try:
            data = yaml.safe_load(self._path.read_text())
        except (OSError, yaml.YAMLError) as exc:
            raise InventoryError(f"cannot read inventory {self._path}: {exc}") from exc
        return parse_inventory(data)
