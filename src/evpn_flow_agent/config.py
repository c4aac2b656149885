"""YAML configuration loader for the EVPN flow agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import yaml

from ovs_evpn.switch import DEFAULT_BRIDGE, DEFAULT_TIMEOUT


@dataclass
class SwitchConfig:
    bridge: str = DEFAULT_BRIDGE
    timeout: float = DEFAULT_TIMEOUT
    ofctl: str = "ovs-ofctl"
    vsctl: str = "ovs-vsctl"


@dataclass
class HostConfig:
    interface: str = "eth1"
    address: Optional[str] = None


@dataclass
class InventoryConfig:
    path: Path = Path("/etc/evpn-flow-agent/inventory.yaml")


@dataclass
class WatcherConfig:
    type: str
    path: Path
    interval: float = 5.0


@dataclass
class AgentConfig:
    switch: SwitchConfig = field(default_factory=SwitchConfig)
    host: HostConfig = field(default_factory=HostConfig)
    inventory: InventoryConfig = field(default_factory=InventoryConfig)
    watchers: Sequence[WatcherConfig] = field(default_factory=list)


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")
    return section


def _parse_switch(section: dict) -> SwitchConfig:
    timeout = float(section.get("timeout", DEFAULT_TIMEOUT))
    if timeout <= 0:
        raise ValueError("switch 'timeout' must be positive")
    return SwitchConfig(
        bridge=str(section.get("bridge", DEFAULT_BRIDGE)),
        timeout=timeout,
        ofctl=str(section.get("ofctl", "ovs-ofctl")),
        vsctl=str(section.get("vsctl", "ovs-vsctl")),
    )


def _parse_host(section: dict) -> HostConfig:
    address = section.get("address")
    return HostConfig(
        interface=str(section.get("interface", "eth1")),
        address=str(address) if address else None,
    )


def _parse_watchers(entries: Iterable[dict]) -> List[WatcherConfig]:
    watchers: List[WatcherConfig] = []
    for entry in entries:
        watchers.append(
            WatcherConfig(
                type=str(entry["type"]),
                path=Path(entry.get("path", ".")),
                interval=float(entry.get("interval", entry.get("poll_interval", 5.0))),
            )
        )
    return watchers


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(path.read_text())
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    inventory_section = _section(data, "inventory")
    inventory = InventoryConfig()
    if "path" in inventory_section:
        inventory = InventoryConfig(path=Path(inventory_section["path"]))

    watchers_section = data.get("watchers", [])
    if not isinstance(watchers_section, list):
        raise ValueError("'watchers' section must be a list")

    return AgentConfig(
        switch=_parse_switch(_section(data, "switch")),
        host=_parse_host(_section(data, "host")),
        inventory=inventory,
        watchers=_parse_watchers(watchers_section),
    )
