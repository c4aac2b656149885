from pathlib import Path

import pytest

from evpn_flow_agent.config import load_config


def test_load_config(tmp_path: Path):
    config_path = tmp_path / "agent.yaml"
    config_path.write_text(
        """
switch:
  bridge: br-overlay
  timeout: 2.5
host:
  interface: eth2
  address: 10.1.1.2
inventory:
  path: /run/evpn/inventory.yaml
watchers:
  - type: file
    path: /var/lib/evpn-flow-agent/routes.json
    interval: 2
"""
    )

    cfg = load_config(config_path)

    assert cfg.switch.bridge == "br-overlay"
    assert cfg.switch.timeout == pytest.approx(2.5)
    assert cfg.switch.ofctl == "ovs-ofctl"
    assert cfg.host.interface == "eth2"
    assert cfg.host.address == "10.1.1.2"
    assert cfg.inventory.path == Path("/run/evpn/inventory.yaml")
    assert len(cfg.watchers) == 1
    watcher = cfg.watchers[0]
    assert watcher.type == "file"
    assert watcher.path == Path("/var/lib/evpn-flow-agent/routes.json")
    assert watcher.interval == pytest.approx(2.0)


def test_load_config_defaults(tmp_path: Path):
    config_path = tmp_path / "agent.yaml"
    config_path.write_text("")

    cfg = load_config(config_path)

    assert cfg.switch.bridge == "docker0-ovs"
    assert cfg.switch.timeout == pytest.approx(5.0)
    assert cfg.host.interface == "eth1"
    assert cfg.host.address is None
    assert list(cfg.watchers) == []


@pytest.mark.parametrize(
    "content",
    [
        "- not\n- a mapping\n",
        "switch: [1, 2]\n",
        "watchers: {type: file}\n",
        "switch:\n  timeout: 0\n",
    ],
)
def test_load_config_rejects_invalid_structure(tmp_path: Path, content):
    config_path = tmp_path / "agent.yaml"
    config_path.write_text(content)

    with pytest.raises(ValueError):
        load_config(config_path)
