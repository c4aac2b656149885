"""Entry point for the standalone EVPN flow agent."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event

from ovs_evpn.driver import FlowDriver
from ovs_evpn.host import HostIdentityProvider
from ovs_evpn.inventory import FileInventory
from ovs_evpn.switch import OvsSwitch
from ovs_evpn_agent import DriverRegistry
from ovs_evpn_agent.drivers import build_flow_adapter

from .config import AgentConfig, load_config
from .watchers import FileAdvertisementWatcher

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def build_driver(config: AgentConfig) -> FlowDriver:
    switch = OvsSwitch(
        config.switch.bridge,
        timeout=config.switch.timeout,
        ofctl=config.switch.ofctl,
        vsctl=config.switch.vsctl,
    )
    return FlowDriver(
        switch,
        FileInventory(config.inventory.path),
        HostIdentityProvider(config.host.interface, config.host.address),
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the EVPN flow agent")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/evpn-flow-agent/agent.yaml"),
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--oneshot",
        action="store_true",
        help="Poll every watcher once and exit",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    config = load_config(args.config)

    registry = DriverRegistry()
    registry.register("ovs-flows", build_flow_adapter(build_driver(config)))

    stop_event = Event()

    watchers = []
    for watcher_cfg in config.watchers:
        if watcher_cfg.type == "file":
            watcher = FileAdvertisementWatcher(
                registry=registry,
                path=watcher_cfg.path,
                interval=watcher_cfg.interval,
                stop_event=stop_event,
            )
        else:
            raise ValueError(f"unsupported watcher type '{watcher_cfg.type}'")
        # Perform an initial poll so we react immediately
        try:
            watcher.poll()
        except Exception:  # pragma: no cover - logged inside watcher
            LOG.exception("initial poll failed for watcher %s", watcher_cfg.path)
        watchers.append(watcher)

    if args.oneshot:
        LOG.info("oneshot run complete")
        return 0

    if not watchers:
        LOG.warning("no watchers configured; agent will idle")

    for watcher in watchers:
        watcher.start()

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    except KeyboardInterrupt:  # pragma: no cover - fallback if signal not set
        stop_event.set()

    for watcher in watchers:
        watcher.join()

    LOG.info("EVPN flow agent stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
