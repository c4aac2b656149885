"""Adapter between the flow driver and the registry contract."""

from __future__ import annotations

import logging

from ovs_evpn.driver import FlowDriver
from ovs_evpn.model import Advertisement

from .base import AdvertisementDriver

LOG = logging.getLogger(__name__)


class FlowDriverAdapter(AdvertisementDriver):
    """Wrap :class:`~ovs_evpn.driver.FlowDriver` for registry use."""

    def __init__(self, driver: FlowDriver) -> None:
        self._driver = driver

    @property
    def driver(self) -> FlowDriver:
        return self._driver

    def on_advertisement(self, advertisement: Advertisement) -> None:
        report = self._driver.process(advertisement)
        if report.failures:
            LOG.warning(
                "Advertisement %s/%s via %s: %d flow(s) installed, %d failed",
                advertisement.ip,
                advertisement.mac,
                advertisement.nexthop,
                len(report.installed),
                len(report.failures),
            )

    def on_withdraw(self, advertisement: Advertisement) -> None:
        # Installed flows are left in place; removal is not handled here.
        self._driver.forget(advertisement)
        LOG.info(
            "Route for %s/%s via %s withdrawn; existing flows are kept",
            advertisement.ip,
            advertisement.mac,
            advertisement.nexthop,
        )


def build_flow_adapter(driver: FlowDriver) -> FlowDriverAdapter:
    """Helper mirroring the builder pattern used by the registry wiring."""

    return FlowDriverAdapter(driver)
