"""Driver registry dispatching advertisement events."""

from __future__ import annotations

import logging
from typing import Dict

from .drivers import AdvertisementDriver
from .events import AdvertisementUpsert, AdvertisementWithdraw

LOG = logging.getLogger(__name__)


class DriverRegistry:
    """Dispatch advertisement events to registered driver adapters."""

    def __init__(self) -> None:
        self._drivers: Dict[str, AdvertisementDriver] = {}

    def register(self, name: str, driver: AdvertisementDriver) -> None:
        if name in self._drivers:
            raise ValueError(f"driver '{name}' already registered")
        self._drivers[name] = driver

    def unregister(self, name: str) -> None:
        self._drivers.pop(name, None)

    def handle(self, event: AdvertisementUpsert | AdvertisementWithdraw) -> None:
        if isinstance(event, AdvertisementUpsert):
            self._dispatch(event, "on_advertisement")
        elif isinstance(event, AdvertisementWithdraw):
            self._dispatch(event, "on_withdraw")
        else:
            raise TypeError(f"Unsupported event type: {type(event)!r}")

    def _dispatch(self, event: AdvertisementUpsert | AdvertisementWithdraw, method: str) -> None:
        for name, driver in self._drivers.items():
            try:
                getattr(driver, method)(event.advertisement)
            except Exception:
                LOG.exception("driver %s failed to handle %s", name, event)
