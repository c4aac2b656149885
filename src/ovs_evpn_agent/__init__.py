"""Event dispatch between advertisement sources and flow drivers.

Watchers publish :mod:`~ovs_evpn_agent.events` objects into a
:class:`DriverRegistry`, which fans them out to every registered driver
adapter.  Keeping this layer separate from :mod:`ovs_evpn` lets the core be
driven from a GoBGP monitor, a file watcher or a test harness alike.
"""

from .events import AdvertisementUpsert, AdvertisementWithdraw  # noqa: F401
from .registry import DriverRegistry  # noqa: F401

__all__ = [
    "AdvertisementUpsert",
    "AdvertisementWithdraw",
    "DriverRegistry",
]
