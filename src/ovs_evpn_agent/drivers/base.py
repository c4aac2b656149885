"""Abstract interface for advertisement-aware drivers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ovs_evpn.model import Advertisement


class AdvertisementDriver(ABC):
    """Base class for driver adapters managed by :class:`DriverRegistry`."""

    @abstractmethod
    def on_advertisement(self, advertisement: Advertisement) -> None:
        """Apply ``advertisement`` as the current location of its endpoint."""

    @abstractmethod
    def on_withdraw(self, advertisement: Advertisement) -> None:
        """React to ``advertisement`` no longer being announced."""
