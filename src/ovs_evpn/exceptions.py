"""Exception hierarchy for the flow synthesis core."""

from __future__ import annotations


class EvpnOvsError(Exception):
    """Base class for errors raised by :mod:`ovs_evpn`."""


class AddressParseError(EvpnOvsError, ValueError):
    """A MAC or IPv4 address in an advertisement could not be parsed."""


class AdvertisementError(EvpnOvsError, ValueError):
    """An advertisement lacks a field a flow rule needs (e.g. a VNI label)."""


class PortNotFound(EvpnOvsError):
    """No switch port could be resolved for an endpoint or next-hop."""


class SwitchError(EvpnOvsError):
    """The switch-control channel failed, timed out or rejected a command."""


class InventoryError(EvpnOvsError):
    """The container inventory could not be read."""
