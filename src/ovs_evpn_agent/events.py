"""Event primitives consumed by the driver registry."""

from __future__ import annotations

from dataclasses import dataclass

from ovs_evpn.model import Advertisement


@dataclass(frozen=True)
class AdvertisementUpsert:
    """A MAC/IP route was advertised or its attributes changed.

    Each upsert supersedes whatever was previously known for the endpoint.
    """

    advertisement: Advertisement


@dataclass(frozen=True)
class AdvertisementWithdraw:
    """A MAC/IP route is no longer advertised."""

    advertisement: Advertisement
