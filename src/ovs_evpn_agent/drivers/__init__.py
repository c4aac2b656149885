"""Driver adapters exposed to the registry."""

from .base import AdvertisementDriver  # noqa: F401
from .flow_adapter import FlowDriverAdapter, build_flow_adapter  # noqa: F401

__all__ = [
    "AdvertisementDriver",
    "FlowDriverAdapter",
    "build_flow_adapter",
]
