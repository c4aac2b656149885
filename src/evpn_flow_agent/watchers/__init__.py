"""Watcher implementations used by the EVPN flow agent."""

from .file import FileAdvertisementWatcher  # noqa: F401

__all__ = ["FileAdvertisementWatcher"]
