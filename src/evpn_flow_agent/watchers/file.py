"""File-based advertisement watcher.

Polls a JSON dump of the EVPN MAC/IP routes (for instance written by a
GoBGP ``monitor`` hook) and publishes an event for every route that is new,
changed or gone since the previous poll.  Accepted layouts are either a
bare list of routes or ``{"routes": [...]}`` with entries such as::

    {"mac": "aa:bb:cc:dd:ee:ff", "ip": "10.0.0.5", "vni": 42, "nexthop": "10.1.1.1"}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Event, Thread
from typing import Any, Dict, Tuple

from ovs_evpn.model import Advertisement
from ovs_evpn_agent import DriverRegistry
from ovs_evpn_agent.events import AdvertisementUpsert, AdvertisementWithdraw

LOG = logging.getLogger(__name__)

EndpointKey = Tuple[str, str]


def _extract_state(payload: Any) -> Dict[EndpointKey, Advertisement]:
    if isinstance(payload, dict):
        routes = payload.get("routes")
        if routes is None:
            raise ValueError("routes file missing 'routes' key")
    else:
        routes = payload
    if not isinstance(routes, list):
        raise ValueError("'routes' must be a list")

    state: Dict[EndpointKey, Advertisement] = {}
    for entry in routes:
        if not isinstance(entry, dict):
            LOG.warning("ignoring non-mapping route entry %r", entry)
            continue
        try:
            advertisement = Advertisement.from_dict(entry)
        except ValueError as exc:
            LOG.warning("ignoring route entry %r: %s", entry, exc)
            continue
        # Later entries for the same endpoint supersede earlier ones.
        state[advertisement.endpoint_key] = advertisement
    return state


class FileAdvertisementWatcher(Thread):
    """Poll a JSON routes file and publish advertisement events."""

    def __init__(
        self,
        registry: DriverRegistry,
        path: Path,
        interval: float,
        stop_event: Event,
    ) -> None:
        super().__init__(daemon=True)
        self._registry = registry
        self._path = Path(path)
        self._interval = interval
        self._stop_event = stop_event
        self._state: Dict[EndpointKey, Advertisement] = {}

    @property
    def path(self) -> Path:
        return self._path

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll()
            except Exception:  # pragma: no cover - logged below
                LOG.exception("file watcher encountered an error")
            self._stop_event.wait(self._interval)

    def poll(self) -> None:
        if not self._path.exists():
            LOG.debug("routes file %s does not exist yet", self._path)
            return

        try:
            payload = json.loads(self._path.read_text())
        except json.JSONDecodeError as exc:
            LOG.warning("failed to parse routes file %s: %s", self._path, exc)
            return

        try:
            desired = _extract_state(payload)
        except ValueError as exc:
            LOG.warning("invalid routes file %s: %s", self._path, exc)
            return

        for key, advertisement in desired.items():
            if self._state.get(key) != advertisement:
                LOG.debug("route %s/%s updated: %s", key[1], key[0], advertisement)
                self._registry.handle(AdvertisementUpsert(advertisement))

        for key in set(self._state) - set(desired):
            LOG.debug("route %s/%s removed", key[1], key[0])
            self._registry.handle(AdvertisementWithdraw(self._state[key]))

        self._state = desired
