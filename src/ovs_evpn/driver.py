"""Advertisement to flow orchestration.

:class:`FlowSynthesizer` plans the flows for one advertisement,
:class:`FlowInstaller` pushes a single rule to the switch, and
:class:`FlowDriver` ties both together with host identity discovery.  The
three rule kinds are evaluated independently: any failure is recorded
against its own rule and never prevents the others from being attempted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

from .addresses import ZERO_IPV4, parse_ipv4, parse_mac
from .exceptions import AddressParseError, EvpnOvsError, SwitchError
from .flows import build_arp_responder_rule, build_local_port_rule, build_remote_port_rule
from .inventory import Inventory
from .locality import Locality, classify
from .model import Advertisement, FlowRule, HostIdentity, RuleKind
from .ports import PortResolver
from .switch import SwitchControl

LOG = logging.getLogger(__name__)


@dataclass
class SynthesisReport:
    """Outcome of processing one advertisement."""

    advertisement: Advertisement
    host: HostIdentity
    locality: Locality
    rules: List[FlowRule] = field(default_factory=list)
    installed: List[FlowRule] = field(default_factory=list)
    failures: List[Tuple[RuleKind, str]] = field(default_factory=list)
    skipped: List[RuleKind] = field(default_factory=list)

    def rule(self, kind: RuleKind) -> Optional[FlowRule]:
        return next((r for r in self.rules if r.kind is kind), None)

    def failed(self, kind: RuleKind) -> bool:
        return any(k is kind for k, _ in self.failures)


class FlowSynthesizer:
    """Build the flow rules an advertisement calls for, without installing them."""

    def __init__(self, switch: SwitchControl, inventory: Inventory) -> None:
        self._resolver = PortResolver(switch)
        self._inventory = inventory

    def synthesize(self, advertisement: Advertisement, host: HostIdentity) -> SynthesisReport:
        try:
            parse_ipv4(advertisement.nexthop)
        except AddressParseError as exc:
            # Without a usable next-hop the locality is unknowable.
            LOG.warning(
                "Skipping all flows for %s/%s: next-hop %s", advertisement.ip, advertisement.mac, exc
            )
            report = SynthesisReport(
                advertisement=advertisement, host=host, locality=Locality.UNKNOWN
            )
            report.failures.extend((kind, str(exc)) for kind in RuleKind)
            return report

        locality = classify(advertisement.nexthop, host.address)
        report = SynthesisReport(advertisement=advertisement, host=host, locality=locality)
        LOG.debug(
            "Advertisement %s/%s via %s is %s (host %s)",
            advertisement.ip,
            advertisement.mac,
            advertisement.nexthop,
            locality.value,
            host.address,
        )

        steps: Tuple[Tuple[RuleKind, bool, Callable[[Advertisement], FlowRule]], ...] = (
            (RuleKind.ARP_RESPONDER, locality.wants_remote_flows, build_arp_responder_rule),
            (RuleKind.REMOTE_PORT, locality.wants_remote_flows, self._remote_port_rule),
            (RuleKind.LOCAL_PORT, locality.wants_local_flow, self._local_port_rule),
        )
        for kind, applicable, build in steps:
            if not applicable:
                report.skipped.append(kind)
                continue
            try:
                rule = build(advertisement)
            except EvpnOvsError as exc:
                LOG.warning(
                    "Skipping %s flow for %s/%s: %s",
                    kind.value,
                    advertisement.ip,
                    advertisement.mac,
                    exc,
                )
                report.failures.append((kind, str(exc)))
                continue
            report.rules.append(rule)
        return report

    def _remote_port_rule(self, advertisement: Advertisement) -> FlowRule:
        # Validate before asking the switch anything.
        parse_mac(advertisement.mac)
        advertisement.require_vni()
        nexthop = str(parse_ipv4(advertisement.nexthop))
        port = self._resolver.resolve_remote_port(nexthop)
        return build_remote_port_rule(advertisement, port)

    def _local_port_rule(self, advertisement: Advertisement) -> FlowRule:
        port = self._resolver.resolve_local_port(advertisement, self._inventory.snapshot())
        return build_local_port_rule(advertisement, port)


class FlowInstaller:
    """Submit rules to the switch, one at a time, without retrying."""

    def __init__(self, switch: SwitchControl) -> None:
        self._switch = switch

    def install(self, rule: FlowRule) -> bool:
        flow = rule.to_ofctl()
        try:
            self._switch.install_rule(rule)
        except SwitchError as exc:
            LOG.error("Failed to install %s flow %s: %s", rule.kind.value, flow, exc)
            return False
        LOG.info("Installed %s flow: %s", rule.kind.value, flow)
        return True


class FlowDriver:
    """Turn advertisements into installed flows on the local switch.

    Parameters
    ----------
    switch:
        Channel used for port lookups and flow installation.
    inventory:
        Source of local container endpoints.
    host_identity:
        Callable returning this host's fabric address.  It is invoked once
        per advertisement so address changes are picked up without restart.
    """

    def __init__(
        self,
        switch: SwitchControl,
        inventory: Inventory,
        host_identity: Callable[[], HostIdentity],
    ) -> None:
        self._synthesizer = FlowSynthesizer(switch, inventory)
        self._installer = FlowInstaller(switch)
        self._host_identity = host_identity
        self._nexthops: Dict[Tuple[str, str], str] = {}
        self._lock = Lock()
        self._last_report: Optional[SynthesisReport] = None

    @property
    def last_report(self) -> Optional[SynthesisReport]:
        return self._last_report

    def process(self, advertisement: Advertisement) -> SynthesisReport:
        self._track_move(advertisement)

        host = self._host_identity()
        if not host.is_known:
            LOG.warning(
                "Fabric address of %s is unknown; only next-hop %s counts as local",
                host.interface or "host",
                ZERO_IPV4,
            )
        report = self._synthesizer.synthesize(advertisement, host)
        for rule in report.rules:
            if self._installer.install(rule):
                report.installed.append(rule)
            else:
                report.failures.append((rule.kind, "installation failed"))

        self._last_report = report
        return report

    @property
    def tracked_endpoints(self) -> int:
        with self._lock:
            return len(self._nexthops)

    def forget(self, advertisement: Advertisement) -> None:
        """Stop tracking the location of a withdrawn endpoint."""

        with self._lock:
            self._nexthops.pop(advertisement.endpoint_key, None)

    def _track_move(self, advertisement: Advertisement) -> None:
        key = advertisement.endpoint_key
        with self._lock:
            previous = self._nexthops.get(key)
            self._nexthops[key] = advertisement.nexthop
        if previous is not None and previous != advertisement.nexthop:
            # TODO: withdraw the flows installed for the previous next-hop
            # once the switch channel grows a delete-flows operation.
            LOG.info(
                "Endpoint %s/%s moved from %s to %s; flows for the old location remain",
                advertisement.ip,
                advertisement.mac,
                previous,
                advertisement.nexthop,
            )
