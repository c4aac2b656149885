"""EVPN advertisement to Open vSwitch flow synthesis.

This package turns EVPN MAC/IP advertisements into OpenFlow rules on the
local overlay bridge.  For every advertisement it decides whether the
endpoint lives on this host or behind another fabric node and then:

* installs an ARP responder so requests for remote endpoints are answered
  locally instead of crossing the fabric;
* steers unicast traffic for remote endpoints to the tunnel port of their
  next-hop, tagged with the VNI; and
* delivers VNI-tagged traffic for local endpoints to the right container
  port.

The synthesis itself is pure-Python and talks to the switch only through
:class:`ovs_evpn.switch.SwitchControl`, so unit tests can run without Open
vSwitch installed.
"""

from .driver import FlowDriver, FlowSynthesizer, SynthesisReport  # noqa: F401
from .model import Advertisement, FlowRule, HostIdentity  # noqa: F401

__all__ = [
    "Advertisement",
    "FlowDriver",
    "FlowRule",
    "FlowSynthesizer",
    "HostIdentity",
    "SynthesisReport",
]
