import pytest

from ovs_evpn.locality import Locality, classify


def test_nexthop_equal_to_host_is_self():
    assert classify("10.1.1.1", "10.1.1.1") is Locality.SELF


def test_zero_nexthop_is_unknown():
    assert classify("0.0.0.0", "10.1.1.2") is Locality.UNKNOWN


def test_other_nexthop_is_remote():
    assert classify("10.1.1.1", "10.1.1.2") is Locality.REMOTE


def test_unknown_host_address_makes_distinct_nexthop_remote():
    assert classify("10.1.1.1", "0.0.0.0") is Locality.REMOTE


def test_comparison_ignores_surrounding_whitespace():
    assert classify(" 10.1.1.1\n", "10.1.1.1") is Locality.SELF


@pytest.mark.parametrize(
    "locality, remote, local",
    [
        (Locality.SELF, False, True),
        (Locality.UNKNOWN, False, True),
        (Locality.REMOTE, True, False),
    ],
)
def test_rule_applicability(locality, remote, local):
    assert locality.wants_remote_flows is remote
    assert locality.wants_local_flow is local
