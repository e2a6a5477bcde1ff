import pytest

from places.policy import GeocodePolicy
from routing.policy import RoutingPolicy


@pytest.fixture
def fast_routing_policy():
    # no pacing delay so tests run instantly
    return RoutingPolicy(max_in_flight=2, request_delay_s=0)


@pytest.fixture
def fast_geocode_policy():
    return GeocodePolicy(serial_delay_s=0)

