import pytest
import requests

from routing.amap_client import AMapDrivingClient, preference_to_strategy
from routing.models import Coordinate, RoutePreference, RoutingError
from routing.osrm_client import OSRMClient, preference_to_exclude


class MockResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class MockSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def three_points():
    return [Coordinate(30.57, 104.07), Coordinate(30.25, 103.5), Coordinate(29.98, 103.01)]


def amap_payload(steps, distance="143000", duration="7200"):
    return {
        "status": "1",
        "info": "OK",
        "infocode": "10000",
        "route": {"paths": [{"distance": distance, "duration": duration, "steps": steps}]},
    }


# --- AMap ---

def test_amap_joins_step_polylines_in_order(three_points):
    steps = [
        {"polyline": "104.07,30.57;104.0,30.5"},
        {"polyline": ""},
        {"polyline": "103.8,30.4;bad;103.5,30.25"},
        {"polyline": "103.2,30.1;103.01,29.98"},
    ]
    session = MockSession(MockResponse(amap_payload(steps)))
    client = AMapDrivingClient(key="test-key", session=session)

    route = client.fetch_route(three_points, RoutePreference.LESS_TOLL)

    assert [(p.lon, p.lat) for p in route.polyline] == [
        (104.07, 30.57), (104.0, 30.5), (103.8, 30.4), (103.5, 30.25), (103.2, 30.1), (103.01, 29.98),
    ]
    assert route.distance_label == "143000 m"
    assert route.duration_label == "7200 s"

    params = session.requests[0]["params"]
    assert session.requests[0]["url"].endswith("/v3/direction/driving")
    assert params["origin"] == "104.07,30.57"
    assert params["destination"] == "103.01,29.98"
    assert params["waypoints"] == "103.5,30.25"
    assert params["strategy"] == "4"
    assert params["key"] == "test-key"


def test_amap_without_via_points_sends_no_waypoints(three_points):
    session = MockSession(MockResponse(amap_payload([{"polyline": "104.07,30.57;103.01,29.98"}])))
    client = AMapDrivingClient(key="k", session=session)

    client.fetch_route([three_points[0], three_points[-1]], RoutePreference.HIGHWAY_FIRST)

    assert "waypoints" not in session.requests[0]["params"]


def test_amap_missing_key_fails_before_any_request(three_points):
    session = MockSession(MockResponse(amap_payload([])))
    client = AMapDrivingClient(key="  ", session=session)

    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert info.value.code == "NO_KEY"
    assert session.requests == []


def test_amap_empty_polyline_is_an_error(three_points):
    session = MockSession(MockResponse(amap_payload([{"polyline": ""}, {}])))
    client = AMapDrivingClient(key="k", session=session)

    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert info.value.code == "EMPTY_POLYLINE"


def test_amap_no_paths_is_an_error(three_points):
    payload = {"status": "1", "route": {"paths": []}}
    client = AMapDrivingClient(key="k", session=MockSession(MockResponse(payload)))

    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert info.value.code == "NO_PATH"


def test_amap_provider_status_carries_infocode(three_points):
    payload = {"status": "0", "info": "INVALID_USER_KEY", "infocode": "10001"}
    client = AMapDrivingClient(key="k", session=MockSession(MockResponse(payload)))

    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert info.value.code == "10001"
    assert "INVALID_USER_KEY" in info.value.message


def test_amap_http_and_network_failures(three_points):
    client = AMapDrivingClient(key="k", session=MockSession(MockResponse({}, status_code=503)))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "503"

    client = AMapDrivingClient(key="k", session=MockSession(error=requests.ConnectionError("down")))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "NETWORK"


def test_amap_missing_distance_is_labelled_unknown(three_points):
    payload = amap_payload([{"polyline": "104.07,30.57;103.01,29.98"}], distance="", duration=None)
    client = AMapDrivingClient(key="k", session=MockSession(MockResponse(payload)))

    route = client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert route.distance_label == "unknown"
    assert route.duration_label == "unknown"


def test_strategy_codes():
    assert preference_to_strategy(RoutePreference.HIGHWAY_FIRST) == "0"
    assert preference_to_strategy(RoutePreference.LESS_TOLL) == "4"
    assert preference_to_strategy(RoutePreference.AVOID_TOLL) == "1"
    assert preference_to_strategy(RoutePreference.NORMAL_ROAD_FIRST) == "2"
    assert preference_to_strategy(RoutePreference.SHORTEST_TIME) == "0"


# --- OSRM ---

def test_osrm_parses_geojson_geometry(three_points):
    payload = {
        "code": "Ok",
        "routes": [{
            "distance": 143210.4,
            "duration": 7311.6,
            "geometry": {"type": "LineString", "coordinates": [[104.07, 30.57], [103.5, 30.25], [103.01, 29.98]]},
        }],
    }
    session = MockSession(MockResponse(payload))
    client = OSRMClient(session=session)

    route = client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert route.polyline == [Coordinate(30.57, 104.07), Coordinate(30.25, 103.5), Coordinate(29.98, 103.01)]
    assert route.distance_label == "143210 m"
    assert route.duration_label == "7312 s"

    request = session.requests[0]
    assert request["url"].endswith("/route/v1/driving/104.07,30.57;103.5,30.25;103.01,29.98")
    assert request["params"]["overview"] == "full"
    assert request["params"]["geometries"] == "geojson"
    assert "exclude" not in request["params"]


def test_osrm_excludes_motorways_for_normal_roads(three_points):
    payload = {"code": "Ok", "routes": [{"distance": 1, "duration": 1, "geometry": {"coordinates": [[104.07, 30.57], [103.01, 29.98]]}}]}
    session = MockSession(MockResponse(payload))

    OSRMClient(session=session).fetch_route(three_points, RoutePreference.NORMAL_ROAD_FIRST)

    assert session.requests[0]["params"]["exclude"] == "motorway,ferry"
    assert preference_to_exclude(RoutePreference.LESS_TOLL) is None


def test_osrm_errors(three_points):
    client = OSRMClient(session=MockSession(MockResponse({"code": "NoRoute", "message": "Impossible route"})))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "NoRoute"

    empty = {"code": "Ok", "routes": [{"geometry": {"coordinates": []}}]}
    client = OSRMClient(session=MockSession(MockResponse(empty)))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "EMPTY_POLYLINE"

    client = OSRMClient(session=MockSession(MockResponse(ValueError("not json"))))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "BAD_RESPONSE"


@pytest.mark.parametrize("payload", [None, ["status", "1"], "1"])
def test_amap_body_that_is_not_an_object_is_a_bad_response(three_points, payload):
    client = AMapDrivingClient(key="k", session=MockSession(MockResponse(payload)))

    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert info.value.code == "BAD_RESPONSE"


def test_amap_malformed_route_shapes(three_points):
    payload = {"status": "1", "route": {"paths": ["104.07,30.57;103.01,29.98"]}}
    client = AMapDrivingClient(key="k", session=MockSession(MockResponse(payload)))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "BAD_RESPONSE"

    payload = {"status": "1", "route": "nothing here"}
    client = AMapDrivingClient(key="k", session=MockSession(MockResponse(payload)))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "NO_PATH"


def test_amap_skips_steps_that_are_not_objects(three_points):
    steps = ["104.0,30.5", None, {"polyline": 42}, {"polyline": "104.07,30.57;103.01,29.98"}]
    client = AMapDrivingClient(key="k", session=MockSession(MockResponse(amap_payload(steps))))

    route = client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert route.polyline == [Coordinate(30.57, 104.07), Coordinate(29.98, 103.01)]


def test_osrm_malformed_bodies(three_points):
    client = OSRMClient(session=MockSession(MockResponse(["Ok"])))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "BAD_RESPONSE"

    client = OSRMClient(session=MockSession(MockResponse({"code": "Ok", "routes": ["route"]})))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "BAD_RESPONSE"

    broken = {"code": "Ok", "routes": [{"geometry": {"coordinates": [[104.07, 30.57], [None, 30]]}}]}
    client = OSRMClient(session=MockSession(MockResponse(broken)))
    with pytest.raises(RoutingError) as info:
        client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)
    assert info.value.code == "BAD_RESPONSE"


def test_osrm_non_numeric_distance_is_labelled_unknown(three_points):
    payload = {"code": "Ok", "routes": [{
        "distance": "far",
        "duration": None,
        "geometry": {"coordinates": [[104.07, 30.57], [103.01, 29.98]]},
    }]}
    client = OSRMClient(session=MockSession(MockResponse(payload)))

    route = client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    assert route.distance_label == "unknown"
    assert route.duration_label == "unknown"


def test_network_failures_are_logged_lazily(three_points, caplog):
    caplog.set_level("WARNING")
    down = requests.ConnectionError("down")

    for client in (
        AMapDrivingClient(key="k", session=MockSession(error=down)),
        OSRMClient(session=MockSession(error=down)),
    ):
        with pytest.raises(RoutingError):
            client.fetch_route(three_points, RoutePreference.HIGHWAY_FIRST)

    records = [record for record in caplog.records if "request failed" in record.msg]
    assert len(records) == 2
    assert all(record.args == (down,) for record in records)
