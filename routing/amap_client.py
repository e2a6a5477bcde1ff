#Purpose: The AMap driving-route "adapter/client".
#Sole responsibility: talk to the AMap v3 driving endpoint via HTTP and return normalized outputs.
#Encapsulates AMap-specific details:
#coordinate formatting (lon,lat)
#route preference -> strategy code
#step polyline fragments -> one dense coordinate list
#status / infocode error handling
#It should not contain queueing, caching or fallback rules.


from dotenv import load_dotenv
import logging
import os
from typing import List, Optional, Sequence

import requests

from .models import Coordinate, DrivingRoute, RoutePreference, RoutingError, build_route_key, parse_lon_lat_text

# Read AMap settings from environment
# Example in .env:
# AMAP_KEY=your-web-service-key
# AMAP_BASE_URL=https://restapi.amap.com
load_dotenv()
AMAP_BASE_URL = os.getenv("AMAP_BASE_URL", "https://restapi.amap.com")

logger = logging.getLogger(__name__)

# AMap driving strategy vocabulary
STRATEGY_CODES = {
    RoutePreference.HIGHWAY_FIRST: "0",
    RoutePreference.LESS_TOLL: "4",
    RoutePreference.AVOID_TOLL: "1",
    RoutePreference.NORMAL_ROAD_FIRST: "2",
}
DEFAULT_STRATEGY = "0"


def preference_to_strategy(preference: RoutePreference) -> str:
    """Unrecognized preferences map to the highway-first strategy."""
    return STRATEGY_CODES.get(preference, DEFAULT_STRATEGY)


class AMapDrivingClient:
    """
    AMap Driving Adapter / Client

    Sole responsibility:
    - Talk to AMap /v3/direction/driving via HTTP
    - Convert internal Coordinate -> AMap 'lon,lat'
    - Return a normalized DrivingRoute or raise RoutingError

    """
    def __init__(self, key: Optional[str] = None, timeout: float = 10, session: Optional[requests.Session] = None):
        self.base_url = AMAP_BASE_URL
        self.key = (key if key is not None else os.getenv("AMAP_KEY", "")).strip()
        self.timeout = timeout #the time to wait for a response from AMap before giving up
        self.session = session or requests.Session()

    def ensure_key(self) -> None:
        if not self.key:
            raise RoutingError("NO_KEY", "AMAP_KEY is not configured; AMap API cannot be called.")

    def build_params(self, points: Sequence[Coordinate], preference: RoutePreference) -> dict:
        params = {
            "key": self.key,
            "origin": points[0].as_lon_lat_text(),
            "destination": points[-1].as_lon_lat_text(),
            "strategy": preference_to_strategy(preference),
            "extensions": "base",
        }
        if len(points) > 2:
            params["waypoints"] = ";".join(point.as_lon_lat_text() for point in points[1:-1])
        return params

    def fetch_route(self, points: Sequence[Coordinate], preference: RoutePreference) -> DrivingRoute:
        """
        calls the AMap driving endpoint with the ordered points and returns
        the first path as a DrivingRoute.

        Raises RoutingError on a missing key, transport failure, non-success
        status, a response without a path, or a path without coordinates.
        """
        self.ensure_key()
        if len(points) < 2:
            raise RoutingError("POINTS_NOT_ENOUGH", "Route planning needs at least a start and an end point.")

        url = f"{self.base_url}/v3/direction/driving"

        try:
            response = self.session.get(url, params=self.build_params(points, preference), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("AMap driving request failed: %s", exc)
            raise RoutingError("NETWORK", "AMap driving request failed; check the network or retry later.") from exc

        if not response.ok:
            raise RoutingError(str(response.status_code), f"AMap driving planning failed (HTTP {response.status_code}).")

        try:
            data = response.json()
        except ValueError as exc:
            raise RoutingError("BAD_RESPONSE", "AMap driving response is not valid JSON.") from exc

        #validating AMap response
        if not isinstance(data, dict):
            raise RoutingError("BAD_RESPONSE", "AMap driving response is not a JSON object.")
        if data.get("status") != "1":
            raise RoutingError(data.get("infocode"), f"AMap driving planning failed: {data.get('info') or 'unknown error'}")

        route = data.get("route")
        paths = route.get("paths") if isinstance(route, dict) else None
        if not paths or not isinstance(paths, list):
            raise RoutingError("NO_PATH", "AMap returned no usable route.")
        path = paths[0] #take the first path (AMap may return several)
        if not isinstance(path, dict):
            raise RoutingError("BAD_RESPONSE", "AMap route path is malformed.")

        polyline = self.join_step_polylines(path.get("steps") or [])
        if not polyline:
            raise RoutingError("EMPTY_POLYLINE", "AMap returned an empty route.")

        distance = path.get("distance")
        duration = path.get("duration")

        #Normalize output to internal format
        return DrivingRoute(
            polyline=polyline,
            distance_label=f"{distance} m" if distance else "unknown",
            duration_label=f"{duration} s" if duration else "unknown",
            route_key=build_route_key(points, preference),
        )

    @staticmethod
    def join_step_polylines(steps: List[dict]) -> List[Coordinate]:
        """Concatenate 'lon,lat;lon,lat' step fragments in order, skipping malformed pairs."""
        coordinates: List[Coordinate] = []
        for step in steps if isinstance(steps, list) else []:
            fragment = step.get("polyline") if isinstance(step, dict) else None
            if not fragment or not isinstance(fragment, str):
                continue
            for raw_pair in fragment.split(";"):
                coordinate = parse_lon_lat_text(raw_pair)
                if coordinate is not None:
                    coordinates.append(coordinate)
        return coordinates
