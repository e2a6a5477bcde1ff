#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#route preference -> edge exclusions (motorway, ferry)
#parsing the GeoJSON geometry into our Coordinate list
#It should not contain queueing, caching or fallback rules.


from dotenv import load_dotenv
import logging
import os
from typing import List, Optional, Sequence

import requests

from .models import Coordinate, DrivingRoute, RoutePreference, RoutingError, build_route_key

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()
OSRM_BASE_URL = os.getenv("OSRM_BASE_URL", "https://router.project-osrm.org")

logger = logging.getLogger(__name__)

# Preferences that keep the route off motorway and ferry edges
EXCLUDING_PREFERENCES = {
    RoutePreference.NORMAL_ROAD_FIRST,
    RoutePreference.AVOID_TOLL,
}


def preference_to_exclude(preference: RoutePreference) -> Optional[str]:
    if preference in EXCLUDING_PREFERENCES:
        return "motorway,ferry"
    return None


def _rounded_label(value, unit: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "unknown"
    return f"{round(value)} {unit}"


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal Coordinate -> OSRM (lon,lat)
    - Return a normalized DrivingRoute or raise RoutingError

    """
    def __init__(self, profile: str = "driving", timeout: float = 10, session: Optional[requests.Session] = None):
        self.base_url = OSRM_BASE_URL
        self.timeout = timeout #the time to wait for a response from OSRM before giving up
        self.profile = profile #the mode of transportation (driving, walking, cycling)
        self.session = session or requests.Session()

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

    def format_coordinates(self, coords: Sequence[Coordinate]) -> str:
        """Convert list of Coordinate to OSRM format 'lon,lat;lon,lat;...'"""
        return ';'.join(coord.as_lon_lat_text() for coord in coords)

    def fetch_route(self, points: Sequence[Coordinate], preference: RoutePreference) -> DrivingRoute:
        """
        calls the OSRM /route endpoint with full GeoJSON geometry and returns
        the first route as a DrivingRoute.
        """
        if len(points) < 2:
            raise RoutingError("POINTS_NOT_ENOUGH", "Route planning needs at least a start and an end point.")

        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(points)}"
        params = {
            "overview": "full",
            "geometries": "geojson",
            "steps": "false",
        }
        exclude = preference_to_exclude(preference)
        if exclude:
            params["exclude"] = exclude

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("OSRM route request failed: %s", exc)
            raise RoutingError("NETWORK", "OSRM route request failed; check the network or retry later.") from exc

        if not response.ok:
            raise RoutingError(str(response.status_code), f"OSRM route planning failed (HTTP {response.status_code}).")

        try:
            data = response.json() #OSRM returns a JSON response with routes, each containing geometry, distance and duration
        except ValueError as exc:
            raise RoutingError("BAD_RESPONSE", "OSRM response is not valid JSON.") from exc

        #validating OSRM response
        if not isinstance(data, dict):
            raise RoutingError("BAD_RESPONSE", "OSRM response is not a JSON object.")
        if data.get("code") != "Ok":
            raise RoutingError(data.get("code"), f"OSRM error: {data.get('message', 'Unknown error')}")

        routes = data.get("routes")
        if not routes or not isinstance(routes, list):
            raise RoutingError("NO_PATH", "OSRM returned no usable route.")
        route = routes[0] #take the first route (OSRM may return multiple routes)
        if not isinstance(route, dict):
            raise RoutingError("BAD_RESPONSE", "OSRM route is malformed.")

        geometry = route.get("geometry")
        pairs = geometry.get("coordinates") if isinstance(geometry, dict) else None

        # OSRM geometry is [lon, lat]; we keep (lat, lon) internally
        polyline: List[Coordinate] = []
        for pair in pairs if isinstance(pairs, list) else []:
            try:
                polyline.append(Coordinate(lat=float(pair[1]), lon=float(pair[0])))
            except (TypeError, ValueError, IndexError, KeyError) as exc:
                raise RoutingError("BAD_RESPONSE", f"OSRM geometry holds a malformed coordinate: {pair!r}") from exc

        if not polyline:
            raise RoutingError("EMPTY_POLYLINE", "OSRM returned an empty route.")

        distance = route.get("distance")
        duration = route.get("duration")

        #Normalize output to internal format
        return DrivingRoute(
            polyline=polyline,
            distance_label=_rounded_label(distance, "m"),
            duration_label=_rounded_label(duration, "s"),
            route_key=build_route_key(points, preference),
        )
