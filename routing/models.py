"""
Purpose: Domain models for the Routing capability.
What it does:
- Defines the value types every other package exchanges:
- Coordinate (lat, lon, optional timestamp)
- DrivingRoute (dense polyline + distance/duration labels + cache key)
- RouteOutcome (route or structured error, never both)

Defines enums/constants:
- RoutePreference = HIGHWAY_FIRST | LESS_TOLL | AVOID_TOLL | NORMAL_ROAD_FIRST | SHORTEST_TIME

Defines the routing error type raised by provider clients.

Rule: No HTTP calls, no queueing. Models only.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence


class RoutePreference(str, Enum):
    HIGHWAY_FIRST = "HIGHWAY_FIRST"
    LESS_TOLL = "LESS_TOLL"
    AVOID_TOLL = "AVOID_TOLL"
    NORMAL_ROAD_FIRST = "NORMAL_ROAD_FIRST"
    SHORTEST_TIME = "SHORTEST_TIME"

    @classmethod
    def parse(cls, value) -> RoutePreference:
        """
        Lenient conversion for values coming from stored records.
        Unknown or empty values fall back to HIGHWAY_FIRST.
        """
        if isinstance(value, RoutePreference):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.HIGHWAY_FIRST


PREFERENCE_LABELS = {
    RoutePreference.HIGHWAY_FIRST: "Highway first",
    RoutePreference.LESS_TOLL: "Less toll",
    RoutePreference.AVOID_TOLL: "Avoid toll",
    RoutePreference.NORMAL_ROAD_FIRST: "Normal roads first",
    RoutePreference.SHORTEST_TIME: "Shortest time",
}


def preference_label(preference: RoutePreference) -> str:
    return PREFERENCE_LABELS.get(preference, str(preference))


@dataclass(frozen=True)
class Coordinate:
    """
    A single geographic point. Immutable, compared by value.
    """
    lat: float
    lon: float
    timestamp: Optional[str] = None

    def as_lon_lat_text(self) -> str:
        # provider wire order is lon,lat
        return f"{self.lon},{self.lat}"

    def to_dict(self) -> dict:
        data = {"lat": self.lat, "lon": self.lon}
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional[Coordinate]:
        if not data:
            return None
        lat = data.get("lat")
        lon = data.get("lon", data.get("lng"))
        if lat is None or lon is None:
            return None
        return cls(lat=float(lat), lon=float(lon), timestamp=data.get("timestamp"))


class RoutingError(Exception):
    """
    Raised by driving-route clients when the provider gives no usable path.
    Carries a machine code (HTTP status, provider infocode or one of our
    own codes such as NO_KEY / NO_PATH / EMPTY_POLYLINE) and a human reason.
    """

    def __init__(self, code: Optional[str], message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"RoutingError(code={self.code!r}, message={self.message!r})"


@dataclass(frozen=True)
class DrivingRoute:
    """
    A road-following route as returned by a provider (or the cache).
    """
    polyline: List[Coordinate]
    distance_label: str
    duration_label: str
    route_key: str = ""
    from_cache: bool = False


@dataclass(frozen=True)
class RouteOutcome:
    """
    Result of RouteRequestQueue.plan_route: exactly one of route / error is set.
    """
    route: Optional[DrivingRoute] = None
    error: Optional[RoutingError] = None

    @property
    def ok(self) -> bool:
        return self.route is not None


def build_route_key(points: Sequence[Coordinate], preference: RoutePreference) -> str:
    """
    Deterministic cache signature:
        origin|destination|via;via;...|preference
    """
    origin = points[0].as_lon_lat_text()
    destination = points[-1].as_lon_lat_text()
    via = ";".join(point.as_lon_lat_text() for point in points[1:-1]) if len(points) > 2 else ""
    return f"{origin}|{destination}|{via}|{preference.value}"


def straight_line(points: Sequence[Coordinate]) -> List[Coordinate]:
    """Direct connection through the given points (routing fallback)."""
    return list(points)


def same_position(a: Optional[Coordinate], b: Optional[Coordinate]) -> bool:
    """Compare by lat/lon only; timestamps do not move a point."""
    if a is None or b is None:
        return a is b
    return a.lat == b.lat and a.lon == b.lon


def parse_lon_lat_text(text: Optional[str]) -> Optional[Coordinate]:
    """Parse a provider 'lon,lat' pair; None when either part is not a finite number."""
    if not text:
        return None
    parts = text.split(",")
    if len(parts) != 2:
        return None
    try:
        lon = float(parts[0])
        lat = float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return Coordinate(lat=lat, lon=lon)

