#Marks routing as a package.
#Re-exports the public API (RouteRequestQueue, provider clients, models)
#so other modules import from routing without knowing internal file names.
#No business logic.

from .models import (
    Coordinate,
    DrivingRoute,
    RouteOutcome,
    RoutePreference,
    RoutingError,
    build_route_key,
    straight_line,
)
from .cache import Cache, JsonFileCache, MemoryCache
from .policy import RoutingPolicy, default_routing_policy
from .amap_client import AMapDrivingClient
from .osrm_client import OSRMClient
from .route_queue import RouteProvider, RouteRequestQueue

__all__ = [
    "Coordinate",
    "DrivingRoute",
    "RouteOutcome",
    "RoutePreference",
    "RoutingError",
    "build_route_key",
    "straight_line",
    "Cache",
    "JsonFileCache",
    "MemoryCache",
    "RoutingPolicy",
    "default_routing_policy",
    "AMapDrivingClient",
    "OSRMClient",
    "RouteProvider",
    "RouteRequestQueue",
]
