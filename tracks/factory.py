"""
Purpose: Default wiring of the track engine.
What it does:
Builds one PlaceResolver (persisted geocode cache), one RouteRequestQueue
(in-memory route cache) and the TrackBuilder / TrackBoard on top. Create the
board once per process so the caches are shared by every build pass.
"""

from __future__ import annotations

from dotenv import load_dotenv
import os
from typing import Optional

from places.nominatim_client import NominatimClient
from places.policy import GeocodePolicy, default_geocode_policy
from places.resolver import PlaceResolver
from routing.amap_client import AMapDrivingClient
from routing.cache import JsonFileCache, MemoryCache
from routing.osrm_client import OSRMClient
from routing.policy import RoutingPolicy, default_routing_policy
from routing.route_queue import RouteRequestQueue

from .board import TrackBoard
from .builder import TrackBuilder

# Example in .env:
# ROUTE_PROVIDER=osrm
# GEOCODE_CACHE_PATH=.cache/geocode_cache.json
load_dotenv()
ROUTE_PROVIDER = os.getenv("ROUTE_PROVIDER", "amap")
GEOCODE_CACHE_PATH = os.getenv("GEOCODE_CACHE_PATH", ".cache/geocode_cache.json")


def make_route_provider(name: Optional[str] = None, policy: Optional[RoutingPolicy] = None):
    name = (name or ROUTE_PROVIDER).lower()
    policy = policy or default_routing_policy()
    if name == "osrm":
        return OSRMClient(timeout=policy.timeout_s)
    if name == "amap":
        return AMapDrivingClient(timeout=policy.timeout_s)
    raise ValueError(f"Unknown route provider {name!r}; expected 'amap' or 'osrm'")


def build_default_board(
    provider_name: Optional[str] = None,
    *,
    routing_policy: Optional[RoutingPolicy] = None,
    geocode_policy: Optional[GeocodePolicy] = None,
) -> TrackBoard:
    routing_policy = routing_policy or default_routing_policy()
    geocode_policy = geocode_policy or default_geocode_policy()

    resolver = PlaceResolver(
        NominatimClient(policy=geocode_policy),
        policy=geocode_policy,
        cache=JsonFileCache(GEOCODE_CACHE_PATH),
    )
    route_queue = RouteRequestQueue(
        make_route_provider(provider_name, routing_policy),
        policy=routing_policy,
        cache=MemoryCache(),
    )
    return TrackBoard(TrackBuilder(resolver, route_queue))
