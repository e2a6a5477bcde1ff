"""
Purpose: Turn free-text place names into coordinates.
What it does:
- builds query variants: bare name, then with context, then with the country
- checks the persisted cache (keyed by lower-cased variant) before any request
- ranks live Nominatim candidates (importance + type weight) and keeps the winner
- stores the winner under the variant that produced it
- resolves batches strictly one at a time with a pause between network requests

"Not found" is a normal outcome (None), never an exception: callers continue
with whatever points did resolve.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

from routing.cache import Cache, MemoryCache
from routing.models import Coordinate

from .models import PlaceLookupError, ResolvedPlace, cache_key, normalize_place_name
from .policy import GeocodePolicy, default_geocode_policy

logger = logging.getLogger(__name__)

# Favors settlements over administrative polygons and transport lines.
TYPE_WEIGHTS: Dict[str, float] = {
    "house": 2,
    "road": 2,
    "neighbourhood": 1,
    "village": 3,
    "town": 3,
    "city": 3,
    "county": 2,
    "state": 1,
    "administrative": 0,
    "railway": -1,
    "waterway": -1,
}


class PlaceQuery(NamedTuple):
    place: str
    context: Optional[str] = None


def _as_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def candidate_score(candidate: Dict[str, Any]) -> float:
    importance = _as_float(candidate.get("importance")) or 0.0
    kind = candidate.get("type")
    return importance + (TYPE_WEIGHTS.get(kind, 0) if isinstance(kind, str) else 0)


def candidate_coordinate(candidate: Dict[str, Any]) -> Optional[Coordinate]:
    lat = _as_float(candidate.get("lat"))
    lon = _as_float(candidate.get("lon"))
    if lat is None or lon is None:
        return None
    return Coordinate(lat=lat, lon=lon)


def pick_best_candidate(candidates: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Highest score wins; ties keep the service's own order.
    Candidates that are not objects or lack numeric coordinates are never picked.
    """
    usable = [
        candidate
        for candidate in candidates or []
        if isinstance(candidate, dict) and candidate_coordinate(candidate) is not None
    ]
    if not usable:
        return None
    return sorted(usable, key=candidate_score, reverse=True)[0]


def build_query_variants(place: str, context: Optional[str] = None, country_qualifier: str = "") -> List[str]:
    """
    Yield query strings from bare to most qualified:
        "<place>", "<place>, <context>", "<place>, <country>"
    """
    base = normalize_place_name(place)
    if not base:
        return []

    variants = [base]
    normalized_context = normalize_place_name(context)
    if normalized_context:
        variants.append(f"{base}, {normalized_context}")
    if country_qualifier:
        variants.append(f"{base}, {country_qualifier}")

    # dedupe, keep order
    return list(dict.fromkeys(variants))


class PlaceResolver:
    """
    Geocoding front-end over a NominatimClient-like object (anything with
    search(query) -> list of candidate dicts).
    """

    def __init__(self, client, *, policy: Optional[GeocodePolicy] = None, cache: Optional[Cache] = None):
        self.client = client
        self.policy = policy or default_geocode_policy()
        self.cache = cache if cache is not None else MemoryCache()

        # number of calls actually handed to the client
        self.requests_issued = 0

    async def resolve(self, place_text: str, context: Optional[str] = None) -> Optional[ResolvedPlace]:
        place, _ = await self._resolve(place_text, context)
        return place

    async def resolve_serial(
        self,
        items: Iterable[Union[PlaceQuery, Tuple[str, Optional[str]], str]],
    ) -> Dict[str, ResolvedPlace]:
        """
        Resolve many places strictly one after another.

        Returns normalized text -> ResolvedPlace for every place that resolved.
        Duplicate normalized names are resolved once (first context wins).
        """
        results: Dict[str, ResolvedPlace] = {}
        seen = set()

        for item in items:
            query = PlaceQuery(item) if isinstance(item, str) else PlaceQuery(*item)
            normalized = normalize_place_name(query.place)
            if not normalized or normalized in seen:
                continue
            seen.add(normalized)

            place, queried = await self._resolve(normalized, query.context)
            if place is not None:
                results[normalized] = place

            # serial pacing to stay under the public service rate limit
            if queried and self.policy.serial_delay_s:
                await asyncio.sleep(self.policy.serial_delay_s)

        return results

    async def _resolve(self, place_text: str, context: Optional[str]) -> Tuple[Optional[ResolvedPlace], bool]:
        """
        Returns (place or None, whether any network request was issued).
        """
        variants = build_query_variants(place_text, context, self.policy.country_qualifier)
        queried = False

        for query in variants:
            key = cache_key(query)
            cached = self.cache.get(key)
            if cached is not None:
                place = ResolvedPlace.from_dict(cached, query=query)
                if place is not None:
                    logger.debug("Geocode cache hit for %r", query)
                    return place, queried

            queried = True
            self.requests_issued += 1
            try:
                candidates = await asyncio.to_thread(self.client.search, query)
            except PlaceLookupError as exc:
                logger.warning("Place lookup for %r failed: [%s] %s", query, exc.code, exc.message)
                continue

            best = pick_best_candidate(candidates)
            if best is None:
                continue

            label = best.get("display_name")
            place = ResolvedPlace(
                coordinate=candidate_coordinate(best),
                label=label if isinstance(label, str) and label else query,
                query=query,
            )
            self.cache.set(key, place.to_dict())
            return place, queried

        logger.info("No coordinate found for %r", place_text)
        return None, queried
