"""
Purpose: Scoped place search for endpoint / waypoint pickers.
What it does:
- runs a city-level query and a POI query side by side
- narrows both to the anchor city once the user picked an administrative area
- relaxes the scope when the narrowed POI query comes back nearly empty,
  marking those hits as out of scope
- merges and deduplicates the hits

Service errors never raise out of search(); they come back in
SuggestionResult.error so the caller can offer a retry.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .amap_tips import TipsQuery
from .models import PlaceCandidate, PlaceLookupError

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 2
# a narrowed POI query with this many hits or fewer triggers the unscoped fallback
FALLBACK_THRESHOLD = 2


@dataclass
class SuggestionResult:
    candidates: List[PlaceCandidate] = field(default_factory=list)
    error: Optional[PlaceLookupError] = None

    @property
    def in_scope(self) -> List[PlaceCandidate]:
        return [candidate for candidate in self.candidates if candidate.in_scope]

    @property
    def out_of_scope(self) -> List[PlaceCandidate]:
        return [candidate for candidate in self.candidates if not candidate.in_scope]


def dedupe_candidates(candidates: List[PlaceCandidate]) -> List[PlaceCandidate]:
    seen = set()
    result = []
    for candidate in candidates:
        key = candidate.dedupe_key()
        if key in seen:
            continue
        seen.add(key)
        result.append(candidate)
    return result


class PlaceSuggester:
    """
    Holds the anchor city scope for one picker.
    """

    def __init__(self, client):
        self.client = client
        self.anchor_city: Optional[str] = None

    async def search(self, keywords: str) -> SuggestionResult:
        keywords = (keywords or "").strip()
        if len(keywords) < MIN_KEYWORD_LENGTH:
            return SuggestionResult()

        city_limited = self.anchor_city is not None
        city_query = TipsQuery(keywords=keywords, type="city", city=self.anchor_city, citylimit=city_limited)
        poi_query = TipsQuery(keywords=keywords, city=self.anchor_city, citylimit=city_limited)

        (city_hits, city_error), (poi_hits, poi_error) = await asyncio.gather(
            self._request(city_query),
            self._request(poi_query),
        )

        fallback_hits: List[PlaceCandidate] = []
        if city_limited and len(poi_hits) <= FALLBACK_THRESHOLD:
            relaxed, _ = await self._request(TipsQuery(keywords=keywords, citylimit=False))
            fallback_hits = [replace(hit, source="fallback-poi", in_scope=False) for hit in relaxed]

        merged = dedupe_candidates(city_hits + poi_hits + fallback_hits)
        return SuggestionResult(candidates=merged, error=city_error or poi_error)

    def select(self, candidate: PlaceCandidate) -> PlaceCandidate:
        """Picking an administrative area narrows later searches to it."""
        if candidate.is_administrative_area:
            self.anchor_city = candidate.adcode or candidate.name
            logger.debug("Suggestion scope anchored to %s", self.anchor_city)
        return candidate

    def clear_scope(self) -> None:
        self.anchor_city = None

    async def _request(self, query: TipsQuery) -> Tuple[List[PlaceCandidate], Optional[PlaceLookupError]]:
        try:
            hits = await asyncio.to_thread(self.client.input_tips, query)
        except PlaceLookupError as exc:
            logger.warning("Suggestion query %r failed: [%s] %s", query.keywords, exc.code, exc.message)
            return [], exc
        return hits, None
