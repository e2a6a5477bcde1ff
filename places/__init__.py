"""
Places domain package.

Public API:
- Domain models: PlaceCandidate, ResolvedPlace, PlaceLookupError
- Resolution: PlaceResolver, PlaceQuery, normalize_place_name
- Suggestions: PlaceSuggester, SuggestionResult
- Clients: NominatimClient, AMapTipsClient
"""
from .models import PlaceCandidate, PlaceLookupError, ResolvedPlace, normalize_place_name
from .policy import GeocodePolicy, default_geocode_policy
from .nominatim_client import NominatimClient
from .amap_tips import AMapTipsClient, TipsQuery
from .resolver import PlaceQuery, PlaceResolver
from .suggestions import PlaceSuggester, SuggestionResult

__all__ = [
    "PlaceCandidate",
    "PlaceLookupError",
    "ResolvedPlace",
    "normalize_place_name",
    "GeocodePolicy",
    "default_geocode_policy",
    "NominatimClient",
    "AMapTipsClient",
    "TipsQuery",
    "PlaceQuery",
    "PlaceResolver",
    "PlaceSuggester",
    "SuggestionResult",
]
