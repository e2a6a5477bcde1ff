#Purpose: The Nominatim geocoding "adapter/client".
#Sole responsibility: talk to Nominatim /search via HTTP and return the raw candidate list.
#Encapsulates Nominatim-specific details:
#query parameters (jsonv2, country codes, language, limit)
#the User-Agent the usage policy requires
#error handling
#Ranking and caching live in places/resolver.py.


from dotenv import load_dotenv
import logging
import os
from typing import Any, Dict, List, Optional

import requests

from .models import PlaceLookupError
from .policy import GeocodePolicy, default_geocode_policy

# Example in .env:
# NOMINATIM_URL=https://nominatim.openstreetmap.org/search
# NOMINATIM_USER_AGENT=triptrack/0.1 (you@example.com)
load_dotenv()
NOMINATIM_URL = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "triptrack/0.1")

logger = logging.getLogger(__name__)


class NominatimClient:
    """
    Nominatim Adapter / Client

    Returns candidates as plain dicts with at least lat, lon, display_name
    and optionally importance, type, class, address.
    """
    def __init__(self, policy: Optional[GeocodePolicy] = None, session: Optional[requests.Session] = None):
        self.url = NOMINATIM_URL
        self.policy = policy or default_geocode_policy()
        self.session = session or requests.Session()

    def search(self, query: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Raises PlaceLookupError on transport errors, non-success status or
        a body that is not a JSON list.
        """
        params = {
            "format": "jsonv2",
            "q": query,
            "accept-language": self.policy.accept_language,
            "countrycodes": self.policy.country_codes,
            "addressdetails": "1",
            "limit": str(limit or self.policy.result_limit),
        }
        headers = {
            "Accept": "application/json",
            "User-Agent": NOMINATIM_USER_AGENT,
        }

        try:
            response = self.session.get(self.url, params=params, headers=headers, timeout=self.policy.timeout_s)
        except requests.RequestException as exc:
            raise PlaceLookupError("NETWORK", f"Nominatim request failed: {exc}") from exc

        if not response.ok:
            raise PlaceLookupError(str(response.status_code), f"Nominatim search failed (HTTP {response.status_code}).")

        try:
            data = response.json()
        except ValueError as exc:
            raise PlaceLookupError("BAD_RESPONSE", "Nominatim response is not valid JSON.") from exc

        if not isinstance(data, list):
            raise PlaceLookupError("BAD_RESPONSE", "Nominatim response is not a candidate list.")

        logger.debug("Nominatim returned %d candidates for %r", len(data), query)
        return data
