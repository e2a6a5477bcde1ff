#Purpose: The AMap input-tips "adapter/client" (place suggestions).
#Sole responsibility: call /v3/assistant/inputtips and return normalized PlaceCandidate objects.
#Encapsulates AMap-specific details:
#query parameters (keywords, type, city, citylimit)
#location text 'lon,lat' parsing
#district/address hierarchy labels
#status / infocode error handling
#Merging, scoping and fallback rules live in places/suggestions.py.


from dotenv import load_dotenv
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from routing.models import parse_lon_lat_text

from .models import PlaceCandidate, PlaceLookupError

load_dotenv()
AMAP_BASE_URL = os.getenv("AMAP_BASE_URL", "https://restapi.amap.com")

logger = logging.getLogger(__name__)

# province / city / district / county / banner / league anywhere, or a trailing prefecture
_ADMINISTRATIVE_NAME = re.compile(r"[省市区县旗盟]|州$")
_HIERARCHY_SPLIT = re.compile(r"[·\s]")


@dataclass(frozen=True)
class TipsQuery:
    keywords: str
    type: Optional[str] = None
    city: Optional[str] = None
    citylimit: Optional[bool] = None


def looks_administrative_name(name: str) -> bool:
    return bool(_ADMINISTRATIVE_NAME.search(name or ""))


def _text(value: Any) -> str:
    # AMap sends [] instead of "" for empty fields
    return value if isinstance(value, str) else ""


def format_hierarchy(district: str, address: str) -> str:
    parts = [part.strip() for part in _HIERARCHY_SPLIT.split(district) + _HIERARCHY_SPLIT.split(address)]
    return "·".join(part for part in parts if part)


def normalize_tip(tip: dict, source: str) -> Optional[PlaceCandidate]:
    """Convert one raw tip; tips without a parsable location are dropped."""
    coordinate = parse_lon_lat_text(_text(tip.get("location")))
    if coordinate is None:
        return None

    name = _text(tip.get("name"))
    district = _text(tip.get("district"))
    address = _text(tip.get("address"))
    hierarchy = format_hierarchy(district, address)

    return PlaceCandidate(
        id=_text(tip.get("id")) or None,
        name=name,
        display_label=f"{name} ({hierarchy})" if hierarchy else name,
        coordinate=coordinate,
        is_administrative_area=source == "city" or looks_administrative_name(name),
        district=district or None,
        address=address or None,
        adcode=_text(tip.get("adcode")) or None,
        source=source,
    )


class AMapTipsClient:
    """
    AMap Input Tips Adapter / Client
    """
    def __init__(self, key: Optional[str] = None, timeout: float = 10, session: Optional[requests.Session] = None):
        self.base_url = AMAP_BASE_URL
        self.key = (key if key is not None else os.getenv("AMAP_KEY", "")).strip()
        self.timeout = timeout
        self.session = session or requests.Session()

    def input_tips(self, query: TipsQuery) -> List[PlaceCandidate]:
        """
        Raises PlaceLookupError on a missing key, transport failure or a
        non-success status.
        """
        if not self.key:
            raise PlaceLookupError("NO_KEY", "AMAP_KEY is not configured; AMap API cannot be called.")

        params = {"key": self.key, "keywords": query.keywords}
        if query.type:
            params["type"] = query.type
        if query.city:
            params["city"] = query.city
        if query.citylimit is not None:
            params["citylimit"] = "true" if query.citylimit else "false"

        try:
            response = self.session.get(f"{self.base_url}/v3/assistant/inputtips", params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise PlaceLookupError("NETWORK", "Suggestion service is unavailable; retry later.") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise PlaceLookupError(str(response.status_code), "Suggestion service returned an unreadable response.") from exc

        if not isinstance(data, dict):
            data = {}
        if not response.ok or data.get("status") != "1":
            raise PlaceLookupError(
                data.get("infocode") or str(response.status_code),
                data.get("info") or "Suggestion service is unavailable; retry later.",
            )

        source = "city" if query.type == "city" else "poi"
        candidates = []
        tips = data.get("tips")
        for tip in tips if isinstance(tips, list) else []:
            if not isinstance(tip, dict):
                continue
            candidate = normalize_tip(tip, source)
            if candidate is not None:
                candidates.append(candidate)
        return candidates
