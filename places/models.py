"""
Purpose: Domain models for the Places capability.
What it does:
- Defines core data structures:
- PlaceCandidate (one hit of a text search, with scope / administrative flags)
- ResolvedPlace (winning coordinate of a resolution + the query that produced it)

Defines the lookup error raised by the HTTP place clients and the text
normalisation every lookup key goes through.

Rule: No HTTP calls, no ranking. Models only.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from routing.models import Coordinate

# full-width and ASCII separators people type between place names
_SEPARATORS = re.compile(r"[，、；;|]")
_WHITESPACE = re.compile(r"\s+")


def normalize_place_name(place: Optional[str]) -> str:
    """Trim, collapse separator punctuation to commas, collapse whitespace."""
    if not place:
        return ""
    return _WHITESPACE.sub(" ", _SEPARATORS.sub(",", place.strip()))


def cache_key(query: str) -> str:
    return query.strip().lower()


class PlaceLookupError(Exception):
    """Raised by place clients when the service gives no usable answer."""

    def __init__(self, code: Optional[str], message: str):
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class PlaceCandidate:
    """
    One search hit. in_scope is False for hits that came from the
    scope-relaxed fallback query.
    """
    name: str
    display_label: str
    coordinate: Coordinate
    id: Optional[str] = None
    is_administrative_area: bool = False
    in_scope: bool = True
    district: Optional[str] = None
    address: Optional[str] = None
    adcode: Optional[str] = None
    source: str = "poi"

    def dedupe_key(self) -> str:
        return f"{self.name}|{self.district or ''}|{self.coordinate.lat:.6f},{self.coordinate.lon:.6f}"


@dataclass(frozen=True)
class ResolvedPlace:
    coordinate: Coordinate
    label: str
    query: str = ""

    def to_dict(self) -> dict:
        return {"lat": self.coordinate.lat, "lon": self.coordinate.lon, "label": self.label}

    @classmethod
    def from_dict(cls, data: dict, query: str = "") -> Optional[ResolvedPlace]:
        coordinate = Coordinate.from_dict(data)
        if coordinate is None:
            return None
        return cls(coordinate=coordinate, label=data.get("label", ""), query=query)
