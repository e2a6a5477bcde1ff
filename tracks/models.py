"""
Purpose: Domain models for the Tracks capability.
What it does:
- Defines the persisted segment record as the engine sees it:
- Segment (endpoints as text + optional manual coordinates, via text, waypoints, saved polyline)
- Waypoint (named, optionally resolved)
- SegmentPatch (the only shape written back to the store)

- Defines the derived, recomputed-on-demand display state:
- RoutePoint (START / VIA / END marker)
- SegmentTrack (markers + dense polyline)
- BuildResult (tracks + human-readable warnings of one build pass)

Rule: No lookups, no routing calls. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from routing.models import Coordinate, RoutePreference


class PointKind(str, Enum):
    START = "start"
    VIA = "via"
    END = "end"


@dataclass(frozen=True)
class Waypoint:
    id: str
    name: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    timestamp: Optional[str] = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if self.lat is None or self.lon is None:
            return None
        return Coordinate(lat=self.lat, lon=self.lon, timestamp=self.timestamp)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Waypoint:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            lat=data.get("lat"),
            lon=data.get("lon", data.get("lng")),
            timestamp=data.get("timestamp"),
        )


@dataclass(frozen=True)
class Segment:
    """
    One leg of a trip. Manual coordinates, when present, win over text lookups.
    """
    id: str
    name: str
    start_point: str = ""
    end_point: str = ""
    via_points_text: str = ""
    preference: RoutePreference = RoutePreference.HIGHWAY_FIRST
    start_coord: Optional[Coordinate] = None
    end_coord: Optional[Coordinate] = None
    start_place_id: Optional[str] = None
    end_place_id: Optional[str] = None

    # saved edited polyline
    points: List[Coordinate] = field(default_factory=list)
    waypoints: List[Waypoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Segment:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            start_point=data.get("start_point", ""),
            end_point=data.get("end_point", ""),
            via_points_text=data.get("via_points_text", ""),
            preference=RoutePreference.parse(data.get("preference")),
            start_coord=Coordinate.from_dict(data.get("start_coord")),
            end_coord=Coordinate.from_dict(data.get("end_coord")),
            start_place_id=data.get("start_place_id"),
            end_place_id=data.get("end_place_id"),
            points=[point for point in map(Coordinate.from_dict, data.get("points") or []) if point],
            waypoints=[Waypoint.from_dict(item) for item in data.get("waypoints") or []],
        )


# marks a patch field that should be left alone
UNSET: Any = object()


@dataclass(frozen=True)
class SegmentPatch:
    """
    Partial update for a Segment. Fields left UNSET are not touched;
    an explicit None clears the stored value.
    """
    start_point: Any = UNSET
    end_point: Any = UNSET
    start_coord: Any = UNSET
    end_coord: Any = UNSET
    start_place_id: Any = UNSET
    end_place_id: Any = UNSET
    points: Any = UNSET
    waypoints: Any = UNSET

    def changes(self) -> Dict[str, Any]:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not UNSET
        }

    def apply_to(self, segment: Segment) -> Segment:
        return replace(segment, **self.changes())


@dataclass(frozen=True)
class RoutePoint:
    label: str
    coordinate: Coordinate
    kind: PointKind


@dataclass(frozen=True)
class SegmentTrack:
    """
    Display state for one segment. polyline is empty for a marker-only track.
    """
    segment_id: str
    segment_name: str
    points: List[RoutePoint]
    polyline: List[Coordinate]
    distance_label: Optional[str] = None
    duration_label: Optional[str] = None
    from_cache: bool = False
    # True when the polyline is the straight-line fallback
    degraded: bool = False


@dataclass
class BuildResult:
    tracks: List[SegmentTrack] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        """All warnings as one message; empty when fully resolved and routed."""
        return "\n".join(self.warnings)

    def track_for(self, segment_id: str) -> Optional[SegmentTrack]:
        for track in self.tracks:
            if track.segment_id == segment_id:
                return track
        return None
