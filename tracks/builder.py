"""
Purpose: The track "orchestrator" (single entry point for display tracks).
What it does:

Coordinates one build pass end-to-end:

- takes the active segment selection

- decides per endpoint / via point whether a manual coordinate exists or a
  text lookup is needed

- batches every needed lookup of the pass into ONE serial resolver call

- asks the route queue for a road polyline per segment (all segments at once;
  the queue enforces its own concurrency bound)

- falls back to a straight line when routing fails

- returns SegmentTrack objects + human-readable warnings

Rule: Builder never mutates segments and keeps no state between passes.
Every pass starts from scratch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from places.models import ResolvedPlace, normalize_place_name
from places.resolver import PlaceQuery
from routing.models import Coordinate, same_position, straight_line

from .models import BuildResult, PointKind, RoutePoint, Segment, SegmentTrack

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointSlot:
    """
    One wanted point of a segment, before resolution.
    Exactly one of coordinate / lookup is set.
    """
    label: str
    coordinate: Optional[Coordinate] = None
    lookup: Optional[str] = None


def split_via_points(via_points_text: str) -> List[str]:
    return [name for name in (part.strip() for part in normalize_place_name(via_points_text).split(",")) if name]


def _text_slot(text: str) -> Optional[PointSlot]:
    normalized = normalize_place_name(text)
    if not normalized:
        return None
    return PointSlot(label=normalized, lookup=normalized)


def plan_point_slots(segment: Segment) -> List[PointSlot]:
    """
    Ordered wanted points: start, vias, end.

    Manual coordinates beat text. Structured waypoints beat the legacy
    comma-separated via text.
    """
    slots: List[Optional[PointSlot]] = []

    if segment.start_coord is not None:
        slots.append(PointSlot(label=normalize_place_name(segment.start_point) or "Start", coordinate=segment.start_coord))
    else:
        slots.append(_text_slot(segment.start_point))

    if segment.waypoints:
        for index, waypoint in enumerate(segment.waypoints, start=1):
            if waypoint.coordinate is not None:
                slots.append(PointSlot(label=waypoint.name or f"Waypoint {index}", coordinate=waypoint.coordinate))
            else:
                slots.append(_text_slot(waypoint.name))
    else:
        slots.extend(_text_slot(name) for name in split_via_points(segment.via_points_text))

    if segment.end_coord is not None:
        slots.append(PointSlot(label=normalize_place_name(segment.end_point) or "End", coordinate=segment.end_coord))
    else:
        slots.append(_text_slot(segment.end_point))

    return [slot for slot in slots if slot is not None]


def saved_polyline_fits(segment: Segment) -> bool:
    """
    A saved polyline is only shown when it still starts and ends at the
    manual endpoint coordinates (where those are set).
    """
    if len(segment.points) < 2:
        return False
    if segment.start_coord is not None and not same_position(segment.points[0], segment.start_coord):
        return False
    if segment.end_coord is not None and not same_position(segment.points[-1], segment.end_coord):
        return False
    return True


def assign_kinds(located: Sequence[Tuple[str, Coordinate]]) -> List[RoutePoint]:
    """Kinds are positional: first START, last END, everything between VIA."""
    points = []
    last = len(located) - 1
    for index, (label, coordinate) in enumerate(located):
        if index == 0:
            kind = PointKind.START
        elif index == last:
            kind = PointKind.END
        else:
            kind = PointKind.VIA
        points.append(RoutePoint(label=label, coordinate=coordinate, kind=kind))
    return points


class TrackBuilder:
    """
    Combines a PlaceResolver and a RouteRequestQueue into display tracks.
    """

    def __init__(self, resolver, route_queue):
        self.resolver = resolver
        self.route_queue = route_queue

    async def build_tracks(self, segments: Sequence[Segment]) -> BuildResult:
        plans = [(segment, plan_point_slots(segment)) for segment in segments]

        # one shared serial batch for the whole pass
        lookups = [
            PlaceQuery(slot.lookup, segment.name)
            for segment, slots in plans
            for slot in slots
            if slot.coordinate is None
        ]
        resolved: Dict[str, ResolvedPlace] = await self.resolver.resolve_serial(lookups) if lookups else {}

        outcomes = await asyncio.gather(*(self._build_segment(segment, slots, resolved) for segment, slots in plans))

        result = BuildResult()
        for track, warnings in outcomes:
            if track is not None:
                result.tracks.append(track)
            result.warnings.extend(warnings)

        logger.info(
            "Built %d track(s) from %d segment(s) with %d warning(s)",
            len(result.tracks), len(plans), len(result.warnings),
        )
        return result

    async def _build_segment(
        self,
        segment: Segment,
        slots: List[PointSlot],
        resolved: Dict[str, ResolvedPlace],
    ) -> Tuple[Optional[SegmentTrack], List[str]]:
        warnings: List[str] = []
        located: List[Tuple[str, Coordinate]] = []
        missing: List[str] = []

        for slot in slots:
            if slot.coordinate is not None:
                located.append((slot.label, slot.coordinate))
                continue
            place = resolved.get(slot.lookup)
            if place is None:
                missing.append(slot.label)
            else:
                located.append((slot.label, place.coordinate))

        if not located:
            warnings.append(f"Segment '{segment.name}': no place could be resolved, segment skipped.")
            return None, warnings

        if missing:
            warnings.append(f"Segment '{segment.name}': could not resolve {', '.join(missing)}; those points were skipped.")

        points = assign_kinds(located)
        coordinates = [point.coordinate for point in points]

        if len(points) == 1:
            # marker only, nothing to draw as a line
            return SegmentTrack(segment.id, segment.name, points, polyline=[]), warnings

        if saved_polyline_fits(segment):
            # a saved edited polyline is shown as-is
            return SegmentTrack(segment.id, segment.name, points, polyline=list(segment.points)), warnings
        if segment.points:
            logger.info("Saved track of segment %s no longer matches its endpoints, routing again", segment.id)

        outcome = await self.route_queue.plan_route(coordinates, segment.preference)
        if outcome.ok:
            route = outcome.route
            track = SegmentTrack(
                segment_id=segment.id,
                segment_name=segment.name,
                points=points,
                polyline=list(route.polyline),
                distance_label=route.distance_label,
                duration_label=route.duration_label,
                from_cache=route.from_cache,
            )
            return track, warnings

        reason = outcome.error.message if outcome.error else "unknown error"
        logger.warning("Routing failed for segment %s, using direct line: %s", segment.id, reason)
        warnings.append(f"Segment '{segment.name}': routing unavailable ({reason}); fell back to direct line.")
        track = SegmentTrack(
            segment_id=segment.id,
            segment_name=segment.name,
            points=points,
            polyline=straight_line(coordinates),
            degraded=True,
        )
        return track, warnings
