"""
Purpose: The waypoint list shown beside a segment.
What it does:
Structured waypoints are shown as stored. Otherwise a read-only list is
sampled from the saved polyline (or, failing that, the computed track):
every Nth interior point, capped.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from routing.models import Coordinate

from .models import Segment, Waypoint
from .policy import DisplayPolicy, default_display_policy


def sample_display_waypoints(
    segment: Segment,
    track_polyline: Sequence[Coordinate] = (),
    policy: Optional[DisplayPolicy] = None,
) -> List[Waypoint]:
    policy = policy or default_display_policy()

    if segment.waypoints:
        return list(segment.waypoints)

    source = segment.points or list(track_polyline)
    if len(source) <= 2:
        return []

    interior = source[1:-1]
    sampled = interior[::policy.waypoint_sample_step][:policy.waypoint_max]
    return [
        Waypoint(
            id=f"wp-{segment.id}-{index}",
            name=f"Waypoint {index + 1}",
            lat=point.lat,
            lon=point.lon,
            timestamp=point.timestamp,
        )
        for index, point in enumerate(sampled)
    ]
