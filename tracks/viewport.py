"""Camera parameters derived from the displayed points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from routing.models import Coordinate

DEFAULT_CENTER = Coordinate(lat=35.8617, lon=104.1954)
DEFAULT_ZOOM = 4
SINGLE_POINT_ZOOM = 11
FOCUS_ZOOM = 13
FIT_PADDING_PX = 24


@dataclass(frozen=True)
class Viewport:
    """
    Either a centre + zoom, or bounds (south-west, north-east) to fit with padding.
    """
    center: Coordinate
    zoom: Optional[int] = None
    bounds: Optional[Tuple[Coordinate, Coordinate]] = None
    padding_px: int = 0


def default_viewport() -> Viewport:
    return Viewport(center=DEFAULT_CENTER, zoom=DEFAULT_ZOOM)


def fit_viewport(points: Sequence[Coordinate]) -> Optional[Viewport]:
    """None when there is nothing to show, so the camera stays where it is."""
    if not points:
        return None

    if len(points) == 1:
        return Viewport(center=points[0], zoom=SINGLE_POINT_ZOOM)

    south = min(point.lat for point in points)
    north = max(point.lat for point in points)
    west = min(point.lon for point in points)
    east = max(point.lon for point in points)
    return Viewport(
        center=Coordinate(lat=(south + north) / 2, lon=(west + east) / 2),
        bounds=(Coordinate(lat=south, lon=west), Coordinate(lat=north, lon=east)),
        padding_px=FIT_PADDING_PX,
    )


def focus_viewport(coordinate: Coordinate, zoom: int = FOCUS_ZOOM) -> Viewport:
    return Viewport(center=coordinate, zoom=zoom)
