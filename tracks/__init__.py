"""
Tracks domain package.

Public API:
- Domain models: Segment, Waypoint, SegmentPatch, RoutePoint, PointKind, SegmentTrack, BuildResult
- Building: TrackBuilder, TrackBoard, build_default_board
- Store boundary: SegmentStore, InMemorySegmentStore, load_segments
- Display helpers: fit_viewport, focus_viewport, default_viewport, sample_display_waypoints
"""
from .models import BuildResult, PointKind, RoutePoint, Segment, SegmentPatch, SegmentTrack, Waypoint
from .store import InMemorySegmentStore, SegmentStore, load_segments
from .builder import TrackBuilder
from .board import TrackBoard
from .viewport import Viewport, default_viewport, fit_viewport, focus_viewport
from .waypoints import sample_display_waypoints
from .factory import build_default_board

__all__ = [
    "BuildResult",
    "PointKind",
    "RoutePoint",
    "Segment",
    "SegmentPatch",
    "SegmentTrack",
    "Waypoint",
    "InMemorySegmentStore",
    "SegmentStore",
    "load_segments",
    "TrackBuilder",
    "TrackBoard",
    "Viewport",
    "default_viewport",
    "fit_viewport",
    "focus_viewport",
    "sample_display_waypoints",
    "build_default_board",
]
