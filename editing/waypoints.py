"""
Purpose: Draft editing of a segment's structured waypoint list.
What it does:
Add / rename / pick a place / reorder / delete waypoints on a private copy,
then save the whole list through the store in one patch, or cancel.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from places.models import PlaceCandidate
from tracks.models import Segment, SegmentPatch, Waypoint
from tracks.store import SegmentStore

from .session import DraftEditError


def new_waypoint_id() -> str:
    return f"wp-{uuid.uuid4()}"


class WaypointDraftEditor:

    def __init__(self, store: SegmentStore, id_factory: Callable[[], str] = new_waypoint_id):
        self.store = store
        self.id_factory = id_factory
        self.segment_id: Optional[str] = None
        self.drafts: List[Waypoint] = []

    @property
    def active(self) -> bool:
        return self.segment_id is not None

    def start(self, segment: Segment, displayed: Sequence[Waypoint] = ()) -> List[Waypoint]:
        """Start from the stored waypoints, or from what is currently displayed when there are none."""
        self.segment_id = segment.id
        self.drafts = list(segment.waypoints or displayed)
        return self.drafts

    def add(self) -> Waypoint:
        self._require_active()
        waypoint = Waypoint(id=self.id_factory())
        self.drafts.append(waypoint)
        return waypoint

    def rename(self, waypoint_id: str, name: str) -> Waypoint:
        # a typed name no longer matches the old coordinate
        return self._update(waypoint_id, name=name, lat=None, lon=None)

    def select_place(self, waypoint_id: str, candidate: PlaceCandidate) -> Waypoint:
        return self._update(
            waypoint_id,
            name=candidate.name,
            lat=candidate.coordinate.lat,
            lon=candidate.coordinate.lon,
        )

    def move(self, waypoint_id: str, direction: str) -> None:
        """direction is 'up' or 'down'; moving past either end is a no-op."""
        index = self._index_of(waypoint_id)
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(self.drafts):
            return
        item = self.drafts.pop(index)
        self.drafts.insert(target, item)

    def delete(self, waypoint_id: str) -> None:
        self.drafts.pop(self._index_of(waypoint_id))

    def save(self) -> Segment:
        self._require_active()
        updated = self.store.apply_segment_update(self.segment_id, SegmentPatch(waypoints=list(self.drafts)))
        self.cancel()
        return updated

    def cancel(self) -> None:
        self.segment_id = None
        self.drafts = []

    def _update(self, waypoint_id: str, **changes) -> Waypoint:
        index = self._index_of(waypoint_id)
        self.drafts[index] = replace(self.drafts[index], **changes)
        return self.drafts[index]

    def _index_of(self, waypoint_id: str) -> int:
        self._require_active()
        for index, waypoint in enumerate(self.drafts):
            if waypoint.id == waypoint_id:
                return index
        raise DraftEditError(f"Unknown waypoint {waypoint_id}")

    def _require_active(self) -> None:
        if self.segment_id is None:
            raise DraftEditError("No waypoint draft is open")
