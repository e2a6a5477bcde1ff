"""
Purpose: Draft editing of a segment's start / end place.
What it does:
- copies the segment's endpoint texts + manual coordinates into a draft
- typing a new text drops the matching manual coordinate (it no longer describes the text)
- picking a place candidate sets text, coordinate and place id together
- save writes one patch through the store, cancel restores the pre-edit values

revert(segment_id) is meant to be registered as a DraftEditor cancel
listener so a cancelled track edit also rolls the endpoint draft back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from places.models import PlaceCandidate
from routing.models import Coordinate, same_position
from tracks.models import Segment, SegmentPatch
from tracks.store import SegmentStore

from .session import DraftEditError

logger = logging.getLogger(__name__)


class Endpoint(str, Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class EndpointDraft:
    segment_id: str
    start_point: str
    end_point: str
    start_coord: Optional[Coordinate] = None
    end_coord: Optional[Coordinate] = None
    start_place_id: Optional[str] = None
    end_place_id: Optional[str] = None

    @classmethod
    def from_segment(cls, segment: Segment) -> EndpointDraft:
        return cls(
            segment_id=segment.id,
            start_point=segment.start_point,
            end_point=segment.end_point,
            start_coord=segment.start_coord,
            end_coord=segment.end_coord,
            start_place_id=segment.start_place_id,
            end_place_id=segment.end_place_id,
        )


class EndpointDraftEditor:

    def __init__(self, store: SegmentStore):
        self.store = store
        self.draft: Optional[EndpointDraft] = None
        self._snapshot: Optional[EndpointDraft] = None

    @property
    def active(self) -> bool:
        return self.draft is not None

    def start(self, segment: Segment) -> EndpointDraft:
        if self.draft is not None and self.draft.segment_id != segment.id:
            raise DraftEditError(f"Endpoints of segment {self.draft.segment_id} are already being edited")
        self._snapshot = EndpointDraft.from_segment(segment)
        self.draft = self._snapshot
        return self.draft

    def update_text(self, endpoint: Endpoint, text: str) -> EndpointDraft:
        draft = self._require_draft()
        if Endpoint(endpoint) is Endpoint.START:
            self.draft = replace(draft, start_point=text, start_coord=None, start_place_id=None)
        else:
            self.draft = replace(draft, end_point=text, end_coord=None, end_place_id=None)
        return self.draft

    def select_place(self, endpoint: Endpoint, candidate: PlaceCandidate) -> EndpointDraft:
        draft = self._require_draft()
        if Endpoint(endpoint) is Endpoint.START:
            self.draft = replace(draft, start_point=candidate.name, start_coord=candidate.coordinate, start_place_id=candidate.id)
        else:
            self.draft = replace(draft, end_point=candidate.name, end_coord=candidate.coordinate, end_place_id=candidate.id)
        return self.draft

    def save(self) -> Segment:
        """A saved edited track no longer fits once an endpoint coordinate moves, so it is dropped."""
        draft = self._require_draft()
        patch = SegmentPatch(
            start_point=draft.start_point,
            end_point=draft.end_point,
            start_coord=draft.start_coord,
            end_coord=draft.end_coord,
            start_place_id=draft.start_place_id,
            end_place_id=draft.end_place_id,
        )
        snapshot = self._snapshot
        if snapshot is not None and (
            not same_position(draft.start_coord, snapshot.start_coord)
            or not same_position(draft.end_coord, snapshot.end_coord)
        ):
            logger.info("Endpoint coordinates of segment %s changed, dropping its saved track", draft.segment_id)
            patch = replace(patch, points=[])
        updated = self.store.apply_segment_update(draft.segment_id, patch)
        self.draft = None
        self._snapshot = None
        return updated

    def cancel(self) -> Optional[EndpointDraft]:
        """Drop the draft; returns the pre-edit values."""
        snapshot = self._snapshot
        self.draft = None
        self._snapshot = None
        return snapshot

    def revert(self, segment_id: str) -> None:
        """Put the draft back to its pre-edit values, keeping it open."""
        if self.draft is None or self.draft.segment_id != segment_id:
            return
        logger.debug("Reverting endpoint draft of segment %s", segment_id)
        self.draft = self._snapshot

    def _require_draft(self) -> EndpointDraft:
        if self.draft is None:
            raise DraftEditError("No endpoint draft is open")
        return self.draft
