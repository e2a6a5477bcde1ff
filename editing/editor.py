"""
Purpose: State machine for interactive track editing.
What it does:

IDLE -> EDITING(mode) -> COMMITTED | CANCELLED

- only one segment may be in EDITING at a time; start_edit is rejected
  while a session is open
- mode switches keep accumulated drags
- commit writes start/end coordinates + polyline through the segment store
- cancel drops the working copy, tells cancel listeners (so mirrored drafts
  such as endpoint texts can roll back) and hands back the untouched original

Every rejected call raises DraftEditError before mutating anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from routing.models import Coordinate
from tracks.models import SegmentPatch, SegmentTrack
from tracks.store import SegmentStore

from .policy import EditPolicy, default_edit_policy
from .session import (
    ControlPoint,
    DragCommand,
    DraftEditError,
    DraftEditSession,
    EditMode,
    MoveControlPoint,
    MoveEnd,
    MoveStart,
)

logger = logging.getLogger(__name__)


class EditorState(Enum):
    IDLE = "IDLE"
    EDITING = "EDITING"
    COMMITTED = "COMMITTED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class CommittedTrack:
    """What commit handed to the store."""
    segment_id: str
    start_coord: Coordinate
    end_coord: Coordinate
    polyline: List[Coordinate]


class DraftEditor:
    """
    Owns the single system-wide edit session.
    """

    def __init__(self, store: SegmentStore, *, policy: Optional[EditPolicy] = None):
        self.store = store
        self.policy = policy or default_edit_policy()
        self.state = EditorState.IDLE
        self.session: Optional[DraftEditSession] = None
        self._cancel_listeners: List[Callable[[str], None]] = []

    # --- Read model ---

    @property
    def editing_segment_id(self) -> Optional[str]:
        return self.session.segment_id if self.session else None

    @property
    def mode(self) -> Optional[EditMode]:
        return self.session.mode if self.session else None

    def draggable(self) -> List[ControlPoint]:
        return self.session.draggable() if self.session else []

    def display_polyline(self, track: SegmentTrack) -> List[Coordinate]:
        """The working copy while this track is being edited, the track itself otherwise."""
        if self.session is not None and self.session.segment_id == track.segment_id:
            return list(self.session.working_polyline)
        return list(track.polyline)

    def add_cancel_listener(self, listener: Callable[[str], None]) -> None:
        self._cancel_listeners.append(listener)

    # --- Transitions ---

    def start_edit(self, segment_id: str, polyline: List[Coordinate]) -> DraftEditSession:
        if self.state is EditorState.EDITING:
            raise DraftEditError(
                f"Segment {self.session.segment_id} is already being edited; save or cancel it first"
            )
        if not polyline:
            raise DraftEditError(f"Segment {segment_id} has no track to edit")

        self.session = DraftEditSession.open(segment_id, polyline, self.policy)
        self.state = EditorState.EDITING
        logger.info("Editing segment %s (%d points)", segment_id, len(polyline))
        return self.session

    def switch_mode(self, mode: EditMode) -> None:
        session = self._require_session()
        try:
            session.mode = EditMode(mode)
        except ValueError as exc:
            raise DraftEditError(f"Unknown edit mode {mode!r}") from exc

    def apply(self, command: DragCommand) -> None:
        self._require_session().apply(command)

    def move_start(self, coordinate: Coordinate) -> None:
        self.apply(MoveStart(coordinate))

    def move_end(self, coordinate: Coordinate) -> None:
        self.apply(MoveEnd(coordinate))

    def move_control_point(self, index: int, coordinate: Coordinate) -> None:
        self.apply(MoveControlPoint(index, coordinate))

    def commit(self) -> CommittedTrack:
        session = self._require_session()
        working = list(session.working_polyline)
        if len(working) < self.policy.min_commit_points:
            raise DraftEditError(
                f"A track needs at least {self.policy.min_commit_points} points to be saved, got {len(working)}"
            )

        committed = CommittedTrack(
            segment_id=session.segment_id,
            start_coord=working[0],
            end_coord=working[-1],
            polyline=working,
        )
        self.store.apply_segment_update(
            session.segment_id,
            SegmentPatch(start_coord=committed.start_coord, end_coord=committed.end_coord, points=committed.polyline),
        )

        logger.info("Committed %d drag(s) on segment %s", len(session.applied), session.segment_id)
        self.session = None
        self.state = EditorState.COMMITTED
        return committed

    def cancel(self) -> List[Coordinate]:
        session = self._require_session()
        self.session = None
        self.state = EditorState.CANCELLED

        for listener in self._cancel_listeners:
            listener(session.segment_id)

        logger.info("Cancelled edit of segment %s, %d drag(s) discarded", session.segment_id, len(session.applied))
        return list(session.original_polyline)

    def _require_session(self) -> DraftEditSession:
        if self.state is not EditorState.EDITING or self.session is None:
            raise DraftEditError("No edit session is active")
        return self.session
