"""
Purpose: Holds the tracks currently shown for the active segment selection.
What it does:
- runs a build pass on every selection change
- tags every pass with a generation number and drops results of passes that
  are no longer the latest when they finish
- detach() cancels in-flight passes (the view went away)

The renderer reads tracks / message / loading; nothing else writes them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Set

from routing.models import Coordinate

from .builder import TrackBuilder
from .models import BuildResult, Segment, SegmentTrack

logger = logging.getLogger(__name__)

EMPTY_SELECTION_MESSAGE = "Select a trip, day or segment to view its track."
NOTHING_RESOLVED_MESSAGE = "No valid place could be resolved; check the start, end and via point texts."
BUILD_FAILED_MESSAGE = "Tracks could not be built; change the selection to try again."


class TrackBoard:

    def __init__(self, builder: TrackBuilder):
        self.builder = builder
        self.tracks: List[SegmentTrack] = []
        self.message: str = EMPTY_SELECTION_MESSAGE
        self.loading = False
        self.detached = False

        self._generation = 0
        self._passes: Set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    async def refresh(self, segments: Sequence[Segment]) -> Optional[BuildResult]:
        """
        Rebuild tracks for the given selection.

        Returns the BuildResult when it was applied, None when the pass was
        superseded by a newer one, the board was detached meanwhile, or the
        pass failed. A failed latest pass clears the tracks and stops loading.
        """
        self._generation += 1
        generation = self._generation

        if not segments:
            self.tracks = []
            self.loading = False
            self.message = EMPTY_SELECTION_MESSAGE
            return BuildResult()

        self.loading = True
        build = asyncio.ensure_future(self.builder.build_tracks(list(segments)))
        self._passes.add(build)
        build.add_done_callback(self._passes.discard)

        try:
            result = await build
        except asyncio.CancelledError:
            if self.detached:
                return None
            raise
        except Exception:
            if self.detached or generation != self._generation:
                logger.info("Discarding failed stale build pass %d", generation, exc_info=True)
                return None
            logger.exception("Build pass %d failed", generation)
            self.tracks = []
            self.loading = False
            self.message = BUILD_FAILED_MESSAGE
            return None

        if self.detached or generation != self._generation:
            logger.info("Discarding stale build pass %d (latest is %d)", generation, self._generation)
            return None

        self.tracks = result.tracks
        self.loading = False
        self.message = result.summary if result.tracks else NOTHING_RESOLVED_MESSAGE
        return result

    def detach(self) -> None:
        self.detached = True
        for build in list(self._passes):
            build.cancel()

    def track_for(self, segment_id: str) -> Optional[SegmentTrack]:
        for track in self.tracks:
            if track.segment_id == segment_id:
                return track
        return None

    def marker_coordinates(self) -> List[Coordinate]:
        return [point.coordinate for track in self.tracks for point in track.points]
