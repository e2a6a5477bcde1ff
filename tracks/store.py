"""
Purpose: Persistence boundary for segment records.
What it does:
- SegmentStore protocol: the two calls the engine makes on the trip store
- InMemorySegmentStore: dict-backed implementation for scripts and tests
- load_segments: read a JSON trip file (trips -> days -> route_segments)

Rule: The engine never touches storage except through apply_segment_update.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Union

from .models import Segment, SegmentPatch

logger = logging.getLogger(__name__)


class SegmentStore(Protocol):
    def get_segments(self) -> List[Segment]: ...

    def apply_segment_update(self, segment_id: str, patch: SegmentPatch) -> Segment: ...


class InMemorySegmentStore:
    """
    Keeps segments in insertion order. Segments are frozen, so every update
    stores a new instance.
    """

    def __init__(self, segments: Iterable[Segment] = ()):
        self._segments: Dict[str, Segment] = {segment.id: segment for segment in segments}

    def get_segments(self) -> List[Segment]:
        return list(self._segments.values())

    def get_segment(self, segment_id: str) -> Optional[Segment]:
        return self._segments.get(segment_id)

    def apply_segment_update(self, segment_id: str, patch: SegmentPatch) -> Segment:
        segment = self._segments.get(segment_id)
        if segment is None:
            raise KeyError(f"Unknown segment {segment_id}")

        updated = patch.apply_to(segment)
        self._segments[segment_id] = updated
        logger.info("Segment %s updated: %s", segment_id, ", ".join(patch.changes()))
        return updated


def load_segments(path: Union[str, Path]) -> List[Segment]:
    """
    Accepts either {"trips": [{"days": [{"route_segments": [...]}]}]}
    or a bare list of segment dicts.
    """
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    if isinstance(data, list):
        return [Segment.from_dict(item) for item in data]

    segments = []
    for trip in data.get("trips", []):
        for day in trip.get("days", []):
            for item in day.get("route_segments", []):
                segments.append(Segment.from_dict(item))
    return segments
