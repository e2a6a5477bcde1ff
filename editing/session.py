"""
Purpose: The private working state of one track edit.
What it does:
- DraftEditSession: working polyline (mutated by drags) + original snapshot (never mutated)
- EditMode: which part of the polyline is draggable (START / END / TRACK)
- Drag commands: MoveStart, MoveEnd, MoveControlPoint
- sample_control_points: the sparse draggable overlay for TRACK mode

Rule: No persistence and no session bookkeeping here; editing/editor.py owns
the state transitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple, Union

from routing.models import Coordinate

from .policy import EditPolicy


class EditMode(str, Enum):
    START = "start"
    END = "end"
    TRACK = "track"


class DraftEditError(Exception):
    """Raised when an edit call breaks session discipline. State is left untouched."""
    pass


@dataclass(frozen=True)
class MoveStart:
    coordinate: Coordinate


@dataclass(frozen=True)
class MoveEnd:
    coordinate: Coordinate


@dataclass(frozen=True)
class MoveControlPoint:
    index: int
    coordinate: Coordinate


DragCommand = Union[MoveStart, MoveEnd, MoveControlPoint]


@dataclass(frozen=True)
class ControlPoint:
    index: int
    coordinate: Coordinate
    # True for the midpoint stand-in used on very short polylines
    synthesized: bool = False


def sample_control_points(polyline: Sequence[Coordinate], stride: int = 25, max_count: int = 16) -> List[ControlPoint]:
    """
    Interior indices 1, 1+stride, 1+2*stride, ... capped at max_count, so
    N > 2 points give min(max_count, ceil((N-2)/stride)) control points.

    A polyline of length <= 2 has no interior; one control point at index
    len // 2 is synthesized so TRACK mode is never empty.
    """
    if not polyline:
        return []

    if len(polyline) <= 2:
        index = len(polyline) // 2
        return [ControlPoint(index=index, coordinate=polyline[index], synthesized=True)]

    indices = range(1, len(polyline) - 1, stride)
    return [ControlPoint(index=index, coordinate=polyline[index]) for index in indices][:max_count]


@dataclass
class DraftEditSession:
    segment_id: str
    working_polyline: List[Coordinate]
    original_polyline: Tuple[Coordinate, ...]
    policy: EditPolicy
    mode: EditMode = EditMode.START
    applied: List[DragCommand] = field(default_factory=list)

    @classmethod
    def open(cls, segment_id: str, polyline: Sequence[Coordinate], policy: EditPolicy) -> DraftEditSession:
        # two independent copies; the tuple cannot be mutated by any drag
        return cls(
            segment_id=segment_id,
            working_polyline=list(polyline),
            original_polyline=tuple(polyline),
            policy=policy,
        )

    def control_points(self) -> List[ControlPoint]:
        return sample_control_points(
            self.working_polyline,
            stride=self.policy.control_point_stride,
            max_count=self.policy.control_point_max,
        )

    def draggable(self) -> List[ControlPoint]:
        """What the renderer should offer as drag handles in the current mode."""
        if not self.working_polyline:
            return []
        if self.mode is EditMode.START:
            return [ControlPoint(0, self.working_polyline[0])]
        if self.mode is EditMode.END:
            last = len(self.working_polyline) - 1
            return [ControlPoint(last, self.working_polyline[last])]
        return self.control_points()

    def apply(self, command: DragCommand) -> None:
        """
        Validate first, then mutate exactly one index of the working polyline.
        """
        index = self._target_index(command)
        self.working_polyline[index] = command.coordinate
        self.applied.append(command)

    def _target_index(self, command: DragCommand) -> int:
        if isinstance(command, MoveStart):
            if self.mode is not EditMode.START:
                raise DraftEditError(f"MoveStart needs START mode, session is in {self.mode.name} mode")
            return 0

        if isinstance(command, MoveEnd):
            if self.mode is not EditMode.END:
                raise DraftEditError(f"MoveEnd needs END mode, session is in {self.mode.name} mode")
            return len(self.working_polyline) - 1

        if isinstance(command, MoveControlPoint):
            if self.mode is not EditMode.TRACK:
                raise DraftEditError(f"MoveControlPoint needs TRACK mode, session is in {self.mode.name} mode")
            allowed = {point.index for point in self.control_points()}
            if command.index not in allowed:
                raise DraftEditError(f"Index {command.index} is not a control point")
            return command.index

        raise DraftEditError(f"Unknown drag command {command!r}")
