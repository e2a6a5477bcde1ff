"""
Purpose: Central configuration for track editing.
What it does:

CONTROL_POINT_STRIDE = 25

CONTROL_POINT_MAX = 16

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EditPolicy:
    """
    Control points are sampled by polyline index, not by distance, so on an
    unevenly sampled road they are not evenly spaced on the map.
    """

    control_point_stride: int = 25
    control_point_max: int = 16

    # a committed track must keep at least a start and an end
    min_commit_points: int = 2

    def validate(self) -> None:
        if self.control_point_stride < 1:
            raise ValueError("control_point_stride must be >= 1")

        if self.control_point_max < 1:
            raise ValueError("control_point_max must be >= 1")

        if self.min_commit_points < 2:
            raise ValueError("min_commit_points must be >= 2")


def default_edit_policy() -> EditPolicy:
    p = EditPolicy()
    p.validate()
    return p
