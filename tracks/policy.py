"""
Purpose: Central configuration for read-only track display helpers.
What it does:

WAYPOINT_SAMPLE_STEP = 50

WAYPOINT_MAX = 20

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DisplayPolicy:
    """
    Sampling used to list waypoints for segments that have no structured ones.
    """

    waypoint_sample_step: int = 50
    waypoint_max: int = 20

    def validate(self) -> None:
        if self.waypoint_sample_step < 1:
            raise ValueError("waypoint_sample_step must be >= 1")

        if self.waypoint_max < 0:
            raise ValueError("waypoint_max must be >= 0")


def default_display_policy() -> DisplayPolicy:
    p = DisplayPolicy()
    p.validate()
    return p
