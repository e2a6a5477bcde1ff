#Expose the editing pieces:
#Track draft state machine (start / end / control-point drags)
#Endpoint and waypoint draft editors

from .policy import EditPolicy, default_edit_policy
from .session import (
    ControlPoint,
    DraftEditError,
    DraftEditSession,
    EditMode,
    MoveControlPoint,
    MoveEnd,
    MoveStart,
    sample_control_points,
)
from .editor import CommittedTrack, DraftEditor, EditorState
from .endpoints import Endpoint, EndpointDraft, EndpointDraftEditor
from .waypoints import WaypointDraftEditor

__all__ = [
    "EditPolicy",
    "default_edit_policy",
    "ControlPoint",
    "DraftEditError",
    "DraftEditSession",
    "EditMode",
    "MoveControlPoint",
    "MoveEnd",
    "MoveStart",
    "sample_control_points",
    "CommittedTrack",
    "DraftEditor",
    "EditorState",
    "Endpoint",
    "EndpointDraft",
    "EndpointDraftEditor",
    "WaypointDraftEditor",
]
