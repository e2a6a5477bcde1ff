import itertools

import pytest

from editing.editor import DraftEditor
from editing.endpoints import Endpoint, EndpointDraftEditor
from editing.session import DraftEditError
from editing.waypoints import WaypointDraftEditor
from places.models import PlaceCandidate
from routing.models import Coordinate
from tracks.models import Segment, Waypoint
from tracks.store import InMemorySegmentStore


def place(name, lat, lon, place_id="B001"):
    return PlaceCandidate(name=name, display_label=name, coordinate=Coordinate(lat, lon), id=place_id)


@pytest.fixture
def segment():
    return Segment(
        id="seg-1",
        name="成都-雅安",
        start_point="成都",
        end_point="雅安",
        start_coord=Coordinate(30.57, 104.07),
        start_place_id="P-CD",
    )


@pytest.fixture
def store(segment):
    return InMemorySegmentStore([segment, Segment(id="seg-2", name="雅安-康定")])


# --- endpoints ---

def test_typing_drops_the_manual_coordinate(store, segment):
    editor = EndpointDraftEditor(store)
    editor.start(segment)

    draft = editor.update_text(Endpoint.START, "成都东站")

    assert draft.start_point == "成都东站"
    assert draft.start_coord is None
    assert draft.start_place_id is None
    assert draft.end_point == "雅安"


def test_selected_place_is_saved_through_the_store(store, segment):
    editor = EndpointDraftEditor(store)
    editor.start(segment)
    editor.select_place(Endpoint.END, place("雅安站", 29.97, 103.04, "P-YA"))

    saved = editor.save()

    assert saved.end_point == "雅安站"
    assert saved.end_coord == Coordinate(29.97, 103.04)
    assert saved.end_place_id == "P-YA"
    assert saved.start_coord == Coordinate(30.57, 104.07)
    assert store.get_segment("seg-1") == saved
    assert not editor.active


def test_cancel_returns_pre_edit_values(store, segment):
    editor = EndpointDraftEditor(store)
    editor.start(segment)
    editor.update_text(Endpoint.START, "somewhere")

    snapshot = editor.cancel()

    assert snapshot.start_point == "成都"
    assert snapshot.start_coord == Coordinate(30.57, 104.07)
    assert store.get_segment("seg-1") == segment


def test_only_one_segment_endpoint_draft(store, segment):
    editor = EndpointDraftEditor(store)
    editor.start(segment)

    with pytest.raises(DraftEditError):
        editor.start(store.get_segment("seg-2"))


def test_track_edit_cancel_reverts_endpoint_draft(store, segment):
    endpoints = EndpointDraftEditor(store)
    track_editor = DraftEditor(store)
    track_editor.add_cancel_listener(endpoints.revert)

    endpoints.start(segment)
    endpoints.update_text(Endpoint.START, "成都东站")
    track_editor.start_edit("seg-1", [Coordinate(30.57, 104.07), Coordinate(29.98, 103.01)])
    track_editor.cancel()

    assert endpoints.active
    assert endpoints.draft.start_point == "成都"
    assert endpoints.draft.start_coord == Coordinate(30.57, 104.07)


def test_revert_ignores_other_segments(store, segment):
    endpoints = EndpointDraftEditor(store)
    endpoints.start(segment)
    endpoints.update_text(Endpoint.END, "康定")

    endpoints.revert("seg-2")

    assert endpoints.draft.end_point == "康定"


def test_moving_an_endpoint_drops_the_saved_track():
    saved_track = [Coordinate(30.57, 104.07), Coordinate(30.2, 103.5), Coordinate(29.98, 103.01)]
    store = InMemorySegmentStore([Segment(
        id="seg-1", name="成都-雅安", start_point="成都", end_point="雅安",
        start_coord=Coordinate(30.57, 104.07), end_coord=Coordinate(29.98, 103.01), points=saved_track,
    )])
    editor = EndpointDraftEditor(store)
    editor.start(store.get_segment("seg-1"))
    editor.select_place(Endpoint.START, place("成都东站", 30.63, 104.14, "P-CDE"))

    saved = editor.save()

    assert saved.start_coord == Coordinate(30.63, 104.14)
    assert saved.points == []


def test_renaming_without_moving_keeps_the_saved_track():
    saved_track = [Coordinate(30.57, 104.07), Coordinate(30.2, 103.5), Coordinate(29.98, 103.01)]
    store = InMemorySegmentStore([Segment(
        id="seg-1", name="成都-雅安", start_point="成都", end_point="雅安",
        start_coord=Coordinate(30.57, 104.07), end_coord=Coordinate(29.98, 103.01), points=saved_track,
    )])
    editor = EndpointDraftEditor(store)
    editor.start(store.get_segment("seg-1"))
    editor.select_place(Endpoint.END, place("雅安市", 29.98, 103.01, "P-YA"))

    saved = editor.save()

    assert saved.end_point == "雅安市"
    assert saved.points == saved_track


# --- waypoints ---

@pytest.fixture
def waypoint_editor(store):
    counter = itertools.count(1)
    return WaypointDraftEditor(store, id_factory=lambda: f"wp-{next(counter)}")


def test_add_rename_pick_and_save(waypoint_editor, store, segment):
    waypoint_editor.start(segment)
    first = waypoint_editor.add()
    second = waypoint_editor.add()

    waypoint_editor.select_place(first.id, place("名山", 30.08, 103.11))
    waypoint_editor.rename(second.id, "蒙顶山")

    saved = waypoint_editor.save()

    assert [w.id for w in saved.waypoints] == ["wp-1", "wp-2"]
    assert saved.waypoints[0].coordinate == Coordinate(30.08, 103.11)
    assert saved.waypoints[1].name == "蒙顶山"
    assert saved.waypoints[1].coordinate is None
    assert not waypoint_editor.active


def test_rename_clears_coordinate(waypoint_editor):
    segment = Segment(id="seg-1", name="x", waypoints=[Waypoint(id="wp-a", name="名山", lat=30.08, lon=103.11)])
    waypoint_editor.start(segment)

    renamed = waypoint_editor.rename("wp-a", "名山区")

    assert renamed.lat is None and renamed.lon is None


def test_reorder_and_delete(waypoint_editor, segment):
    displayed = [Waypoint(id=f"wp-{name}", name=name) for name in ("a", "b", "c")]
    waypoint_editor.start(segment, displayed)

    waypoint_editor.move("wp-c", "up")
    waypoint_editor.move("wp-a", "up")
    waypoint_editor.move("wp-b", "down")
    assert [w.name for w in waypoint_editor.drafts] == ["a", "c", "b"]

    waypoint_editor.delete("wp-c")
    assert [w.name for w in waypoint_editor.drafts] == ["a", "b"]

    with pytest.raises(DraftEditError):
        waypoint_editor.delete("wp-zzz")


def test_cancel_leaves_store_untouched(waypoint_editor, store, segment):
    waypoint_editor.start(segment)
    waypoint_editor.add()

    waypoint_editor.cancel()

    assert store.get_segment("seg-1").waypoints == []
    with pytest.raises(DraftEditError):
        waypoint_editor.add()
