import pytest

from editing.editor import DraftEditor, EditorState
from editing.session import DraftEditError, EditMode, MoveControlPoint, MoveStart, sample_control_points
from routing.models import Coordinate
from tracks.models import Segment, SegmentTrack
from tracks.store import InMemorySegmentStore


def polyline(count):
    return [Coordinate(30.0 + i / 100, 104.0 + i / 100) for i in range(count)]


@pytest.fixture
def store():
    return InMemorySegmentStore([Segment(id="seg-1", name="成都-雅安"), Segment(id="seg-2", name="雅安-康定")])


@pytest.fixture
def editor(store):
    return DraftEditor(store)


@pytest.mark.parametrize("length,expected", [
    (3, 1),
    (26, 1),
    (27, 1),
    (28, 2),
    (60, 3),
    (100, 4),
    (402, 16),
    (2000, 16),
])
def test_control_point_count(length, expected):
    points = sample_control_points(polyline(length))
    assert len(points) == expected
    assert points[0].index == 1
    assert all(0 < p.index < length - 1 for p in points)


@pytest.mark.parametrize("length,index", [(1, 0), (2, 1)])
def test_short_polyline_gets_one_synthesized_control_point(length, index):
    points = sample_control_points(polyline(length))
    assert len(points) == 1
    assert points[0].index == index
    assert points[0].synthesized


def test_commit_writes_start_end_and_polyline(editor, store):
    original = polyline(60)
    editor.start_edit("seg-1", original)
    new_start = Coordinate(30.7, 104.2)
    new_end = Coordinate(29.9, 103.0)
    nudged = Coordinate(30.31, 104.22)

    editor.move_start(new_start)
    editor.switch_mode(EditMode.END)
    editor.move_end(new_end)
    editor.switch_mode(EditMode.TRACK)
    assert [p.index for p in editor.draggable()] == [1, 26, 51]
    editor.move_control_point(26, nudged)

    committed = editor.commit()

    saved = store.get_segment("seg-1")
    assert editor.state is EditorState.COMMITTED
    assert committed.start_coord == new_start
    assert saved.start_coord == new_start
    assert saved.end_coord == new_end
    assert len(saved.points) == 60
    assert saved.points[26] == nudged
    assert saved.points[1:26] == original[1:26]
    # the caller's list is never touched
    assert original[0] != new_start


def test_cancel_restores_original_pointwise(editor, store):
    original = polyline(30)
    editor.start_edit("seg-1", original)
    editor.move_start(Coordinate(31.0, 105.0))
    editor.switch_mode(EditMode.TRACK)
    editor.move_control_point(1, Coordinate(31.5, 105.5))

    restored = editor.cancel()

    assert restored == original
    assert editor.state is EditorState.CANCELLED
    assert editor.editing_segment_id is None
    assert store.get_segment("seg-1").points == []


def test_only_one_session_at_a_time(editor):
    editor.start_edit("seg-1", polyline(10))

    with pytest.raises(DraftEditError):
        editor.start_edit("seg-2", polyline(10))
    assert editor.editing_segment_id == "seg-1"

    editor.cancel()
    editor.start_edit("seg-2", polyline(10))
    assert editor.editing_segment_id == "seg-2"


def test_mode_discipline(editor):
    editor.start_edit("seg-1", polyline(60))

    with pytest.raises(DraftEditError):
        editor.apply(MoveControlPoint(1, Coordinate(0, 0)))

    editor.switch_mode(EditMode.TRACK)
    with pytest.raises(DraftEditError):
        editor.apply(MoveStart(Coordinate(0, 0)))
    with pytest.raises(DraftEditError):
        editor.move_control_point(5, Coordinate(0, 0))

    assert editor.session.working_polyline == polyline(60)
    assert editor.session.applied == []


def test_mode_switch_keeps_drags(editor):
    editor.start_edit("seg-1", polyline(10))
    moved = Coordinate(31.0, 105.0)
    editor.move_start(moved)

    editor.switch_mode(EditMode.END)
    editor.switch_mode(EditMode.START)

    assert editor.session.working_polyline[0] == moved
    assert [p.coordinate for p in editor.draggable()] == [moved]


def test_unknown_mode_is_rejected(editor):
    editor.start_edit("seg-1", polyline(10))
    editor.switch_mode(EditMode.END)

    with pytest.raises(DraftEditError):
        editor.switch_mode("bogus")

    assert editor.mode is EditMode.END
    editor.switch_mode("track")
    assert editor.mode is EditMode.TRACK


def test_calls_without_session_are_rejected(editor):
    with pytest.raises(DraftEditError):
        editor.commit()
    with pytest.raises(DraftEditError):
        editor.cancel()
    with pytest.raises(DraftEditError):
        editor.switch_mode(EditMode.TRACK)


def test_empty_and_single_point_tracks(editor):
    with pytest.raises(DraftEditError):
        editor.start_edit("seg-1", [])

    editor.start_edit("seg-1", polyline(1))
    with pytest.raises(DraftEditError):
        editor.commit()
    assert editor.state is EditorState.EDITING


def test_display_polyline_follows_working_copy(editor):
    track = SegmentTrack("seg-1", "成都-雅安", points=[], polyline=polyline(5))
    other = SegmentTrack("seg-2", "雅安-康定", points=[], polyline=polyline(3))
    editor.start_edit("seg-1", track.polyline)
    editor.move_start(Coordinate(31.0, 105.0))

    assert editor.display_polyline(track)[0] == Coordinate(31.0, 105.0)
    assert editor.display_polyline(other) == polyline(3)


def test_cancel_notifies_listeners(editor):
    cancelled = []
    editor.add_cancel_listener(cancelled.append)
    editor.start_edit("seg-1", polyline(5))

    editor.cancel()

    assert cancelled == ["seg-1"]
