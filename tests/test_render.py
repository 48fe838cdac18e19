from doppelgangers.viewer.render import RenderScheduler, paint_scene
from doppelgangers.viewer.state import MODE_3D, RectSelecting, SelectionRect, ViewState3D
from doppelgangers.viewer.viewport import project_3d
import config


def test_scheduler_coalesces_requests_into_one_paint(frames):
    painted = []
    scheduler = RenderScheduler(lambda: painted.append(1), frames.request)

    for _ in range(10):
        scheduler.request()
    assert scheduler.pending
    assert frames.tick() == 1
    assert painted == [1]
    assert not scheduler.pending

    assert frames.tick() == 0
    assert painted == [1]


def test_request_during_frame_schedules_next_frame(frames):
    painted = []
    scheduler = RenderScheduler(lambda: None, frames.request)

    def paint():
        painted.append(frames.frames)
        if len(painted) == 1:
            scheduler.request()

    scheduler._paint = paint
    scheduler.request()
    frames.tick()
    frames.tick()
    assert painted == [0, 1]
    assert scheduler.paint_count == 2


def test_flush_paints_pending_frame_once(frames):
    painted = []
    scheduler = RenderScheduler(lambda: painted.append(1), frames.request)
    assert not scheduler.flush()

    scheduler.request()
    assert scheduler.flush()
    # The queued frame callback finds nothing left to do
    frames.tick()
    assert painted == [1]


def test_paint_scene_draws_disks_and_rings(point_factory, viewer_state, recording_canvas):
    points = [
        point_factory(x=0.1, y=0.1, type="pr"),
        point_factory(x=0.2, y=0.2, type="issue"),
        point_factory(x=0.3, y=0.3),
    ]
    viewer_state.selected = {1}
    visible = paint_scene(recording_canvas, points, viewer_state)

    assert visible == 3
    assert recording_canvas.calls[0].kind == "clear"
    disks = recording_canvas.of_kind("disk")
    rings = recording_canvas.of_kind("ring")
    assert len(disks) == 2
    assert len(rings) == 1
    assert rings[0].args[2] == config.SELECTED_POINT_RADIUS
    assert rings[0].args[3] == config.COLORS["selected"]
    assert disks[0].args[2] == config.POINT_RADIUS
    assert recording_canvas.count_text == "3/3 items"


def test_paint_scene_count_reflects_filters(point_factory, viewer_state, recording_canvas):
    points = [point_factory(type="pr"), point_factory(type="issue"), point_factory(type="issue")]
    viewer_state.filters.show_issue = False
    assert paint_scene(recording_canvas, points, viewer_state) == 1
    assert recording_canvas.count_text == "1/3 items"
    assert len(recording_canvas.of_kind("disk", "ring")) == 1


def test_paint_scene_3d_draws_far_to_near(point_factory, viewer_state, recording_canvas):
    viewer_state.mode = MODE_3D
    viewer_state.view_3d = ViewState3D(rotate_x=0.0, rotate_y=0.0, zoom=1.0)
    # With no rotation depth follows z3d: index 1 is nearest, index 2 farthest
    points = [
        point_factory(x3d=0.2, z3d=0.5),
        point_factory(x3d=0.4, z3d=0.1),
        point_factory(x3d=0.6, z3d=0.9),
    ]
    paint_scene(recording_canvas, points, viewer_state)

    xs = [call.args[0] for call in recording_canvas.of_kind("disk")]
    expected_order = [2, 0, 1]
    expected = [project_3d(points[i], viewer_state.view_3d, viewer_state.canvas).x for i in expected_order]
    assert xs == expected


def test_paint_scene_skips_culled_points(point_factory, viewer_state, recording_canvas):
    viewer_state.mode = MODE_3D
    viewer_state.view_3d = ViewState3D(rotate_x=0.0, rotate_y=0.0, zoom=3.5)
    points = [point_factory(z3d=0.0), point_factory(z3d=0.5)]
    visible = paint_scene(recording_canvas, points, viewer_state)
    assert visible == 2
    assert len(recording_canvas.of_kind("disk")) == 1


def test_paint_scene_draws_live_rect(point_factory, viewer_state, recording_canvas):
    viewer_state.gesture = RectSelecting(additive=False, rect=SelectionRect(40, 30, 10, 5))
    paint_scene(recording_canvas, [point_factory()], viewer_state)
    (rect,) = recording_canvas.of_kind("rect")
    assert rect.args[:4] == (10, 5, 30, 25)
    assert recording_canvas.calls[-1].kind == "rect"
