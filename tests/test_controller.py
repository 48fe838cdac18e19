import pytest

from doppelgangers.viewer.controller import ViewerController
from doppelgangers.viewer.search import SearchClient
from doppelgangers.viewer.state import MODE_2D, MODE_3D, ViewState2D, ViewState3D


@pytest.fixture
def controller(point_factory, viewer_state, recording_canvas, frames):
    points = [
        point_factory(x=0.1, y=0.1, type="pr", state="open", embedding=(1.0, 0.0)),
        point_factory(x=0.5, y=0.5, type="issue", state="closed", embedding=(0.0, 1.0)),
        point_factory(x=0.9, y=0.9, type="pr", state="closed", embedding=(0.9, 0.1)),
    ]
    return ViewerController(points, recording_canvas, frames.request, state=viewer_state)


def test_first_paint_is_requested_on_construction(controller, recording_canvas, frames):
    assert recording_canvas.calls == []
    assert frames.tick() == 1
    assert recording_canvas.count_text == "3/3 items"


def test_many_events_paint_once_per_frame(controller, frames):
    frames.tick()
    before = controller.scheduler.paint_count
    for delta in (-50, -50, 100):
        controller.wheel(50, 50, delta)
    controller.pointer_down(0, 0)
    controller.pointer_move(20, 20)
    controller.pointer_up(20, 20)
    frames.tick()
    assert controller.scheduler.paint_count == before + 1


def test_toggle_mode_switches_camera(controller):
    assert controller.toggle_mode() == MODE_3D
    controller.wheel(50, 50, -100)
    assert controller.state.view_3d.zoom > ViewState3D().zoom
    assert controller.state.view_2d == ViewState2D()
    assert controller.toggle_mode() == MODE_2D


def test_set_mode_rejects_unknown(controller):
    with pytest.raises(ValueError):
        controller.set_mode("4d")


def test_filters_update_visible_count(controller, frames, recording_canvas):
    controller.set_filter("show_closed", False)
    frames.tick()
    assert controller.visible_count == 1
    assert recording_canvas.count_text == "1/3 items"
    with pytest.raises(ValueError):
        controller.set_filter("show_everything", True)


def test_reset_view_only_touches_current_mode(controller):
    controller.wheel(30, 30, -200)
    controller.state.view_3d.rotate_x = 0.1
    controller.reset_view()
    assert controller.state.view_2d == ViewState2D()
    assert controller.state.view_3d.rotate_x == 0.1


def test_rect_selection_and_clear(controller):
    controller.pointer_down(0, 0, shift=True)
    controller.pointer_move(60, 60)
    controller.pointer_up(60, 60)
    assert controller.state.selected == {0, 1}
    assert [i for i, _ in controller.selected_points()] == [0, 1]
    assert [i for i, _ in controller.selected_points(limit=1)] == [0]

    controller.clear_selection()
    assert controller.state.selected == set()


def test_load_resets_selection_and_gesture(controller, point_factory):
    controller.state.selected = {2}
    controller.pointer_down(0, 0, shift=True)
    controller.load([point_factory()])
    assert controller.state.selected == set()
    assert controller.state.selection_rect is None
    assert len(controller.points) == 1


def test_search_without_client_raises(controller):
    with pytest.raises(RuntimeError):
        controller.search("anything")


def test_search_selects_matches(controller, fake_embedder, frames):
    client = SearchClient(lambda key: fake_embedder(vectors={"login": [1.0, 0.0]}, dimension=2))
    client.set_credential("sk-test")
    controller.search_client = client
    frames.tick()

    hits = controller.search("login")

    assert [h.index for h in hits] == [0, 2]
    assert controller.state.selected == {0, 2}
    assert controller.scheduler.pending


def test_search_results_listed_by_similarity(controller, fake_embedder):
    client = SearchClient(lambda key: fake_embedder(vectors={"auth": [0.2, 1.0]}, dimension=2))
    client.set_credential("sk-test")
    controller.search_client = client

    controller.search("auth")

    assert [i for i, _ in controller.selected_points()] == [1, 2, 0]
    assert [i for i, _ in controller.selected_points(limit=2)] == [1, 2]

    controller.state.selected.discard(2)
    assert [i for i, _ in controller.selected_points()] == [1, 0]

    controller.clear_selection()
    assert controller.state.search_order == []
    controller.state.selected = {2, 0}
    assert [i for i, _ in controller.selected_points()] == [0, 2]


def test_resize_updates_canvas(controller, frames, recording_canvas):
    controller.resize(640, 480)
    frames.tick()
    assert recording_canvas.calls[0].args == (640, 480)
