"""Main view UI components (search, camera controls, viewer canvas)."""

import logging

import streamlit as st

from doppelgangers.errors import MissingCredentialError, SearchBusyError
from doppelgangers.ui.state import AppState
from doppelgangers.ui.styles import render_error
from doppelgangers.viewer.controller import ViewerController
from doppelgangers.viewer.state import MODE_3D

logger = logging.getLogger(__name__)

# Screen pixels moved by one camera button press
NUDGE = 40.0
# Wheel delta for one zoom button press
ZOOM_STEP = 240.0


def render_search_bar(controller: ViewerController) -> None:
    """Render search input and handle search action."""
    with st.form("search_form", clear_on_submit=False, border=False):
        col1, col2 = st.columns([4, 1])

        with col1:
            query = st.text_input(
                "Search by meaning",
                placeholder="Describe a change to find matching pull requests and issues...",
                key="search_input",
                label_visibility="collapsed"
            )

        with col2:
            search_clicked = st.form_submit_button(
                "Search",
                type="primary",
                use_container_width=True,
                disabled=controller.state.search_pending
            )

    if search_clicked and query.strip():
        _perform_search(controller, query.strip())


def _perform_search(controller: ViewerController, query: str) -> None:
    """Execute search and update state."""
    try:
        with st.spinner("Searching..."):
            hits = controller.search(query)
    except MissingCredentialError:
        AppState.set_error("Enter an OpenAI API key in the sidebar to search.")
        return
    except SearchBusyError:
        st.info("A search is already running.")
        return

    st.session_state.last_search_query = query
    if hits is None:
        AppState.set_error(controller.state.last_error or "Search failed")
    else:
        AppState.clear_error()


def render_camera_controls(controller: ViewerController) -> None:
    """Buttons that feed drags and wheel steps into the viewer."""
    is_3d = controller.state.mode == MODE_3D
    cols = st.columns(8)

    pan_3d = False
    if is_3d:
        pan_3d = cols[7].toggle("Pan", value=False, help="Arrows pan instead of rotating")

    moves = [("◀", -NUDGE, 0.0), ("▶", NUDGE, 0.0), ("▲", 0.0, -NUDGE), ("▼", 0.0, NUDGE)]
    for col, (label, dx, dy) in zip(cols[:4], moves):
        if col.button(label, use_container_width=True, key=f"nudge_{label}"):
            _drag(controller, dx, dy, pan_3d)

    if cols[4].button("＋", use_container_width=True, key="zoom_in"):
        _zoom(controller, -ZOOM_STEP)
    if cols[5].button("－", use_container_width=True, key="zoom_out"):
        _zoom(controller, ZOOM_STEP)
    if cols[6].button("Reset", use_container_width=True, key="reset_view"):
        controller.reset_view()


def _center(controller: ViewerController) -> tuple[float, float]:
    canvas = controller.state.canvas
    return canvas.width / 2, canvas.height / 2


def _drag(controller: ViewerController, dx: float, dy: float, pan_3d: bool = False) -> None:
    """A full pointer drag from the canvas center: pans in 2D, rotates (or pans) in 3D."""
    x, y = _center(controller)
    controller.pointer_down(x, y, ctrl=pan_3d)
    controller.pointer_move(x + dx, y + dy)
    controller.pointer_up(x + dx, y + dy)


def _zoom(controller: ViewerController, delta_y: float) -> None:
    x, y = _center(controller)
    controller.wheel(x, y, delta_y)


def render_canvas(controller: ViewerController) -> None:
    """Deliver the pending frame and show it; box selections go back into the viewer."""
    st.session_state.frames.tick()
    fig = st.session_state.canvas.to_figure(dragmode="select")

    event = st.plotly_chart(
        fig,
        key="viewer_plot",
        on_select="rerun",
        selection_mode="box",
        config={"displayModeBar": False, "scrollZoom": False},
    )

    additive = st.checkbox("Add box selections to the current selection", value=False)
    _apply_box(controller, event, additive)


def _apply_box(controller: ViewerController, event, additive: bool) -> None:
    """Replay a new box selection as a shift-drag."""
    if not event or "selection" not in event:
        return
    boxes = event["selection"].get("box") or []
    if not boxes:
        return

    box = boxes[-1]
    try:
        x0, x1 = (float(v) for v in box["x"][:2])
        y0, y1 = (float(v) for v in box["y"][:2])
    except (KeyError, TypeError, ValueError):
        logger.debug(f"Ignoring malformed box selection: {box}")
        return

    key = (x0, y0, x1, y1, additive)
    if key == st.session_state.last_box:
        return
    st.session_state.last_box = key

    controller.pointer_down(x0, y0, shift=True, ctrl=additive)
    controller.pointer_move(x1, y1)
    controller.pointer_up(x1, y1)
    st.rerun()


def render_explorer() -> None:
    """Render the engine-driven explorer: search, camera controls and canvas."""
    controller = AppState.controller()

    render_search_bar(controller)

    if AppState.has_error():
        render_error(st.session_state.last_error)

    render_camera_controls(controller)
    render_canvas(controller)
