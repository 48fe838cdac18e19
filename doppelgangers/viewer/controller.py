"""
ViewerController: owns the viewer state and routes input events.

Every handler runs to completion and, when it changed something visible,
asks the scheduler for a repaint on the next frame.
"""

import logging
from typing import Callable, Optional

from doppelgangers.core.points import Point
from doppelgangers.viewer import viewport
from doppelgangers.viewer.render import Canvas, FrameCallback, RenderScheduler, paint_scene
from doppelgangers.viewer.search import SearchClient, SearchHit
from doppelgangers.viewer.selection import SelectionEngine, is_visible
from doppelgangers.viewer.state import MODE_2D, MODE_3D, CanvasSize, ViewerState, ViewState2D, ViewState3D
import config

logger = logging.getLogger(__name__)

FILTER_NAMES = ("show_pr", "show_issue", "show_open", "show_closed")


class ViewerController:
    """
    Single owner of ViewerState for one loaded point set.

    Args:
        points: Render-ready points
        canvas: Drawing surface
        request_frame: Schedules a callback for the next display frame
        search_client: Optional search client (search disabled without one)
    """

    def __init__(
        self,
        points: list[Point],
        canvas: Canvas,
        request_frame: Callable[[FrameCallback], None],
        search_client: Optional[SearchClient] = None,
        state: Optional[ViewerState] = None
    ):
        self.points = points
        self.canvas = canvas
        self.state = state or ViewerState()
        self.search_client = search_client
        self.scheduler = RenderScheduler(self.paint, request_frame)
        self.engine = SelectionEngine(self.points, self.state)
        self.scheduler.request()

    # -------------------------------------------------------------------------
    # Dataset and canvas
    # -------------------------------------------------------------------------

    def load(self, points: list[Point]) -> None:
        """Swap in a new point set; the old selection is meaningless for it."""
        self.points = points
        self.engine = SelectionEngine(self.points, self.state)
        self.state.reset_for_dataset_change()
        self.scheduler.request()

    def resize(self, width: float, height: float) -> None:
        self.state.canvas = CanvasSize(width, height)
        self.scheduler.request()

    def paint(self) -> None:
        paint_scene(self.canvas, self.points, self.state)

    # -------------------------------------------------------------------------
    # Mode and filters
    # -------------------------------------------------------------------------

    def set_mode(self, mode: str) -> None:
        if mode not in (MODE_2D, MODE_3D):
            raise ValueError(f"Unknown mode '{mode}'")
        self.state.mode = mode
        self.scheduler.request()

    def toggle_mode(self) -> str:
        self.set_mode(MODE_2D if self.state.mode == MODE_3D else MODE_3D)
        return self.state.mode

    def reset_view(self) -> None:
        """Put the camera of the current mode back to its initial position."""
        if self.state.mode == MODE_3D:
            self.state.view_3d = ViewState3D()
        else:
            self.state.view_2d = ViewState2D()
        self.scheduler.request()

    def set_filter(self, name: str, enabled: bool) -> None:
        if name not in FILTER_NAMES:
            raise ValueError(f"Unknown filter '{name}'")
        setattr(self.state.filters, name, enabled)
        self.scheduler.request()

    # -------------------------------------------------------------------------
    # Pointer input
    # -------------------------------------------------------------------------

    def pointer_down(self, x: float, y: float, shift: bool = False, ctrl: bool = False, meta: bool = False) -> None:
        if self.engine.pointer_down(x, y, shift=shift, ctrl=ctrl, meta=meta):
            self.scheduler.request()

    def pointer_move(self, x: float, y: float) -> None:
        if self.engine.pointer_move(x, y):
            self.scheduler.request()

    def pointer_up(self, x: float, y: float) -> None:
        if self.engine.pointer_up(x, y):
            self.scheduler.request()

    def wheel(self, x: float, y: float, delta_y: float) -> None:
        ratio = viewport.wheel_ratio(delta_y)
        if self.state.mode == MODE_3D:
            viewport.zoom_3d(self.state.view_3d, ratio)
        else:
            viewport.zoom_2d_at(self.state.view_2d, ratio, x, y)
        self.scheduler.request()

    # -------------------------------------------------------------------------
    # Search and selection
    # -------------------------------------------------------------------------

    def search(self, query: str) -> Optional[list[SearchHit]]:
        """
        Replace the selection with the best matches for query.

        Raises:
            RuntimeError: If the controller has no search client
            SearchBusyError / MissingCredentialError: See SearchClient.submit
        """
        if self.search_client is None:
            raise RuntimeError("Search is not enabled for this dataset")
        hits = self.search_client.submit(query, self.state, self.points)
        self.scheduler.request()
        return hits

    def clear_selection(self) -> None:
        self.state.clear_selection()
        self.scheduler.request()

    def selected_points(self, limit: int = config.MAX_SIDEBAR_ITEMS) -> list[tuple[int, Point]]:
        """Selected points, search hits first by similarity, capped at limit."""
        indices = self.state.ordered_selection()[:limit]
        return [(i, self.points[i]) for i in indices]

    @property
    def visible_count(self) -> int:
        return sum(1 for p in self.points if is_visible(p, self.state.filters))
