"""
Gesture handling: pan/rotate drags, rectangle selection and click-to-deselect.
"""

import logging
import math
from typing import Optional

from doppelgangers.core.points import Point
from doppelgangers.viewer.state import (
    DRAG_PAN,
    DRAG_PAN_3D,
    DRAG_ROTATE,
    MODE_3D,
    Dragging,
    Filters,
    Idle,
    RectSelecting,
    SelectionRect,
    ViewerState,
)
from doppelgangers.viewer import viewport
import config

logger = logging.getLogger(__name__)


def is_visible(point: Point, filters: Filters) -> bool:
    return filters.allows(point.type, point.state)


def visible_indices(points: list[Point], filters: Filters) -> list[int]:
    return [i for i, p in enumerate(points) if is_visible(p, filters)]


def points_in_rect(points: list[Point], state: ViewerState, rect: SelectionRect) -> list[int]:
    """
    Indices of visible, unculled points inside rect (inclusive bounds).
    """
    left, right, top, bottom = rect.bounds()
    inside = []
    for i, point in enumerate(points):
        if not is_visible(point, state.filters):
            continue
        screen = viewport.project_to_screen(point, state.mode, state.view, state.canvas)
        if screen.culled:
            continue
        if left <= screen.x <= right and top <= screen.y <= bottom:
            inside.append(i)
    return inside


def hit_test(
    points: list[Point],
    state: ViewerState,
    x: float,
    y: float,
    radius: float = config.HIT_RADIUS
) -> Optional[int]:
    """
    First visible point within radius pixels of (x, y), or None.

    Linear scan in index order; hit regions are small enough that
    overlaps don't matter.
    """
    limit = radius * radius
    for i, point in enumerate(points):
        if not is_visible(point, state.filters):
            continue
        screen = viewport.project_to_screen(point, state.mode, state.view, state.canvas)
        if screen.culled:
            continue
        dx = screen.x - x
        dy = screen.y - y
        if dx * dx + dy * dy <= limit:
            return i
    return None


class SelectionEngine:
    """
    Pointer gesture state machine over a fixed point set.

    States: Idle, Dragging(pan | rotate | pan3d), RectSelecting(additive).
    Each handler returns True when the scene needs a repaint.
    """

    def __init__(self, points: list[Point], state: ViewerState):
        self.points = points
        self.state = state

    def pointer_down(
        self,
        x: float,
        y: float,
        shift: bool = False,
        ctrl: bool = False,
        meta: bool = False
    ) -> bool:
        state = self.state
        state.press_x, state.press_y = x, y
        command = ctrl or meta

        if shift:
            state.gesture = RectSelecting(additive=command, rect=SelectionRect(x, y, x, y))
            return True

        if command:
            if state.mode == MODE_3D:
                state.gesture = Dragging(mode=DRAG_PAN_3D, last_x=x, last_y=y)
                return False
            state.gesture = RectSelecting(additive=True, rect=SelectionRect(x, y, x, y))
            return True

        mode = DRAG_ROTATE if state.mode == MODE_3D else DRAG_PAN
        state.gesture = Dragging(mode=mode, last_x=x, last_y=y)
        return False

    def pointer_move(self, x: float, y: float) -> bool:
        gesture = self.state.gesture

        if isinstance(gesture, Dragging):
            dx = x - gesture.last_x
            dy = y - gesture.last_y
            if gesture.mode == DRAG_PAN:
                viewport.pan(self.state.view_2d, dx, dy)
            elif gesture.mode == DRAG_ROTATE:
                viewport.rotate_3d(self.state.view_3d, dx, dy)
            elif gesture.mode == DRAG_PAN_3D:
                viewport.pan(self.state.view_3d, dx, dy)
            gesture.last_x, gesture.last_y = x, y
            return True

        if isinstance(gesture, RectSelecting):
            gesture.rect.x1, gesture.rect.y1 = x, y
            return True

        return False

    def pointer_up(self, x: float, y: float) -> bool:
        state = self.state
        gesture = state.gesture
        state.gesture = Idle()

        if isinstance(gesture, RectSelecting):
            gesture.rect.x1, gesture.rect.y1 = x, y
            self.select_rect(gesture.rect, gesture.additive)
            return True

        if isinstance(gesture, Dragging):
            travel = math.hypot(x - state.press_x, y - state.press_y)
            if travel >= config.CLICK_MAX_TRAVEL:
                return False

        return self.click(x, y)

    def select_rect(self, rect: SelectionRect, additive: bool) -> None:
        """Apply a finished rectangle to the selection."""
        if not additive:
            self.state.clear_selection()
        inside = points_in_rect(self.points, self.state, rect)
        self.state.selected.update(inside)
        logger.debug(f"Rectangle selected {len(inside)} point(s), {len(self.state.selected)} total")

    def click(self, x: float, y: float) -> bool:
        """
        Clear the selection when the click misses every visible point.

        A click never adds to the selection.
        """
        if hit_test(self.points, self.state, x, y) is not None:
            return False
        if not self.state.selected:
            return False
        self.state.clear_selection()
        return True
