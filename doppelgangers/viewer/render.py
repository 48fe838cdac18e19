"""
Frame-coalesced rendering of the point cloud.

State changes call RenderScheduler.request(); the next frame paints once,
however many requests arrived in between.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from doppelgangers.core.points import Point
from doppelgangers.viewer.selection import is_visible
from doppelgangers.viewer.state import MODE_3D, ViewerState
from doppelgangers.viewer import viewport
import config

logger = logging.getLogger(__name__)


class Canvas(Protocol):
    """Drawing surface the painter targets."""

    def clear(self, width: float, height: float) -> None: ...

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None: ...

    def stroke_circle(self, x: float, y: float, radius: float, color: str, line_width: float) -> None: ...

    def stroke_dashed_rect(
        self, left: float, top: float, width: float, height: float, color: str, dash: tuple[int, int]
    ) -> None: ...

    def set_count(self, text: str) -> None: ...


@dataclass
class DrawCall:
    kind: str
    args: tuple


@dataclass
class RecordingCanvas:
    """Canvas that records draw calls; used headless and in tests."""
    calls: list[DrawCall] = field(default_factory=list)
    count_text: str = ""

    def clear(self, width: float, height: float) -> None:
        self.calls = [DrawCall("clear", (width, height))]

    def fill_circle(self, x, y, radius, color) -> None:
        self.calls.append(DrawCall("disk", (x, y, radius, color)))

    def stroke_circle(self, x, y, radius, color, line_width) -> None:
        self.calls.append(DrawCall("ring", (x, y, radius, color, line_width)))

    def stroke_dashed_rect(self, left, top, width, height, color, dash) -> None:
        self.calls.append(DrawCall("rect", (left, top, width, height, color, dash)))

    def set_count(self, text: str) -> None:
        self.count_text = text

    def of_kind(self, *kinds: str) -> list[DrawCall]:
        return [c for c in self.calls if c.kind in kinds]


def paint_scene(canvas: Canvas, points: list[Point], state: ViewerState) -> int:
    """
    Draw every visible point and the live selection rectangle.

    In 3D, points are drawn farthest first so nearer ones land on top.
    Culled points are skipped.

    Returns:
        Number of visible points (before culling)
    """
    canvas.clear(state.canvas.width, state.canvas.height)

    projected = []
    for index, point in enumerate(points):
        if not is_visible(point, state.filters):
            continue
        screen = viewport.project_to_screen(point, state.mode, state.view, state.canvas)
        projected.append((index, screen))

    if state.mode == MODE_3D:
        # Larger depth shrinks the perspective factor, so it is farther away
        projected.sort(key=lambda item: item[1].depth, reverse=True)

    for index, screen in projected:
        if screen.culled:
            continue
        assert 0 <= index < len(points)
        selected = index in state.selected
        radius = config.SELECTED_POINT_RADIUS if selected else config.POINT_RADIUS
        color = config.COLORS["selected"] if selected else config.COLORS["point"]
        if points[index].type == config.TYPE_ISSUE:
            canvas.stroke_circle(screen.x, screen.y, radius, color, config.RING_WIDTH)
        else:
            canvas.fill_circle(screen.x, screen.y, radius, color)

    rect = state.selection_rect
    if rect is not None:
        left, right, top, bottom = rect.bounds()
        canvas.stroke_dashed_rect(
            left, top, right - left, bottom - top, config.COLORS["accent"], config.SELECTION_DASH
        )

    canvas.set_count(f"{len(projected)}/{len(points)} items")
    return len(projected)


FrameCallback = Callable[[], None]


class ManualFrameSource:
    """
    Frame source driven by the caller.

    Stands in for a display refresh signal: request() queues a callback,
    tick() delivers one frame.
    """

    def __init__(self):
        self._pending: list[FrameCallback] = []
        self.frames = 0

    def request(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    def tick(self) -> int:
        """Run callbacks queued before this frame; returns how many ran."""
        callbacks, self._pending = self._pending, []
        for callback in callbacks:
            callback()
        self.frames += 1
        return len(callbacks)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)


class RenderScheduler:
    """
    Coalesces repaint requests into one paint per frame.

    Args:
        paint: Performs one full repaint
        request_frame: Schedules a callback for the next display frame
    """

    def __init__(self, paint: Callable[[], None], request_frame: Callable[[FrameCallback], None]):
        self._paint = paint
        self._request_frame = request_frame
        self._scheduled = False
        self.paint_count = 0

    @property
    def pending(self) -> bool:
        return self._scheduled

    def request(self) -> None:
        if self._scheduled:
            return
        self._scheduled = True
        self._request_frame(self._on_frame)

    def _on_frame(self) -> None:
        if not self._scheduled:
            return
        self._scheduled = False
        self._paint()
        self.paint_count += 1

    def flush(self) -> bool:
        """Paint now if a repaint is pending; returns True if it painted."""
        if not self._scheduled:
            return False
        self._on_frame()
        return True
