"""
Viewer state: camera, filters, selection and gesture, owned by one controller.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

import config

MODE_2D = "2d"
MODE_3D = "3d"

DRAG_PAN = "pan"
DRAG_ROTATE = "rotate"
DRAG_PAN_3D = "pan3d"


@dataclass
class ViewState2D:
    """2D affine camera. scale stays within [VIEW_2D_MIN_SCALE, VIEW_2D_MAX_SCALE]."""
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0


@dataclass
class ViewState3D:
    """3D orbit camera. rotate_x and zoom are clamped; rotate_y is free."""
    rotate_x: float = config.VIEW_3D_ROTATE_X
    rotate_y: float = config.VIEW_3D_ROTATE_Y
    zoom: float = config.VIEW_3D_ZOOM
    offset_x: float = 0.0
    offset_y: float = 0.0


@dataclass(frozen=True)
class CanvasSize:
    width: float = config.CANVAS_WIDTH
    height: float = config.CANVAS_HEIGHT


@dataclass
class Filters:
    """
    Independent type and state toggles.

    A point missing the attribute passes that axis.
    """
    show_pr: bool = True
    show_issue: bool = True
    show_open: bool = True
    show_closed: bool = True

    def allows(self, item_type: Optional[str], item_state: Optional[str]) -> bool:
        if item_type == config.TYPE_PR and not self.show_pr:
            return False
        if item_type == config.TYPE_ISSUE and not self.show_issue:
            return False
        if item_state == config.STATE_OPEN and not self.show_open:
            return False
        if item_state == config.STATE_CLOSED and not self.show_closed:
            return False
        return True


@dataclass
class SelectionRect:
    """Selection rectangle in screen pixels; (x1, y1) follows the pointer."""
    x0: float
    y0: float
    x1: float
    y1: float

    def bounds(self) -> tuple[float, float, float, float]:
        """Return (left, right, top, bottom)."""
        return (
            min(self.x0, self.x1),
            max(self.x0, self.x1),
            min(self.y0, self.y1),
            max(self.y0, self.y1),
        )


@dataclass(frozen=True)
class Idle:
    pass


@dataclass
class Dragging:
    mode: str
    last_x: float
    last_y: float


@dataclass
class RectSelecting:
    additive: bool
    rect: SelectionRect


Gesture = Union[Idle, Dragging, RectSelecting]


@dataclass
class ViewerState:
    """
    Everything the viewer mutates while a dataset is loaded.

    Only the selection engine, the viewport functions and the search client
    write to it, always through the controller that owns it.
    """
    mode: str = MODE_2D
    canvas: CanvasSize = field(default_factory=CanvasSize)
    view_2d: ViewState2D = field(default_factory=ViewState2D)
    view_3d: ViewState3D = field(default_factory=ViewState3D)
    filters: Filters = field(default_factory=Filters)
    selected: set[int] = field(default_factory=set)
    search_order: list[int] = field(default_factory=list)
    gesture: Gesture = field(default_factory=Idle)
    press_x: float = 0.0
    press_y: float = 0.0
    search_pending: bool = False
    last_error: Optional[str] = None

    @property
    def view(self) -> Union[ViewState2D, ViewState3D]:
        """View state for the current mode."""
        return self.view_3d if self.mode == MODE_3D else self.view_2d

    @property
    def selection_rect(self) -> Optional[SelectionRect]:
        if isinstance(self.gesture, RectSelecting):
            return self.gesture.rect
        return None

    def reset_for_dataset_change(self) -> None:
        """Clear state tied to the previous dataset's indices."""
        self.selected = set()
        self.search_order = []
        self.gesture = Idle()
        self.last_error = None

    def clear_selection(self) -> None:
        self.selected.clear()
        self.search_order = []

    def ordered_selection(self) -> list[int]:
        """Selected indices: last search hits by similarity, then the rest by index."""
        ranked = [i for i in self.search_order if i in self.selected]
        seen = set(ranked)
        return ranked + sorted(i for i in self.selected if i not in seen)

    def set_error(self, message: str) -> None:
        """Record an error for display."""
        self.last_error = message

    def clear_error(self) -> None:
        self.last_error = None
