"""
Viewport math: normalized point -> screen pixels, plus camera updates.

Projection functions are pure. Camera updates mutate the view state they
are handed and keep it inside its bounds.
"""

import math
from dataclasses import dataclass
from typing import Union

from doppelgangers.core.points import Point
from doppelgangers.viewer.state import (
    MODE_3D,
    CanvasSize,
    ViewState2D,
    ViewState3D,
)
import config


@dataclass(frozen=True)
class ScreenPoint:
    x: float
    y: float
    depth: float = 0.0
    culled: bool = False


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def project_2d(point: Point, view: ViewState2D, canvas: CanvasSize) -> ScreenPoint:
    return ScreenPoint(
        x=point.x * canvas.width * view.scale + view.offset_x,
        y=point.y * canvas.height * view.scale + view.offset_y,
    )


def project_3d(point: Point, view: ViewState3D, canvas: CanvasSize) -> ScreenPoint:
    """
    Orbit-camera projection.

    The unit cube is centered on the origin and scaled by zoom, turned by
    yaw (about Y) then pitch (about X), and divided by 1 + depth * k.
    Points whose divisor falls under the near plane sit at or behind the
    camera and are culled.
    """
    x = (point.x3d - 0.5) * view.zoom
    y = (point.y3d - 0.5) * view.zoom
    z = (point.z3d - 0.5) * view.zoom

    cos_y, sin_y = math.cos(view.rotate_y), math.sin(view.rotate_y)
    cos_x, sin_x = math.cos(view.rotate_x), math.sin(view.rotate_x)

    x1 = x * cos_y + z * sin_y
    z1 = -x * sin_y + z * cos_y
    y1 = y * cos_x - z1 * sin_x
    depth = y * sin_x + z1 * cos_x

    denominator = 1 + depth * config.VIEW_3D_PERSPECTIVE
    culled = denominator <= config.VIEW_3D_NEAR_PLANE
    perspective = 1 / max(denominator, config.VIEW_3D_NEAR_PLANE)

    return ScreenPoint(
        x=x1 * perspective * canvas.width * config.VIEW_3D_FILL + canvas.width * 0.5 + view.offset_x,
        y=y1 * perspective * canvas.height * config.VIEW_3D_FILL + canvas.height * 0.5 + view.offset_y,
        depth=depth,
        culled=culled,
    )


def project_to_screen(
    point: Point,
    mode: str,
    view: Union[ViewState2D, ViewState3D],
    canvas: CanvasSize
) -> ScreenPoint:
    """
    Screen position of a point in the given mode.

    Pure: identical inputs always give identical output.
    """
    if mode == MODE_3D:
        return project_3d(point, view, canvas)
    return project_2d(point, view, canvas)


# -------------------------------------------------------------------------
# Camera updates
# -------------------------------------------------------------------------

def wheel_ratio(delta_y: float) -> float:
    """Multiplicative zoom for a wheel delta (scrolling up zooms in)."""
    return math.exp(-delta_y * config.WHEEL_ZOOM_SPEED)


def zoom_2d_at(view: ViewState2D, ratio: float, cursor_x: float, cursor_y: float) -> None:
    """
    Zoom about the cursor so the point under it stays put.

    The ratio is re-derived after clamping, so hitting a scale bound
    does not move the content.
    """
    previous = view.scale
    view.scale = clamp(previous * ratio, config.VIEW_2D_MIN_SCALE, config.VIEW_2D_MAX_SCALE)
    applied = view.scale / previous
    view.offset_x = cursor_x - (cursor_x - view.offset_x) * applied
    view.offset_y = cursor_y - (cursor_y - view.offset_y) * applied


def zoom_3d(view: ViewState3D, ratio: float) -> None:
    view.zoom = clamp(view.zoom * ratio, config.VIEW_3D_MIN_ZOOM, config.VIEW_3D_MAX_ZOOM)


def rotate_3d(view: ViewState3D, dx: float, dy: float) -> None:
    """Yaw freely with horizontal drag; pitch with vertical drag, clamped short of flipping."""
    view.rotate_y += dx * config.ROTATE_SPEED
    view.rotate_x = clamp(
        view.rotate_x + dy * config.ROTATE_SPEED,
        -config.VIEW_3D_MAX_PITCH,
        config.VIEW_3D_MAX_PITCH,
    )


def pan(view: Union[ViewState2D, ViewState3D], dx: float, dy: float) -> None:
    view.offset_x += dx
    view.offset_y += dy
