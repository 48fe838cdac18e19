"""
Standalone HTML viewer artifact.

Fills the bundled template with the point data and viewer settings so the
result opens in any browser without a server.
"""

import html
import json
import logging
from pathlib import Path
from typing import Optional

from doppelgangers.core.points import Point, points_to_json
import config

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).parent / "templates" / "viewer.html"


def viewer_settings() -> dict:
    """Camera, interaction and drawing constants the browser viewer runs on."""
    return {
        "view2d": {
            "minScale": config.VIEW_2D_MIN_SCALE,
            "maxScale": config.VIEW_2D_MAX_SCALE,
        },
        "view3d": {
            "rotateX": config.VIEW_3D_ROTATE_X,
            "rotateY": config.VIEW_3D_ROTATE_Y,
            "zoom": config.VIEW_3D_ZOOM,
            "minZoom": config.VIEW_3D_MIN_ZOOM,
            "maxZoom": config.VIEW_3D_MAX_ZOOM,
        },
        "maxPitch": config.VIEW_3D_MAX_PITCH,
        "perspective": config.VIEW_3D_PERSPECTIVE,
        "nearPlane": config.VIEW_3D_NEAR_PLANE,
        "fill": config.VIEW_3D_FILL,
        "rotateSpeed": config.ROTATE_SPEED,
        "wheelSpeed": config.WHEEL_ZOOM_SPEED,
        "clickTravel": config.CLICK_MAX_TRAVEL,
        "hitRadius": config.HIT_RADIUS,
        "radius": config.POINT_RADIUS,
        "selectedRadius": config.SELECTED_POINT_RADIUS,
        "ringWidth": config.RING_WIDTH,
        "dash": list(config.SELECTION_DASH),
        "maxSidebarItems": config.MAX_SIDEBAR_ITEMS,
        "topK": config.SEARCH_TOP_K,
        "model": config.OPENAI_MODEL,
        "colors": dict(config.COLORS),
    }


def render_html(points: list[Point], title: str = "Doppelgangers", template: Optional[str] = None) -> str:
    """
    Render the viewer page for a set of points.

    Args:
        points: Render-ready points
        title: Page title
        template: Template text (defaults to the bundled viewer)

    Returns:
        Complete HTML document
    """
    if template is None:
        template = TEMPLATE_PATH.read_text(encoding="utf-8")

    settings_json = json.dumps(viewer_settings()).replace("<", "\\u003c")

    replacements = {
        "__TITLE__": html.escape(title),
        "__SETTINGS_JSON__": settings_json,
    }
    for key, value in config.COLORS.items():
        replacements[f"__COLOR_{key.upper()}__"] = value

    page = template
    for token, value in replacements.items():
        page = page.replace(token, value)

    # Data goes in last so nothing inside item text is mistaken for a token
    return page.replace("__DATA_JSON__", points_to_json(points))


def write_html(points: list[Point], output_path: Path, title: str = "Doppelgangers") -> Path:
    """Render the viewer and write it to output_path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_html(points, title=title), encoding="utf-8")
    logger.info(f"Wrote {output_path} ({len(points)} points)")
    return output_path
