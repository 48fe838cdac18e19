"""
Interactive viewer engine: camera, selection, rendering and search.
"""

from .state import ViewerState, ViewState2D, ViewState3D, Filters, CanvasSize, MODE_2D, MODE_3D
from .viewport import ScreenPoint, project_to_screen
from .selection import SelectionEngine
from .render import RenderScheduler, ManualFrameSource, RecordingCanvas, paint_scene
from .search import SearchClient, SearchHit, rank_by_similarity
from .controller import ViewerController

__all__ = [
    "ViewerState",
    "ViewState2D",
    "ViewState3D",
    "Filters",
    "CanvasSize",
    "MODE_2D",
    "MODE_3D",
    "ScreenPoint",
    "project_to_screen",
    "SelectionEngine",
    "RenderScheduler",
    "ManualFrameSource",
    "RecordingCanvas",
    "paint_scene",
    "SearchClient",
    "SearchHit",
    "rank_by_similarity",
    "ViewerController",
]
