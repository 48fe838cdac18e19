"""
Centralized session state management for the Doppelgangers explorer.
Provides typed accessors and clear state transition methods.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

import streamlit as st

from doppelgangers.core.points import Point
from doppelgangers.visualization.scatter import PlotlyCanvas
from doppelgangers.viewer.controller import ViewerController
from doppelgangers.viewer.render import ManualFrameSource
from doppelgangers.viewer.search import SearchClient
from doppelgangers.viewer.state import MODE_3D
import config


@dataclass
class StateDefaults:
    """Default values for all session state variables."""
    embeddings_path: str = str(config.EMBEDDINGS_PATH)
    points: Optional[List[Point]] = None
    controller: Optional[Any] = None
    canvas: Optional[Any] = None
    frames: Optional[Any] = None
    search_client: Optional[Any] = None
    last_search_query: str = ""
    last_box: Optional[tuple] = None
    last_error: Optional[str] = None


class AppState:
    """
    Wrapper around Streamlit session state with type hints and defaults.

    The viewer engine lives in session state so camera, filters and
    selection survive reruns. The search API key stays inside the
    SearchClient for the session only.
    """

    @classmethod
    def init(cls) -> None:
        """Initialize all session state with defaults."""
        defaults = StateDefaults()
        for field_name in defaults.__dataclass_fields__:
            if field_name not in st.session_state:
                st.session_state[field_name] = getattr(defaults, field_name)
        if st.session_state.search_client is None:
            st.session_state.search_client = SearchClient()

    @classmethod
    def load_points(cls, points: List[Point]) -> None:
        """Install a new point set, keeping the camera and filters of an existing viewer."""
        st.session_state.points = points
        st.session_state.last_box = None
        st.session_state.last_error = None

        controller = st.session_state.controller
        if controller is None:
            frames = ManualFrameSource()
            canvas = PlotlyCanvas()
            st.session_state.frames = frames
            st.session_state.canvas = canvas
            st.session_state.controller = ViewerController(
                points,
                canvas,
                frames.request,
                search_client=st.session_state.search_client,
            )
        else:
            controller.load(points)

    @classmethod
    def reset_for_dataset_change(cls) -> None:
        """Drop the viewer when the embeddings file changes."""
        st.session_state.points = None
        st.session_state.controller = None
        st.session_state.canvas = None
        st.session_state.frames = None
        st.session_state.last_box = None
        st.session_state.last_error = None

    @classmethod
    def set_error(cls, message: str) -> None:
        """Record an error for display."""
        st.session_state.last_error = message

    @classmethod
    def clear_error(cls) -> None:
        """Clear any recorded error."""
        st.session_state.last_error = None

    @staticmethod
    def controller() -> Optional[ViewerController]:
        return st.session_state.get("controller")

    @staticmethod
    def search_client() -> SearchClient:
        return st.session_state.search_client

    @staticmethod
    def has_points() -> bool:
        """Check if a dataset has been projected."""
        return st.session_state.get("points") is not None

    @staticmethod
    def has_error() -> bool:
        """Check if there's an error to display."""
        return st.session_state.get("last_error") is not None

    @staticmethod
    def is_3d_view() -> bool:
        """Check if the viewer is in 3D mode."""
        controller = st.session_state.get("controller")
        return controller is not None and controller.state.mode == MODE_3D
