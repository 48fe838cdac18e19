"""Streamlit front end: session state, sidebar, explorer and docs tabs."""

from .state import AppState
from .styles import inject_styles, render_error, render_header, render_info
from .sidebar import render_sidebar
from .main_view import render_explorer
from .details import render_getting_started, render_selection_panel
from .docs import render_architecture_tab, render_methodology_tab

__all__ = [
    "AppState",
    "inject_styles",
    "render_error",
    "render_header",
    "render_info",
    "render_sidebar",
    "render_explorer",
    "render_getting_started",
    "render_selection_panel",
    "render_architecture_tab",
    "render_methodology_tab",
]
