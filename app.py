"""
Doppelgangers: duplicate pull request and issue explorer
Main Streamlit application.

Run with: streamlit run app.py
"""

import streamlit as st
import streamlit.components.v1 as components

from doppelgangers.core.points import without_embeddings
from doppelgangers.ui import (
    AppState,
    inject_styles,
    render_architecture_tab,
    render_error,
    render_explorer,
    render_header,
    render_info,
    render_methodology_tab,
    render_selection_panel,
    render_sidebar,
)
from doppelgangers.visualization.html import render_html
import config


# -----------------------------------------------------------------------------
# Page Configuration
# -----------------------------------------------------------------------------

st.set_page_config(
    page_title="Doppelgangers",
    page_icon="🪞",
    layout="wide",
    initial_sidebar_state="expanded"
)

inject_styles()
AppState.init()


# -----------------------------------------------------------------------------
# Tabs
# -----------------------------------------------------------------------------

def render_explore_tab() -> None:
    """Viewer engine with the selection panel beside it."""
    col_viz, col_details = st.columns([3, 2])

    with col_viz:
        render_explorer()

    with col_details:
        render_selection_panel(AppState.controller())


def render_viewer_tab() -> None:
    """The standalone HTML viewer, inline and as a download."""
    include_embeddings = st.checkbox(
        "Include embeddings (enables search)",
        value=False,
        help="Raw vectors make the page much larger and expose the embeddings to anyone you share it with",
    )
    points = st.session_state.points
    if not include_embeddings:
        points = without_embeddings(points)
    page = render_html(points, title="Doppelgangers")

    st.download_button(
        "Download viewer HTML",
        data=page,
        file_name=config.HTML_PATH.name,
        mime="text/html",
    )
    components.html(page, height=config.CANVAS_HEIGHT + 60, scrolling=False)


def render_empty_state() -> None:
    render_info(
        "Choose an embeddings file in the sidebar and press Build. "
        "Create one with: doppelgangers triage --repo owner/name"
    )


# -----------------------------------------------------------------------------
# Main Application
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    render_header()
    render_sidebar()

    if not AppState.has_points():
        if AppState.has_error():
            render_error(st.session_state.last_error)
        render_empty_state()
        st.stop()

    tab_explore, tab_viewer, tab_methodology, tab_architecture = st.tabs([
        "🔍 Explore", "🖥️ Viewer", "📚 Methodology", "🏗️ Architecture"
    ])

    with tab_explore:
        render_explore_tab()

    with tab_viewer:
        render_viewer_tab()

    with tab_methodology:
        render_methodology_tab()

    with tab_architecture:
        render_architecture_tab()


if __name__ == "__main__":
    main()
