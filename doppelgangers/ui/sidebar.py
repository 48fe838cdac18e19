"""Sidebar UI components: pipeline controls, view controls and search key."""

import logging
from pathlib import Path

import streamlit as st

from doppelgangers.core.projection_cache import default_cache_path
from doppelgangers.core.projector import ProjectionConfig
from doppelgangers.errors import VectorLengthMismatchError
from doppelgangers.pipeline.build import load_points
from doppelgangers.ui.state import AppState
from doppelgangers.viewer.state import MODE_2D, MODE_3D
import config

logger = logging.getLogger(__name__)

FILTER_LABELS = {
    "show_pr": "Pull requests",
    "show_issue": "Issues",
    "show_open": "Open",
    "show_closed": "Closed",
}


def render_sidebar() -> None:
    """Render the complete sidebar."""
    with st.sidebar:
        render_pipeline_controls()
        st.markdown("---")
        if AppState.has_points():
            render_dataset_info()
            st.markdown("---")
            render_view_controls()
            st.markdown("---")
        render_search_key()


def render_pipeline_controls() -> None:
    """Embeddings file and projection parameters; Build runs the projection."""
    st.markdown("### Dataset")

    path_text = st.text_input(
        "Embeddings file",
        value=st.session_state.embeddings_path,
        help="JSONL written by `doppelgangers embed`"
    )
    if path_text != st.session_state.embeddings_path:
        st.session_state.embeddings_path = path_text
        AppState.reset_for_dataset_change()

    with st.expander("Projection", expanded=not AppState.has_points()):
        neighbors = st.slider("UMAP neighbors", 2, 100, config.UMAP_N_NEIGHBORS)
        min_dist = st.slider("UMAP min distance", 0.0, 0.99, config.UMAP_MIN_DIST, step=0.01)
        spread = st.slider("UMAP spread", 0.1, 5.0, config.UMAP_SPREAD, step=0.1)
        pca_dims = st.slider(
            "PCA dimensions",
            2, 256, config.PCA_COMPONENTS,
            help="Embeddings are reduced to this many dimensions before UMAP"
        )
        force = st.checkbox("Recompute even if cached", value=False)

    if st.button("Build", type="primary", use_container_width=True):
        try:
            projection_config = ProjectionConfig(
                n_neighbors=neighbors,
                min_dist=min_dist,
                spread=spread,
                pca_components=pca_dims,
            )
        except ValueError as e:
            AppState.set_error(f"Invalid projection settings: {e}")
            return
        _build(Path(st.session_state.embeddings_path), projection_config, force)


def _build(path: Path, projection_config: ProjectionConfig, force: bool) -> None:
    """Project the embeddings file and install the points."""
    cache_path = default_cache_path(path)

    with st.status("Building projection...", expanded=True) as status:
        try:
            points = load_points(
                path,
                cache_path,
                projection_config=projection_config,
                force=force,
                include_embeddings=True,
                progress_callback=st.write,
            )
        except (FileNotFoundError, VectorLengthMismatchError) as e:
            status.update(label="Build failed", state="error")
            AppState.set_error(str(e))
            return
        status.update(label=f"Loaded {len(points):,} items", state="complete")

    AppState.load_points(points)


def render_dataset_info() -> None:
    """Render dataset info section."""
    st.markdown("### Dataset Info")
    points = st.session_state.points
    n_pr = sum(1 for p in points if p.type == config.TYPE_PR)
    n_issue = sum(1 for p in points if p.type == config.TYPE_ISSUE)
    st.markdown(f"**Items:** {len(points):,}")
    if n_pr or n_issue:
        st.markdown(f"**Pull requests:** {n_pr:,} · **Issues:** {n_issue:,}")


def render_view_controls() -> None:
    """Mode toggle and filter switches, applied through the viewer controller."""
    controller = AppState.controller()

    st.markdown("### View Mode")
    view_3d = st.toggle("3D View", value=controller.state.mode == MODE_3D)
    mode = MODE_3D if view_3d else MODE_2D
    if mode != controller.state.mode:
        controller.set_mode(mode)

    st.markdown("### Filters")
    for name, label in FILTER_LABELS.items():
        enabled = st.checkbox(label, value=getattr(controller.state.filters, name), key=f"filter_{name}")
        if enabled != getattr(controller.state.filters, name):
            controller.set_filter(name, enabled)


def render_search_key() -> None:
    """API key for search, held in this session only."""
    st.markdown("### Search Key")
    client = AppState.search_client()

    if client.has_credential:
        st.caption("An API key is set for this session.")
        if st.button("Forget key", use_container_width=True):
            client.clear_credential()
            st.rerun()
        return

    def store_key():
        client.set_credential(st.session_state.api_key_input)
        st.session_state.api_key_input = ""

    st.text_input(
        "OpenAI API key",
        type="password",
        key="api_key_input",
        on_change=store_key,
        help="Used for search queries only; never written to disk"
    )
