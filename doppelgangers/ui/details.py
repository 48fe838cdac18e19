"""Selection panel components."""

import html

import streamlit as st

from doppelgangers.core.points import Point
from doppelgangers.loaders.base import records_to_frame
from doppelgangers.viewer.controller import ViewerController
import config


def render_selection_panel(controller: ViewerController) -> None:
    """Render the selected items, capped at MAX_SIDEBAR_ITEMS."""
    st.markdown("### Selection")

    total = len(controller.state.selected)
    st.markdown(f'<div class="dg-count">{total} selected</div>', unsafe_allow_html=True)

    if total:
        col_clear, col_export = st.columns(2)
        with col_clear:
            if st.button("Clear selection", use_container_width=True):
                controller.clear_selection()
                st.rerun()
        with col_export:
            selected = [point for _, point in controller.selected_points(limit=total)]
            st.download_button(
                "Export CSV",
                data=records_to_frame(selected).to_csv(index=False),
                file_name="selection.csv",
                mime="text/csv",
                use_container_width=True,
            )

    for _, point in controller.selected_points(config.MAX_SIDEBAR_ITEMS):
        render_item_card(point)

    if total > config.MAX_SIDEBAR_ITEMS:
        st.caption(f"Showing {config.MAX_SIDEBAR_ITEMS} of {total}")

    if not total:
        render_getting_started()


def render_item_card(point: Point) -> None:
    """Render a single selected item."""
    title = point.title or point.url
    meta = describe(point)

    st.markdown(f"""
    <div class="dg-card">
        <a href="{html.escape(point.url, quote=True)}" target="_blank" rel="noreferrer">{html.escape(title)}</a>
        {f'<div class="dg-card-meta">{html.escape(meta)}</div>' if meta else ''}
        {f'<div class="dg-card-text">{html.escape(point.body)}</div>' if point.body else ''}
    </div>
    """, unsafe_allow_html=True)


def describe(point: Point) -> str:
    """Kind, number, state and file count, e.g. "PR · #12 · open"."""
    parts = []
    if point.type:
        parts.append("PR" if point.type == config.TYPE_PR else "Issue")
    if point.number is not None:
        parts.append(f"#{point.number}")
    if point.state:
        parts.append(point.state)
    if point.files:
        parts.append(f"{len(point.files)} files")
    return " · ".join(parts)


def render_getting_started() -> None:
    """Render getting started guide."""
    st.markdown("""
    **Select:** Drag a box on the plot to select the items inside it

    **Search:** Describe a change above to select the closest items

    **Navigate:** Use the arrow buttons to pan (2D) or rotate (3D), ＋/－ to zoom

    **3D View:** Toggle in the sidebar; nearer points are drawn on top

    Filled dots are pull requests, rings are issues. Items that are
    semantically similar appear close together.
    """)
