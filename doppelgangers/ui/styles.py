"""
Theme constants and CSS injection for the Doppelgangers explorer.
Shares its palette with the standalone HTML viewer.
"""

import html
from dataclasses import dataclass

import streamlit as st

import config


@dataclass(frozen=True)
class Theme:
    """Central theme configuration - all colors in one place."""
    bg: str = config.COLORS["background"]
    panel: str = config.COLORS["panel"]
    text: str = config.COLORS["text"]
    muted: str = config.COLORS["muted"]
    accent: str = config.COLORS["accent"]
    point: str = config.COLORS["point"]
    selected: str = config.COLORS["selected"]

    bg_card: str = "rgba(15, 23, 42, 0.6)"
    border_subtle: str = "rgba(148, 163, 184, 0.2)"
    border_focus: str = "rgba(56, 189, 248, 0.6)"


THEME = Theme()


def get_css() -> str:
    """Generate CSS using theme constants."""
    return f"""
<style>
    [data-testid="stAppViewContainer"] {{
        background: {THEME.bg};
    }}

    [data-testid="stSidebar"] {{
        background: {THEME.panel};
    }}

    .dg-header {{
        font-family: 'JetBrains Mono', 'Fira Code', 'SF Mono', monospace;
        color: {THEME.text};
        font-size: 2.2rem;
        font-weight: 700;
        margin-bottom: 0;
        letter-spacing: -0.02em;
    }}

    .dg-subheader {{
        color: {THEME.muted};
        font-size: 1rem;
        margin-top: 0.25rem;
    }}

    /* Selected item card */
    .dg-card {{
        background: {THEME.bg_card};
        border: 1px solid {THEME.border_subtle};
        border-radius: 8px;
        padding: 10px;
        margin: 0 0 12px 0;
    }}

    .dg-card:hover {{
        border-color: {THEME.border_focus};
    }}

    .dg-card a {{
        color: {THEME.accent};
        text-decoration: none;
        font-weight: 600;
    }}

    .dg-card-meta {{
        color: {THEME.muted};
        font-size: 0.75rem;
        margin-top: 4px;
    }}

    .dg-card-text {{
        color: {THEME.muted};
        font-size: 0.8rem;
        margin-top: 6px;
        max-height: 160px;
        overflow-y: auto;
    }}

    .dg-count {{
        color: {THEME.muted};
        font-size: 0.85rem;
        margin-bottom: 12px;
    }}

    .dg-error {{
        background: rgba(239, 68, 68, 0.1);
        border: 1px solid rgba(239, 68, 68, 0.3);
        border-radius: 8px;
        padding: 1rem;
        color: #fca5a5;
        margin: 0.5rem 0;
        font-size: 0.9rem;
    }}

    .dg-info {{
        background: rgba(56, 189, 248, 0.1);
        border: 1px solid rgba(56, 189, 248, 0.3);
        border-radius: 8px;
        padding: 0.75rem 1rem;
        color: {THEME.text};
        margin: 0.5rem 0;
        font-size: 0.85rem;
    }}

    .stButton > button[kind="primary"] {{
        background: {THEME.accent};
        border: none;
        color: {THEME.bg};
    }}

    [data-testid="stTextInput"] input {{
        background: {THEME.bg_card};
        border: 1px solid {THEME.border_subtle};
        border-radius: 6px;
        color: {THEME.text};
    }}
</style>
"""


def inject_styles() -> None:
    """Inject CSS styles into the Streamlit app."""
    st.markdown(get_css(), unsafe_allow_html=True)


def render_header() -> None:
    """Render the styled application header."""
    st.markdown('<h1 class="dg-header">Doppelgangers</h1>', unsafe_allow_html=True)
    st.markdown(
        '<p class="dg-subheader">Find duplicate pull requests and issues by looking at them</p>',
        unsafe_allow_html=True,
    )


def render_error(message: str) -> None:
    """Render a styled error message."""
    st.markdown(f'<div class="dg-error">{html.escape(message)}</div>', unsafe_allow_html=True)


def render_info(message: str) -> None:
    """Render a styled info message."""
    st.markdown(f'<div class="dg-info">{html.escape(message)}</div>', unsafe_allow_html=True)
