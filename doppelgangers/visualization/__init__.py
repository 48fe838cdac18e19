"""
Output surfaces for the viewer: standalone HTML and Plotly figures.
"""

from .html import render_html, viewer_settings, write_html
from .scatter import PlotlyCanvas

__all__ = ["PlotlyCanvas", "render_html", "viewer_settings", "write_html"]
