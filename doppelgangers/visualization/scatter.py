"""
Plotly drawing surface for the viewer engine.
Collects paint calls and turns them into a Plotly figure in screen space.
"""

import plotly.graph_objects as go

import config


class PlotlyCanvas:
    """
    Canvas backed by a Plotly figure.

    Draw calls are buffered in paint order and emitted as a single marker
    trace, so later calls are drawn on top. The y axis is flipped so screen
    pixels map one to one.

    Features:
    - Filled disks for pull requests, open rings for issues
    - Dashed selection rectangle as a layout shape
    - Visible/total readout as the figure title
    """

    # Plotly marker sizes are diameters in px
    SIZE_SCALE = 2.0

    def __init__(self):
        self.width = float(config.CANVAS_WIDTH)
        self.height = float(config.CANVAS_HEIGHT)
        self._reset()

    def _reset(self) -> None:
        self._xs: list[float] = []
        self._ys: list[float] = []
        self._sizes: list[float] = []
        self._colors: list[str] = []
        self._symbols: list[str] = []
        self._line_colors: list[str] = []
        self._shapes: list[dict] = []
        self.count_text = ""

    # -------------------------------------------------------------------------
    # Canvas protocol
    # -------------------------------------------------------------------------

    def clear(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self._reset()

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None:
        self._add_marker(x, y, radius, color, "circle", color)

    def stroke_circle(self, x: float, y: float, radius: float, color: str, line_width: float) -> None:
        self._add_marker(x, y, radius, "rgba(0,0,0,0)", "circle-open", color)

    def stroke_dashed_rect(self, left, top, width, height, color, dash) -> None:
        self._shapes.append(dict(
            type="rect",
            x0=left,
            y0=top,
            x1=left + width,
            y1=top + height,
            line=dict(color=color, width=1, dash=f"{dash[0]}px,{dash[1]}px"),
        ))

    def set_count(self, text: str) -> None:
        self.count_text = text

    def _add_marker(self, x, y, radius, color, symbol, line_color) -> None:
        self._xs.append(x)
        self._ys.append(y)
        self._sizes.append(radius * self.SIZE_SCALE)
        self._colors.append(color)
        self._symbols.append(symbol)
        self._line_colors.append(line_color)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    @property
    def marker_count(self) -> int:
        return len(self._xs)

    def to_figure(self, dragmode=False) -> go.Figure:
        """
        Build the figure for the last painted frame.

        Args:
            dragmode: Plotly drag mode; "select" lets a host read box selections
        """
        fig = go.Figure()

        fig.add_trace(go.Scatter(
            x=self._xs,
            y=self._ys,
            mode="markers",
            marker=dict(
                color=self._colors,
                size=self._sizes,
                symbol=self._symbols,
                line=dict(color=self._line_colors, width=config.RING_WIDTH),
            ),
            hoverinfo="skip",
            showlegend=False,
        ))

        fig.update_layout(
            width=int(self.width),
            height=int(self.height),
            template="plotly_dark",
            paper_bgcolor=config.COLORS["background"],
            plot_bgcolor=config.COLORS["background"],
            margin=dict(l=0, r=0, t=30, b=0),
            title=dict(text=self.count_text, font=dict(size=12, color=config.COLORS["muted"])),
            xaxis=dict(
                range=[0, self.width],
                showgrid=False,
                showticklabels=False,
                zeroline=False,
                fixedrange=True,
            ),
            yaxis=dict(
                range=[self.height, 0],
                showgrid=False,
                showticklabels=False,
                zeroline=False,
                fixedrange=True,
            ),
            shapes=self._shapes,
            dragmode=dragmode,
        )

        return fig
