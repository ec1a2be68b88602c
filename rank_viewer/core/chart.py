from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import plotly.graph_objects as go

from .exceptions import RenderError
from .projection import DerivedSeries

logger = logging.getLogger(__name__)

CHART_TYPES = ("bar", "scatter")
CLICK_EVENTS = ("plotly_click", "click", "tap")


@dataclass(frozen=True)
class LayoutOptions:
    """
    Plot settings chosen in the UI.

    - chart_type: 'bar' (one bar per item in rank order, height = y_metric)
                  or 'scatter' (x_metric against y_metric)
    - x_metric / y_metric: 'score', 'rank' or a metric name
    - color_scale: plotly colour scale name used for the marker colours
    """
    chart_type: str = "bar"
    x_metric: str = "rank"
    y_metric: str = "score"
    title: Optional[str] = None
    color_scale: str = "viridis"
    height: Optional[int] = None

    def with_changes(self, **changes: Any) -> LayoutOptions:
        return replace(self, **changes)


@dataclass(frozen=True)
class SelectionEvent:
    """The user picked one item on the chart."""
    item_id: str


@dataclass(frozen=True)
class NoOp:
    """A chart interaction that is not a selection (hover, pan, zoom, lasso...)."""
    reason: str = ""


Interaction = Union[SelectionEvent, NoOp]
DrawSink = Callable[[go.Figure], None]


def _column_problems(name: str, values: Sequence[Optional[float]], ids: Sequence[str]) -> List[str]:
    bad = [
        ids[i]
        for i, v in enumerate(values)
        if v is None or (isinstance(v, float) and not math.isfinite(v))
    ]
    if not bad:
        return []
    preview = ", ".join(bad[:5]) + (f" (+{len(bad) - 5})" if len(bad) > 5 else "")
    return [f"'{name}' is missing or not finite for {preview}"]


class ChartAdapter:
    """
    Bridges DerivedSeries and the Plotly engine.

    - build_figure(): validate array alignment, then build a go.Figure
    - render(): build + hand the figure to the draw sink; keeps the last good figure
    - on_interaction(): normalise a Plotly event payload into SelectionEvent or NoOp

    Every point carries its item id in 'customdata', which is how clicks are
    mapped back to items.
    """

    def __init__(self, draw: Optional[DrawSink] = None, default_options: Optional[LayoutOptions] = None):
        self._draw = draw
        self.default_options = default_options or LayoutOptions()
        self._last_figure: Optional[go.Figure] = None
        self._last_series: Optional[DerivedSeries] = None
        self._generation = 0

    @property
    def last_figure(self) -> Optional[go.Figure]:
        return self._last_figure

    @property
    def last_series(self) -> Optional[DerivedSeries]:
        return self._last_series

    # ------------------------------------------------------------------
    # Figure construction
    # ------------------------------------------------------------------
    def columns(self, derived: DerivedSeries, options: LayoutOptions) -> Dict[str, List[Any]]:
        """Per-point arrays handed to the engine."""
        ids = derived.ids
        columns: Dict[str, List[Any]] = {
            "ids": ids,
            "ranks": derived.ranks,
            "y": derived.values(options.y_metric),
        }
        if options.chart_type == "scatter":
            columns["x"] = derived.values(options.x_metric)
        return columns

    def validate(self, columns: Mapping[str, Sequence[Any]]) -> None:
        """
        Raises:
            RenderError: if the per-point arrays differ in length or a plotted value is missing
        """
        lengths = {name: len(values) for name, values in columns.items()}
        if len(set(lengths.values())) > 1:
            raise RenderError(f"Series columns have mismatched lengths: {lengths}")

        ids = list(columns.get("ids", []))
        problems: List[str] = []
        for axis in ("x", "y"):
            if axis in columns:
                problems.extend(_column_problems(axis, columns[axis], ids))
        if problems:
            raise RenderError("; ".join(problems))

    def build_figure(self, derived: DerivedSeries, options: Optional[LayoutOptions] = None,
                     *, selected_id: Optional[str] = None) -> go.Figure:
        options = options or self.default_options

        if options.chart_type not in CHART_TYPES:
            raise RenderError(f"Unknown chart type '{options.chart_type}'")

        if derived.is_empty:
            return self.empty_figure("No items match the current filters.")

        columns = self.columns(derived, options)
        self.validate(columns)

        ids = columns["ids"]
        hover = [f"#{r} · {i}" for r, i in zip(columns["ranks"], ids)]
        selected = [ids.index(selected_id)] if selected_id in ids else None

        if options.chart_type == "bar":
            trace = go.Bar(
                x=ids,
                y=columns["y"],
                customdata=ids,
                hovertext=hover,
                hoverinfo="text+y",
                marker=dict(color=columns["y"], colorscale=options.color_scale),
                selectedpoints=selected,
            )
            x_title = "Item (rank order)"
        else:
            trace = go.Scatter(
                x=columns["x"],
                y=columns["y"],
                customdata=ids,
                hovertext=hover,
                hoverinfo="text+x+y",
                mode="markers",
                marker=dict(
                    size=9,
                    color=columns["ranks"],
                    colorscale=options.color_scale,
                    reversescale=True,
                    showscale=True,
                    colorbar=dict(title="Rank"),
                ),
                selectedpoints=selected,
            )
            x_title = options.x_metric

        fig = go.Figure(trace)
        fig.update_layout(
            title=options.title or f"{derived.dataset_name}: {len(derived)} items",
            xaxis_title=x_title,
            yaxis_title=options.y_metric,
            clickmode="event",
            margin=dict(l=40, r=40, t=50, b=40),
        )
        if options.chart_type == "bar":
            fig.update_xaxes(type="category", categoryorder="array", categoryarray=ids)
        if options.height:
            fig.update_layout(height=options.height)
        return fig

    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure.
        """
        fig = go.Figure()
        fig.update_layout(
            title=message,
            xaxis={"visible": False},
            yaxis={"visible": False},
        )
        return fig

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(
        self,
        derived: DerivedSeries,
        layout_options: Optional[LayoutOptions] = None,
        *,
        generation: Optional[int] = None,
        selected_id: Optional[str] = None,
    ) -> Optional[go.Figure]:
        """
        Build and draw a figure for 'derived'.

        Returns None without drawing when 'generation' is older than the last
        drawn generation (a render queued before a newer dataset load).

        Raises:
            RenderError: the series cannot be plotted; the last figure is kept
        """
        if generation is not None and generation < self._generation:
            logger.info(
                "Dropping stale render",
                extra={"generation": generation, "current_generation": self._generation},
            )
            return None

        try:
            fig = self.build_figure(derived, layout_options, selected_id=selected_id)
        except RenderError as e:
            logger.warning("Render rejected", extra={"dataset": derived.dataset_name, "error": str(e)})
            raise

        if self._draw is not None:
            self._draw(fig)

        self._last_figure = fig
        self._last_series = derived
        if generation is not None:
            self._generation = generation
        return fig

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------
    def on_interaction(self, raw_event: Optional[Mapping[str, Any]]) -> Interaction:
        """
        Normalise a Plotly event into a SelectionEvent (click/tap on a point) or NoOp.

        Expected payload: {"event": "plotly_click" | "plotly_hover" | "plotly_relayout" | ...,
                           "points": [{"customdata": ..., "pointIndex": ...}, ...]}
        """
        if not raw_event:
            return NoOp("empty event")

        event = str(raw_event.get("event", "")).lower()
        if event not in CLICK_EVENTS:
            return NoOp(event or "unknown event")

        points = raw_event.get("points") or []
        if not points:
            return NoOp("click without a point")

        item_id = self._item_id_of(points[0])
        if item_id is None:
            logger.warning("Could not map clicked point to an item", extra={"point": points[0]})
            return NoOp("unmapped point")
        return SelectionEvent(item_id)

    def _item_id_of(self, point: Mapping[str, Any]) -> Optional[str]:
        custom = point.get("customdata")
        if isinstance(custom, (list, tuple)):
            custom = custom[0] if custom else None
        if custom is not None:
            return str(custom)

        index = point.get("pointIndex", point.get("pointNumber"))
        if isinstance(index, int) and self._last_series is not None:
            ids = self._last_series.ids
            if 0 <= index < len(ids):
                return ids[index]
        return None
