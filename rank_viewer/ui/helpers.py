from __future__ import annotations

import math
from typing import Any, List, Optional

import dash_bootstrap_components as dbc
from dash import dcc, html

from rank_viewer.core.controls import (
    Control,
    ControlKind,
    ControlSet,
    RangeControl,
    RangeValue,
)
from rank_viewer.core.dataset import Dataset
from rank_viewer.core.projection import DerivedSeries
from rank_viewer.core.store import Snapshot
from rank_viewer.ui.ids import filter_control_id

COLOUR_SCALES = ["viridis", "plasma", "reds", "greys", "turbo"]


def metric_options(dataset: Optional[Dataset]) -> List[dict]:
    """Axis choices: score, rank, then every metric."""
    if dataset is None:
        return []
    names = ["score", "rank", *[m for m in dataset.metric_names if m not in ("score", "rank")]]
    return [{"label": n, "value": n} for n in names]


def _slider_step(control: RangeControl) -> Optional[float]:
    if control.step is not None:
        return control.step
    if control.lower is None or control.upper is None or control.upper == control.lower:
        return None
    # ~100 positions across the range, rounded to a power of ten
    raw = (control.upper - control.lower) / 100.0
    return 10 ** math.floor(math.log10(raw))


def _range_component(control: RangeControl, value: RangeValue) -> Any:
    if control.lower is None or control.upper is None:
        return html.Small("No values in this dataset.", className="text-muted")

    step = _slider_step(control)
    lower, upper = control.lower, control.upper
    if step:
        # slider ends on the step grid, outside the data bounds, so the ends stay inactive
        lower = math.floor(lower / step) * step
        upper = math.ceil(upper / step) * step

    lo = value.min if value.min is not None else lower
    hi = value.max if value.max is not None else upper
    return dcc.RangeSlider(
        id=filter_control_id(control.name),
        min=lower,
        max=upper,
        step=step,
        value=[lo, hi],
        marks=None,
        tooltip={"placement": "bottom", "always_visible": False},
        className="mb-3",
    )


def control_component(control: Control, value: Any) -> html.Div:
    """One labelled widget for a filter control, pre-set to 'value'."""
    if control.kind == ControlKind.RANGE:
        widget = _range_component(control, value)
    elif control.kind == ControlKind.TOGGLE:
        widget = dbc.Switch(
            id=filter_control_id(control.name),
            label=f"Only {control.label}",
            value=bool(value),
            className="mb-3",
        )
    else:
        widget = dcc.Dropdown(
            id=filter_control_id(control.name),
            options=[{"label": o, "value": o} for o in control.options],
            value=list(value),
            multi=True,
            placeholder=f"All {control.label}",
            className="mb-3",
        )

    label = [] if control.kind == ControlKind.TOGGLE else [html.Label(control.label, className="form-label")]
    return html.Div(label + [widget], className="rv-control")


def control_components(controls: ControlSet) -> List[html.Div]:
    defaults = controls.defaults()
    return [control_component(controls[name], defaults[name]) for name in controls]


def table_records(derived: Optional[DerivedSeries]) -> List[dict]:
    if derived is None:
        return []
    return derived.to_frame().to_dict("records")


def table_columns(derived: Optional[DerivedSeries]) -> List[dict]:
    if derived is None:
        return []
    return [{"name": c, "id": c} for c in derived.to_frame().columns]


def status_text(snapshot: Snapshot) -> html.Span:
    if not snapshot.is_loaded:
        return html.Span([html.Strong("Status: "), "No dataset loaded"])

    selected = snapshot.selection.item_id or "None"
    return html.Span(
        [
            html.Strong("Dataset: "), snapshot.dataset.name, " • ",
            html.Strong("Showing: "), f"{len(snapshot.derived)} / {len(snapshot.dataset)}", " • ",
            html.Strong("Selected: "), selected,
        ]
    )
