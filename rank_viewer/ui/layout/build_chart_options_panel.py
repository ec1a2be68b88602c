from __future__ import annotations

from typing import Optional

import dash_bootstrap_components as dbc
from dash import dcc, html

from rank_viewer.core.chart import LayoutOptions
from rank_viewer.core.dataset import Dataset
from rank_viewer.ui.helpers import COLOUR_SCALES, metric_options
from rank_viewer.ui.ids import IDs


def build_chart_options_panel(dataset: Optional[Dataset], options: LayoutOptions) -> dbc.Card:
    axis_options = metric_options(dataset)

    return dbc.Card(
        [
            dbc.CardHeader("Chart", className="fw-semibold"),
            dbc.CardBody(
                [
                    dbc.RadioItems(
                        id=IDs.Control.CHART_TYPE,
                        options=[
                            {"label": "Ranking", "value": "bar"},
                            {"label": "Scatter", "value": "scatter"},
                        ],
                        value=options.chart_type,
                        inline=True,
                        className="btn-group mb-3",
                        inputClassName="btn-check",
                        labelClassName="btn btn-outline-primary btn-sm",
                        labelCheckedClassName="active",
                    ),
                    html.Div(
                        id=IDs.Control.X_METRIC_CONTAINER,
                        children=[
                            html.Label("X axis", className="form-label"),
                            dcc.Dropdown(
                                id=IDs.Control.X_METRIC_SELECT,
                                options=axis_options,
                                value=options.x_metric,
                                clearable=False,
                                className="mb-2",
                            ),
                        ],
                        style={} if options.chart_type == "scatter" else {"display": "none"},
                    ),
                    html.Label("Y axis", className="form-label"),
                    dcc.Dropdown(
                        id=IDs.Control.Y_METRIC_SELECT,
                        options=axis_options,
                        value=options.y_metric,
                        clearable=False,
                        className="mb-2",
                    ),
                    html.Label("Colour scale", className="form-label"),
                    dcc.Dropdown(
                        id=IDs.Control.COLOUR_SCALE_SELECT,
                        options=[{"label": s.capitalize(), "value": s} for s in COLOUR_SCALES],
                        value=options.color_scale,
                        clearable=False,
                    ),
                ]
            ),
        ],
        className="rv-chart-options mb-3",
    )
