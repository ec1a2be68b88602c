from __future__ import annotations

from typing import Optional

import dash_bootstrap_components as dbc
from dash import html

from rank_viewer.core.controls import ControlSet
from rank_viewer.core.dataset import Dataset
from rank_viewer.ui.helpers import control_components
from rank_viewer.ui.ids import IDs


def build_filter_panel(dataset: Optional[Dataset]) -> dbc.Card:
    controls = ControlSet.for_dataset(dataset) if dataset is not None else ControlSet([])

    return dbc.Card(
        [
            dbc.CardHeader("Filters", className="fw-semibold"),
            dbc.CardBody(
                [
                    html.Div([
                        html.H5(
                            dataset.name if dataset is not None else "No dataset",
                            id=IDs.Control.SIDEBAR_DATASET_NAME,
                            className="card-title",
                        ),
                        html.P(
                            f"{len(dataset) if dataset is not None else 0} items",
                            id=IDs.Control.SIDEBAR_DATASET_META,
                            className="card-subtitle text-muted mb-3",
                        ),
                        html.Hr(),
                    ]),
                    html.Div(
                        control_components(controls),
                        id=IDs.Control.FILTER_CONTROLS_CONTAINER,
                    ),
                    dbc.Button(
                        "Reset filters",
                        id=IDs.Control.RESET_FILTERS_BTN,
                        color="secondary",
                        outline=True,
                        size="sm",
                        className="mt-2",
                    ),
                ]
            ),
        ],
        className="rv-sidebar",
    )
