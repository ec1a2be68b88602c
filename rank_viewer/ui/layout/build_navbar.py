from __future__ import annotations

from typing import List, Optional

import dash_bootstrap_components as dbc
from dash import dcc, html

from rank_viewer.config.model import GlobalConfig
from rank_viewer.ui.ids import IDs


def build_navbar(dataset_options: List[dict], global_config: GlobalConfig, default_dataset: Optional[str]) -> dbc.Navbar:
    return dbc.Navbar(
        dbc.Container(
            [
                dbc.NavbarBrand(global_config.ui_title, className="fw-semibold"),
                html.Div(
                    dcc.Dropdown(
                        id=IDs.Control.DATASET_SELECT,
                        options=dataset_options,
                        value=default_dataset,
                        clearable=False,
                        placeholder="Select dataset",
                        style={"minWidth": "260px"},
                    ),
                    className="ms-auto",
                ),
            ],
            fluid=True,
        ),
        color="primary",
        dark=True,
        className="rv-navbar",
    )
