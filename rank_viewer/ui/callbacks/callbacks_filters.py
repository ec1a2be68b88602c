from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
from dash import Input, Output, State, dcc, exceptions

from rank_viewer.core.controls import ControlSet
from rank_viewer.ui.helpers import control_components, metric_options
from rank_viewer.ui.ids import IDs
from rank_viewer.validation import ValidationError, validate_items

if TYPE_CHECKING:
    from rank_viewer.ui.config import AppConfig

logger = logging.getLogger(__name__)


def register_filter_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Rebuild the filter widgets + axis choices per dataset
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.SIDEBAR_DATASET_NAME, "children"),
        Output(IDs.Control.SIDEBAR_DATASET_META, "children"),
        Output(IDs.Control.FILTER_CONTROLS_CONTAINER, "children"),
        Output(IDs.Control.X_METRIC_SELECT, "options"),
        Output(IDs.Control.Y_METRIC_SELECT, "options"),
        Input(IDs.Control.DATASET_SELECT, "value"),
        prevent_initial_call=True,
    )
    def update_filter_panel(dataset_name: str | None):
        ds = ctx.datasets.try_get(dataset_name)
        try:
            if ds is not None:
                validate_items(ds.items, dataset_name=ds.name)
        except ValidationError:
            ds = None
        if ds is None:
            # the previous dataset stays loaded; the sync callback shows the notice
            return (dash.no_update,) * 5

        controls = ControlSet.for_dataset(ds)
        options = metric_options(ds)
        logger.debug("Filter panel rebuilt", extra={"dataset": ds.name, "controls": list(controls)})
        return (
            ds.name,
            f"{len(ds)} items",
            control_components(controls),
            options,
            options,
        )

    # ---------------------------------------------------------
    # The X axis only applies to scatter charts
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.X_METRIC_CONTAINER, "style"),
        Input(IDs.Control.CHART_TYPE, "value"),
    )
    def update_x_axis_visibility(chart_type: str | None):
        return {} if chart_type == "scatter" else {"display": "none"}

    # ---------------------------------------------------------
    # Download the currently displayed items
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.DOWNLOAD_DATA, "data"),
        Input(IDs.Control.DOWNLOAD_DATA_BTN, "n_clicks"),
        State(IDs.Control.DATASET_SELECT, "value"),
        prevent_initial_call=True,
    )
    def download_derived_series(_n_clicks, dataset_name):
        with ctx.session.lock:
            derived = ctx.session.store.get_snapshot().derived
        if derived is None:
            raise exceptions.PreventUpdate

        filename = f"{dataset_name or derived.dataset_name}_ranking.csv"
        return dcc.send_data_frame(derived.to_frame().to_csv, filename, index=False)
