from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc

from rank_viewer.ui.ids import IDs
from rank_viewer.ui.layout.build_chart_options_panel import build_chart_options_panel
from rank_viewer.ui.layout.build_filter_panel import build_filter_panel
from rank_viewer.ui.layout.build_navbar import build_navbar
from rank_viewer.ui.layout.build_plot_panel import build_plot_panel

if TYPE_CHECKING:
    from rank_viewer.ui.config import AppConfig


def build_layout(ctx: AppConfig):
    default_name = ctx.default_dataset
    default_dataset = ctx.datasets.try_get(default_name)

    navbar = build_navbar(ctx.datasets.options(), ctx.global_config, default_name)

    filter_panel = build_filter_panel(default_dataset)

    chart_panel = build_chart_options_panel(default_dataset, ctx.session.layout_options)

    return dbc.Container(
        fluid=True,
        className="rv-root",
        children=[
            navbar,

            dcc.Store(id=IDs.Store.FILTER_STATE, storage_type="memory"),
            dcc.Store(id=IDs.Store.SELECTION, storage_type="memory"),

            dbc.Row(
                [
                    dbc.Col([chart_panel, filter_panel], md=3, className="mt-3"),
                    dbc.Col(build_plot_panel(), md=9, className="mt-3"),
                ],
                className="gx-3",
            ),
        ],
    )
