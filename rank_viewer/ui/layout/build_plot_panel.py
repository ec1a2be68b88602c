from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dash_table, dcc, html

from rank_viewer.ui.ids import IDs


def build_image_modal() -> dbc.Modal:
    # Only the close button dismisses the modal, so every close goes through the selection controller
    return dbc.Modal(
        [
            dbc.ModalHeader(dbc.ModalTitle(id=IDs.Control.IMAGE_MODAL_TITLE), close_button=False),
            dbc.ModalBody(
                html.Img(id=IDs.Control.IMAGE_MODAL_IMG, style={"maxWidth": "100%"}),
                className="text-center",
            ),
            dbc.ModalFooter(
                dbc.Button("Close", id=IDs.Control.IMAGE_MODAL_CLOSE, color="secondary", size="sm"),
            ),
        ],
        id=IDs.Control.IMAGE_MODAL,
        is_open=False,
        size="lg",
        backdrop="static",
        keyboard=False,
    )


def build_plot_panel() -> dbc.Card:
    return dbc.Card(
        [
            dbc.CardHeader(
                html.Div(
                    [
                        html.Strong("Ranking"),
                        html.Div(id=IDs.Control.STATUS_BAR, className="ms-auto small text-muted"),
                    ],
                    className="d-flex align-items-center",
                ),
                className="p-2",
            ),
            dbc.CardBody(
                [
                    dbc.Alert(
                        id=IDs.Control.RENDER_NOTICE,
                        color="warning",
                        is_open=False,
                        dismissable=True,
                        className="mb-2",
                    ),
                    dcc.Tabs(
                        id=IDs.Control.PAGE_TABS,
                        value="chart",
                        children=[
                            dcc.Tab(
                                label="Chart",
                                value="chart",
                                children=dcc.Loading(
                                    type="default",
                                    children=dcc.Graph(
                                        id=IDs.Control.MAIN_GRAPH,
                                        style={"height": "650px"},
                                        config={"responsive": True},
                                    ),
                                ),
                            ),
                            dcc.Tab(
                                label="Table",
                                value="table",
                                children=dash_table.DataTable(
                                    id=IDs.Control.RANKING_TABLE,
                                    data=[],
                                    columns=[],
                                    page_size=25,
                                    sort_action="native",
                                    style_table={"overflowX": "auto"},
                                    style_as_list_view=True,
                                    style_cell={
                                        "fontSize": "12px",
                                        "padding": "6px 8px",
                                        "textAlign": "left",
                                    },
                                    style_header={
                                        "fontWeight": "600",
                                        "backgroundColor": "#f3f4f6",
                                    },
                                ),
                            ),
                        ],
                    ),
                    html.Div(
                        [
                            dbc.Button(
                                "Download data (CSV)",
                                id=IDs.Control.DOWNLOAD_DATA_BTN,
                                color="secondary",
                                size="sm",
                                className="mt-2 ms-auto me-2",
                            ),
                            dcc.Download(id=IDs.Control.DOWNLOAD_DATA),
                        ],
                        className="d-flex justify-content-end align-items-center",
                    ),
                    build_image_modal(),
                ],
                className="rv-main-body",
            ),
        ],
        className="rv-maincard",
    )
