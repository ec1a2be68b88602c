from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

import dash
from dash import ALL, Input, Output

from rank_viewer.core.chart import ChartAdapter
from rank_viewer.core.exceptions import DatasetLoadError, RankViewerError, UnknownControlError
from rank_viewer.ui.helpers import status_text, table_columns, table_records
from rank_viewer.ui.ids import IDs

if TYPE_CHECKING:
    from rank_viewer.ui.config import AppConfig

logger = logging.getLogger(__name__)

LAYOUT_TRIGGERS = {
    IDs.Control.CHART_TYPE: "chart_type",
    IDs.Control.X_METRIC_SELECT: "x_metric",
    IDs.Control.Y_METRIC_SELECT: "y_metric",
    IDs.Control.COLOUR_SCALE_SELECT: "color_scale",
}


def apply_ui_trigger(ctx: AppConfig, triggered_id: Any, value: Any) -> Optional[str]:
    """
    Pure-ish dispatcher: route one UI trigger to the session.

    Returns a user-facing notice when the action was rejected, else None.
    Rejected actions leave the session unchanged.
    """
    session = ctx.session

    try:
        if triggered_id is None or triggered_id == IDs.Control.DATASET_SELECT:
            name = value if triggered_id is not None else ctx.default_dataset
            if not name:
                return None
            session.store.load(ctx.datasets[name])

        elif isinstance(triggered_id, dict) and triggered_id.get("type") == IDs.Pattern.FILTER_CONTROL:
            session.store.set_filter(triggered_id["name"], value)

        elif triggered_id == IDs.Control.RESET_FILTERS_BTN:
            session.store.reset_filters()

        elif isinstance(triggered_id, str) and triggered_id in LAYOUT_TRIGGERS:
            if value is None:
                return None
            session.set_layout_options(
                session.layout_options.with_changes(**{LAYOUT_TRIGGERS[triggered_id]: value})
            )

        elif triggered_id == IDs.Control.MAIN_GRAPH:
            event = {"event": "plotly_click", **(value or {})}
            session.selection.handle(session.chart.on_interaction(event))

        elif triggered_id == IDs.Control.IMAGE_MODAL_CLOSE:
            session.selection.deselect()

        else:
            logger.debug("Ignoring unknown trigger", extra={"trigger": str(triggered_id)})

    except UnknownControlError as e:
        # widgets of the previous dataset can still fire while the panel is rebuilt
        logger.info("Ignoring stale filter control", extra={"control": e.name})
        return None
    except (RankViewerError, KeyError) as e:
        logger.warning(
            "UI action rejected",
            extra={"trigger": str(triggered_id), "error": str(e)},
        )
        if isinstance(e, DatasetLoadError):
            return f"Could not load dataset: {e}"
        return str(e)

    return None


def collect_outputs(ctx: AppConfig, notice: Optional[str]) -> Dict[str, Any]:
    """Project the session state onto the component props the sync callback writes."""
    session = ctx.session
    snapshot = session.store.get_snapshot()

    figure = session.chart.last_figure
    if figure is None or not snapshot.is_loaded:
        figure = ChartAdapter.empty_figure("No dataset loaded.")

    notice = notice or session.render_error
    modal = session.gateway.state

    return {
        "figure": figure,
        "notice": notice or "",
        "notice_open": bool(notice),
        "modal_open": modal.is_open,
        "modal_title": modal.title,
        "modal_src": modal.src,
        "table_data": table_records(snapshot.derived),
        "table_columns": table_columns(snapshot.derived),
        "status": status_text(snapshot),
        "filter_state": snapshot.filter_state.to_dict(),
        "selection": snapshot.selection.item_id,
    }


def register_sync_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # UI -> session -> every rendered output (single writer)
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.MAIN_GRAPH, "figure"),
        Output(IDs.Control.RENDER_NOTICE, "children"),
        Output(IDs.Control.RENDER_NOTICE, "is_open"),
        Output(IDs.Control.IMAGE_MODAL, "is_open"),
        Output(IDs.Control.IMAGE_MODAL_TITLE, "children"),
        Output(IDs.Control.IMAGE_MODAL_IMG, "src"),
        Output(IDs.Control.RANKING_TABLE, "data"),
        Output(IDs.Control.RANKING_TABLE, "columns"),
        Output(IDs.Control.STATUS_BAR, "children"),
        Output(IDs.Store.FILTER_STATE, "data"),
        Output(IDs.Store.SELECTION, "data"),
        Output(IDs.Control.MAIN_GRAPH, "clickData"),
        Input(IDs.Control.DATASET_SELECT, "value"),
        Input({"type": IDs.Pattern.FILTER_CONTROL, "name": ALL}, "value"),
        Input(IDs.Control.RESET_FILTERS_BTN, "n_clicks"),
        Input(IDs.Control.CHART_TYPE, "value"),
        Input(IDs.Control.X_METRIC_SELECT, "value"),
        Input(IDs.Control.Y_METRIC_SELECT, "value"),
        Input(IDs.Control.COLOUR_SCALE_SELECT, "value"),
        Input(IDs.Control.MAIN_GRAPH, "clickData"),
        Input(IDs.Control.IMAGE_MODAL_CLOSE, "n_clicks"),
    )
    def sync_session_from_ui(*_args):
        triggered = dash.ctx.triggered
        triggered_id = dash.ctx.triggered_id
        value = triggered[0]["value"] if triggered and triggered_id is not None else None

        with ctx.session.lock:
            notice = apply_ui_trigger(ctx, triggered_id, value)
            out = collect_outputs(ctx, notice)

        return (
            out["figure"],
            out["notice"],
            out["notice_open"],
            out["modal_open"],
            out["modal_title"],
            out["modal_src"],
            out["table_data"],
            out["table_columns"],
            out["status"],
            out["filter_state"],
            out["selection"],
            # cleared so clicking the same point again fires a new event
            None,
        )
