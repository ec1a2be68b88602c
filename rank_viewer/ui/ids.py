from __future__ import annotations

__all__ = ["IDs", "filter_control_id"]


class IDs:
    class Store:
        FILTER_STATE = "filter-state"
        SELECTION = "selection-state"

    class Control:
        # Navbar
        DATASET_SELECT = "dataset-select"

        # Sidebar
        SIDEBAR_DATASET_NAME = "sidebar-dataset-name"
        SIDEBAR_DATASET_META = "sidebar-dataset-meta"
        FILTER_CONTROLS_CONTAINER = "filter-controls-container"
        RESET_FILTERS_BTN = "reset-filters-btn"

        # Chart options
        CHART_TYPE = "chart-type"
        X_METRIC_SELECT = "x-metric-select"
        Y_METRIC_SELECT = "y-metric-select"
        X_METRIC_CONTAINER = "x-metric-container"
        COLOUR_SCALE_SELECT = "colour-scale-select"

        # Main area
        PAGE_TABS = "page-tabs"
        MAIN_GRAPH = "main-graph"
        RANKING_TABLE = "ranking-table"
        DOWNLOAD_DATA = "download-data"
        DOWNLOAD_DATA_BTN = "download-data-btn"
        RENDER_NOTICE = "render-notice"
        STATUS_BAR = "status-bar"

        # Image preview
        IMAGE_MODAL = "image-modal"
        IMAGE_MODAL_TITLE = "image-modal-title"
        IMAGE_MODAL_IMG = "image-modal-img"
        IMAGE_MODAL_CLOSE = "image-modal-close"

    class Pattern:
        # pattern-matching "type" strings
        FILTER_CONTROL = "filter-control"


def filter_control_id(name: str) -> dict:
    return {"type": IDs.Pattern.FILTER_CONTROL, "name": name}
