from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import dash_bootstrap_components as dbc
from dash import Dash

from .config import AppConfig
from rank_viewer.config.loader import load_dataset_registry
from rank_viewer.services.dataset_service import DatasetManager
from rank_viewer.session import RankingSession
from rank_viewer.ui.callbacks.callbacks_filters import register_filter_callbacks
from rank_viewer.ui.callbacks.callbacks_sync import register_sync_callbacks
from rank_viewer.ui.layout.build_layout import build_layout

logger = logging.getLogger(__name__)


def _choose_default_dataset(manager: DatasetManager, preferred: Optional[str]) -> Optional[str]:
    if preferred and preferred in manager:
        return preferred
    names = sorted(manager.keys())
    return names[0] if names else None


def create_dash_app(config_root: Path | str = Path("config")) -> Dash:
    config_root = Path(config_root)

    # 1) Load Config
    global_config, cfg_by_name = load_dataset_registry(config_root)

    # 2) Services + session wiring
    dataset_manager = DatasetManager(cfg_by_name)
    session = RankingSession(image_base_url=global_config.image_base_url)

    ctx = AppConfig(
        config_root=config_root,
        global_config=global_config,
        datasets=dataset_manager,
        session=session,
        default_dataset=_choose_default_dataset(dataset_manager, global_config.default_dataset),
    )
    ctx.validate()

    logger.info(
        "Creating dashboard",
        extra={"config_root": str(config_root), "default_dataset": ctx.default_dataset},
    )

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
        assets_folder=str(Path(__file__).parent / "assets"),
    )
    app.title = global_config.ui_title

    app.layout = build_layout(ctx)

    # Register callbacks
    register_sync_callbacks(app, ctx)
    register_filter_callbacks(app, ctx)

    return app
