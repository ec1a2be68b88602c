from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rank_viewer.config.model import GlobalConfig
from rank_viewer.services.dataset_service import DatasetManager
from rank_viewer.session import RankingSession


@dataclass
class AppConfig:
    """
    Shared state for the Dash app, passed into layout + callback registration
    instead of module-level globals.
    """
    config_root: Path
    global_config: GlobalConfig
    datasets: DatasetManager
    session: Optional[RankingSession] = None
    default_dataset: Optional[str] = None

    def validate(self) -> None:
        """Ensure all required services are attached before the app starts."""
        if self.session is None:
            raise RuntimeError("AppConfig.session must be initialized.")
