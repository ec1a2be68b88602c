from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Mapping, Optional

from rank_viewer.config.model import DatasetConfig
from rank_viewer.core.dataset import Dataset
from rank_viewer.core.dataset_loader import from_config
from rank_viewer.core.exceptions import DatasetLoadError
from rank_viewer.validation import ValidationError

logger = logging.getLogger(__name__)


class DatasetManager(Mapping[str, Dataset]):
    """
    Configured datasets behind a read-only dict interface.

    Keys are the configured names; a dataset file is read the first time its
    name is looked up and kept for the lifetime of the manager. Membership,
    iteration and len() never touch the files.
    """

    def __init__(self, cfg_by_name: Dict[str, DatasetConfig]):
        self._cfg_by_name = dict(cfg_by_name)
        self._cache: Dict[str, Dataset] = {}

    def __getitem__(self, name: str) -> Dataset:
        """
        Raises:
            KeyError: no dataset configured under 'name'
            DatasetLoadError: the configured file could not be read
        """
        if name not in self._cache:
            if name not in self._cfg_by_name:
                raise KeyError(f"Unknown dataset '{name}'")
            self._cache[name] = self._read(self._cfg_by_name[name])
        return self._cache[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._cfg_by_name)

    def __len__(self) -> int:
        return len(self._cfg_by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._cfg_by_name

    @staticmethod
    def _read(cfg: DatasetConfig) -> Dataset:
        logger.info("Reading dataset on first use", extra={"dataset": cfg.name, "path": str(cfg.path)})
        try:
            return from_config(cfg)
        except (DatasetLoadError, ValidationError) as e:
            logger.error("Dataset could not be read", extra={"dataset": cfg.name, "error": str(e)})
            raise

    def try_get(self, name: Optional[str]) -> Optional[Dataset]:
        """Like get(), but an unreadable or malformed file also gives None."""
        if not name:
            return None
        try:
            return self.get(name)
        except (DatasetLoadError, ValidationError):
            return None

    def is_loaded(self, name: str) -> bool:
        return name in self._cache

    def options(self) -> List[dict]:
        """Dropdown options, sorted by name; the description becomes the hover title."""
        return [
            {"label": name, "value": name, "title": self._cfg_by_name[name].description or name}
            for name in sorted(self._cfg_by_name)
        ]
