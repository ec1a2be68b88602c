from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from rank_viewer.config.model import DatasetConfig, GlobalConfig
from rank_viewer.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

GLOBAL_FILE = "global.json"
DATASETS_DIR = "datasets"


def _read_json(path: Path) -> Any:
    try:
        with path.open() as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def _data_root(raw_global: Dict[str, Any], root: Path) -> Optional[Path]:
    """'data_root' from global.json, relative to the config directory."""
    value = raw_global.get("data_root")
    if value is None:
        return None
    path = Path(value)
    return path if path.is_absolute() else (root / path).resolve()


def _dataset_configs(folder: Path, data_root: Optional[Path]) -> List[DatasetConfig]:
    """
    One DatasetConfig per readable *.json file in 'folder', in file-name order.
    Unreadable files and entries without a 'file' key are logged and skipped.
    """
    if not folder.is_dir():
        logger.warning("Datasets directory not found", extra={"path": str(folder)})
        return []

    files = sorted(folder.glob("*.json"))
    if not files:
        logger.warning("No dataset configs found", extra={"path": str(folder)})

    configs: List[DatasetConfig] = []
    for idx, config_file in enumerate(files):
        try:
            raw = _read_json(config_file)
        except (OSError, ConfigError) as e:
            logger.error("Skipping unreadable dataset config", extra={"file": config_file.name, "error": str(e)})
            continue

        if not isinstance(raw, dict) or "file" not in raw:
            logger.error("Skipping dataset config without 'file'", extra={"file": config_file.name})
            continue

        configs.append(DatasetConfig.from_raw(raw, source_path=config_file, index=idx, data_root=data_root))
        logger.debug("Dataset config read", extra={"file": config_file.name, "dataset": configs[-1].name})
    return configs


def load_global_config(root: Path) -> GlobalConfig:
    """
    Read a config directory laid out as:

        <root>/global.json
        <root>/datasets/*.json

    Raises:
        FileNotFoundError: no global.json under 'root'
        ConfigError: global.json is not valid JSON
    """
    root = Path(root)
    global_path = root / GLOBAL_FILE
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    logger.info("Loading global config", extra={"config_root": str(root)})
    raw_global = _read_json(global_path)
    if not isinstance(raw_global, dict):
        raise ConfigError(f"{global_path}: expected a JSON object")

    data_root = _data_root(raw_global, root)
    return GlobalConfig(
        ui_title=raw_global.get("ui_title", "Ranking Browser"),
        default_dataset=raw_global.get("default_dataset"),
        image_base_url=raw_global.get("image_base_url"),
        data_root=data_root,
        datasets=_dataset_configs(root / DATASETS_DIR, data_root),
    )


def load_dataset_registry(path: Path) -> Tuple[GlobalConfig, Dict[str, DatasetConfig]]:
    """
    Global config plus dataset name -> DatasetConfig. No dataset file is read here.

    Raises:
        ConfigError: two dataset configs share a name
    """
    global_config = load_global_config(path)

    registry: Dict[str, DatasetConfig] = {}
    duplicates = set()
    for ds_cfg in global_config.datasets:
        if ds_cfg.name in registry:
            duplicates.add(ds_cfg.name)
        else:
            registry[ds_cfg.name] = ds_cfg

    if duplicates:
        raise ConfigError(f"Duplicate dataset names in config: {sorted(duplicates)}")

    if global_config.default_dataset and global_config.default_dataset not in registry:
        logger.warning(
            "Configured default dataset not found",
            extra={"default_dataset": global_config.default_dataset},
        )

    logger.info(
        "Dataset registry loaded",
        extra={"config_root": str(path), "dataset_names": sorted(registry)},
    )
    return global_config, registry
