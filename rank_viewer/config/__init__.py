from .model import DatasetConfig, GlobalConfig
from .loader import load_dataset_registry, load_global_config

__all__ = ["DatasetConfig", "GlobalConfig", "load_dataset_registry", "load_global_config"]
