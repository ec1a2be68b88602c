from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class DatasetConfig:
    """
    Parsed config entry for a single dataset.
    """
    raw: Dict[str, Any]
    source_path: Path
    index: int
    data_root: Optional[Path] = None

    @property
    def name(self) -> str:
        return self.raw.get("name", f"Dataset {self.index}")

    @property
    def description(self) -> str:
        return self.raw.get("description", "")

    @property
    def path(self) -> Path:
        """
        Dataset file; relative paths resolve against data_root, or the
        folder holding the config file when no data_root is set.
        """
        path = Path(self.raw["file"])
        if path.is_absolute():
            return path
        base = self.data_root if self.data_root is not None else self.source_path.parent
        return base / path

    @classmethod
    def from_raw(
        cls,
        raw: Dict[str, Any],
        source_path: Path,
        index: int,
        data_root: Optional[Path] = None,
    ) -> DatasetConfig:
        return cls(raw=raw, source_path=source_path, index=index, data_root=data_root)


@dataclass
class GlobalConfig:
    ui_title: str = "Ranking Browser"
    default_dataset: Optional[str] = None
    image_base_url: Optional[str] = None
    data_root: Optional[Path] = None
    datasets: List[DatasetConfig] = field(default_factory=list)
