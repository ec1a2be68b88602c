from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from rank_viewer.config.model import DatasetConfig
from rank_viewer.core.dataset import CATEGORY_PREFIX, FLAG_PREFIX, METRIC_PREFIX, Dataset
from rank_viewer.core.exceptions import DatasetLoadError

logger = logging.getLogger(__name__)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _json_records(path: Path) -> List[Dict[str, Any]]:
    try:
        with path.open() as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise DatasetLoadError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("items")
    if not isinstance(raw, list):
        raise DatasetLoadError(f"{path}: expected a list of records or an object with 'items'")
    return raw


def _number(value: Any, path: Path, column: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise DatasetLoadError(f"{path}: column '{column}' has non-numeric value {value!r}") from None


def _csv_records(path: Path) -> List[Dict[str, Any]]:
    """
    Rows -> records. Plain columns: id, rank, score, imageRef.
    Prefixed columns: metric.<name>, category.<field>, flag.<name>.
    Empty cells are treated as absent.
    """
    try:
        # read everything as text so ids like '007' survive
        df = pd.read_csv(path, dtype=str)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DatasetLoadError(f"Could not parse CSV {path}: {e}") from e

    missing = [c for c in ("id", "rank", "score") if c not in df.columns]
    if missing:
        raise DatasetLoadError(f"{path}: missing required columns {missing}")

    records: List[Dict[str, Any]] = []
    for row in df.to_dict("records"):
        rank = None if _is_missing(row["rank"]) else _number(row["rank"], path, "rank")
        record: Dict[str, Any] = {
            "id": None if _is_missing(row["id"]) else row["id"],
            # ranks must be plain ints; anything else is left for validation to report
            "rank": int(rank) if rank is not None and rank.is_integer() else rank,
            "score": None if _is_missing(row["score"]) else _number(row["score"], path, "score"),
            "metrics": {},
            "categories": {},
            "flags": {},
        }
        image_ref = row.get("imageRef")
        if not _is_missing(image_ref) and image_ref.strip():
            record["imageRef"] = image_ref.strip()

        for column, value in row.items():
            if _is_missing(value):
                continue
            if column.startswith(METRIC_PREFIX):
                record["metrics"][column[len(METRIC_PREFIX):]] = _number(value, path, column)
            elif column.startswith(CATEGORY_PREFIX):
                record["categories"][column[len(CATEGORY_PREFIX):]] = value
            elif column.startswith(FLAG_PREFIX):
                record["flags"][column[len(FLAG_PREFIX):]] = value.strip().lower() in ("1", "true", "yes")
        records.append(record)
    return records


def read_records(path: Path) -> List[Dict[str, Any]]:
    """
    Read dataset records from a .json or .csv file.

    Raises:
        DatasetLoadError: missing file, unknown extension or unparseable content
    """
    path = Path(path)
    if not path.is_file():
        raise DatasetLoadError(f"Dataset file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        return _json_records(path)
    if suffix == ".csv":
        return _csv_records(path)
    raise DatasetLoadError(f"Unsupported dataset file type '{suffix}' ({path})")


def from_config(cfg: DatasetConfig) -> Dataset:
    """
    Build a Dataset from a DatasetConfig. Invariants are not checked here;
    RankedItemStore.load() validates before accepting it.
    """
    path = cfg.path
    logger.info("Reading dataset file", extra={"dataset": cfg.name, "path": str(path)})
    records = read_records(path)
    return Dataset.from_records(records, name=cfg.name)
